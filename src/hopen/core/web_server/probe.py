"""Port occupancy and server discovery over the reserved port range."""
from __future__ import annotations

import logging
import socket
from typing import Optional

from hopen.core.exceptions import NoPortAvailableError, PortProbeUnavailableError
from hopen.core.process.inspector import ProcessInspector, default_inspector

from .models import PortRange, ServerHandle

logger = logging.getLogger(__name__)


def bind_check(host: str, port: int) -> bool:
    """Return True if ``host:port`` cannot be bound right now.

    Any bind failure counts as "in use".
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host, port))
    except OSError:
        return True
    finally:
        sock.close()
    return False


class PortProbe:
    """Answers "is this port taken, and by whom?" from live OS state.

    OS-level listener enumeration (IPv4 and IPv6) is preferred. When the
    inspector reports it cannot enumerate, an attempted bind on the loopback
    host is used instead.
    """

    def __init__(self, inspector: Optional[ProcessInspector] = None, *, host: str = "127.0.0.1") -> None:
        self.inspector = inspector if inspector is not None else default_inspector()
        self.host = host

    def _listeners(self, port: int) -> Optional[list[Optional[int]]]:
        try:
            return self.inspector.list_listeners_on_port(port)
        except PortProbeUnavailableError as exc:
            logger.debug("port %s: enumeration unavailable (%s); using bind check", port, exc)
            return None

    def is_port_bound(self, port: int) -> bool:
        listeners = self._listeners(port)
        if listeners is None:
            return bind_check(self.host, port)
        return bool(listeners)

    def find_free_port(self, port_range: PortRange) -> int:
        """Return the smallest port in ``port_range`` that is not bound.

        Raises:
            NoPortAvailableError: If every port in the range is bound.
        """
        for port in port_range:
            if not self.is_port_bound(port):
                logger.debug("first free port in %s: %s", port_range, port)
                return port
        raise NoPortAvailableError(port_range.start, port_range.end)

    def find_existing_server(self, port_range: PortRange) -> Optional[ServerHandle]:
        """Return the first bound port in ``port_range`` whose owner PID is known.

        Any listener counts; a foreign process in the range is indistinguishable
        from a previous hopen server.
        """
        for port in port_range:
            listeners = self._listeners(port)
            if listeners is None:
                # A bind check can say "in use" but never "by whom".
                continue
            pid = next((p for p in listeners if p), None)
            if pid is not None:
                logger.debug("existing listener on port %s: pid=%s", port, pid)
                return ServerHandle(pid=pid, port=port, cwd_lookup=self.process_working_directory)
        return None

    def process_working_directory(self, pid: int) -> Optional[str]:
        """Best-effort cwd of ``pid``; None if unsupported or the process is gone."""
        try:
            return self.inspector.working_directory_of(pid)
        except Exception as exc:
            logger.debug("cwd lookup for pid=%s failed: %s", pid, exc)
            return None


__all__ = ["PortProbe", "bind_check"]
