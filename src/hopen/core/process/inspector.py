"""
OS process and port inspection.

Answers three questions about external OS state: which processes listen on a
TCP port, what a process's working directory is, and how to deliver a
forceful termination. The answer always comes from the live OS. Nothing is
cached between calls.

Implementations
---------------
``PsutilProcessInspector``
    Process table and socket enumeration through psutil. Preferred.
``ShellProcessInspector``
    The external ``lsof`` and ``kill`` utilities (plus ``/proc`` on Linux).
    Used when psutil cannot see sockets, e.g. on macOS without root.
``ChainedProcessInspector``
    Tries each inspector in order. An inspector that raises
    ``PortProbeUnavailableError`` is skipped rather than trusted.
"""
from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

import psutil

from hopen.core.exceptions import PortProbeUnavailableError

logger = logging.getLogger(__name__)

_SHELL_TIMEOUT_SECONDS = 5.0


class ProcessInspector(ABC):
    """Capability set used by the port probe and the process controller."""

    name: str = "inspector"

    @abstractmethod
    def list_listeners_on_port(self, port: int) -> List[Optional[int]]:
        """Return one entry per TCP socket listening on ``port``.

        An entry is the owning PID, or ``None`` when the socket is visible
        but its owner is not (e.g. another user's process).

        Raises:
            PortProbeUnavailableError: If listeners cannot be enumerated here.
        """

    @abstractmethod
    def working_directory_of(self, pid: int) -> Optional[str]:
        """Return the process's current directory, or None when unknown."""

    @abstractmethod
    def terminate(self, pid: int) -> bool:
        """Deliver a forceful termination.

        Returns:
            True when the request was delivered, False when the process could
            not be found or signalled through this mechanism.
        """


class PsutilProcessInspector(ProcessInspector):
    name = "psutil"

    def list_listeners_on_port(self, port: int) -> List[Optional[int]]:
        try:
            conns = psutil.net_connections(kind="tcp")
        except (psutil.AccessDenied, PermissionError, NotImplementedError) as exc:
            raise PortProbeUnavailableError(
                "psutil cannot enumerate sockets on this platform",
                context={"port": port, "details": str(exc)},
            ) from exc

        pids: List[Optional[int]] = []
        for conn in conns:
            if conn.status != psutil.CONN_LISTEN or not conn.laddr:
                continue
            if conn.laddr.port == port:
                pids.append(conn.pid)
        return pids

    def working_directory_of(self, pid: int) -> Optional[str]:
        try:
            return psutil.Process(pid).cwd() or None
        except (psutil.NoSuchProcess, psutil.ZombieProcess, psutil.AccessDenied):
            return None

    def terminate(self, pid: int) -> bool:
        try:
            proc = psutil.Process(pid)
        except psutil.NoSuchProcess:
            return False
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied:
            logger.debug("psutil: access denied killing pid=%s", pid)
            return False
        return True


class ShellProcessInspector(ProcessInspector):
    name = "shell"

    def _run(self, argv: Sequence[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.run(  # noqa: S603
            list(argv),
            capture_output=True,
            text=True,
            timeout=_SHELL_TIMEOUT_SECONDS,
            check=False,
        )

    def list_listeners_on_port(self, port: int) -> List[Optional[int]]:
        try:
            result = self._run(["lsof", "-nP", "-t", f"-iTCP:{port}", "-sTCP:LISTEN"])
        except (FileNotFoundError, subprocess.TimeoutExpired) as exc:
            raise PortProbeUnavailableError(
                "lsof is not available",
                context={"port": port, "details": str(exc)},
            ) from exc

        pids: List[Optional[int]] = []
        for line in (result.stdout or "").splitlines():
            line = line.strip()
            if line.isdigit():
                pids.append(int(line))
        # lsof exits 1 with no output when nothing matches; anything else
        # without output means it could not inspect sockets.
        if not pids and result.returncode not in (0, 1):
            raise PortProbeUnavailableError(
                f"lsof exited with code {result.returncode}",
                context={"port": port, "details": (result.stderr or "").strip()},
            )
        return pids

    def working_directory_of(self, pid: int) -> Optional[str]:
        proc_cwd = Path(f"/proc/{pid}/cwd")
        if proc_cwd.exists():
            try:
                return str(proc_cwd.resolve())
            except OSError:
                return None

        try:
            result = self._run(["lsof", "-a", "-p", str(pid), "-d", "cwd", "-Fn"])
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return None
        for line in (result.stdout or "").splitlines():
            if line.startswith("n") and len(line) > 1:
                return line[1:]
        return None

    def terminate(self, pid: int) -> bool:
        try:
            result = self._run(["kill", "-9", str(pid)])
        except (FileNotFoundError, subprocess.TimeoutExpired) as exc:
            logger.debug("kill -9 %s unavailable: %s", pid, exc)
            return False
        if result.returncode != 0:
            logger.debug("kill -9 %s failed: %s", pid, (result.stderr or "").strip())
            return False
        return True


class ChainedProcessInspector(ProcessInspector):
    """First capable inspector wins."""

    name = "chained"

    def __init__(self, inspectors: Sequence[ProcessInspector]) -> None:
        if not inspectors:
            raise ValueError("ChainedProcessInspector needs at least one inspector")
        self.inspectors = list(inspectors)

    def list_listeners_on_port(self, port: int) -> List[Optional[int]]:
        reasons: List[str] = []
        for inspector in self.inspectors:
            try:
                return inspector.list_listeners_on_port(port)
            except PortProbeUnavailableError as exc:
                logger.debug("%s inspector unavailable: %s", inspector.name, exc)
                reasons.append(f"{inspector.name}: {exc}")
        raise PortProbeUnavailableError(
            "no inspector can enumerate listeners",
            context={"port": port, "details": "; ".join(reasons)},
        )

    def working_directory_of(self, pid: int) -> Optional[str]:
        for inspector in self.inspectors:
            cwd = inspector.working_directory_of(pid)
            if cwd:
                return cwd
        return None

    def terminate(self, pid: int) -> bool:
        return any(inspector.terminate(pid) for inspector in self.inspectors)


def default_inspector() -> ProcessInspector:
    """psutil first, then the shell utilities."""
    return ChainedProcessInspector([PsutilProcessInspector(), ShellProcessInspector()])


__all__ = [
    "ProcessInspector",
    "PsutilProcessInspector",
    "ShellProcessInspector",
    "ChainedProcessInspector",
    "default_inspector",
]
