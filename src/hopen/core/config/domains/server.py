"""Domain-specific configuration for the local HTTP server.

Provides cached access to the loopback bind address, the reserved port range,
timing knobs for background startup and restarts, and the per-launch log file
template.
"""
from __future__ import annotations

import tempfile
from functools import cached_property
from pathlib import Path
from typing import Optional

from hopen.core.exceptions import ConfigError
from hopen.core.web_server.models import PortRange

from ..base import BaseDomainConfig

DEFAULT_PORT = 8000
MAX_PORT = 8100


def _as_float(value: object, default: float) -> float:
    try:
        if value is None:
            return float(default)
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return float(default)


class ServerConfig(BaseDomainConfig):
    """Domain-specific configuration accessor for the ``server`` section."""

    def _config_section(self) -> str:
        return "server"

    @cached_property
    def host(self) -> str:
        return str(self.section.get("host") or "127.0.0.1")

    @cached_property
    def url_host(self) -> str:
        return str(self.section.get("url_host") or "localhost")

    @cached_property
    def port_range(self) -> PortRange:
        """Inclusive port range scanned for free ports and running servers.

        Raises:
            ConfigError: If start is greater than end.
        """
        raw = self.section.get("port_range") or {}
        start = int(raw.get("start", DEFAULT_PORT))
        end = int(raw.get("end", MAX_PORT))
        if start > end:
            raise ConfigError(
                f"server.port_range.start ({start}) must not exceed end ({end})",
                context={"start": start, "end": end},
            )
        return PortRange(start=start, end=end)

    @cached_property
    def settle_delay_seconds(self) -> float:
        return _as_float(self.section.get("settle_delay_seconds"), 0.5)

    @cached_property
    def release_timeout_seconds(self) -> float:
        return _as_float(self.section.get("release_timeout_seconds"), 5.0)

    @cached_property
    def browser_delay_seconds(self) -> float:
        return _as_float(self.section.get("browser_delay_seconds"), 0.3)

    @cached_property
    def log_template(self) -> str:
        """Background log path template; only ``{tmp}`` and ``{pid}`` are expanded.

        Raises:
            ConfigError: If the template names any other placeholder or is
                not a valid format string.
        """
        raw = str(self.section.get("log_template") or "{tmp}/hopen-server-{pid}.log")
        try:
            raw.format(tmp="", pid=0)
        except (KeyError, IndexError, ValueError) as exc:
            raise ConfigError(
                "server.log_template may only use the {tmp} and {pid} placeholders",
                context={"log_template": raw, "details": repr(exc)},
            ) from exc
        return raw

    @cached_property
    def site_home(self) -> Optional[str]:
        raw = self.section.get("site_home")
        if raw is None or not str(raw).strip():
            return None
        return str(raw).strip()

    def log_path_for(self, pid: int) -> Path:
        """Expand the log template for a background launch keyed by ``pid``."""
        rendered = self.log_template.format(tmp=tempfile.gettempdir(), pid=pid)
        return Path(rendered).expanduser()


__all__ = ["ServerConfig", "DEFAULT_PORT", "MAX_PORT"]
