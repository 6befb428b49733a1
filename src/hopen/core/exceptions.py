from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping


class HopenError(Exception):
    """Base exception for hopen."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": {k: str(v) for k, v in self.context.items()},
        }


class ConfigError(HopenError, ValueError):
    """Raised when configuration cannot be loaded or fails validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        HopenError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class NoHtmlFilesError(HopenError):
    """Raised when the current directory holds no ``*.htm``/``*.html`` file."""

    def __init__(self, directory: Path) -> None:
        super().__init__(
            "No HTML files found in current directory",
            context={"Current directory": directory},
        )
        self.directory = directory


class NotUnderSiteRootError(HopenError, ValueError):
    """Raised when the current directory lies outside the configured site root."""

    def __init__(self, site_root: Path, current_dir: Path) -> None:
        message = "Current directory is not under site_home"
        HopenError.__init__(
            self,
            message,
            context={"Site home": site_root, "Current directory": current_dir},
        )
        ValueError.__init__(self, message)
        self.site_root = site_root
        self.current_dir = current_dir


class FilenameRequiresRootError(HopenError, ValueError):
    """Raised when a filename is given without any site root."""

    def __init__(self, filename: str) -> None:
        message = "filename argument requires either -r flag or HOPEN_SITE_HOME to be set"
        HopenError.__init__(self, message, context={"Filename": filename})
        ValueError.__init__(self, message)
        self.filename = filename


class NoPortAvailableError(HopenError):
    """Raised when every port in the scanned range is bound."""

    def __init__(self, start: int, end: int) -> None:
        super().__init__(
            f"No available ports found in range {start}-{end}",
            context={"start": start, "end": end},
        )
        self.start = start
        self.end = end


class StartupFailedError(HopenError):
    """Raised when a server could not be launched or did not bind its port."""

    def __init__(self, port: int, log_path: Path | None, *, details: str = "") -> None:
        ctx: Dict[str, Any] = {"Port": port}
        if details:
            ctx["details"] = details
        if log_path is not None:
            ctx["Check logs"] = log_path
        super().__init__("Failed to start server", context=ctx)
        self.port = port
        self.log_path = log_path


class TerminateFailedError(HopenError):
    """Raised when neither the process table nor ``kill -9`` stopped a PID."""

    def __init__(self, pid: int, details: str = "") -> None:
        ctx: Dict[str, Any] = {"PID": pid}
        if details:
            ctx["details"] = details
        super().__init__(f"Failed to stop server process {pid}", context=ctx)
        self.pid = pid


class PortProbeUnavailableError(HopenError):
    """Raised by an inspector that cannot enumerate listeners on this platform.

    Never fatal: callers fall back to the next inspector or a bind check.
    """


class BrowserOpenFailedError(HopenError):
    """Raised when the default browser could not be launched. Logged only."""

    def __init__(self, url: str, details: str = "") -> None:
        ctx: Dict[str, Any] = {"URL": url}
        if details:
            ctx["details"] = details
        super().__init__(f"Failed to open browser: {url}", context=ctx)
        self.url = url


__all__ = [
    "HopenError",
    "ConfigError",
    "NoHtmlFilesError",
    "NotUnderSiteRootError",
    "FilenameRequiresRootError",
    "NoPortAvailableError",
    "StartupFailedError",
    "TerminateFailedError",
    "PortProbeUnavailableError",
    "BrowserOpenFailedError",
]
