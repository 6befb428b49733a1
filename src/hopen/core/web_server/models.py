from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional


@dataclass(frozen=True)
class PortRange:
    """Inclusive TCP port interval, always scanned in ascending order."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if not (0 < self.start <= 65535 and 0 < self.end <= 65535):
            raise ValueError(f"ports must be within 1-65535: {self.start}-{self.end}")
        if self.start > self.end:
            raise ValueError(f"empty port range: {self.start}-{self.end}")

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def __contains__(self, port: object) -> bool:
        return isinstance(port, int) and self.start <= port <= self.end

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass
class ServerHandle:
    """Reference to a server process owned by the OS, not by this process.

    ``cwd`` is looked up lazily through ``cwd_lookup`` on first access and is
    never persisted across invocations.
    """

    pid: int
    port: int
    cwd_lookup: Optional[Callable[[int], Optional[str]]] = field(default=None, repr=False, compare=False)
    _cwd: Optional[str] = field(default=None, repr=False, compare=False)
    _cwd_loaded: bool = field(default=False, repr=False, compare=False)

    @property
    def cwd(self) -> Optional[str]:
        if not self._cwd_loaded:
            self._cwd = self.cwd_lookup(self.pid) if self.cwd_lookup is not None else None
            self._cwd_loaded = True
        return self._cwd


@dataclass(frozen=True)
class PathMapping:
    """Directory to serve plus the URL path for the caller's location."""

    site_root: Optional[Path]
    served_directory: Path
    url_path: str

    @property
    def url_suffix(self) -> str:
        """``/<url_path>`` or the empty string for the site root."""
        return f"/{self.url_path}" if self.url_path else ""


@dataclass(frozen=True)
class LaunchSpec:
    """One-shot description of a server launch."""

    directory: Path
    port: int
    url: str
    foreground: bool = False
    auto_open_browser: bool = True


class LifecycleState(str, Enum):
    NO_SERVER = "no_server"
    SERVER_RUNNING_REUSE = "server_running_reuse"
    SERVER_RUNNING_MENU = "server_running_menu"
    STARTING_NEW = "starting_new"
    RESTARTING = "restarting"
    CANCELLED = "cancelled"
    EXITED = "exited"


class ExistingServerChoice(str, Enum):
    OPEN_BROWSER = "1) Open in browser"
    QUIT_SERVER = "2) Quit the existing server"
    QUIT_AND_RESTART = "3) Quit and restart here"
    CANCEL = "4) Cancel and leave everything unchanged"


class StartupChoice(str, Enum):
    START_BACKGROUND = "1) Start server in background"
    START_FOREGROUND = "2) Start server in foreground"
    CANCEL = "3) Cancel"


@dataclass
class LifecycleOutcome:
    """What an invocation ended up doing; returned for callers and tests."""

    state: LifecycleState
    handle: Optional[ServerHandle] = None
    url: Optional[str] = None
    exit_code: int = 0
    history: list[LifecycleState] = field(default_factory=list)


__all__ = [
    "PortRange",
    "ServerHandle",
    "PathMapping",
    "LaunchSpec",
    "LifecycleState",
    "LifecycleOutcome",
    "ExistingServerChoice",
    "StartupChoice",
]
