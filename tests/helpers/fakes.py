"""In-memory stand-ins for OS state, the daemon launcher and the terminal."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from hopen.core.config.domains.server import ServerConfig
from hopen.core.exceptions import PortProbeUnavailableError
from hopen.core.process.inspector import ProcessInspector
from hopen.core.web_server.daemon import DaemonLaunch


class FakeProcessInspector(ProcessInspector):
    """Port table and process table held in dicts.

    ``terminate`` removes the PID from every port it listens on unless the PID
    is listed in ``unkillable``.
    """

    name = "fake"

    def __init__(
        self,
        listeners: Optional[Dict[int, List[Optional[int]]]] = None,
        cwds: Optional[Dict[int, str]] = None,
        *,
        unavailable: bool = False,
        unkillable: Sequence[int] = (),
    ) -> None:
        self.listeners: Dict[int, List[Optional[int]]] = {k: list(v) for k, v in (listeners or {}).items()}
        self.cwds = dict(cwds or {})
        self.unavailable = unavailable
        self.unkillable = set(unkillable)
        self.queried_ports: List[int] = []
        self.terminated: List[int] = []

    def bind(self, port: int, pid: Optional[int]) -> None:
        self.listeners.setdefault(port, []).append(pid)

    def list_listeners_on_port(self, port: int) -> List[Optional[int]]:
        self.queried_ports.append(port)
        if self.unavailable:
            raise PortProbeUnavailableError("fake inspector disabled", context={"port": port})
        return list(self.listeners.get(port, []))

    def working_directory_of(self, pid: int) -> Optional[str]:
        return self.cwds.get(pid)

    def terminate(self, pid: int) -> bool:
        if pid in self.unkillable:
            return False
        known = any(pid in pids for pids in self.listeners.values())
        if not known:
            return False
        for port in list(self.listeners):
            self.listeners[port] = [p for p in self.listeners[port] if p != pid]
            if not self.listeners[port]:
                del self.listeners[port]
        self.terminated.append(pid)
        return True


class FakeLauncher:
    """Pretends to spawn a daemon; optionally binds its port in ``inspector``."""

    def __init__(
        self,
        inspector: FakeProcessInspector,
        log_dir: Path,
        *,
        pid: int = 4242,
        binds: bool = True,
    ) -> None:
        self.inspector = inspector
        self.log_dir = Path(log_dir)
        self.pid = pid
        self.binds = binds
        self.spawned: List[Tuple[Path, int]] = []

    def spawn(self, directory: Path, port: int) -> DaemonLaunch:
        self.spawned.append((Path(directory), port))
        if self.binds:
            self.inspector.bind(port, self.pid)
        return DaemonLaunch(
            pid=self.pid,
            port=port,
            directory=Path(directory),
            log_path=self.log_dir / f"hopen-server-{self.pid}.log",
        )


class ScriptedUI:
    """Records every line and answers menus from a script.

    ``choices`` holds 1-based menu indexes (or None for end of input);
    ``confirms`` holds the yes/no answers.
    """

    def __init__(self, choices: Sequence[Optional[int]] = (), confirms: Sequence[bool] = ()) -> None:
        self.choices = list(choices)
        self.confirms = list(confirms)
        self.lines: List[Tuple[str, str]] = []
        self.menus: List[Tuple[str, List[Any]]] = []

    def info(self, message: str) -> None:
        self.lines.append(("info", message))

    def success(self, message: str) -> None:
        self.lines.append(("success", message))

    def warning(self, message: str) -> None:
        self.lines.append(("warning", message))

    def kv(self, key: str, value: Any) -> None:
        self.lines.append(("kv", f"{key}: {value}"))

    def blank(self) -> None:
        self.lines.append(("blank", ""))

    def select(self, title: str, options: Sequence[Any]) -> Optional[Any]:
        self.menus.append((title, list(options)))
        answer = self.choices.pop(0) if self.choices else None
        return None if answer is None else options[answer - 1]

    def confirm(self, message: str) -> bool:
        self.lines.append(("confirm", message))
        return self.confirms.pop(0) if self.confirms else False

    @property
    def text(self) -> str:
        return "\n".join(message for _, message in self.lines)


class RecordingOpener:
    def __init__(self, result: bool = True, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.urls: List[str] = []

    def __call__(self, url: str) -> bool:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.result


def make_server_config(tmp_path: Path, **overrides: Any) -> ServerConfig:
    """A ``ServerConfig`` built from an explicit document, no file or env lookup."""
    section: Dict[str, Any] = {
        "host": "127.0.0.1",
        "url_host": "localhost",
        "port_range": {"start": 8000, "end": 8100},
        "settle_delay_seconds": 0.5,
        "release_timeout_seconds": 5.0,
        "browser_delay_seconds": 0.0,
        "log_template": str(tmp_path / "logs" / "hopen-server-{pid}.log"),
        "site_home": None,
    }
    section.update(overrides)
    return ServerConfig(config={"server": section})
