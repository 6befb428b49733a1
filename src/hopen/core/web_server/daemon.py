"""Detached background server launches.

Contract
--------
The child is ``<python> -m hopen --internal-serve --internal-port <port>
--internal-dir <directory>``. It serves ``directory`` on the loopback
``port`` in the foreground of its own session, so it outlives the invoking
process. The child's stdin is ``/dev/null``. Its stdout and stderr go to one
log file keyed by the child's PID (see ``server.log_template``). Whether the
launch worked is decided by the caller, who probes the port after a settle
delay.
"""
from __future__ import annotations

import logging
import os
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from hopen.core.exceptions import StartupFailedError

logger = logging.getLogger(__name__)

INTERNAL_SERVE_FLAG = "--internal-serve"
INTERNAL_PORT_FLAG = "--internal-port"
INTERNAL_DIR_FLAG = "--internal-dir"


@dataclass(frozen=True)
class DaemonLaunch:
    pid: int
    port: int
    directory: Path
    log_path: Path


def _popen_kwargs() -> dict[str, Any]:
    if os.name == "posix":
        return {"start_new_session": True}
    if os.name == "nt":
        creationflags = 0
        for flag in ("CREATE_NEW_PROCESS_GROUP", "DETACHED_PROCESS"):
            value = getattr(subprocess, flag, None)
            if isinstance(value, int):
                creationflags |= value
        return {"creationflags": creationflags} if creationflags else {}
    return {}


def _default_log_path(pid: int) -> Path:
    return Path(tempfile.gettempdir()) / f"hopen-server-{pid}.log"


class DaemonLauncher:
    """Spawn a detached ``hopen`` child that serves one directory on one port."""

    def __init__(
        self,
        *,
        python: Optional[str] = None,
        module: str = "hopen",
        log_path_for: Optional[Callable[[int], Path]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.python = python or sys.executable
        self.module = module
        self.log_path_for = log_path_for or _default_log_path
        self.env = dict(env) if env is not None else None

    def build_argv(self, directory: Path, port: int) -> List[str]:
        return [
            self.python,
            "-m",
            self.module,
            INTERNAL_SERVE_FLAG,
            INTERNAL_PORT_FLAG,
            str(int(port)),
            INTERNAL_DIR_FLAG,
            str(directory),
        ]

    def _child_env(self) -> Dict[str, str]:
        env = dict(self.env if self.env is not None else os.environ)
        # Log lines must reach the file before the child is killed with -9.
        env["PYTHONUNBUFFERED"] = "1"
        return env

    def spawn(self, directory: Path, port: int) -> DaemonLaunch:
        """Start the child and return its PID and log file.

        The log is created under a provisional name and renamed once the
        child's PID is known; the child keeps writing to the same inode.
        """
        directory = Path(directory).resolve()
        argv = self.build_argv(directory, port)

        final_dir = self.log_path_for(0).parent
        final_dir.mkdir(parents=True, exist_ok=True)
        fd, provisional = tempfile.mkstemp(prefix="hopen-server-", suffix=".log.pending", dir=str(final_dir))
        try:
            with os.fdopen(fd, "wb") as log_fh:
                proc = subprocess.Popen(  # noqa: S603
                    argv,
                    cwd=str(directory),
                    env=self._child_env(),
                    stdin=subprocess.DEVNULL,
                    stdout=log_fh,
                    stderr=subprocess.STDOUT,
                    close_fds=True,
                    **_popen_kwargs(),
                )
        except OSError as exc:
            Path(provisional).unlink(missing_ok=True)
            logger.error("could not spawn background server for port %s: %s", port, exc)
            raise StartupFailedError(int(port), None, details=str(exc)) from exc

        log_path = self.log_path_for(proc.pid)
        try:
            os.replace(provisional, log_path)
        except OSError as exc:
            logger.warning("could not rename %s to %s: %s", provisional, log_path, exc)
            log_path = Path(provisional)

        logger.info("spawned background server pid=%s port=%s log=%s", proc.pid, port, log_path)
        return DaemonLaunch(pid=proc.pid, port=int(port), directory=directory, log_path=log_path)


__all__ = [
    "DaemonLauncher",
    "DaemonLaunch",
    "INTERNAL_SERVE_FLAG",
    "INTERNAL_PORT_FLAG",
    "INTERNAL_DIR_FLAG",
]
