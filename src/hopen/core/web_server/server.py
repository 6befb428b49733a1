"""Start the static file server in the foreground or as a detached daemon."""
from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Optional

from hopen.core.config.domains.server import ServerConfig
from hopen.core.exceptions import HopenError, StartupFailedError

from .browser import Opener, open_browser, open_browser_later
from .daemon import DaemonLauncher
from .models import LaunchSpec, ServerHandle
from .probe import PortProbe
from .static import CancellationToken, serve_directory
from .ui import LifecycleUI

logger = logging.getLogger(__name__)


class ServerProcess:
    def __init__(
        self,
        config: ServerConfig,
        probe: PortProbe,
        ui: LifecycleUI,
        *,
        launcher: Optional[DaemonLauncher] = None,
        opener: Optional[Opener] = None,
        sleep: Callable[[float], None] = time.sleep,
        serve: Callable[..., None] = serve_directory,
    ) -> None:
        self.config = config
        self.probe = probe
        self.ui = ui
        self.launcher = launcher if launcher is not None else DaemonLauncher(log_path_for=config.log_path_for)
        self.opener = opener
        self.sleep = sleep
        self.serve = serve

    # ------------------------------------------------------------------ modes

    def run_foreground(
        self,
        directory: Path,
        port: int,
        token: Optional[CancellationToken] = None,
        *,
        on_ready: Optional[Callable[[Any], None]] = None,
    ) -> None:
        """Serve ``directory`` on loopback ``port``; blocks until SIGINT/SIGTERM.

        Raises:
            StartupFailedError: If the port cannot be bound.
        """
        self.serve(Path(directory), self.config.host, int(port), token, on_ready=on_ready)

    def run_background(self, spec: LaunchSpec) -> ServerHandle:
        """Spawn the daemon, wait the settle delay, then confirm the port is bound.

        Raises:
            StartupFailedError: If nothing listens on the port after the delay.
        """
        launch = self.launcher.spawn(spec.directory, spec.port)
        self.sleep(self.config.settle_delay_seconds)
        if not self.probe.is_port_bound(spec.port):
            logger.error("background server pid=%s did not bind port %s", launch.pid, spec.port)
            raise StartupFailedError(spec.port, launch.log_path)

        self.ui.success(f"Server started successfully! (PID: {launch.pid})")
        self.ui.kv("To stop the server, run", f"kill {launch.pid}  (or: hopen -e)")
        self.ui.kv("Logs", launch.log_path)
        self.ui.blank()
        return ServerHandle(pid=launch.pid, port=spec.port, cwd_lookup=self.probe.process_working_directory)

    # ----------------------------------------------------------------- browser

    def _open_now(self, url: str) -> None:
        if open_browser(url, self.opener):
            self.ui.success(f"Browser opened at {url}")

    def _maybe_prompt_and_open(self, url: str) -> None:
        if self.ui.confirm("Open in browser now?"):
            self._open_now(url)

    # ------------------------------------------------------------------ start

    def start(self, spec: LaunchSpec, token: Optional[CancellationToken] = None) -> ServerHandle:
        """Start a server for ``spec`` and handle the browser as requested.

        ``spec.auto_open_browser`` False means "prompt first".
        """
        directory = Path(spec.directory)
        if not directory.is_dir():
            raise HopenError(
                f"Root path {directory} does not exist",
                context={"Directory": directory},
            )

        self.ui.success("All checks passed!")
        self.ui.kv("Starting HTTP server in", directory)
        self.ui.kv("Port", spec.port)
        self.ui.kv("Access at", spec.url)
        self.ui.blank()

        if not spec.foreground:
            handle = self.run_background(spec)
            if spec.auto_open_browser:
                self._open_now(spec.url)
            else:
                self._maybe_prompt_and_open(spec.url)
            return handle

        want_open = spec.auto_open_browser or self.ui.confirm("Open in browser now?")

        def on_ready(_httpd) -> None:
            # Runs once the socket is bound and listening.
            if want_open:
                if spec.auto_open_browser:
                    open_browser_later(spec.url, self.config.browser_delay_seconds, self.opener)
                    self.ui.info(f"Opening browser at {spec.url}")
                else:
                    self._open_now(spec.url)
            self.ui.info("Server running (press Ctrl+C to stop)")

        self.run_foreground(directory, spec.port, token, on_ready=on_ready)
        self.ui.info("Server stopped.")
        return ServerHandle(pid=os.getpid(), port=spec.port)


__all__ = ["ServerProcess"]
