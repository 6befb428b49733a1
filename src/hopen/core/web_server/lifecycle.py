"""Decide whether an invocation reuses, replaces, stops or starts a server.

The decision is driven entirely by live OS state: the first occupied port in
the configured range is "the" running server. Path mapping and the HTML
check run before the port range is scanned; the exit flag skips the HTML
check.

State flow::

    exit flag ............................. -> EXITED
    server found, no menu ................. -> SERVER_RUNNING_REUSE
    server found, menu .................... -> SERVER_RUNNING_MENU
        open / quit / cancel .............. -> terminal
        quit and restart .................. -> RESTARTING -> STARTING_NEW
    no server, no menu .................... -> STARTING_NEW
    no server, menu ....................... -> STARTING_NEW | CANCELLED
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from hopen.core.config.domains.server import ServerConfig
from hopen.core.process.controller import ProcessController

from . import paths
from .browser import open_browser
from .models import (
    ExistingServerChoice,
    LaunchSpec,
    LifecycleOutcome,
    LifecycleState,
    PathMapping,
    ServerHandle,
    StartupChoice,
)
from .probe import PortProbe
from .server import ServerProcess
from .ui import LifecycleUI

logger = logging.getLogger(__name__)

_RELEASE_POLL_SECONDS = 0.1


@dataclass(frozen=True)
class Invocation:
    """One command-line run, already reduced to flags and paths."""

    current_dir: Path
    site_root: Optional[Path] = None
    filename: Optional[str] = None
    exit: bool = False
    foreground: bool = False
    menu: bool = False
    prompt: bool = False


class LifecycleController:
    def __init__(
        self,
        config: ServerConfig,
        probe: PortProbe,
        controller: ProcessController,
        server: ServerProcess,
        ui: LifecycleUI,
        *,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.probe = probe
        self.controller = controller
        self.server = server
        self.ui = ui
        self.sleep = sleep
        self.monotonic = monotonic
        self._history: list[LifecycleState] = []

    # ---------------------------------------------------------------- helpers

    def _enter(self, state: LifecycleState) -> None:
        logger.debug("lifecycle -> %s", state.value)
        self._history.append(state)

    def _outcome(self, state: LifecycleState, **kwargs) -> LifecycleOutcome:
        return LifecycleOutcome(state=state, history=list(self._history), **kwargs)

    def _url(self, port: int, mapping: PathMapping) -> str:
        return paths.build_url(self.config.url_host, port, mapping)

    def _open(self, url: str) -> None:
        if open_browser(url, self.server.opener):
            self.ui.success(f"Browser opened at {url}")

    def _start(self, inv: Invocation, mapping: PathMapping, port: int, foreground: bool) -> LifecycleOutcome:
        self._enter(LifecycleState.STARTING_NEW)
        url = self._url(port, mapping)
        spec = LaunchSpec(
            directory=mapping.served_directory,
            port=port,
            url=url,
            foreground=foreground,
            auto_open_browser=not inv.prompt,
        )
        handle = self.server.start(spec)
        return self._outcome(LifecycleState.STARTING_NEW, handle=handle, url=url)

    def _wait_for_release(self, port: int) -> bool:
        deadline = self.monotonic() + max(0.0, self.config.release_timeout_seconds)
        while self.probe.is_port_bound(port):
            if self.monotonic() >= deadline:
                return False
            self.sleep(_RELEASE_POLL_SECONDS)
        return True

    # ------------------------------------------------------------------ flows

    def _stop(self, handle: ServerHandle) -> None:
        self.controller.terminate(handle.pid)
        self.ui.success(f"Server stopped (PID: {handle.pid}, port: {handle.port})")

    def _reuse(self, handle: ServerHandle, mapping: PathMapping) -> LifecycleOutcome:
        self._enter(LifecycleState.SERVER_RUNNING_REUSE)
        url = self._url(handle.port, mapping)
        self.ui.warning(f"Reusing existing server (PID: {handle.pid}, port: {handle.port})")
        self._open(url)
        return self._outcome(LifecycleState.SERVER_RUNNING_REUSE, handle=handle, url=url)

    def _restart(self, inv: Invocation, handle: ServerHandle, mapping: PathMapping) -> LifecycleOutcome:
        self._enter(LifecycleState.RESTARTING)
        # A failed kill raises TerminateFailedError here; no second server is started.
        self._stop(handle)
        self.ui.blank()

        self.sleep(self.config.settle_delay_seconds)
        if not self._wait_for_release(handle.port):
            self.ui.warning(f"Port {handle.port} still in use after {self.config.release_timeout_seconds:g}s")

        self.ui.kv("Checking for HTML files in", inv.current_dir)
        paths.require_html_files(inv.current_dir)
        self.ui.success("Found HTML files")
        self.ui.blank()

        port = self.probe.find_free_port(self.config.port_range)
        return self._start(inv, mapping, port, inv.foreground)

    def _existing_menu(self, inv: Invocation, handle: ServerHandle, mapping: PathMapping) -> LifecycleOutcome:
        self._enter(LifecycleState.SERVER_RUNNING_MENU)
        url = self._url(handle.port, mapping)

        self.ui.warning("An HTTP server is already running!")
        if handle.cwd:
            self.ui.kv("Directory", handle.cwd)
        self.ui.kv("PID", handle.pid)
        self.ui.kv("Port", handle.port)
        self.ui.kv("URL", url)
        self.ui.blank()

        choice = self.ui.select("What would you like to do?", list(ExistingServerChoice))
        if choice is ExistingServerChoice.OPEN_BROWSER:
            self._open(url)
            return self._outcome(LifecycleState.SERVER_RUNNING_MENU, handle=handle, url=url)
        if choice is ExistingServerChoice.QUIT_SERVER:
            self._stop(handle)
            return self._outcome(LifecycleState.SERVER_RUNNING_MENU, handle=handle)
        if choice is ExistingServerChoice.QUIT_AND_RESTART:
            return self._restart(inv, handle, mapping)

        self._enter(LifecycleState.CANCELLED)
        self.ui.warning("Cancelled - no changes made")
        return self._outcome(LifecycleState.CANCELLED, handle=handle)

    def _startup_menu(self, inv: Invocation, mapping: PathMapping) -> LifecycleOutcome:
        port = self.probe.find_free_port(self.config.port_range)
        url = self._url(port, mapping)

        self.ui.info("No server currently running.")
        self.ui.kv("Directory", mapping.served_directory)
        self.ui.kv("Port", port)
        self.ui.kv("URL", url)
        self.ui.blank()

        choice = self.ui.select("What would you like to do?", list(StartupChoice))
        if choice is StartupChoice.START_BACKGROUND:
            return self._start(inv, mapping, port, foreground=False)
        if choice is StartupChoice.START_FOREGROUND:
            return self._start(inv, mapping, port, foreground=True)

        self._enter(LifecycleState.CANCELLED)
        self.ui.warning("Cancelled - no server started")
        return self._outcome(LifecycleState.CANCELLED)

    # -------------------------------------------------------------------- run

    def run(self, inv: Invocation) -> LifecycleOutcome:
        """Drive one invocation to a terminal state.

        Raises:
            FilenameRequiresRootError: ``filename`` given without a site root.
            NotUnderSiteRootError: ``current_dir`` lies outside the site root.
            NoHtmlFilesError: ``current_dir`` holds no HTML file (not checked
                for the exit flag).
            NoPortAvailableError: Every port in the range is bound.
            StartupFailedError: A background server did not bind its port.
            TerminateFailedError: A running server could not be stopped.
        """
        self._history = []
        mapping = paths.resolve(inv.site_root, inv.current_dir, inv.filename)
        port_range = self.config.port_range

        if inv.exit:
            handle = self.probe.find_existing_server(port_range)
            if handle is None:
                self.ui.warning(f"No server running on port range {port_range}.")
            else:
                self._stop(handle)
            self._enter(LifecycleState.EXITED)
            return self._outcome(LifecycleState.EXITED, handle=handle)

        paths.require_html_files(inv.current_dir)
        handle = self.probe.find_existing_server(port_range)
        if handle is not None:
            if inv.menu:
                return self._existing_menu(inv, handle, mapping)
            return self._reuse(handle, mapping)

        self._enter(LifecycleState.NO_SERVER)
        if inv.menu:
            return self._startup_menu(inv, mapping)

        port = self.probe.find_free_port(port_range)
        return self._start(inv, mapping, port, inv.foreground)


__all__ = ["Invocation", "LifecycleController"]
