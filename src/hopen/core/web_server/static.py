"""Loopback static file server with cooperative cancellation.

The serve loop is the stdlib ``ThreadingHTTPServer`` with a
``SimpleHTTPRequestHandler`` rooted at the served directory. That handler
provides content-type inference and keeps requests inside the root.

Shutdown is driven by a :class:`CancellationToken`. Signal handlers only set
the token. A watcher thread observes it and stops the serve loop, so no
process exit happens inside a signal handler.
"""
from __future__ import annotations

import functools
import logging
import signal
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from types import FrameType
from typing import Any, Callable, Optional

from hopen.core.exceptions import StartupFailedError

logger = logging.getLogger(__name__)

_POLL_INTERVAL_SECONDS = 0.2


class CancellationToken:
    """A one-way flag shared between signal handlers and the serve loop."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


class StaticRequestHandler(SimpleHTTPRequestHandler):
    """Serves files under ``directory``; request lines go to logging, not stderr."""

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002 - stdlib signature
        logger.info("%s %s", self.address_string(), format % args)

    def end_headers(self) -> None:
        # Local preview: always revalidate so edits show up on reload.
        self.send_header("Cache-Control", "no-cache")
        super().end_headers()


def make_server(directory: Path, host: str, port: int) -> ThreadingHTTPServer:
    """Bind (synchronously) a threaded static server for ``directory``."""
    handler = functools.partial(StaticRequestHandler, directory=str(directory))
    httpd = ThreadingHTTPServer((host, port), handler)
    httpd.daemon_threads = True
    return httpd


def serve_until_cancelled(httpd: ThreadingHTTPServer, token: CancellationToken) -> None:
    """Run ``httpd`` until ``token`` is cancelled, then close the socket."""

    def _watch() -> None:
        token.wait()
        httpd.shutdown()

    watcher = threading.Thread(target=_watch, name="hopen-shutdown-watcher", daemon=True)
    watcher.start()
    try:
        httpd.serve_forever(poll_interval=_POLL_INTERVAL_SECONDS)
    finally:
        # Lets the watcher finish if the loop ended on its own.
        token.cancel()
        httpd.server_close()


def install_signal_handlers(token: CancellationToken) -> Callable[[], None]:
    """Route SIGINT/SIGTERM to ``token.cancel()``.

    Only possible from the main thread; elsewhere this is a no-op. Returns a
    callable that restores the previous handlers.
    """
    if threading.current_thread() is not threading.main_thread():
        return lambda: None

    def _handler(signum: int, frame: Optional[FrameType]) -> None:
        logger.info("received signal %s; shutting down", signum)
        token.cancel()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.getsignal(sig)
        signal.signal(sig, _handler)

    def _restore() -> None:
        for sig, old in previous.items():
            signal.signal(sig, old)

    return _restore


def serve_directory(
    directory: Path,
    host: str,
    port: int,
    token: Optional[CancellationToken] = None,
    *,
    on_ready: Optional[Callable[[ThreadingHTTPServer], None]] = None,
) -> None:
    """Serve ``directory`` on ``host:port`` and block until cancelled.

    Signal handlers are installed for the duration of the call. ``on_ready``
    runs once the socket is bound and listening, before the first request is
    accepted.

    Raises:
        StartupFailedError: If the address cannot be bound.
    """
    token = token if token is not None else CancellationToken()
    try:
        httpd = make_server(directory, host, port)
    except OSError as exc:
        logger.error("could not bind %s:%s: %s", host, port, exc)
        raise StartupFailedError(int(port), None, details=str(exc)) from exc
    logger.info("serving %s on http://%s:%s", directory, host, httpd.server_address[1])
    restore = install_signal_handlers(token)
    try:
        if on_ready is not None:
            try:
                on_ready(httpd)
            except BaseException:
                httpd.server_close()
                raise
        serve_until_cancelled(httpd, token)
    finally:
        restore()
    logger.info("server on port %s stopped", port)


__all__ = [
    "CancellationToken",
    "StaticRequestHandler",
    "make_server",
    "serve_until_cancelled",
    "install_signal_handlers",
    "serve_directory",
]
