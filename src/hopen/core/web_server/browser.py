"""Open the default browser; failures are logged and never abort a start."""
from __future__ import annotations

import logging
import threading
import webbrowser
from typing import Callable, Optional

from hopen.core.exceptions import BrowserOpenFailedError

logger = logging.getLogger(__name__)

Opener = Callable[[str], bool]


def _default_opener(url: str) -> bool:
    return webbrowser.open(url)


def open_browser(url: str, opener: Optional[Opener] = None) -> bool:
    """Open ``url``; return False (after logging a warning) on failure."""
    opener = opener if opener is not None else _default_opener
    try:
        try:
            ok = opener(url)
        except Exception as exc:
            raise BrowserOpenFailedError(url, str(exc)) from exc
        if ok is False:
            raise BrowserOpenFailedError(url, "no runnable browser found")
    except BrowserOpenFailedError as exc:
        logger.warning("%s (%s)", exc, exc.context.get("details", ""))
        return False
    return True


def open_browser_later(url: str, delay_seconds: float, opener: Optional[Opener] = None) -> threading.Thread:
    """Open ``url`` after ``delay_seconds`` on a daemon thread; returns the thread."""
    timer = threading.Timer(max(0.0, float(delay_seconds)), open_browser, args=(url, opener))
    timer.name = "hopen-browser-open"
    timer.daemon = True
    timer.start()
    return timer


__all__ = ["open_browser", "open_browser_later", "Opener"]
