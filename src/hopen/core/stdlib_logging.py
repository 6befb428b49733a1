from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from hopen.core.config.domains.logging import DEFAULT_FORMAT

_CONFIGURED_KEY: Optional[str] = None
_HOPEN_HANDLER: Optional[logging.Handler] = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(
    *,
    level: str = "WARNING",
    log_path: Optional[Path] = None,
    fmt: str = DEFAULT_FORMAT,
) -> None:
    """Install the hopen handler on the root logger.

    Records go to ``log_path`` when given, otherwise to stderr. Idempotent
    per-process: reconfiguring with the same target only adjusts the level.
    """
    global _CONFIGURED_KEY, _HOPEN_HANDLER

    key = str(Path(log_path).expanduser().resolve()) if log_path is not None else "<stderr>"
    root = logging.getLogger()
    root.setLevel(_level_from_name(level))

    if _CONFIGURED_KEY == key and _HOPEN_HANDLER is not None:
        _HOPEN_HANDLER.setLevel(_level_from_name(level))
        return

    if _HOPEN_HANDLER is not None:
        root.removeHandler(_HOPEN_HANDLER)
        _HOPEN_HANDLER.close()
        _HOPEN_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        Path(key).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(key, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(fmt))
    root.addHandler(handler)

    _HOPEN_HANDLER = handler
    _CONFIGURED_KEY = key


def reset_logging_for_tests() -> None:
    """Test-only: remove the handler installed by :func:`configure_logging`."""
    global _CONFIGURED_KEY, _HOPEN_HANDLER
    if _HOPEN_HANDLER is not None:
        logging.getLogger().removeHandler(_HOPEN_HANDLER)
        _HOPEN_HANDLER.close()
    _CONFIGURED_KEY = None
    _HOPEN_HANDLER = None


__all__ = ["configure_logging", "reset_logging_for_tests"]
