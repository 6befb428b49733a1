"""YAML file reading with advisory locks."""
from __future__ import annotations

import fcntl
from pathlib import Path
from typing import Any

import yaml


def read_yaml(
    path: Path, default: Any = None, raise_on_error: bool = False
) -> Any:
    """Read YAML with error handling.

    Returns default if file is missing or invalid, unless raise_on_error is True.

    Args:
        path: YAML file path to read
        default: Value to return if file missing or invalid (default: None)
        raise_on_error: If True, propagate exceptions instead of returning default.

    Returns:
        Any: Parsed YAML data, or default if error
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        with open(path, "r", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            data = yaml.safe_load(f)
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        return data if data is not None else default
    except Exception:
        if raise_on_error:
            raise
        return default


__all__ = ["read_yaml"]
