"""Centralized configuration caching.

Provides a single source of truth for loaded configuration across all domain
configs. The cache key fingerprints ``HOPEN_*`` environment variables and the
user config file so tests and long-running processes never see stale config.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .manager import ENV_PREFIX, ConfigManager, get_user_config_dir

_config_cache: Dict[str, Dict[str, Any]] = {}


def _cache_key(user_config_dir: Path) -> str:
    env_items = sorted(
        (k, os.environ.get(k, ""))
        for k in os.environ.keys()
        if k.startswith(ENV_PREFIX)
    )
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]

    cfg_file = user_config_dir / "config.yaml"
    try:
        st = cfg_file.stat()
        file_fp = f"{st.st_mtime_ns}:{st.st_size}"
    except OSError:
        file_fp = "missing"
    return f"{user_config_dir}|{env_fp}|{file_fp}"


def get_cached_config(user_config_dir: Optional[Path] = None, *, validate: bool = True) -> Dict[str, Any]:
    """Return the merged configuration, loading it at most once per fingerprint.

    The returned dict must be treated as immutable.
    """
    resolved = (
        Path(user_config_dir).expanduser().resolve()
        if user_config_dir is not None
        else get_user_config_dir()
    )
    key = _cache_key(resolved)
    cached = _config_cache.get(key)
    if cached is not None:
        return cached
    cfg = ConfigManager(user_config_dir=resolved).load_config(validate=validate)
    _config_cache[key] = cfg
    return cfg


def reset_config_cache() -> None:
    """Drop every cached configuration (used by tests)."""
    _config_cache.clear()


__all__ = ["get_cached_config", "reset_config_cache"]
