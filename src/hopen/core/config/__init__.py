"""Layered configuration for hopen.

Bundled YAML defaults, an optional user ``config.yaml`` and ``HOPEN_*``
environment overrides are merged and validated with jsonschema.
"""

from .cache import get_cached_config, reset_config_cache
from .manager import ConfigManager, get_user_config_dir

__all__ = [
    "ConfigManager",
    "get_cached_config",
    "get_user_config_dir",
    "reset_config_cache",
]
