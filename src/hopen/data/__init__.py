"""Bundled data files: config defaults and the config schema."""
from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """Filesystem path of ``hopen/data/<subpackage>[/<filename>]``.

    >>> get_data_path("schemas", "config.schema.yaml").name
    'config.schema.yaml'
    """
    root = Path(str(resources.files("hopen.data"))) / subpackage
    return root / filename if filename else root


@lru_cache(maxsize=8)
def read_yaml(subpackage: str, filename: str) -> dict[str, Any]:
    """Parsed bundled YAML file; callers must copy before mutating."""
    text = get_data_path(subpackage, filename).read_text(encoding="utf-8")
    return yaml.safe_load(text) or {}


__all__ = ["get_data_path", "read_yaml"]
