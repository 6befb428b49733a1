"""Shared helpers (merging, YAML I/O)."""

from .io import read_yaml
from .merge import deep_merge

__all__ = ["deep_merge", "read_yaml"]
