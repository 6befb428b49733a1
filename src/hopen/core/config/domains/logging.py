"""Domain-specific configuration for stdlib logging."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Optional

from ..base import BaseDomainConfig

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class LoggingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "logging"

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level", "WARNING") or "WARNING").upper()

    @cached_property
    def format(self) -> str:
        return str(self.section.get("format") or DEFAULT_FORMAT)

    @cached_property
    def path(self) -> Optional[Path]:
        raw = self.section.get("path")
        if raw is None or not str(raw).strip():
            return None
        return Path(str(raw)).expanduser()


__all__ = ["LoggingConfig", "DEFAULT_FORMAT"]
