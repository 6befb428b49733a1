"""Typed accessors over one top-level section of the merged configuration."""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .cache import get_cached_config


class BaseDomainConfig(ABC):
    """One subclass per config section; values are exposed as cached properties.

    Example:
        class ServerConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "server"

            @cached_property
            def host(self) -> str:
                return self.section.get("host", "127.0.0.1")

    Pass ``config`` to build an accessor over an explicit document (tests,
    embedding) without touching the user config directory.
    """

    def __init__(
        self,
        user_config_dir: Optional[Path] = None,
        *,
        config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._config: Mapping[str, Any] = config if config is not None else get_cached_config(user_config_dir)

    @abstractmethod
    def _config_section(self) -> str:
        """Name of the top-level key this accessor reads."""

    @cached_property
    def section(self) -> Dict[str, Any]:
        """Copy of the section, or an empty dict when it is missing or null."""
        return dict(self._config.get(self._config_section()) or {})


__all__ = ["BaseDomainConfig"]
