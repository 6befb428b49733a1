"""Presentation interface the lifecycle calls into.

Rendering (colors, glyphs, menus) lives in ``hopen.cli``; the core only
knows this protocol, and tests drive it with scripted answers.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class LifecycleUI(Protocol):
    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def kv(self, key: str, value: Any) -> None: ...

    def blank(self) -> None: ...

    def select(self, title: str, options: Sequence[T]) -> Optional[T]:
        """Return the chosen option, or None when input ends (treated as cancel)."""
        ...

    def confirm(self, message: str) -> bool: ...


__all__ = ["LifecycleUI"]
