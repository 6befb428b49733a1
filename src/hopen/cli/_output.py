"""Terminal output for the hopen CLI.

Status lines (✓/⚠) go to stdout; errors and their context go to stderr.
Diagnostics belong in :mod:`logging`, not here.
"""
from __future__ import annotations

import sys
from typing import Any, Callable, Optional, Sequence, TextIO, TypeVar

from hopen.core.exceptions import HopenError

from . import _menu

T = TypeVar("T")


def print_success(message: str, *, file: Optional[TextIO] = None) -> None:
    """Print success message with checkmark."""
    print(f"✓ {message}", file=file or sys.stdout)


def print_warning(message: str, *, file: Optional[TextIO] = None) -> None:
    print(f"⚠ {message}", file=file or sys.stdout)


def print_error(message: str, *, file: Optional[TextIO] = None) -> None:
    """Print error message to stderr."""
    print(f"Error: {message}", file=file or sys.stderr)


def print_hopen_error(exc: HopenError, *, file: Optional[TextIO] = None) -> None:
    """Print ``exc`` and one ``Key: value`` line per context entry."""
    out = file or sys.stderr
    print_error(str(exc), file=out)
    for key, value in exc.context.items():
        print(f"{key}: {value}", file=out)


class ConsoleUI:
    """Plain-text implementation of the lifecycle's UI protocol."""

    def __init__(
        self,
        *,
        stream: Optional[TextIO] = None,
        input_fn: Callable[[str], str] = input,
    ) -> None:
        self._stream = stream
        self._input = input_fn

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def info(self, message: str) -> None:
        print(message, file=self.stream)

    def success(self, message: str) -> None:
        print_success(message, file=self.stream)

    def warning(self, message: str) -> None:
        print_warning(message, file=self.stream)

    def kv(self, key: str, value: Any) -> None:
        print(f"{key}: {value}", file=self.stream)

    def blank(self) -> None:
        print(file=self.stream)

    def select(self, title: str, options: Sequence[T]) -> Optional[T]:
        return _menu.select(title, options, input_fn=self._input, stream=self.stream)

    def confirm(self, message: str) -> bool:
        return _menu.confirm(message, input_fn=self._input)


__all__ = [
    "ConsoleUI",
    "print_success",
    "print_warning",
    "print_error",
    "print_hopen_error",
]
