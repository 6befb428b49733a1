"""Numbered menus and yes/no prompts read from the terminal."""
from __future__ import annotations

import sys
from typing import Callable, Optional, Sequence, TextIO, TypeVar

T = TypeVar("T")

YES_ANSWERS = frozenset({"y", "yes"})


def _label(option: object) -> str:
    return str(getattr(option, "value", option))


def _match(answer: str, options: Sequence[T]) -> Optional[T]:
    answer = answer.strip()
    if not answer:
        return None
    if answer.isdigit():
        index = int(answer) - 1
        return options[index] if 0 <= index < len(options) else None
    lowered = answer.lower()
    matches = [
        opt for opt in options
        if _label(opt).lower().startswith(lowered)
        or _label(opt).split(") ", 1)[-1].lower().startswith(lowered)
    ]
    return matches[0] if len(matches) == 1 else None


def select(
    title: str,
    options: Sequence[T],
    *,
    input_fn: Callable[[str], str] = input,
    stream: Optional[TextIO] = None,
) -> Optional[T]:
    """Print ``options`` and read a choice by number or label prefix.

    Asks again on an unrecognized answer. Returns None on end of input.
    """
    out = stream or sys.stdout
    print(title, file=out)
    for option in options:
        print(f"  {_label(option)}", file=out)

    while True:
        try:
            answer = input_fn(f"Choice [1-{len(options)}]: ")
        except EOFError:
            print(file=out)
            return None
        choice = _match(answer, options)
        if choice is not None:
            return choice
        print(f"Please enter a number between 1 and {len(options)}.", file=out)


def confirm(message: str, *, input_fn: Callable[[str], str] = input) -> bool:
    """Ask ``message [y/N]``; only ``y``/``yes`` count as yes."""
    try:
        answer = input_fn(f"{message} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in YES_ANSWERS


__all__ = ["select", "confirm"]
