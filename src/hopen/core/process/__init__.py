"""Process inspection and termination."""

from .controller import ProcessController
from .inspector import (
    ChainedProcessInspector,
    ProcessInspector,
    PsutilProcessInspector,
    ShellProcessInspector,
    default_inspector,
)

__all__ = [
    "ProcessController",
    "ProcessInspector",
    "PsutilProcessInspector",
    "ShellProcessInspector",
    "ChainedProcessInspector",
    "default_inspector",
]
