"""Terminate server processes by PID.

The process table (psutil) is tried first. When it cannot find or signal the
process, the external ``kill -9`` is used. Termination is fire-and-forget:
callers that need the port back must re-probe it.
"""
from __future__ import annotations

import logging
from typing import Optional

from hopen.core.exceptions import TerminateFailedError

from .inspector import ProcessInspector, PsutilProcessInspector, ShellProcessInspector

logger = logging.getLogger(__name__)


class ProcessController:
    def __init__(
        self,
        primary: Optional[ProcessInspector] = None,
        fallback: Optional[ProcessInspector] = None,
    ) -> None:
        self.primary = primary if primary is not None else PsutilProcessInspector()
        self.fallback = fallback if fallback is not None else ShellProcessInspector()

    def terminate(self, pid: int) -> None:
        """Kill ``pid`` via the primary mechanism, falling back to the secondary.

        Raises:
            TerminateFailedError: If both mechanisms fail.
        """
        if pid <= 0:
            raise TerminateFailedError(pid, "refusing to signal a non-positive pid")

        if self.primary.terminate(pid):
            logger.info("terminated pid=%s via %s", pid, self.primary.name)
            return

        logger.debug("pid=%s not terminated via %s; falling back to %s", pid, self.primary.name, self.fallback.name)
        if self.fallback.terminate(pid):
            logger.info("terminated pid=%s via %s", pid, self.fallback.name)
            return

        raise TerminateFailedError(pid, f"{self.primary.name} and {self.fallback.name} both failed")


__all__ = ["ProcessController"]
