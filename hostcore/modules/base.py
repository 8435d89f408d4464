"""
hostcore/modules/base.py

Purpose:
    Shared plumbing for the maintenance modules: the dual path between
    "describe what would happen" (simulate) and "do it" (apply), and per-step
    isolation expressed as collected StepResults.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from hostcore.base.context import RunContext
from hostcore.executor.models import StepResult
from hostcore.observer.events import Severity
from hostcore.observer.journal import DecisionLog
from hostcore.toolkit import Toolbox
from hostcore.toolkit.shell import format_command

logger = logging.getLogger(__name__)


class MaintenanceModule:
    name = "module"

    def __init__(self, ctx: RunContext, tools: Toolbox):
        self.ctx = ctx
        self.tools = tools

    @property
    def journal(self) -> DecisionLog:
        return self.ctx.log

    def announce(self) -> None:
        mode = "simulate" if self.ctx.simulate else "apply"
        self.journal.info(f"=== {self.name.capitalize()} ({mode}) ===")

    def plan(self, action: str, command: Optional[List[str]] = None) -> str:
        """Log one planned action at simulated severity instead of running it."""
        line = f"Would {action}" + (f": {format_command(command)}" if command else "")
        self.journal.simulated(line)
        return line

    def attempt(
        self,
        step: str,
        action: Callable[[], object],
        success: Optional[str] = None,
        failure_severity: Severity = Severity.ERROR,
    ) -> StepResult:
        """
        Run one external action. Failures are logged and returned, never
        raised, so the caller always reaches its next step.
        """
        try:
            action()
        except Exception as exc:
            logger.debug(f"{self.name}: step '{step}' failed", exc_info=True)
            self.journal.record(failure_severity, f"{step} failed: {exc}")
            return StepResult.failed(step, exc)
        if success:
            self.journal.success(success)
        return StepResult.ok(step, success or "")
