"""
hostcore/executor/models.py

Purpose:
    Result types produced during a run.

Semantics:
    - StepResult: one external action (or check) and whether it worked.
      Modules collect these instead of short-circuiting on the first failure.
    - ModuleOutcome: produced once per module invocation, never retried.
    - CheckpointRecord: side record of the restore-point request. Not part
      of the run's pass/fail verdict.
    - RunResult: terminal state of the Orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Tuple

from hostcore.errors import ErrorCode, HostForgeError


@dataclass(frozen=True)
class StepResult:
    name: str
    succeeded: bool
    detail: str = ""
    error: Optional[str] = None

    @classmethod
    def ok(cls, name: str, detail: str = "") -> "StepResult":
        return cls(name=name, succeeded=True, detail=detail)

    @classmethod
    def failed(cls, name: str, error: BaseException | str) -> "StepResult":
        return cls(name=name, succeeded=False, error=str(error))


@dataclass(frozen=True)
class ModuleOutcome:
    module: str
    succeeded: bool
    findings: Tuple[str, ...] = ()
    error: Optional[str] = None
    steps: Tuple[StepResult, ...] = ()

    @classmethod
    def from_steps(cls, module: str, steps: Sequence[StepResult], findings: Sequence[str] = ()) -> "ModuleOutcome":
        steps = tuple(steps)
        failures = [s for s in steps if not s.succeeded]
        error = "; ".join(f"{s.name}: {s.error}" for s in failures) or None
        return cls(
            module=module,
            succeeded=not failures,
            findings=tuple(findings),
            error=error,
            steps=steps,
        )

    @classmethod
    def fault(cls, module: str, error: BaseException) -> "ModuleOutcome":
        """Outcome for a module whose fault escaped to the orchestrator boundary."""
        fault = HostForgeError(
            ErrorCode.MODULE_FAULT,
            f"{type(error).__name__}: {error}",
            details={"module": module},
        )
        return cls(module=module, succeeded=False, error=str(fault))


@dataclass(frozen=True)
class CheckpointRecord:
    description: str
    requested_at: datetime = field(default_factory=datetime.now)
    succeeded: bool = False
    simulated: bool = False
    error: Optional[str] = None


class RunState(str, Enum):
    COMPLETED = "COMPLETED"
    TERMINATED_NO_PRIVILEGE = "TERMINATED_NO_PRIVILEGE"
    TERMINATED_FAULT = "TERMINATED_FAULT"


@dataclass(frozen=True)
class RunResult:
    state: RunState
    outcomes: Tuple[ModuleOutcome, ...] = ()
    checkpoint: Optional[CheckpointRecord] = None
    log_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.state == RunState.COMPLETED

    @property
    def exit_code(self) -> int:
        # Terminated states map to a non-zero process status
        return 0 if self.completed else 1
