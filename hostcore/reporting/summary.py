"""
hostcore/reporting/summary.py

Purpose:
    Machine-readable summary of a run, written beside the decision log as
    JSON when requested. A consumer maps `state` to its own status handling.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from hostcore.executor.models import CheckpointRecord, ModuleOutcome, RunResult, RunState


class StepReport(BaseModel):
    name: str
    succeeded: bool
    detail: str = ""
    error: Optional[str] = None


class OutcomeReport(BaseModel):
    module: str
    succeeded: bool
    findings: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    steps: List[StepReport] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: ModuleOutcome) -> "OutcomeReport":
        return cls(
            module=outcome.module,
            succeeded=outcome.succeeded,
            findings=list(outcome.findings),
            error=outcome.error,
            steps=[
                StepReport(name=s.name, succeeded=s.succeeded, detail=s.detail, error=s.error)
                for s in outcome.steps
            ],
        )


class CheckpointReport(BaseModel):
    description: str
    requested_at: datetime
    succeeded: bool
    simulated: bool = False
    error: Optional[str] = None

    @classmethod
    def from_record(cls, record: CheckpointRecord) -> "CheckpointReport":
        return cls(
            description=record.description,
            requested_at=record.requested_at,
            succeeded=record.succeeded,
            simulated=record.simulated,
            error=record.error,
        )


class RunReport(BaseModel):
    state: RunState
    exit_code: int
    simulate: bool
    generated_at: datetime = Field(default_factory=datetime.now)
    log_path: Optional[str] = None
    error: Optional[str] = None
    checkpoint: Optional[CheckpointReport] = None
    outcomes: List[OutcomeReport] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: RunResult, simulate: bool) -> "RunReport":
        return cls(
            state=result.state,
            exit_code=result.exit_code,
            simulate=simulate,
            log_path=str(result.log_path) if result.log_path else None,
            error=result.error,
            checkpoint=CheckpointReport.from_record(result.checkpoint) if result.checkpoint else None,
            outcomes=[OutcomeReport.from_outcome(o) for o in result.outcomes],
        )


def report_path_for(log_path: Path) -> Path:
    return Path(log_path).with_suffix(".json")


def write_report(report: RunReport, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    return path
