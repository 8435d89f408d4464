from .summary import CheckpointReport, OutcomeReport, RunReport, StepReport, report_path_for, write_report

__all__ = [
    "CheckpointReport",
    "OutcomeReport",
    "RunReport",
    "StepReport",
    "report_path_for",
    "write_report",
]
