from .models import CheckpointRecord, ModuleOutcome, RunResult, RunState, StepResult
from .interlock import PrivilegeGate
from .checkpoint import SafetyCheckpoint

__all__ = [
    "CheckpointRecord",
    "ModuleOutcome",
    "RunResult",
    "RunState",
    "StepResult",
    "PrivilegeGate",
    "SafetyCheckpoint",
]
