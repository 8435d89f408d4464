"""
hostcore/observer/events.py

Purpose:
    The atoms of the Decision Log.
    Immutable, timestamped entries with an enumerated severity.

Semantics:
    - Severity carries no presentation; colours are chosen by the sink.
    - to_line() is the durable on-disk form: "[timestamp] [SEVERITY] message".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"
    SIMULATED = "SIMULATED"


@dataclass(frozen=True)
class LogEntry:
    """
    One decision, taken or simulated. Facts do not change once recorded.
    """
    severity: Severity
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_line(self) -> str:
        return f"[{self.timestamp.strftime(TIMESTAMP_FORMAT)}] [{self.severity.value}] {self.message}"
