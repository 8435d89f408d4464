"""
hostcore/observer/journal.py

Purpose:
    The Decision Log: append-only, timestamped record of every action taken
    or simulated during one run.

Semantics:
    - record() writes to the live sink first, then best-effort to the durable
      sink. A durable failure is never raised; the live sink stays
      authoritative.
    - No buffering. Entries appear in exactly the order record() was called.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from .events import LogEntry, Severity
from .sinks import ConsoleSink, FileSink, Sink

log = logging.getLogger("observer.journal")


def run_log_path(log_dir: Path, started_at: datetime, prefix: str = "hostforge") -> Path:
    """Per-run log file named after the run's start timestamp."""
    return Path(log_dir) / f"{prefix}_{started_at.strftime('%Y%m%d_%H%M%S')}.log"


class DecisionLog:
    def __init__(self, live: Optional[Sink] = None, durable: Optional[FileSink] = None):
        self._live = live or ConsoleSink()
        self._durable = durable
        self._entries: List[LogEntry] = []
        self._persist_warned = False

    @classmethod
    def for_run(
        cls,
        log_dir: Path,
        started_at: Optional[datetime] = None,
        live: Optional[Sink] = None,
        prefix: str = "hostforge",
    ) -> "DecisionLog":
        path = run_log_path(log_dir, started_at or datetime.now(), prefix)
        return cls(live=live, durable=FileSink(path))

    @property
    def path(self) -> Optional[Path]:
        return self._durable.path if self._durable else None

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def record(self, severity: Severity, message: str) -> LogEntry:
        entry = LogEntry(severity=severity, message=message)
        self._entries.append(entry)
        self._live.write(entry)

        if self._durable is not None:
            try:
                self._durable.write(entry)
            except Exception as exc:
                if not self._persist_warned:
                    log.warning(f"Decision log not persisted to {self._durable.path}: {exc}")
                    self._persist_warned = True
        return entry

    # Convenience wrappers

    def info(self, message: str) -> LogEntry:
        return self.record(Severity.INFO, message)

    def warning(self, message: str) -> LogEntry:
        return self.record(Severity.WARNING, message)

    def error(self, message: str) -> LogEntry:
        return self.record(Severity.ERROR, message)

    def success(self, message: str) -> LogEntry:
        return self.record(Severity.SUCCESS, message)

    def simulated(self, message: str) -> LogEntry:
        return self.record(Severity.SIMULATED, message)
