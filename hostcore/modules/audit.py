"""
hostcore/modules/audit.py

Purpose:
    Read-only health audit. Runs in every mode (it never mutates, so the
    simulate flag does not apply) and always runs first.

Checks (each isolated; one failing never skips the next):
    1. OS identity/version and last boot time.
    2. Free space on the system volume. Warning below the threshold
       (default 10%); exactly at the threshold is informational.
    3. Antivirus + real-time protection status.
    4. Error-level system events in the look-back window (newest N).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List

from hostcore.executor.models import ModuleOutcome, StepResult
from hostcore.observer.events import Severity
from hostcore.toolkit.providers import DiskUsage
from .base import MaintenanceModule

logger = logging.getLogger(__name__)

GB = 1024 ** 3


def classify_disk(usage: DiskUsage, threshold: float = 10.0) -> Severity:
    return Severity.WARNING if usage.percent_free < threshold else Severity.INFO


class AuditModule(MaintenanceModule):
    name = "audit"

    def run(self) -> ModuleOutcome:
        self.announce()
        findings: List[str] = []
        checks = [
            ("os identity", self._check_os),
            ("disk space", self._check_disk),
            ("protection status", self._check_protection),
            ("system events", self._check_events),
        ]
        steps = [self._run_check(label, check, findings) for label, check in checks]
        return ModuleOutcome.from_steps(self.name, steps, findings)

    def _run_check(self, label: str, check, findings: List[str]) -> StepResult:
        try:
            check(findings)
        except _CheckFailed as failure:
            self.journal.record(failure.severity, failure.message)
            return StepResult.failed(label, failure.message)
        except Exception as exc:
            logger.debug(f"audit check '{label}' raised", exc_info=True)
            self.journal.error(f"Audit check '{label}' failed: {exc}")
            return StepResult.failed(label, exc)
        return StepResult.ok(label)

    def _note(self, findings: List[str], severity: Severity, message: str) -> None:
        self.journal.record(severity, message)
        findings.append(message)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _check_os(self, findings: List[str]) -> None:
        info = self.tools.health.os_info()
        boot = info.last_boot.strftime("%Y-%m-%d %H:%M:%S") if info.last_boot else "unknown"
        self._note(findings, Severity.INFO, f"OS: {info.caption} (version {info.version}), last boot {boot}")

    def _check_disk(self, findings: List[str]) -> None:
        drive = self.ctx.targets.system_drive
        usage = self.tools.health.disk_usage(drive)
        severity = classify_disk(usage, self.ctx.targets.low_disk_percent)
        message = (
            f"Disk {drive}: {usage.percent_free}% free "
            f"({usage.free_bytes / GB:.2f} GB of {usage.total_bytes / GB:.2f} GB)"
        )
        if severity == Severity.WARNING:
            message += f" - below {self.ctx.targets.low_disk_percent}%"
        self._note(findings, severity, message)

    def _check_protection(self, findings: List[str]) -> None:
        try:
            status = self.tools.health.protection_status()
        except Exception as exc:
            # Usually missing permission or a third-party AV; degraded, not broken
            raise _CheckFailed(Severity.WARNING, f"Could not retrieve protection status: {exc}") from exc

        if status.protected:
            self._note(findings, Severity.SUCCESS, "Antivirus and real-time protection are enabled.")
        else:
            self._note(
                findings,
                Severity.WARNING,
                f"Protection degraded: AntivirusEnabled={status.antivirus_enabled}, "
                f"RealTimeProtectionEnabled={status.realtime_enabled}",
            )

    def _check_events(self, findings: List[str]) -> None:
        hours = self.ctx.targets.event_lookback_hours
        since = datetime.now() - timedelta(hours=hours)
        try:
            events = self.tools.events.recent_errors(since, self.ctx.targets.max_events)
        except Exception as exc:
            raise _CheckFailed(Severity.ERROR, f"Could not read the system event log: {exc}") from exc

        if not events:
            self._note(findings, Severity.INFO, f"No error events in the last {hours} hours.")
            return

        newest = sorted(events, key=lambda e: e.time_created, reverse=True)[: self.ctx.targets.max_events]
        self.journal.info(f"{len(newest)} recent error event(s) in the last {hours} hours:")
        for event in newest:
            line = f"[{event.time_created:%Y-%m-%d %H:%M:%S}] {event.source} (ID {event.event_id})"
            if event.message:
                line += f": {event.message}"
            self._note(findings, Severity.WARNING, line)


class _CheckFailed(Exception):
    """A check that could not complete, with the severity it deserves."""

    def __init__(self, severity: Severity, message: str):
        super().__init__(message)
        self.severity = severity
        self.message = message
