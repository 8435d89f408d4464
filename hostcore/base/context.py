"""
hostcore/base/context.py
Run-wide operational context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from hostcore.base.config import MaintenanceConfig
from hostcore.observer.journal import DecisionLog


@dataclass(frozen=True)
class RunContext:
    """Created once at run start, read-only thereafter. Passed to every component."""
    log: DecisionLog
    log_dir: Path
    audit_only: bool = False
    repair: bool = False
    update: bool = False
    harden: bool = False
    simulate: bool = True
    elevated: bool = False
    targets: MaintenanceConfig = field(default_factory=MaintenanceConfig)

    @property
    def mutating_requested(self) -> bool:
        return self.repair or self.update or self.harden

    @property
    def checkpoint_requested(self) -> bool:
        """A restore point is part of this run's plan (simulated or real)."""
        return not self.audit_only and self.mutating_requested
