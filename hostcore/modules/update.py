"""
hostcore/modules/update.py

Purpose:
    Package updates through every available provider, then a native update
    scan. The three actions are independent: a missing or failing provider
    never skips the others.
"""

from __future__ import annotations

from typing import List

from hostcore.executor.models import ModuleOutcome, StepResult
from hostcore.toolkit.providers import PackageUpdateProvider
from .base import MaintenanceModule


class UpdateModule(MaintenanceModule):
    name = "update"

    def run(self, simulate: bool) -> ModuleOutcome:
        self.announce()
        if simulate:
            # Planned only; no availability probing in simulate mode
            planned = [self.plan(f"upgrade all {p.name} packages", p.command()) for p in self.tools.updaters]
            planned.append(self.plan("trigger a Windows Update scan", self.tools.update_scan.command()))
            return ModuleOutcome.from_steps(self.name, [], planned)

        steps: List[StepResult] = [self._run_provider(p) for p in self.tools.updaters]
        steps.append(self.attempt(
            "update scan",
            self.tools.update_scan.trigger,
            success="Windows Update scan triggered.",
        ))
        return ModuleOutcome.from_steps(self.name, steps, [s.detail for s in steps if s.detail])

    def _run_provider(self, provider: PackageUpdateProvider) -> StepResult:
        step = f"{provider.name} upgrade"
        try:
            present = provider.probe()
        except Exception as exc:
            self.journal.error(f"Could not probe for {provider.name}: {exc}")
            return StepResult.failed(step, exc)

        if not present:
            message = f"{provider.name} not found; skipping."
            self.journal.warning(message)
            return StepResult.ok(step, message)

        self.journal.info(f"Upgrading packages with {provider.name}...")
        return self.attempt(step, provider.invoke, success=f"{provider.name} upgrade completed.")
