"""
hostcore/modules/harden.py

Purpose:
    Removes non-essential app packages, lowers telemetry to Basic, and sets
    non-essential services to manual start. Three independent passes; a
    failure in one never stops the others. Missing packages and services
    are silent.
"""

from __future__ import annotations

from typing import List

from hostcore.executor.models import ModuleOutcome, StepResult
from hostcore.observer.events import Severity
from .base import MaintenanceModule


def match_packages(installed: List[str], pattern: str) -> List[str]:
    needle = pattern.lower()
    return [pkg for pkg in installed if needle in pkg.lower()]


class HardenModule(MaintenanceModule):
    name = "harden"

    def run(self, simulate: bool) -> ModuleOutcome:
        self.announce()
        targets = self.ctx.targets
        if simulate:
            planned = [
                self.plan(
                    "remove installed app packages matching: " + ", ".join(targets.bloat_packages)
                    + ", each with",
                    self.tools.apps.remove_command("<package>"),
                ),
                self.plan(
                    f"set telemetry to Basic ({targets.telemetry_value_name}={targets.telemetry_level})",
                    self.tools.config_values.set_value_command(
                        targets.telemetry_key, targets.telemetry_value_name, targets.telemetry_level
                    ),
                ),
                self.plan(
                    "set startup type to Manual for services: " + ", ".join(targets.nonessential_services)
                    + ", each with",
                    self.tools.services.set_startup_manual_command("<service>"),
                ),
            ]
            return ModuleOutcome.from_steps(self.name, [], planned)

        steps: List[StepResult] = []
        steps.extend(self._remove_bloat())
        steps.append(self._set_telemetry())
        steps.extend(self._demote_services())
        return ModuleOutcome.from_steps(self.name, steps, [s.detail for s in steps if s.detail])

    def _remove_bloat(self) -> List[StepResult]:
        try:
            installed = self.tools.apps.installed()
        except Exception as exc:
            self.journal.warning(f"Could not list installed app packages: {exc}")
            return [StepResult.failed("list app packages", exc)]

        steps = []
        for pattern in self.ctx.targets.bloat_packages:
            for package in match_packages(installed, pattern):
                steps.append(self.attempt(
                    f"remove {package}",
                    lambda p=package: self.tools.apps.remove(p),
                    success=f"Removed {package}",
                    failure_severity=Severity.WARNING,
                ))
        if not steps:
            self.journal.info("No non-essential app packages installed.")
        return steps

    def _set_telemetry(self) -> StepResult:
        targets = self.ctx.targets
        return self.attempt(
            "telemetry level",
            lambda: self.tools.config_values.set_value(
                targets.telemetry_key, targets.telemetry_value_name, targets.telemetry_level
            ),
            success="Telemetry set to Basic.",
            failure_severity=Severity.WARNING,
        )

    def _demote_services(self) -> List[StepResult]:
        services = self.tools.services
        steps = []
        for svc in self.ctx.targets.nonessential_services:
            try:
                present = services.exists(svc)
            except Exception as exc:
                self.journal.warning(f"Could not query service {svc}: {exc}")
                steps.append(StepResult.failed(f"query {svc}", exc))
                continue
            if not present:
                continue
            steps.append(self.attempt(
                f"manual start {svc}",
                lambda s=svc: services.set_startup_manual(s),
                success=f"Service {svc} set to Manual.",
                failure_severity=Severity.WARNING,
            ))
        return steps
