"""
hostcore/modules/repair.py

Purpose:
    File-system / image repair, bounded temp cleanup and an update-component
    reset.

Apply mode runs, strictly in order:
    1. Integrity scan (sfc), blocking.
    2. Image repair (DISM), blocking.
    3. Temp cleanup: entries older than the age limit; missing directories
       and locked items are tolerated.
    4. Update-component reset: stop services -> rename cache directories to
       a timestamped backup (never delete) -> start the same services.

No step is retried. A failed step is logged and the next one still runs.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime
from pathlib import Path
from typing import List, Tuple

from hostcore.executor.models import ModuleOutcome, StepResult
from hostcore.observer.events import Severity
from hostcore.toolkit.providers import FileSystemOps
from .base import MaintenanceModule

logger = logging.getLogger(__name__)


def backup_name(path: Path, stamp: str) -> Path:
    return path.with_name(f"{path.name}.bak_{stamp}")


def purge_stale_entries(root: Path, cutoff: float, fs: FileSystemOps) -> Tuple[int, int]:
    """
    Delete everything under `root` last modified before `cutoff` (epoch
    seconds). Returns (removed, skipped).

    Modification times are read before anything is deleted, because removing
    a child bumps its parent's mtime. Directories are removed deepest first
    and only once empty, so a stale folder holding a fresh file survives.
    """
    root = Path(root)
    if not root.is_dir():
        return 0, 0

    stale_files: List[Path] = []
    stale_dirs: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, topdown=False):
        for name in filenames:
            path = Path(dirpath) / name
            try:
                if path.lstat().st_mtime < cutoff:
                    stale_files.append(path)
            except OSError:
                continue
        for name in dirnames:
            path = Path(dirpath) / name
            try:
                if path.lstat().st_mtime < cutoff:
                    stale_dirs.append(path)
            except OSError:
                continue

    removed = skipped = 0
    for path in stale_files + stale_dirs:
        try:
            fs.remove(path)
            removed += 1
        except OSError:
            skipped += 1
    return removed, skipped


class RepairModule(MaintenanceModule):
    name = "repair"

    def run(self, simulate: bool) -> ModuleOutcome:
        self.announce()
        if simulate:
            return ModuleOutcome.from_steps(self.name, [], self._plan_all())

        steps: List[StepResult] = []
        repair = self.tools.repair

        self.journal.info("Running system file integrity scan (this can take a while)...")
        steps.append(self.attempt("integrity scan", repair.integrity_scan, success="Integrity scan completed."))

        self.journal.info("Running system image repair (this can take a while)...")
        steps.append(self.attempt("image repair", repair.image_repair, success="Image repair completed."))

        steps.append(self.attempt("temp cleanup", self.clean_temp))
        steps.extend(self.reset_update_components())

        return ModuleOutcome.from_steps(self.name, steps, [s.detail for s in steps if s.succeeded and s.detail])

    def _plan_all(self) -> List[str]:
        targets = self.ctx.targets
        repair = self.tools.repair
        stamp = "<timestamp>"
        renames = ", ".join(f"{d} -> {backup_name(d, stamp).name}" for d in targets.update_cache_dirs)
        services = ", ".join(targets.update_services)
        return [
            self.plan("run system file integrity scan", repair.integrity_scan_command()),
            self.plan("run system image repair", repair.image_repair_command()),
            self.plan(
                f"delete temp entries older than {targets.temp_max_age_hours}h in: "
                + ", ".join(str(d) for d in targets.temp_dirs)
            ),
            self.plan(
                f"reset update components: stop {services}; rename {renames}; start {services}"
            ),
        ]

    def clean_temp(self) -> Tuple[int, int]:
        cutoff = time.time() - self.ctx.targets.temp_max_age_hours * 3600
        removed_total = skipped_total = 0
        for directory in self.ctx.targets.temp_dirs:
            removed, skipped = purge_stale_entries(directory, cutoff, self.tools.fs)
            removed_total += removed
            skipped_total += skipped
        self.journal.success(
            f"Temp cleanup removed {removed_total} item(s)"
            + (f", {skipped_total} in use or protected were left in place." if skipped_total else ".")
        )
        return removed_total, skipped_total

    def reset_update_components(self) -> List[StepResult]:
        """
        Stop -> rename -> start. The order matters: renaming a cache while
        its owning service runs, or leaving the services stopped, degrades
        Windows Update.
        """
        targets = self.ctx.targets
        services = self.tools.services
        stamp = datetime.now().strftime("%Y%m%d%H%M%S")
        steps: List[StepResult] = []

        self.journal.info("Resetting Windows Update components...")
        for svc in targets.update_services:
            steps.append(self.attempt(
                f"stop {svc}", lambda s=svc: services.stop(s),
                failure_severity=Severity.WARNING,
            ))

        for cache in targets.update_cache_dirs:
            target = backup_name(cache, stamp)
            steps.append(self.attempt(
                f"rename {cache}", lambda c=cache, t=target: self.tools.fs.rename(c, t),
                success=f"Renamed {cache} -> {target.name}",
                failure_severity=Severity.WARNING,
            ))

        for svc in targets.update_services:
            steps.append(self.attempt(
                f"start {svc}", lambda s=svc: services.start(s),
                failure_severity=Severity.WARNING,
            ))

        if all(s.succeeded for s in steps):
            self.journal.success("Windows Update components reset.")
        else:
            self.journal.warning("Windows Update component reset finished with errors; see above.")
        return steps
