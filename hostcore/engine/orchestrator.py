"""
hostcore/engine/orchestrator.py

Purpose:
    Composes privilege gate, safety checkpoint and the four maintenance
    modules into one run.

State machine:
    INIT -> PRIVILEGE_CHECK -> [TERMINATED_NO_PRIVILEGE]
         -> CHECKPOINT_DECISION -> AUDIT -> REPAIR? -> UPDATE? -> HARDEN?
         -> COMPLETED
    Any fault escaping module isolation -> TERMINATED_FAULT.

Rules:
    - No elevation: error line, nothing else runs (audit included).
    - Checkpoint requested exactly once, before the first mutating module,
      iff not audit-only and a mutating module was requested. When
      simulating it only describes the restore point it would create.
    - Audit always runs. Repair/Update/Harden run iff requested (and not
      audit-only), in that order, each isolated at this boundary.
    - COMPLETED once every requested module was attempted, whatever their
      individual outcome. The final line names the log file.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from hostcore.base.config import MaintenanceConfig
from hostcore.base.context import RunContext
from hostcore.errors import ErrorCode, HostForgeError, OrchestrationFault
from hostcore.executor.checkpoint import SafetyCheckpoint
from hostcore.executor.interlock import PrivilegeGate
from hostcore.executor.models import CheckpointRecord, ModuleOutcome, RunResult, RunState
from hostcore.modules import AuditModule, HardenModule, RepairModule, UpdateModule
from hostcore.observer.journal import DecisionLog
from hostcore.toolkit import Toolbox

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    INIT = "INIT"
    PRIVILEGE_CHECK = "PRIVILEGE_CHECK"
    CHECKPOINT_DECISION = "CHECKPOINT_DECISION"
    AUDIT = "AUDIT"
    REPAIR = "REPAIR"
    UPDATE = "UPDATE"
    HARDEN = "HARDEN"
    COMPLETED = "COMPLETED"
    TERMINATED_NO_PRIVILEGE = "TERMINATED_NO_PRIVILEGE"
    TERMINATED_FAULT = "TERMINATED_FAULT"


@dataclass(frozen=True)
class RunRequest:
    """What the operator asked for, before elevation is known."""
    audit_only: bool = False
    repair: bool = False
    update: bool = False
    harden: bool = False
    dry_run: bool = True

    def describe(self) -> str:
        wanted = ["audit"] + [n for n, on in (("repair", self.repair), ("update", self.update), ("harden", self.harden)) if on]
        return ", ".join(wanted) + (" (audit-only)" if self.audit_only else "")


def build_context(
    request: RunRequest,
    tools: Toolbox,
    log: DecisionLog,
    log_dir: Path,
    targets: Optional[MaintenanceConfig] = None,
) -> RunContext:
    """Query the privilege gate once and freeze everything into a RunContext."""
    return RunContext(
        log=log,
        log_dir=Path(log_dir),
        audit_only=request.audit_only,
        repair=request.repair,
        update=request.update,
        harden=request.harden,
        simulate=request.dry_run,
        elevated=PrivilegeGate(tools.privilege).is_elevated(),
        targets=targets or MaintenanceConfig(),
    )


class Orchestrator:
    """
    Runs one maintenance pass for an immutable RunContext.
    """

    def __init__(self, ctx: RunContext, tools: Toolbox, checkpoint_description: Optional[str] = None):
        self.ctx = ctx
        self.tools = tools
        self.checkpoint_description = checkpoint_description or (
            f"HostForge maintenance {datetime.now():%Y-%m-%d %H:%M}"
        )
        self.phase = Phase.INIT
        self.history: List[Phase] = [Phase.INIT]
        self._outcomes: List[ModuleOutcome] = []
        self._checkpoint: Optional[CheckpointRecord] = None

    def _enter(self, phase: Phase) -> None:
        logger.debug(f"phase {self.phase.value} -> {phase.value}")
        self.phase = phase
        self.history.append(phase)

    def _result(self, state: RunState, error: Optional[str] = None) -> RunResult:
        return RunResult(
            state=state,
            outcomes=tuple(self._outcomes),
            checkpoint=self._checkpoint,
            log_path=self.ctx.log.path,
            error=error,
        )

    def run(self) -> RunResult:
        try:
            return self._run()
        except Exception as exc:
            # Last resort: only faults that escaped every module boundary land here
            self._enter(Phase.TERMINATED_FAULT)
            fault = OrchestrationFault(f"{type(exc).__name__}: {exc}")
            logger.exception("orchestration fault")
            trace = traceback.format_exc().rstrip()
            try:
                self.ctx.log.error(f"Run aborted: {fault.message}")
                self.ctx.log.error(f"Trace:\n{trace}")
                self._log_location()
            except Exception:
                logger.exception("could not record orchestration fault in the decision log")
            return self._result(RunState.TERMINATED_FAULT, error=fault.message)

    def _run(self) -> RunResult:
        ctx = self.ctx
        journal = ctx.log
        mode = "SIMULATE (dry run)" if ctx.simulate else "APPLY"
        journal.info(f"HostForge run started. Mode: {mode}.")

        # --- PrivilegeCheck ---
        self._enter(Phase.PRIVILEGE_CHECK)
        if not ctx.elevated:
            self._enter(Phase.TERMINATED_NO_PRIVILEGE)
            denied = HostForgeError(
                ErrorCode.PRIV_NOT_ELEVATED,
                "Administrator privileges are required. Re-run from an elevated prompt.",
            )
            journal.error(f"{denied.message} Aborting.")
            self._log_location()
            return self._result(RunState.TERMINATED_NO_PRIVILEGE, error=str(denied))

        if ctx.simulate:
            journal.simulated("Dry run: no changes will be made. Pass --no-dry-run to apply.")

        # --- CheckpointDecision ---
        self._enter(Phase.CHECKPOINT_DECISION)
        if ctx.checkpoint_requested:
            # In simulate mode the checkpoint only describes the call
            self._checkpoint = SafetyCheckpoint(ctx, self.tools.restore_points).request(self.checkpoint_description)

        # --- Audit, always ---
        self._enter(Phase.AUDIT)
        audit = AuditModule(ctx, self.tools)
        self._run_module(audit.name, audit.run)

        # --- Mutating modules, fixed order ---
        plan = [
            (Phase.REPAIR, ctx.repair, RepairModule),
            (Phase.UPDATE, ctx.update, UpdateModule),
            (Phase.HARDEN, ctx.harden, HardenModule),
        ]
        for phase, requested, module_cls in plan:
            if not requested:
                continue
            if ctx.audit_only:
                journal.info(f"Audit-only run: skipping requested {module_cls.name} module.")
                continue
            self._enter(phase)
            module = module_cls(ctx, self.tools)
            self._run_module(module.name, lambda m=module: m.run(ctx.simulate))

        self._enter(Phase.COMPLETED)
        failed = [o.module for o in self._outcomes if not o.succeeded]
        if failed:
            journal.warning(f"Maintenance run completed with issues in: {', '.join(failed)}.")
        else:
            journal.success("Maintenance run completed.")
        self._log_location()
        return self._result(RunState.COMPLETED)

    def _run_module(self, name: str, invoke: Callable[[], ModuleOutcome]) -> ModuleOutcome:
        """Module boundary: a fault inside one module never reaches the next."""
        try:
            outcome = invoke()
        except Exception as exc:
            logger.debug(f"module {name} raised", exc_info=True)
            self.ctx.log.error(f"{name.capitalize()} module failed: {type(exc).__name__}: {exc}")
            outcome = ModuleOutcome.fault(name, exc)
        self._outcomes.append(outcome)
        return outcome

    def _log_location(self) -> None:
        path = self.ctx.log.path
        self.ctx.log.info(f"Log saved to {path}" if path else "Log was not persisted (no log directory).")
