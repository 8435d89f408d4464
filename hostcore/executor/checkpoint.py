"""
hostcore/executor/checkpoint.py

Purpose:
    The Safety Checkpoint: request a system restore point before anything
    mutates the machine.

Semantics:
    - Best-effort insurance, not a precondition. Every failure becomes a
      warning line and a CheckpointRecord(succeeded=False); nothing raises.
    - Simulate mode makes no external call at all.
    - Apply mode: probe -> (enable once if disabled) -> create.
"""

from __future__ import annotations

import logging
from datetime import datetime

from hostcore.base.context import RunContext
from hostcore.errors import ErrorCode, HostForgeError, handle_error
from hostcore.toolkit.providers import RestorePointProvider
from hostcore.toolkit.shell import format_command
from .models import CheckpointRecord

log = logging.getLogger("executor.checkpoint")


class SafetyCheckpoint:
    def __init__(self, ctx: RunContext, provider: RestorePointProvider):
        self.ctx = ctx
        self._provider = provider

    def request(self, description: str) -> CheckpointRecord:
        requested_at = datetime.now()
        journal = self.ctx.log

        if self.ctx.simulate:
            journal.simulated(
                f"Would create restore point '{description}': "
                f"{format_command(self._provider.create_command(description))}"
            )
            return CheckpointRecord(description=description, requested_at=requested_at, simulated=True)

        journal.info(f"Creating restore point '{description}'...")
        stage = ErrorCode.CHECKPOINT_UNAVAILABLE
        try:
            if not self._provider.probe():
                journal.warning("System Restore is disabled on the system drive; attempting to enable it.")
                stage = ErrorCode.CHECKPOINT_ENABLE_FAILED
                self._provider.enable()
            stage = ErrorCode.CHECKPOINT_CREATE_FAILED
            self._provider.create(description)
        except Exception as exc:
            cause = handle_error(exc)
            err = HostForgeError(stage, cause.message, details={"cause": cause.code.value, **cause.details})
            log.debug("checkpoint failure", exc_info=True)
            journal.warning(f"Restore point creation failed: {err}. Continuing without a restore point.")
            return CheckpointRecord(
                description=description,
                requested_at=requested_at,
                succeeded=False,
                error=str(err),
            )

        journal.success(f"Restore point '{description}' created.")
        return CheckpointRecord(description=description, requested_at=requested_at, succeeded=True)
