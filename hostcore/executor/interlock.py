"""
hostcore/executor/interlock.py

Purpose:
    The Privilege Gate. A hard precondition for the whole run: the
    Orchestrator refuses to run any module, audit included, without
    elevation.

Semantics:
    - is_elevated() is a pure query and never raises.
    - Fail-Safe: any error while asking the OS counts as "not elevated".
"""

from __future__ import annotations

import logging
from typing import Optional

from hostcore.errors import ErrorCode, HostForgeError
from hostcore.toolkit.providers import PrivilegeProvider

log = logging.getLogger("executor.interlock")


class PrivilegeGate:
    def __init__(self, provider: PrivilegeProvider):
        self._provider = provider
        self.last_error: Optional[HostForgeError] = None

    def is_elevated(self) -> bool:
        try:
            elevated = bool(self._provider.is_admin())
        except Exception as exc:
            self.last_error = HostForgeError(
                ErrorCode.PRIV_QUERY_FAILED,
                f"Privilege query failed: {exc}",
                details={"original_type": type(exc).__name__},
            )
            log.warning(f"{self.last_error}; treating as not elevated")
            return False
        log.debug(f"AUDIT | PrivilegeGate | elevated={elevated}")
        return elevated
