"""
hostcore/engine

Run orchestration: the state machine that gates, orders and isolates the
maintenance modules.
"""

from .orchestrator import Orchestrator, Phase, RunRequest, build_context

__all__ = ["Orchestrator", "Phase", "RunRequest", "build_context"]
