from .base import MaintenanceModule
from .audit import AuditModule, classify_disk
from .repair import RepairModule, purge_stale_entries
from .update import UpdateModule
from .harden import HardenModule

__all__ = [
    "MaintenanceModule",
    "AuditModule",
    "classify_disk",
    "RepairModule",
    "purge_stale_entries",
    "UpdateModule",
    "HardenModule",
]
