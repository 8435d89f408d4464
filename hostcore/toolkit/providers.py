"""
hostcore/toolkit/providers.py

Purpose:
    The narrow interfaces through which HostForge reaches the operating
    system. Modules and the Orchestrator depend only on these Protocols; the
    Windows implementations live in hostcore/toolkit/windows.py and tests
    substitute recording fakes.

Semantics:
    - Query methods never mutate.
    - Mutating methods raise (HostForgeError or OSError) on failure; callers
      turn the exception into a StepResult.
    - Every mutating action has a matching *_command() describing exactly
      what would run, so simulate mode can name it without executing it.
    - probe() -> bool answers "is this tool present", so callers never
      special-case a named binary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable


# ============================================================================
# Health data
# ============================================================================

@dataclass(frozen=True)
class OsInfo:
    caption: str
    version: str
    last_boot: Optional[datetime] = None


@dataclass(frozen=True)
class DiskUsage:
    used_bytes: int
    free_bytes: int

    @property
    def total_bytes(self) -> int:
        return self.used_bytes + self.free_bytes

    @property
    def percent_free(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return round(self.free_bytes / self.total_bytes * 100, 2)


@dataclass(frozen=True)
class ProtectionStatus:
    antivirus_enabled: bool
    realtime_enabled: bool

    @property
    def protected(self) -> bool:
        return self.antivirus_enabled and self.realtime_enabled


@dataclass(frozen=True)
class SystemEvent:
    time_created: datetime
    source: str
    event_id: int
    message: str = ""


# ============================================================================
# Collaborator interfaces
# ============================================================================

@runtime_checkable
class PrivilegeProvider(Protocol):
    def is_admin(self) -> bool:
        ...


@runtime_checkable
class RestorePointProvider(Protocol):
    def probe(self) -> bool:
        """True when restore-point creation is enabled for the system drive."""
        ...

    def enable(self) -> None:
        ...

    def create(self, description: str) -> None:
        ...

    def create_command(self, description: str) -> List[str]:
        ...


@runtime_checkable
class HealthProvider(Protocol):
    def os_info(self) -> OsInfo:
        ...

    def disk_usage(self, drive: str) -> DiskUsage:
        ...

    def protection_status(self) -> ProtectionStatus:
        ...


@runtime_checkable
class EventLogProvider(Protocol):
    def recent_errors(self, since: datetime, limit: int) -> List[SystemEvent]:
        """Error-level system events newer than `since`, newest first."""
        ...


@runtime_checkable
class RepairTools(Protocol):
    def integrity_scan(self) -> None:
        ...

    def image_repair(self) -> None:
        ...

    def integrity_scan_command(self) -> List[str]:
        ...

    def image_repair_command(self) -> List[str]:
        ...


@runtime_checkable
class PackageUpdateProvider(Protocol):
    name: str

    def probe(self) -> bool:
        ...

    def invoke(self) -> None:
        ...

    def command(self) -> List[str]:
        ...


@runtime_checkable
class UpdateScanTrigger(Protocol):
    def trigger(self) -> None:
        ...

    def command(self) -> List[str]:
        ...


@runtime_checkable
class AppPackageProvider(Protocol):
    def installed(self) -> List[str]:
        """Full names of installed app packages."""
        ...

    def remove(self, package: str) -> None:
        ...

    def remove_command(self, package: str) -> List[str]:
        ...


@runtime_checkable
class ConfigValueSetter(Protocol):
    def set_value(self, key: str, name: str, value: int) -> None:
        ...

    def set_value_command(self, key: str, name: str, value: int) -> List[str]:
        ...


@runtime_checkable
class ServiceController(Protocol):
    def exists(self, name: str) -> bool:
        ...

    def stop(self, name: str) -> None:
        ...

    def start(self, name: str) -> None:
        ...

    def set_startup_manual(self, name: str) -> None:
        ...

    def set_startup_manual_command(self, name: str) -> List[str]:
        ...


@runtime_checkable
class FileSystemOps(Protocol):
    def rename(self, src: Path, dst: Path) -> None:
        ...

    def remove(self, path: Path) -> None:
        ...
