"""
hostcore/toolkit

Collaborator interfaces and their Windows implementations, bundled into a
Toolbox that the Orchestrator receives explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .providers import (
    AppPackageProvider,
    ConfigValueSetter,
    DiskUsage,
    EventLogProvider,
    FileSystemOps,
    HealthProvider,
    OsInfo,
    PackageUpdateProvider,
    PrivilegeProvider,
    ProtectionStatus,
    RepairTools,
    RestorePointProvider,
    ServiceController,
    SystemEvent,
    UpdateScanTrigger,
)


@dataclass(frozen=True)
class Toolbox:
    privilege: PrivilegeProvider
    restore_points: RestorePointProvider
    health: HealthProvider
    events: EventLogProvider
    repair: RepairTools
    updaters: Tuple[PackageUpdateProvider, ...]
    update_scan: UpdateScanTrigger
    apps: AppPackageProvider
    config_values: ConfigValueSetter
    services: ServiceController
    fs: FileSystemOps


def windows_toolbox(system_drive: str = "C:\\") -> Toolbox:
    """The production wiring: every collaborator backed by a Windows tool."""
    from . import windows

    return Toolbox(
        privilege=windows.ProcessPrivilege(),
        restore_points=windows.WindowsRestorePoints(drive=system_drive),
        health=windows.WindowsHealth(),
        events=windows.WindowsEventLog(),
        repair=windows.WindowsRepairTools(),
        updaters=(windows.WingetProvider(), windows.ChocolateyProvider()),
        update_scan=windows.UsoScanTrigger(),
        apps=windows.AppxPackages(),
        config_values=windows.RegistrySetter(),
        services=windows.WindowsServices(),
        fs=windows.LocalFileSystem(),
    )


__all__ = [
    "Toolbox",
    "windows_toolbox",
    "AppPackageProvider",
    "ConfigValueSetter",
    "DiskUsage",
    "EventLogProvider",
    "FileSystemOps",
    "HealthProvider",
    "OsInfo",
    "PackageUpdateProvider",
    "PrivilegeProvider",
    "ProtectionStatus",
    "RepairTools",
    "RestorePointProvider",
    "ServiceController",
    "SystemEvent",
    "UpdateScanTrigger",
]
