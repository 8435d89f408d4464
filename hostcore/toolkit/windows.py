"""
hostcore/toolkit/windows.py

Purpose:
    Windows implementations of the collaborator interfaces, driving
    PowerShell and the native maintenance binaries (sfc, DISM, winget,
    choco, UsoClient, reg, sc).

Every call blocks until the external tool exits.
"""

from __future__ import annotations

import ctypes
import json
import logging
import os
import platform
from datetime import datetime
from pathlib import Path
from typing import Any, List

import psutil

from hostcore.errors import ErrorCode, HostForgeError
from .providers import DiskUsage, OsInfo, ProtectionStatus, SystemEvent
from .shell import find_binary, powershell_command, ps_quote, run_command, run_powershell

logger = logging.getLogger(__name__)

EVENT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _json_list(raw: str) -> List[Any]:
    """ConvertTo-Json emits a bare object for one result and nothing for zero."""
    raw = (raw or "").strip()
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HostForgeError(ErrorCode.TOOL_OUTPUT_PARSE_ERROR, f"Unparseable PowerShell output: {exc}") from exc
    return data if isinstance(data, list) else [data]


class ProcessPrivilege:
    """Elevation of the current process."""

    def is_admin(self) -> bool:
        if os.name == "nt":
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        return os.geteuid() == 0


class WindowsRestorePoints:
    def __init__(self, drive: str = "C:\\"):
        self.drive = drive

    def probe(self) -> bool:
        # RPSessionInterval is 0 or absent when System Protection is off
        proc = run_powershell(
            "(Get-ItemProperty -Path 'HKLM:\\SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion\\SystemRestore' "
            "-Name RPSessionInterval -ErrorAction SilentlyContinue).RPSessionInterval"
        )
        return proc.stdout.strip() not in ("", "0")

    def enable(self) -> None:
        run_powershell(f"Enable-ComputerRestore -Drive {ps_quote(self.drive)}")

    def create_command(self, description: str) -> List[str]:
        return powershell_command(
            f"Checkpoint-Computer -Description {ps_quote(description)} -RestorePointType MODIFY_SETTINGS"
        )

    def create(self, description: str) -> None:
        run_command(self.create_command(description))


class WindowsHealth:
    def os_info(self) -> OsInfo:
        last_boot = datetime.fromtimestamp(psutil.boot_time())
        return OsInfo(
            caption=f"{platform.system()} {platform.release()}",
            version=platform.version(),
            last_boot=last_boot,
        )

    def disk_usage(self, drive: str) -> DiskUsage:
        usage = psutil.disk_usage(drive)
        return DiskUsage(used_bytes=usage.used, free_bytes=usage.free)

    def protection_status(self) -> ProtectionStatus:
        proc = run_powershell(
            "Get-MpComputerStatus -ErrorAction Stop | "
            "Select-Object AntivirusEnabled,RealTimeProtectionEnabled | ConvertTo-Json -Compress"
        )
        rows = _json_list(proc.stdout)
        if not rows:
            raise HostForgeError(ErrorCode.TOOL_OUTPUT_PARSE_ERROR, "Get-MpComputerStatus returned nothing")
        row = rows[0]
        return ProtectionStatus(
            antivirus_enabled=bool(row.get("AntivirusEnabled")),
            realtime_enabled=bool(row.get("RealTimeProtectionEnabled")),
        )


class WindowsEventLog:
    def recent_errors(self, since: datetime, limit: int) -> List[SystemEvent]:
        start = since.strftime("%Y-%m-%dT%H:%M:%S")
        # "No events found" is an empty result, not a read failure
        script = (
            "try { "
            f"Get-WinEvent -FilterHashtable @{{LogName='System'; Level=2; StartTime=[datetime]'{start}'}} "
            f"-MaxEvents {int(limit)} -ErrorAction Stop | "
            "Select-Object @{n='TimeCreated';e={$_.TimeCreated.ToString('yyyy-MM-dd HH:mm:ss')}},"
            "ProviderName,Id,@{n='Message';e={($_.Message -split \"`n\")[0]}} | ConvertTo-Json -Compress "
            "} catch { if ($_.FullyQualifiedErrorId -match 'NoMatchingEventsFound') { '[]' } else { throw } }"
        )
        proc = run_powershell(script)
        events = []
        for row in _json_list(proc.stdout):
            events.append(SystemEvent(
                time_created=datetime.strptime(row["TimeCreated"], EVENT_TIME_FORMAT),
                source=str(row.get("ProviderName") or "unknown"),
                event_id=int(row.get("Id") or 0),
                message=str(row.get("Message") or "").strip(),
            ))
        events.sort(key=lambda e: e.time_created, reverse=True)
        return events[:limit]


class WindowsRepairTools:
    def integrity_scan_command(self) -> List[str]:
        return ["sfc", "/scannow"]

    def image_repair_command(self) -> List[str]:
        return ["DISM", "/Online", "/Cleanup-Image", "/RestoreHealth"]

    def integrity_scan(self) -> None:
        run_command(self.integrity_scan_command())

    def image_repair(self) -> None:
        run_command(self.image_repair_command())


class WingetProvider:
    name = "winget"

    def probe(self) -> bool:
        return find_binary("winget") is not None

    def command(self) -> List[str]:
        return [
            "winget", "upgrade", "--all", "--silent",
            "--accept-source-agreements", "--accept-package-agreements",
        ]

    def invoke(self) -> None:
        run_command(self.command())


class ChocolateyProvider:
    name = "chocolatey"

    def probe(self) -> bool:
        return find_binary("choco") is not None

    def command(self) -> List[str]:
        return ["choco", "upgrade", "all", "-y"]

    def invoke(self) -> None:
        run_command(self.command())


class UsoScanTrigger:
    """Asks the Update Session Orchestrator to start a scan. Does not wait for installs."""

    def command(self) -> List[str]:
        return ["UsoClient.exe", "StartScan"]

    def trigger(self) -> None:
        run_command(self.command())


class AppxPackages:
    def installed(self) -> List[str]:
        proc = run_powershell("Get-AppxPackage -AllUsers | Select-Object -ExpandProperty PackageFullName")
        return [line.strip() for line in proc.stdout.splitlines() if line.strip()]

    def remove_command(self, package: str) -> List[str]:
        return powershell_command(f"Remove-AppxPackage -Package {ps_quote(package)} -AllUsers -ErrorAction Stop")

    def remove(self, package: str) -> None:
        run_command(self.remove_command(package))


class RegistrySetter:
    def set_value_command(self, key: str, name: str, value: int) -> List[str]:
        return ["reg", "add", key, "/v", name, "/t", "REG_DWORD", "/d", str(int(value)), "/f"]

    def set_value(self, key: str, name: str, value: int) -> None:
        run_command(self.set_value_command(key, name, value))


class WindowsServices:
    def exists(self, name: str) -> bool:
        # sc returns 1060 for a service that is not installed
        proc = run_command(["sc.exe", "query", name], check=False)
        return proc.returncode == 0

    def stop(self, name: str) -> None:
        run_powershell(f"Stop-Service -Name {ps_quote(name)} -Force -ErrorAction Stop")

    def start(self, name: str) -> None:
        run_powershell(f"Start-Service -Name {ps_quote(name)} -ErrorAction Stop")

    def set_startup_manual_command(self, name: str) -> List[str]:
        return powershell_command(f"Set-Service -Name {ps_quote(name)} -StartupType Manual -ErrorAction Stop")

    def set_startup_manual(self, name: str) -> None:
        run_command(self.set_startup_manual_command(name))


class LocalFileSystem:
    def rename(self, src: Path, dst: Path) -> None:
        Path(src).rename(dst)

    def remove(self, path: Path) -> None:
        # Directories are only removed once empty; fresh files inside survive
        path = Path(path)
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink()
