# ============================================================================
# hostcore/base/config.py
# Application Configuration Management
# ============================================================================
#
# PURPOSE:
# Defines every tunable setting for HostForge: where logs go, how verbose
# diagnostics are, and the fixed maintenance targets (temp directories,
# update services, bloat allow-list, non-essential services).
#
# KEY CONCEPTS:
# 1. Frozen dataclasses: settings cannot change once a run starts
# 2. Environment variables: HOSTFORGE_* overrides, read once by from_env()
# 3. Singleton: get_config()/set_config() are used only at the CLI boundary;
#    a running Orchestrator only ever sees the values copied into RunContext
#
# ============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


def _system_root() -> Path:
    return Path(os.environ.get("SystemRoot", r"C:\Windows"))


def _default_temp_dirs() -> Tuple[Path, ...]:
    # User temp first, then the machine-wide one
    dirs = []
    user_temp = os.environ.get("TEMP") or os.environ.get("TMP")
    if user_temp:
        dirs.append(Path(user_temp))
    dirs.append(_system_root() / "Temp")
    return tuple(dirs)


def _default_cache_dirs() -> Tuple[Path, ...]:
    root = _system_root()
    return (root / "SoftwareDistribution", root / "System32" / "catroot2")


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_bool(name: str, default: bool) -> bool:
    # Anything outside the two explicit sets keeps the default
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning("Unrecognised %s=%r, keeping default %s", name, raw, default)
    return default


def _env_paths(name: str) -> Optional[Tuple[Path, ...]]:
    raw = os.getenv(name, "")
    if not raw:
        return None
    return tuple(Path(p) for p in raw.split(os.pathsep) if p.strip())


# ============================================================================
# Logging Configuration
# ============================================================================
# Diagnostics logging (the `logging` module). The Decision Log audit trail is
# separate and always on.

@dataclass(frozen=True)
class LogConfig:
    # DEBUG / INFO / WARNING / ERROR
    level: str = "WARNING"

    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    # Rotating diagnostics file written next to the decision logs
    file_enabled: bool = True
    file_name: str = "hostforge-diagnostics.log"
    max_file_size_mb: int = 5
    backup_count: int = 3


# ============================================================================
# Storage Configuration
# ============================================================================

@dataclass(frozen=True)
class StorageConfig:
    # Directory holding one decision log per run (created on first write)
    log_dir: Path = field(default_factory=lambda: Path.home() / ".hostforge" / "logs")

    # Per-run log file name prefix: hostforge_YYYYmmdd_HHMMSS.log
    log_prefix: str = "hostforge"


# ============================================================================
# Maintenance Targets
# ============================================================================
# The fixed lists the Repair and Harden modules act on. Kept here rather than
# in the modules so a deployment can narrow them without code changes.

@dataclass(frozen=True)
class MaintenanceConfig:
    # --- Audit ---
    system_drive: str = field(default_factory=lambda: os.environ.get("SystemDrive", "C:") + os.sep)
    low_disk_percent: float = 10.0
    event_lookback_hours: int = 24
    max_events: int = 5

    # --- Repair: temp cleanup ---
    temp_dirs: Tuple[Path, ...] = field(default_factory=_default_temp_dirs)
    temp_max_age_hours: int = 24

    # --- Repair: update-component reset ---
    # Stopped in this order, restarted in the same order after the rename
    update_services: Tuple[str, ...] = ("wuauserv", "cryptSvc", "bits", "msiserver")
    update_cache_dirs: Tuple[Path, ...] = field(default_factory=_default_cache_dirs)

    # --- Harden ---
    bloat_packages: Tuple[str, ...] = (
        "Microsoft.BingNews",
        "Microsoft.BingWeather",
        "Microsoft.GetHelp",
        "Microsoft.Getstarted",
        "Microsoft.MicrosoftSolitaireCollection",
        "Microsoft.People",
        "Microsoft.WindowsFeedbackHub",
        "Microsoft.XboxApp",
        "Microsoft.ZuneMusic",
        "Microsoft.ZuneVideo",
    )
    telemetry_key: str = r"HKLM\SOFTWARE\Policies\Microsoft\Windows\DataCollection"
    telemetry_value_name: str = "AllowTelemetry"
    # 1 = Basic
    telemetry_level: int = 1
    nonessential_services: Tuple[str, ...] = (
        "DiagTrack",
        "dmwappushservice",
        "MapsBroker",
        "RetailDemo",
        "Fax",
        "XblGameSave",
    )


# ============================================================================
# Master Configuration Container
# ============================================================================

@dataclass(frozen=True)
class HostForgeConfig:
    log: LogConfig = field(default_factory=LogConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    maintenance: MaintenanceConfig = field(default_factory=MaintenanceConfig)

    # Simulate unless explicitly disabled
    dry_run: bool = True

    @classmethod
    def from_env(cls) -> "HostForgeConfig":
        """Build a config from HOSTFORGE_* environment variables."""
        log = LogConfig(
            level=os.getenv("HOSTFORGE_LOG_LEVEL", "WARNING"),
            file_enabled=_env_bool("HOSTFORGE_LOG_FILE", True),
        )

        log_dir = os.getenv("HOSTFORGE_LOG_DIR")
        storage = StorageConfig(log_dir=Path(log_dir)) if log_dir else StorageConfig()

        defaults = MaintenanceConfig()
        try:
            maintenance = MaintenanceConfig(
                system_drive=os.getenv("HOSTFORGE_SYSTEM_DRIVE", defaults.system_drive),
                low_disk_percent=float(os.getenv("HOSTFORGE_LOW_DISK_PERCENT", str(defaults.low_disk_percent))),
                event_lookback_hours=int(os.getenv("HOSTFORGE_EVENT_LOOKBACK_HOURS", str(defaults.event_lookback_hours))),
                max_events=int(os.getenv("HOSTFORGE_MAX_EVENTS", str(defaults.max_events))),
                temp_dirs=_env_paths("HOSTFORGE_TEMP_DIRS") or defaults.temp_dirs,
                temp_max_age_hours=int(os.getenv("HOSTFORGE_TEMP_MAX_AGE_HOURS", str(defaults.temp_max_age_hours))),
            )
        except ValueError as exc:
            from hostcore.errors import ErrorCode, HostForgeError
            raise HostForgeError(ErrorCode.CONFIG_PARSE_ERROR, f"Invalid HOSTFORGE_* value: {exc}") from exc

        problems = []
        if not 0 < maintenance.low_disk_percent < 100:
            problems.append(f"low_disk_percent={maintenance.low_disk_percent} (expected 0-100)")
        if maintenance.max_events < 1:
            problems.append(f"max_events={maintenance.max_events} (expected >= 1)")
        if maintenance.event_lookback_hours < 1:
            problems.append(f"event_lookback_hours={maintenance.event_lookback_hours} (expected >= 1)")
        if maintenance.temp_max_age_hours < 1:
            problems.append(f"temp_max_age_hours={maintenance.temp_max_age_hours} (expected >= 1)")
        if problems:
            from hostcore.errors import ErrorCode, HostForgeError
            raise HostForgeError(
                ErrorCode.CONFIG_INVALID,
                "Invalid maintenance settings: " + "; ".join(problems),
                details={"problems": problems},
            )

        return cls(
            log=log,
            storage=storage,
            maintenance=maintenance,
            dry_run=_env_bool("HOSTFORGE_DRY_RUN", True),
        )


# ============================================================================
# Global Configuration Singleton
# ============================================================================

_config: Optional[HostForgeConfig] = None


def get_config() -> HostForgeConfig:
    """
    Get the global configuration instance, loading it from the environment
    on first use.
    """
    global _config
    if _config is None:
        _config = HostForgeConfig.from_env()
    return _config


def set_config(config: Optional[HostForgeConfig]) -> None:
    """Replace (or with None, reset) the global configuration. Used by tests."""
    global _config
    _config = config


def setup_logging(config: Optional[HostForgeConfig] = None, log_dir: Optional[Path] = None) -> None:
    """
    Configure Python's logging system for diagnostics.

    Console handler always; rotating file handler under the log directory
    when enabled. Call once at start-up.
    """
    cfg = config or get_config()
    target_dir = Path(log_dir) if log_dir else cfg.storage.log_dir

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if cfg.log.file_enabled:
        from logging.handlers import RotatingFileHandler
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            handlers.append(RotatingFileHandler(
                target_dir / cfg.log.file_name,
                maxBytes=cfg.log.max_file_size_mb * 1024 * 1024,
                backupCount=cfg.log.backup_count,
                encoding="utf-8",
            ))
        except OSError as exc:
            # Diagnostics are optional; the decision log reports its own failures
            logger.warning("Diagnostics file logging disabled: %s", exc)

    logging.basicConfig(
        level=getattr(logging, cfg.log.level.upper(), logging.WARNING),
        format=cfg.log.format,
        handlers=handlers,
        force=True,
    )
