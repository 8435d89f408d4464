from .config import (
    HostForgeConfig,
    LogConfig,
    MaintenanceConfig,
    StorageConfig,
    get_config,
    set_config,
    setup_logging,
)
from .context import RunContext

__all__ = [
    "HostForgeConfig",
    "LogConfig",
    "MaintenanceConfig",
    "StorageConfig",
    "get_config",
    "set_config",
    "setup_logging",
    "RunContext",
]
