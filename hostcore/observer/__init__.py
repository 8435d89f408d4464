from .events import LogEntry, Severity
from .journal import DecisionLog, run_log_path
from .sinks import ConsoleSink, FileSink, SEVERITY_COLORS

__all__ = [
    "LogEntry",
    "Severity",
    "DecisionLog",
    "run_log_path",
    "ConsoleSink",
    "FileSink",
    "SEVERITY_COLORS",
]
