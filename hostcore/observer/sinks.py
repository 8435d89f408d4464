"""
hostcore/observer/sinks.py

Purpose:
    Destinations for Decision Log entries.
    ConsoleSink is the live, authoritative display; FileSink is the durable
    per-run record.

Semantics:
    - Both sinks are synchronous. An entry is on screen (and, best-effort, on
      disk) before record() returns, so order equals call order.
    - Colour is a presentation policy of ConsoleSink only.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, Optional, Protocol, TextIO

from colorama import Fore, Style, just_fix_windows_console

from .events import LogEntry, Severity

log = logging.getLogger("observer.sinks")

SEVERITY_COLORS: Dict[Severity, str] = {
    Severity.INFO: Fore.WHITE,
    Severity.WARNING: Fore.YELLOW,
    Severity.ERROR: Fore.RED,
    Severity.SUCCESS: Fore.GREEN,
    Severity.SIMULATED: Fore.CYAN,
}


class Sink(Protocol):
    def write(self, entry: LogEntry) -> None:
        ...


class ConsoleSink:
    """
    Human-readable console output, coloured by severity.
    """

    def __init__(self, stream: Optional[TextIO] = None, color: bool = True):
        self._stream = stream
        self.color = color
        if color:
            just_fix_windows_console()

    @property
    def stream(self) -> TextIO:
        # Resolved per write so redirected stdout (tests, pipes) is honoured
        return self._stream or sys.stdout

    def write(self, entry: LogEntry) -> None:
        line = entry.to_line()
        if self.color:
            line = f"{SEVERITY_COLORS.get(entry.severity, '')}{line}{Style.RESET_ALL}"
        self.stream.write(line + "\n")
        self.stream.flush()


class FileSink:
    """
    Appends entries as plain text lines to one file.
    The parent directory is created on first write.
    """

    def __init__(self, filepath: Path):
        self.path = Path(filepath)

    def write(self, entry: LogEntry) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8", errors="backslashreplace") as f:
            f.write(entry.to_line() + "\n")
