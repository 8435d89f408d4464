# hostcore/toolkit/shell.py
# Blocking process execution for external maintenance tools.

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import List, Optional

from hostcore.errors import CommandFailedError, ToolNotFoundError

logger = logging.getLogger(__name__)

POWERSHELL = ["powershell", "-NoProfile", "-NonInteractive", "-ExecutionPolicy", "Bypass", "-Command"]


def find_binary(name: str) -> Optional[str]:
    """Absolute path of `name` on PATH, or None."""
    return shutil.which(name)


def format_command(cmd: List[str]) -> str:
    return " ".join(cmd)


def run_command(cmd: List[str], *, check: bool = True, timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    """
    Run a command to completion and return the finished process.

    No timeout by default: repair and update tools run as long as they need
    and the caller waits.

    Raises:
        ToolNotFoundError: the binary does not exist.
        CommandFailedError: non-zero exit (when check is True).
    """
    logger.debug("exec: %s", format_command(cmd))
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise ToolNotFoundError(cmd[0]) from exc

    logger.debug("exit %s: %s", proc.returncode, format_command(cmd))
    if check and proc.returncode != 0:
        raise CommandFailedError(cmd, proc.returncode, proc.stderr or proc.stdout or "")
    return proc


def powershell_command(script: str) -> List[str]:
    # Force UTF-8 output so non-ASCII event messages decode cleanly
    wrapped = "$OutputEncoding = [Console]::OutputEncoding = [System.Text.UTF8Encoding]::new(); " + script
    return POWERSHELL + [wrapped]


def run_powershell(script: str, *, check: bool = True, timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    return run_command(powershell_command(script), check=check, timeout=timeout)


def ps_quote(value: str) -> str:
    """Single-quoted PowerShell literal."""
    return "'" + value.replace("'", "''") + "'"
