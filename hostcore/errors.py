"""
hostcore/errors.py

Purpose:
    Structured error taxonomy for HostForge: error codes, typed exceptions,
    and a helper that wraps arbitrary exceptions into the taxonomy.

Error code format:
    - PRIV_XXX: Privilege / elevation errors
    - CHECKPOINT_XXX: Restore-point errors
    - TOOL_XXX: External tool execution errors
    - MODULE_XXX: Maintenance module errors
    - CONFIG_XXX: Configuration errors
    - SYSTEM_XXX: Orchestration-level errors

Usage:
    from hostcore.errors import HostForgeError, ErrorCode

    raise HostForgeError(
        ErrorCode.TOOL_EXEC_FAILED,
        "sfc exited with code 1",
        details={"command": "sfc /scannow"}
    )
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    # Privilege Errors
    PRIV_NOT_ELEVATED = "PRIV_001"
    PRIV_QUERY_FAILED = "PRIV_002"

    # Checkpoint Errors
    CHECKPOINT_UNAVAILABLE = "CHECKPOINT_001"
    CHECKPOINT_ENABLE_FAILED = "CHECKPOINT_002"
    CHECKPOINT_CREATE_FAILED = "CHECKPOINT_003"

    # Tool Errors
    TOOL_NOT_INSTALLED = "TOOL_001"
    TOOL_EXEC_FAILED = "TOOL_002"
    TOOL_OUTPUT_PARSE_ERROR = "TOOL_003"
    TOOL_PERMISSION_DENIED = "TOOL_004"

    # Module Errors
    MODULE_FAULT = "MODULE_001"

    # Config Errors
    CONFIG_INVALID = "CONFIG_001"
    CONFIG_PARSE_ERROR = "CONFIG_002"

    # System Errors
    SYSTEM_INTERNAL_ERROR = "SYSTEM_001"
    SYSTEM_ORCHESTRATION_FAULT = "SYSTEM_002"


class HostForgeError(Exception):
    """
    Base exception class for HostForge with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g., "TOOL_002")
        message: Human-readable error message
        details: Optional dictionary with additional context
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}

        # Build exception message with code for easy debugging
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HostForgeError":
        return cls(ErrorCode(data["code"]), data["message"], data.get("details", {}))


class CommandFailedError(HostForgeError):
    """Raised when an external command exits non-zero or cannot be spawned."""

    def __init__(self, command: List[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        summary = stderr.strip().splitlines()[-1] if stderr.strip() else "no output"
        super().__init__(
            ErrorCode.TOOL_EXEC_FAILED,
            f"'{' '.join(command)}' exited with code {returncode}: {summary}",
            details={"command": self.command, "returncode": returncode},
        )


class ToolNotFoundError(HostForgeError):
    """Raised when a required binary is not on PATH."""

    def __init__(self, binary: str):
        self.binary = binary
        super().__init__(
            ErrorCode.TOOL_NOT_INSTALLED,
            f"Binary '{binary}' not found in PATH",
            details={"binary": binary},
        )


class OrchestrationFault(HostForgeError):
    """A fault that escaped every module boundary."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.SYSTEM_ORCHESTRATION_FAULT, message, details)


# ============================================================================
# Convenience Functions
# ============================================================================

def handle_error(error: BaseException, context: Optional[str] = None) -> HostForgeError:
    """
    Convert a generic exception to a HostForgeError.

    Args:
        error: The original exception
        context: Optional context string (e.g., "while resetting update cache")

    Returns:
        HostForgeError with an appropriate code and message
    """
    if isinstance(error, HostForgeError):
        return error

    error_type = type(error).__name__

    if isinstance(error, PermissionError) or "permission" in str(error).lower():
        code = ErrorCode.TOOL_PERMISSION_DENIED
    elif isinstance(error, FileNotFoundError):
        code = ErrorCode.TOOL_NOT_INSTALLED
    else:
        code = ErrorCode.SYSTEM_INTERNAL_ERROR

    message = str(error) or error_type
    if context:
        message = f"{context}: {message}"

    return HostForgeError(
        code=code,
        message=message,
        details={
            "original_type": error_type,
            "original_message": str(error),
        },
    )


__all__ = [
    "ErrorCode",
    "HostForgeError",
    "CommandFailedError",
    "ToolNotFoundError",
    "OrchestrationFault",
    "handle_error",
]
