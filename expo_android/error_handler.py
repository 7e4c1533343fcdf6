"""Error types and error response formatting for the expo-android MCP server."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Standardized error codes."""

    # Device Connection Errors (1100-1199)
    NO_DEVICES_FOUND = "DEVICE_1100"
    DEVICE_NOT_FOUND = "DEVICE_1101"
    AMBIGUOUS_DEVICE = "DEVICE_1102"

    # ADB Command Errors (1200-1299)
    ADB_COMMAND_FAILED = "ADB_1200"
    ADB_TIMEOUT = "ADB_1201"
    ADB_NOT_FOUND = "ADB_1202"
    ADB_OUTPUT_TOO_LARGE = "ADB_1203"

    # Validation Errors (1700-1799)
    INVALID_PARAMETER = "VALIDATION_1700"

    # Generic Errors
    OPERATION_TIMEOUT = "OPERATION_TIMEOUT"


class AndroidMCPError(Exception):
    """Base exception class for expo-android errors."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.recovery_suggestions = recovery_suggestions or []
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
            "recovery_suggestions": self.recovery_suggestions,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return self.message


class CommandExecutionError(AndroidMCPError):
    """An adb invocation failed: non-zero exit, spawn failure or overflow."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
        error_code: ErrorCode = ErrorCode.ADB_COMMAND_FAILED,
    ):
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            error_code,
            message,
            details={
                "command": " ".join(self.command),
                "returncode": returncode,
                "stderr": stderr,
            },
            recovery_suggestions=get_recovery_suggestions(error_code),
        )


class CommandTimeoutError(CommandExecutionError):
    """An adb invocation exceeded its bounded wait."""

    def __init__(self, message: str, command: Optional[Sequence[str]] = None):
        super().__init__(message, command=command, error_code=ErrorCode.ADB_TIMEOUT)


class AdbNotFoundError(CommandExecutionError):
    """The adb executable could not be started."""

    def __init__(self, message: str, command: Optional[Sequence[str]] = None):
        super().__init__(message, command=command, error_code=ErrorCode.ADB_NOT_FOUND)


class SerialResolutionError(AndroidMCPError):
    """No unambiguous target device could be chosen."""

    def __init__(
        self,
        message: str,
        available_serials: Optional[Sequence[str]] = None,
        requested_serial: Optional[str] = None,
    ):
        self.available_serials = list(available_serials or [])
        self.requested_serial = requested_serial
        if requested_serial:
            code = ErrorCode.DEVICE_NOT_FOUND
        elif self.available_serials:
            code = ErrorCode.AMBIGUOUS_DEVICE
        else:
            code = ErrorCode.NO_DEVICES_FOUND
        super().__init__(
            code,
            message,
            details={
                "available_serials": self.available_serials,
                "requested_serial": requested_serial,
            },
            recovery_suggestions=get_recovery_suggestions(code),
        )


def format_adb_not_found_message(
    adb_path: str, source: str, candidates: Sequence[str], reason: str
) -> str:
    """Build the multi-line fix-it message for a missing adb executable."""
    lines = [
        f"ADB executable not found (source: {source}, path: {adb_path}).",
        f"Error: {reason}",
        "Fix:",
        "  - Set ADB_PATH to your adb binary, or",
        "  - Add platform-tools to PATH, or",
        "  - Set ANDROID_HOME / ANDROID_SDK_ROOT.",
        "Candidates tried:",
    ]
    lines.extend(f"  - {candidate}" for candidate in candidates)
    return "\n".join(lines)


RECOVERY_SUGGESTIONS = {
    ErrorCode.NO_DEVICES_FOUND: [
        "Start an emulator or connect a device via USB",
        "Enable USB debugging in Developer Options",
        "Run 'adb devices' to verify connection",
    ],
    ErrorCode.DEVICE_NOT_FOUND: [
        "Verify the serial with the devices tool",
        "Use set_device with 'auto' to clear the override",
        "Reconnect the device",
    ],
    ErrorCode.AMBIGUOUS_DEVICE: [
        "Pass serial explicitly on the tool call",
        "Use set_device to pick a device for this session",
        "Set ADB_SERIAL before starting the server",
    ],
    ErrorCode.ADB_COMMAND_FAILED: [
        "Check device responsiveness",
        "Verify the adb server is running",
        "Restart adb: 'adb kill-server && adb start-server'",
    ],
    ErrorCode.ADB_TIMEOUT: [
        "Check device responsiveness",
        "Increase ADB_TIMEOUT_MS",
        "Restart the device if it appears frozen",
    ],
    ErrorCode.ADB_NOT_FOUND: [
        "Set ADB_PATH to your adb binary",
        "Add platform-tools to PATH",
        "Set ANDROID_HOME or ANDROID_SDK_ROOT",
    ],
    ErrorCode.ADB_OUTPUT_TOO_LARGE: [
        "Increase ADB_MAX_BUFFER_MB",
    ],
}


def get_recovery_suggestions(error_code: ErrorCode) -> List[str]:
    """Get recovery suggestions for specific error codes."""
    return list(
        RECOVERY_SUGGESTIONS.get(
            error_code,
            [
                "Check device connection and status",
                "Verify adb is working properly",
                "Retry the operation",
            ],
        )
    )
