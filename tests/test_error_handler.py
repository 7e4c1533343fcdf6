"""Tests for structured errors."""

from expo_android.error_handler import (
    AdbNotFoundError,
    AndroidMCPError,
    CommandExecutionError,
    CommandTimeoutError,
    ErrorCode,
    SerialResolutionError,
    format_adb_not_found_message,
    get_recovery_suggestions,
)


class TestExceptionHierarchy:
    def test_command_errors_share_a_base(self):
        assert issubclass(CommandTimeoutError, CommandExecutionError)
        assert issubclass(AdbNotFoundError, CommandExecutionError)
        assert issubclass(CommandExecutionError, AndroidMCPError)
        assert issubclass(SerialResolutionError, AndroidMCPError)
        assert not issubclass(SerialResolutionError, CommandExecutionError)

    def test_command_error_details(self):
        error = CommandExecutionError(
            "boom", command=["adb", "shell", "ls"], returncode=2, stderr="nope"
        )
        assert str(error) == "boom"
        assert error.details == {"command": "adb shell ls", "returncode": 2, "stderr": "nope"}
        assert error.recovery_suggestions

    def test_serial_error_codes(self):
        assert SerialResolutionError("x").error_code == ErrorCode.NO_DEVICES_FOUND
        assert (
            SerialResolutionError("x", available_serials=["a", "b"]).error_code
            == ErrorCode.AMBIGUOUS_DEVICE
        )
        assert (
            SerialResolutionError("x", available_serials=["a"], requested_serial="c").error_code
            == ErrorCode.DEVICE_NOT_FOUND
        )

    def test_to_dict(self):
        data = CommandTimeoutError("slow", command=["adb", "devices"]).to_dict()
        assert data["error_code"] == "ADB_1201"
        assert data["message"] == "slow"
        assert "timestamp" in data


def test_adb_not_found_message_lists_candidates():
    message = format_adb_not_found_message(
        "adb",
        "default",
        ["/sdk/platform-tools/adb", "adb (PATH)"],
        "[Errno 2] No such file or directory: 'adb'",
    )
    lines = message.split("\n")
    assert lines[0] == "ADB executable not found (source: default, path: adb)."
    assert "  - Set ADB_PATH to your adb binary, or" in lines
    assert lines[-2:] == ["  - /sdk/platform-tools/adb", "  - adb (PATH)"]


def test_codes_without_entries_get_generic_suggestions():
    assert get_recovery_suggestions(ErrorCode.OPERATION_TIMEOUT) == [
        "Check device connection and status",
        "Verify adb is working properly",
        "Retry the operation",
    ]


def test_suggestions_are_copies():
    get_recovery_suggestions(ErrorCode.ADB_TIMEOUT).append("mutated")
    assert "mutated" not in get_recovery_suggestions(ErrorCode.ADB_TIMEOUT)
