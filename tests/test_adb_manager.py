"""Tests for ADB command execution."""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest

from expo_android.adb_manager import ADBManager, AdbDevice, parse_devices_output
from expo_android.error_handler import (
    AdbNotFoundError,
    CommandExecutionError,
    CommandTimeoutError,
    ErrorCode,
)
from expo_android.timeout import start_deadline

from tests.data.sample_ui_dumps import DEVICES_OUTPUT


def make_process(stdout=b"", stderr=b"", returncode=0, hang=False):
    process = Mock()
    process.pid = 4242
    process.returncode = returncode

    if hang:
        async def communicate():
            await asyncio.sleep(10)
            return stdout, stderr

        process.communicate = AsyncMock(side_effect=communicate)
    else:
        process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.terminate = Mock()
    process.kill = Mock()
    return process


class TestParseDevicesOutput:
    def test_header_and_blank_lines_are_skipped(self):
        assert parse_devices_output(DEVICES_OUTPUT["no_devices"]) == []

    def test_details_are_kept(self):
        devices = parse_devices_output(DEVICES_OUTPUT["single_device"])
        assert devices == [
            AdbDevice(
                serial="emulator-5554",
                state="device",
                details="product:sdk_gphone64 model:sdk_gphone64 transport_id:1",
            )
        ]
        assert devices[0].online

    def test_states(self):
        devices = parse_devices_output(DEVICES_OUTPUT["mixed"])
        assert [(d.serial, d.state, d.online) for d in devices] == [
            ("emulator-5554", "device", True),
            ("R58M123ABC", "unauthorized", False),
        ]


class TestExecuteAdbCommand:
    """Subprocess handling."""

    def test_build_command(self):
        manager = ADBManager(adb_path="/opt/adb")
        assert manager.build_command(["devices"]) == ["/opt/adb", "devices"]
        assert manager.build_command(["shell", "ls"], serial="emulator-5554") == [
            "/opt/adb",
            "-s",
            "emulator-5554",
            "shell",
            "ls",
        ]

    @pytest.mark.asyncio
    async def test_success_returns_text(self):
        manager = ADBManager(adb_path="adb")
        process = make_process(stdout=b"hello\n")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)) as spawn:
            output = await manager.execute_adb_command(["shell", "echo hello"], serial="emulator-5554")
        assert output == "hello\n"
        assert spawn.call_args.args == ("adb", "-s", "emulator-5554", "shell", "echo hello")

    @pytest.mark.asyncio
    async def test_binary_mode(self):
        manager = ADBManager(adb_path="adb")
        process = make_process(stdout=b"\x89PNG\x00")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            output = await manager.execute_adb_command(["exec-out", "screencap", "-p"], binary=True)
        assert output == b"\x89PNG\x00"

    @pytest.mark.asyncio
    async def test_non_zero_exit(self):
        manager = ADBManager(adb_path="adb")
        process = make_process(stderr=b"error: device offline\n", returncode=1)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            with pytest.raises(CommandExecutionError) as exc_info:
                await manager.execute_adb_command(["shell", "ls"])
        error = exc_info.value
        assert error.returncode == 1
        assert error.stderr == "error: device offline\n"
        assert "device offline" in error.message
        assert error.error_code == ErrorCode.ADB_COMMAND_FAILED

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        manager = ADBManager(adb_path="/nonexistent/adb")
        spawn = AsyncMock(side_effect=FileNotFoundError(2, "No such file or directory"))
        with patch("asyncio.create_subprocess_exec", spawn):
            with pytest.raises(AdbNotFoundError) as exc_info:
                await manager.execute_adb_command(["version"])
        assert "ADB executable not found" in exc_info.value.message
        assert "/nonexistent/adb" in exc_info.value.message
        assert exc_info.value.error_code == ErrorCode.ADB_NOT_FOUND

    @pytest.mark.asyncio
    async def test_output_overflow(self):
        manager = ADBManager(adb_path="adb", max_output_bytes=4)
        process = make_process(stdout=b"0123456789")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            with pytest.raises(CommandExecutionError) as exc_info:
                await manager.execute_adb_command(["shell", "cat big"])
        assert exc_info.value.error_code == ErrorCode.ADB_OUTPUT_TOO_LARGE

    @pytest.mark.asyncio
    async def test_timeout_terminates_process(self):
        manager = ADBManager(adb_path="adb", timeout=0.05)
        process = make_process(hang=True)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            with patch.object(manager, "_terminate", AsyncMock()) as terminate:
                with pytest.raises(CommandTimeoutError) as exc_info:
                    await manager.execute_adb_command(["shell", "sleep 100"])
        terminate.assert_awaited_once_with(process)
        assert exc_info.value.error_code == ErrorCode.ADB_TIMEOUT

    @pytest.mark.asyncio
    async def test_cancellation_terminates_process(self):
        manager = ADBManager(adb_path="adb", timeout=30)
        process = make_process(hang=True)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            with patch.object(manager, "_terminate", AsyncMock()) as terminate:
                task = asyncio.create_task(manager.execute_adb_command(["shell", "sleep 100"]))
                await asyncio.sleep(0.01)
                task.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await task
        terminate.assert_awaited_once_with(process)

    @pytest.mark.asyncio
    async def test_outer_deadline_terminates_process(self):
        manager = ADBManager(adb_path="adb", timeout=30)
        process = make_process(hang=True)
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            with patch.object(manager, "_terminate", AsyncMock()) as terminate:
                with pytest.raises(TimeoutError):
                    async with asyncio.timeout(0.05):
                        await manager.execute_adb_command(["shell", "sleep 100"])
        terminate.assert_awaited_once_with(process)

    @pytest.mark.asyncio
    async def test_timeout_is_clamped_to_tool_deadline(self):
        manager = ADBManager(adb_path="adb", timeout=30)
        process = make_process(stdout=b"ok")
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            with patch("expo_android.adb_manager.logger") as mock_logger:
                async with start_deadline(2.0):
                    await manager.execute_adb_command(["shell", "true"])
        logged = mock_logger.debug.call_args.args[0]
        assert "timeout 30.00s" not in logged
        assert "timeout 2.00s" in logged or "timeout 1.99s" in logged


class TestTerminate:
    @pytest.mark.asyncio
    async def test_terminate_then_kill(self):
        manager = ADBManager(adb_path="adb")
        process = make_process(hang=True)
        real_timeout = asyncio.timeout
        with patch("expo_android.adb_manager.asyncio.timeout") as fake_timeout:
            fake_timeout.side_effect = lambda _: real_timeout(0.01)
            await manager._terminate(process)
        process.terminate.assert_called_once()
        process.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_already_exited(self):
        manager = ADBManager(adb_path="adb")
        process = make_process()
        process.terminate.side_effect = ProcessLookupError()
        await manager._terminate(process)
        process.kill.assert_not_called()


class TestHelpers:
    @pytest.mark.asyncio
    async def test_list_devices(self):
        manager = ADBManager(adb_path="adb")
        with patch.object(
            manager,
            "execute_adb_command",
            AsyncMock(return_value=DEVICES_OUTPUT["mixed"]),
        ) as execute:
            devices = await manager.list_devices()
            online = await manager.list_online_devices()
        execute.assert_awaited_with(["devices", "-l"])
        assert len(devices) == 2
        assert [device.serial for device in online] == ["emulator-5554"]

    @pytest.mark.asyncio
    async def test_get_version(self):
        manager = ADBManager(adb_path="adb")
        with patch.object(
            manager,
            "execute_adb_command",
            AsyncMock(return_value="Android Debug Bridge version 1.0.41\n"),
        ):
            assert await manager.get_version() == "Android Debug Bridge version 1.0.41"

    @pytest.mark.asyncio
    async def test_assert_available_wraps_failures(self):
        manager = ADBManager(adb_path="/opt/adb")
        failure = CommandExecutionError("Command failed with exit code 126", returncode=126)
        with patch.object(manager, "execute_adb_command", AsyncMock(side_effect=failure)):
            with pytest.raises(AdbNotFoundError) as exc_info:
                await manager.assert_available()
        assert "exit code 126" in exc_info.value.message
        assert "Candidates tried:" in exc_info.value.message
