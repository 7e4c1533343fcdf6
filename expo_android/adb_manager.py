"""ADB command execution and device enumeration."""

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from . import config
from .error_handler import (
    AdbNotFoundError,
    CommandExecutionError,
    CommandTimeoutError,
    ErrorCode,
    format_adb_not_found_message,
)
from .timeout import clamp_to_deadline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdbDevice:
    """One line of `adb devices -l` output."""

    serial: str
    state: str
    details: str = ""

    @property
    def online(self) -> bool:
        return self.state == "device"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_devices_output(output: str) -> List[AdbDevice]:
    """Parse `adb devices -l` output; the first line is a header."""
    lines = [line.strip() for line in output.split("\n")]
    lines = [line for line in lines if line]

    devices = []
    for line in lines[1:]:
        parts = line.split()
        serial = parts[0]
        state = parts[1] if len(parts) > 1 else ""
        devices.append(AdbDevice(serial=serial, state=state, details=" ".join(parts[2:])))
    return devices


class ADBManager:
    """Runs adb as a subprocess.

    Every failure is raised: `AdbNotFoundError` when the executable is
    missing, `CommandTimeoutError` when the bounded wait expires and
    `CommandExecutionError` for non-zero exits and oversized output.
    """

    def __init__(
        self,
        adb_path: str = config.ADB_PATH,
        timeout: float = config.ADB_TIMEOUT,
        max_output_bytes: int = config.ADB_MAX_OUTPUT_BYTES,
    ) -> None:
        self.adb_path = adb_path
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes

    def build_command(self, args: Sequence[str], serial: Optional[str] = None) -> List[str]:
        prefix = ["-s", serial] if serial else []
        return [self.adb_path, *prefix, *args]

    async def execute_adb_command(
        self,
        args: Sequence[str],
        serial: Optional[str] = None,
        timeout: Optional[float] = None,
        binary: bool = False,
    ) -> Union[str, bytes]:
        """Run `adb [-s serial] args...` and return its stdout."""
        command = self.build_command(args, serial)
        effective_timeout = clamp_to_deadline(timeout or self.timeout)
        logger.debug(f"Running {' '.join(command)} (timeout {effective_timeout:.2f}s)")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise AdbNotFoundError(
                format_adb_not_found_message(
                    self.adb_path,
                    config.ADB_PATH_SOURCE,
                    config.ADB_PATH_CANDIDATES,
                    str(e),
                ),
                command=command,
            ) from e
        except OSError as e:
            raise CommandExecutionError(
                f"Failed to start adb: {e}", command=command
            ) from e

        try:
            async with asyncio.timeout(effective_timeout):
                stdout, stderr = await process.communicate()
        except TimeoutError:
            await self._terminate(process)
            raise CommandTimeoutError(
                f"Command timed out after {effective_timeout:.2f} seconds: "
                f"{' '.join(command)}",
                command=command,
            )
        except asyncio.CancelledError:
            # Cancelled by the tool deadline or the client
            await self._terminate(process)
            raise

        stderr_text = stderr.decode("utf-8", errors="replace") if stderr else ""
        if process.returncode != 0:
            raise CommandExecutionError(
                f"Command failed with exit code {process.returncode}: "
                f"{' '.join(command)}"
                + (f"\n{stderr_text.strip()}" if stderr_text.strip() else ""),
                command=command,
                returncode=process.returncode,
                stderr=stderr_text,
            )

        stdout = stdout or b""
        if len(stdout) > self.max_output_bytes:
            raise CommandExecutionError(
                f"Command output exceeded {self.max_output_bytes} bytes: "
                f"{' '.join(command)}",
                command=command,
                returncode=process.returncode,
                error_code=ErrorCode.ADB_OUTPUT_TOO_LARGE,
            )

        if binary:
            return stdout
        return stdout.decode("utf-8", errors="replace")

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """Terminate a timed-out or cancelled process, escalating to kill."""
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            async with asyncio.timeout(1.0):
                await process.communicate()
            return
        except TimeoutError:
            pass
        try:
            process.kill()
        except ProcessLookupError:
            return
        try:
            async with asyncio.timeout(1.0):
                await process.communicate()
        except TimeoutError:
            logger.warning(f"adb process {process.pid} did not exit after kill")

    async def list_devices(self) -> List[AdbDevice]:
        """List attached devices in every state."""
        output = await self.execute_adb_command(["devices", "-l"])
        return parse_devices_output(output)

    async def list_online_devices(self) -> List[AdbDevice]:
        return [device for device in await self.list_devices() if device.online]

    async def get_version(self) -> str:
        output = await self.execute_adb_command(["version"])
        return output.strip()

    async def assert_available(self) -> None:
        """Raise AdbNotFoundError unless `adb version` runs."""
        try:
            await self.execute_adb_command(["version"])
        except AdbNotFoundError:
            raise
        except CommandExecutionError as e:
            raise AdbNotFoundError(
                format_adb_not_found_message(
                    self.adb_path,
                    config.ADB_PATH_SOURCE,
                    config.ADB_PATH_CANDIDATES,
                    e.message,
                ),
                command=e.command,
            ) from e
