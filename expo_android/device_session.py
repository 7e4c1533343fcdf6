"""Target device resolution for adb commands.

A single `DeviceSession` is owned by the server. It decides, per command,
which serial to pass to `adb -s`, combining:

1. a per-call explicit serial (validated, never cached),
2. the session override set through `set_device`,
3. the `ADB_SERIAL` environment default,
4. auto-detection when exactly one device is online.

The last successful resolution is memoized until the override changes.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from . import config
from .adb_manager import ADBManager
from .error_handler import AndroidMCPError, SerialResolutionError

logger = logging.getLogger(__name__)

AUTO_SERIAL = "auto"

# Marks "no override set" as distinct from an explicit "auto" (None)
_UNSET = object()


def normalize_serial(serial: Optional[str]) -> Optional[str]:
    """Trim a caller-supplied serial; blank and "auto" mean no preference."""
    if serial is None:
        return None
    trimmed = serial.strip()
    if not trimmed or trimmed.lower() == AUTO_SERIAL:
        return None
    return trimmed


@dataclass(frozen=True)
class RequestedSerial:
    serial: Optional[str]
    source: Optional[str]  # "override", "env" or None


@dataclass
class SerialState:
    """Outcome of one resolution, suitable for diagnostics."""

    serial: Optional[str]
    source: str  # override | env | auto | fallback | none
    requested_serial: Optional[str]
    requested_serial_source: Optional[str]
    available_serials: List[str] = field(default_factory=list)
    warning: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.serial is not None and self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DeviceSession:
    """Owns serial override, environment default and the resolution memo."""

    def __init__(self, adb_manager: ADBManager, env_serial: Optional[str] = config.ADB_SERIAL) -> None:
        self.adb_manager = adb_manager
        self.env_serial = env_serial or None
        self._override: Any = _UNSET
        self._resolved: Optional[str] = None
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def override(self) -> Optional[str]:
        return None if self._override is _UNSET else self._override

    @property
    def cached_serial(self) -> Optional[str]:
        return self._resolved

    def set_override(self, serial: Optional[str]) -> None:
        """Pin the session to `serial`; None or "auto" means no preference."""
        self._override = normalize_serial(serial)
        self._invalidate()
        logger.info(f"Device override set to {self._override or 'auto'}")

    def clear_override(self) -> None:
        """Drop the override entirely so the environment default applies again."""
        self._override = _UNSET
        self._invalidate()

    def _invalidate(self) -> None:
        self._resolved = None
        self._generation += 1

    def requested_serial(self) -> RequestedSerial:
        if self._override is not _UNSET:
            return RequestedSerial(self._override, "override")
        if self.env_serial:
            return RequestedSerial(self.env_serial, "env")
        return RequestedSerial(None, None)

    async def compute_state(self, strict: bool) -> SerialState:
        """Decide the target serial from the requested one and the online devices.

        In strict mode an unresolvable situation raises SerialResolutionError;
        otherwise it is reported in `SerialState.error`.
        """
        requested = self.requested_serial()
        online = await self.adb_manager.list_online_devices()
        available = [device.serial for device in online]

        state = SerialState(
            serial=None,
            source="none",
            requested_serial=requested.serial,
            requested_serial_source=requested.source,
            available_serials=available,
        )

        if requested.serial:
            if requested.serial in available:
                state.serial = requested.serial
                state.source = requested.source or "env"
                return state

            if len(available) == 1:
                state.serial = available[0]
                state.source = "fallback"
                state.warning = (
                    f"Requested device {requested.serial} not found. "
                    f"Falling back to {available[0]}."
                )
                return state

            if not available:
                message = (
                    f"Requested device {requested.serial} not found "
                    "and no devices are connected."
                )
            else:
                message = (
                    f"Requested device {requested.serial} not found. "
                    f"Available devices: {', '.join(available)}."
                )
            return self._fail(state, message, strict)

        if len(available) == 1:
            state.serial = available[0]
            state.source = "auto"
            return state

        if not available:
            message = "No adb devices detected. Start an emulator or connect a device."
        else:
            message = (
                f"Multiple devices detected ({', '.join(available)}). "
                "Set ADB_SERIAL or use set_device."
            )
        return self._fail(state, message, strict)

    @staticmethod
    def _fail(state: SerialState, message: str, strict: bool) -> SerialState:
        if strict:
            raise SerialResolutionError(
                message,
                available_serials=state.available_serials,
                requested_serial=state.requested_serial,
            )
        state.error = message
        return state

    async def resolve(self, strict: bool = True) -> Optional[str]:
        """Resolve the session's target serial, reusing the memo when present."""
        if self._resolved is not None:
            return self._resolved

        async with self._lock:
            if self._resolved is not None:
                return self._resolved

            generation = self._generation
            state = await self.compute_state(strict=strict)
            if state.warning:
                logger.warning(state.warning)
            if state.error:
                logger.info(f"Device resolution: {state.error}")

            # Only cache if the override did not change while adb was running
            if state.serial is not None and generation == self._generation:
                self._resolved = state.serial
            return state.serial

    async def get_state(self, strict: bool = False) -> SerialState:
        """Diagnostic resolution: failures are returned in `error`, not raised."""
        try:
            return await self.compute_state(strict=strict)
        except AndroidMCPError as e:
            requested = self.requested_serial()
            available = getattr(e, "available_serials", [])
            return SerialState(
                serial=None,
                source="none",
                requested_serial=requested.serial,
                requested_serial_source=requested.source,
                available_serials=list(available),
                error=e.message,
            )

    async def assert_serial_available(self, serial: str) -> None:
        online = await self.adb_manager.list_online_devices()
        available = [device.serial for device in online]
        if serial in available:
            return
        raise SerialResolutionError(
            f"Device {serial} not found. Available devices: {', '.join(available) or 'none'}.",
            available_serials=available,
            requested_serial=serial,
        )

    async def target_serial(self, serial: Optional[str] = None) -> Optional[str]:
        """Serial for a single command.

        An explicit serial is checked against the online devices and used for
        this call only; otherwise the session resolution applies.
        """
        explicit = normalize_serial(serial)
        if explicit:
            await self.assert_serial_available(explicit)
            return explicit
        return await self.resolve(strict=True)

    async def shell(self, command: str, serial: Optional[str] = None, timeout: Optional[float] = None) -> str:
        target = await self.target_serial(serial)
        return await self.adb_manager.execute_adb_command(
            ["shell", command], serial=target, timeout=timeout
        )

    async def exec_out(
        self, args: Sequence[str], serial: Optional[str] = None, timeout: Optional[float] = None
    ) -> bytes:
        target = await self.target_serial(serial)
        return await self.adb_manager.execute_adb_command(
            ["exec-out", *args], serial=target, timeout=timeout, binary=True
        )
