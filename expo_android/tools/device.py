"""Device management tools for MCP server."""

import logging
from typing import Any, Dict, List, Optional

from .. import config
from ..decorators import timeout_wrapper
from ..device_session import AUTO_SERIAL, SerialState
from ..error_handler import CommandExecutionError
from ..tool_models import SetDeviceParams
from ..validation import (
    DeviceIdValidator,
    create_validation_error_response,
    log_validation_attempt,
)

logger = logging.getLogger(__name__)

# Module-level components reference
_components = {}


def _serial_fields(state: SerialState) -> Dict[str, Any]:
    return {
        "requested_serial": state.requested_serial,
        "requested_serial_source": state.requested_serial_source,
        "selected_serial": state.serial,
        "selected_serial_source": state.source,
        "selected_serial_warning": state.warning,
        "selected_serial_error": state.error,
    }


def suggested_fix(serials: List[str]) -> str:
    if len(serials) == 1:
        return f'Run set_device with serial "{serials[0]}" or set ADB_SERIAL="{serials[0]}".'
    if serials:
        return f"Run set_device with one of: {', '.join(serials)} or set ADB_SERIAL accordingly."
    return "Start an emulator or connect a device, then run doctor again."


@timeout_wrapper()
async def devices() -> Dict[str, Any]:
    """List connected Android devices and emulators.

    When to use:
    - First step to discover devices before selecting one.
    - If other tools report that no device or several devices were found.

    Common combos:
    - `devices` → `set_device` → `inspect`.
    """
    adb_manager = _components.get("adb_manager")
    if not adb_manager:
        return {
            "success": False,
            "error": "ADB manager not initialized",
            "message": "ADB manager not initialized",
        }

    items = await adb_manager.list_devices()
    return {
        "success": True,
        "message": "Devices fetched.",
        "items": [device.to_dict() for device in items],
        "count": len(items),
    }


@timeout_wrapper()
async def doctor() -> Dict[str, Any]:
    """Check adb availability, connected devices and the serial selection.

    When to use:
    - Something is off with the setup (adb missing, no device, wrong device).
    - Before a long automation run, to confirm which device will be used.

    Tips:
    - Never fails on its own: adb and device problems are reported in the
      `*_error` fields together with a `suggested_fix`.
    """
    adb_manager = _components.get("adb_manager")
    session = _components.get("device_session")
    if not adb_manager or not session:
        return {
            "success": False,
            "error": "Device session not initialized",
            "message": "Device session not initialized",
        }

    adb_version: Optional[str] = None
    adb_version_error: Optional[str] = None
    devices_error: Optional[str] = None
    device_list: List[Dict[str, Any]] = []

    try:
        adb_version = await adb_manager.get_version()
    except CommandExecutionError as e:
        adb_version_error = e.message

    try:
        device_list = [device.to_dict() for device in await adb_manager.list_devices()]
    except CommandExecutionError as e:
        devices_error = e.message

    state = await session.get_state(strict=False)
    fix = None
    if state.error:
        fix = suggested_fix([device["serial"] for device in device_list if device["serial"]])

    return {
        "success": True,
        "message": "Doctor check complete.",
        "adb_path": config.ADB_PATH,
        "adb_path_source": config.ADB_PATH_SOURCE,
        "adb_version": adb_version,
        "adb_version_error": adb_version_error,
        "devices": device_list,
        "devices_error": devices_error,
        **_serial_fields(state),
        "suggested_fix": fix,
    }


@timeout_wrapper()
async def set_device(params: SetDeviceParams) -> Dict[str, Any]:
    """Pin this server process to one device.

    When to use:
    - Several devices are connected and tools report an ambiguous target.
    - To switch targets mid-session.

    Tips:
    - Pass "auto" (or omit `serial`) to go back to auto-detection.
    - The new selection is reported even when the device is offline.
    """
    session = _components.get("device_session")
    if not session:
        return {
            "success": False,
            "error": "Device session not initialized",
            "message": "Device session not initialized",
        }

    serial = (params.serial or "").strip() or AUTO_SERIAL
    warnings: List[str] = []
    if serial.lower() != AUTO_SERIAL:
        validation_result = DeviceIdValidator.validate_device_id(serial)
        if not validation_result.is_valid or validation_result.warnings:
            log_validation_attempt("set_device", {"serial": serial}, validation_result, logger)
        if not validation_result.is_valid:
            return create_validation_error_response(validation_result, "device selection")
        serial = validation_result.sanitized_value
        warnings = validation_result.warnings

    session.set_override(serial)
    state = await session.get_state(strict=False)
    return {
        "success": True,
        "message": "Device selection updated.",
        **_serial_fields(state),
        "validation_warnings": warnings,
    }


def register_device_tools(mcp, components):
    """Register device management tools with the MCP server.

    Args:
        mcp: FastMCP server instance
        components: Dictionary containing initialized components
    """
    global _components
    _components = components

    # Register tools with MCP
    mcp.tool(description="List connected Android devices and emulators.")(devices)
    mcp.tool(
        description="Check adb availability, connected devices and which serial will be used."
    )(doctor)
    mcp.tool(
        description='Override the active device serial for this process. Use "auto" to clear.'
    )(set_device)
