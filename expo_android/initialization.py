"""Component initialization for MCP server."""

import logging
from typing import Any, Dict

from .adb_manager import ADBManager
from .device_session import DeviceSession
from .error_handler import AdbNotFoundError, AndroidMCPError
from .media_capture import MediaCapture
from .screen_interactor import ScreenInteractor
from .ui_inspector import UILayoutExtractor

logger = logging.getLogger(__name__)


def initialize_components() -> Dict[str, Any]:
    """Initialize all server components.

    Returns:
        Dictionary containing all initialized components
    """
    adb_manager = ADBManager()
    device_session = DeviceSession(adb_manager)
    ui_inspector = UILayoutExtractor(device_session)
    screen_interactor = ScreenInteractor(device_session, ui_inspector)
    media_capture = MediaCapture(device_session)

    logger.info("All components initialized successfully")

    return {
        "adb_manager": adb_manager,
        "device_session": device_session,
        "ui_inspector": ui_inspector,
        "screen_interactor": screen_interactor,
        "media_capture": media_capture,
    }


async def warm_up(components: Dict[str, Any]) -> None:
    """Check adb before serving and pre-resolve the target device.

    Raises AdbNotFoundError when adb cannot run. Device resolution problems
    are only logged; tools report them when they need a device.
    """
    adb_manager: ADBManager = components["adb_manager"]
    device_session: DeviceSession = components["device_session"]

    try:
        await adb_manager.assert_available()
    except AdbNotFoundError as e:
        logger.error(e.message)
        raise

    try:
        serial = await device_session.resolve(strict=False)
    except AndroidMCPError as e:
        logger.warning(f"Device warm-up failed: {e.message}")
        return

    if serial:
        logger.info(f"Target device: {serial}")
