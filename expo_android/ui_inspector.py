"""UI dump capture and stabilization."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from . import config
from .device_session import DeviceSession
from .element_matcher import is_interactive
from .ui_parser import UIElement, parse_ui_elements

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def is_only_progress(elements: List[UIElement]) -> bool:
    """True when nothing but progress bars is on screen (vacuously for [])."""
    return all("progressbar" in element.class_name.lower() for element in elements)


def is_stable(elements: List[UIElement], only_interactive: bool = False) -> bool:
    """Whether a dump looks settled enough to act on."""
    if not elements or is_only_progress(elements):
        return False
    if only_interactive and not any(is_interactive(element) for element in elements):
        return False
    return True


class UILayoutExtractor:
    """Capture uiautomator dumps through a DeviceSession and parse them."""

    def __init__(
        self,
        session: DeviceSession,
        sleep: Sleep = asyncio.sleep,
        dump_path: str = config.UI_DUMP_DEVICE_PATH,
    ) -> None:
        self.session = session
        self.sleep = sleep
        self.dump_path = dump_path

    async def fetch_ui_xml(self, serial: Optional[str] = None) -> str:
        """Dump the hierarchy on the device and read it back."""
        target = await self.session.target_serial(serial)
        adb = self.session.adb_manager
        await adb.execute_adb_command(
            ["shell", f"uiautomator dump {self.dump_path}"], serial=target
        )
        raw = await adb.execute_adb_command(
            ["exec-out", "cat", self.dump_path], serial=target, binary=True
        )
        return raw.decode("utf-8", errors="replace")

    async def fetch_elements(self, serial: Optional[str] = None) -> List[UIElement]:
        return parse_ui_elements(await self.fetch_ui_xml(serial=serial))

    async def fetch_stable_elements(
        self,
        only_interactive: bool = False,
        attempts: int = config.STABLE_FETCH_ATTEMPTS,
        delay: float = config.STABLE_FETCH_DELAY,
        serial: Optional[str] = None,
    ) -> List[UIElement]:
        """Re-sample the UI until it looks settled, at most `attempts` times.

        Returns the last sample when no attempt was stable; screens that never
        settle still yield a best-effort snapshot.
        """
        attempts = max(1, attempts)
        elements: List[UIElement] = []

        for attempt in range(attempts):
            elements = await self.fetch_elements(serial=serial)
            if is_stable(elements, only_interactive):
                return elements

            logger.debug(
                f"UI not settled (attempt {attempt + 1}/{attempts}, "
                f"{len(elements)} elements)"
            )
            if attempt < attempts - 1:
                await self.sleep(delay)

        logger.info(f"UI did not settle after {attempts} attempts; using last sample")
        return elements
