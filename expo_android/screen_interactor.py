"""Screen interaction: coordinate input, element taps, waits and assertions."""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from . import config
from .device_session import DeviceSession
from .element_matcher import FindCriteria, find_elements, matches_state
from .ui_inspector import UILayoutExtractor
from .ui_parser import UIElement

logger = logging.getLogger(__name__)


def escape_input_text(text: str) -> str:
    """Escape text for `input text`; spaces become %s."""
    return (
        text.replace("\\", "\\\\")
        .replace(" ", "%s")
        .replace('"', '\\"')
        .replace("'", "\\'")
    )


def _element_dict(element: Optional[UIElement]) -> Optional[Dict[str, Any]]:
    return element.to_dict() if element is not None else None


class ScreenInteractor:
    """Handle all screen interaction operations."""

    def __init__(
        self,
        session: DeviceSession,
        ui_inspector: UILayoutExtractor,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.session = session
        self.ui_inspector = ui_inspector
        self.clock = clock
        self.sleep = sleep

    async def tap(self, x: int, y: int, serial: Optional[str] = None) -> Dict[str, Any]:
        await self.session.shell(f"input tap {x} {y}", serial=serial)
        return {"success": True, "message": f"Tapped at ({x}, {y}).", "x": x, "y": y}

    async def swipe(
        self,
        x1: int,
        y1: int,
        x2: int,
        y2: int,
        duration_ms: int = 300,
        serial: Optional[str] = None,
    ) -> Dict[str, Any]:
        await self.session.shell(f"input swipe {x1} {y1} {x2} {y2} {duration_ms}", serial=serial)
        return {
            "success": True,
            "message": "Swipe executed.",
            "x1": x1,
            "y1": y1,
            "x2": x2,
            "y2": y2,
            "duration_ms": duration_ms,
        }

    async def long_press(
        self, x: int, y: int, duration_ms: int = 1000, serial: Optional[str] = None
    ) -> Dict[str, Any]:
        # Long press is a swipe that starts and ends on the same point
        await self.session.shell(f"input swipe {x} {y} {x} {y} {duration_ms}", serial=serial)
        return {
            "success": True,
            "message": "Long press executed.",
            "x": x,
            "y": y,
            "duration_ms": duration_ms,
        }

    async def input_text(self, text: str, serial: Optional[str] = None) -> Dict[str, Any]:
        await self.session.shell(f"input text {escape_input_text(text)}", serial=serial)
        return {"success": True, "message": "Text input sent.", "text": text}

    async def key_event(self, key_code: str, serial: Optional[str] = None) -> Dict[str, Any]:
        await self.session.shell(f"input keyevent {key_code}", serial=serial)
        return {"success": True, "message": f"Key event {key_code} sent.", "key_code": key_code}

    async def open_app(self, package_name: str, serial: Optional[str] = None) -> Dict[str, Any]:
        await self.session.shell(
            f"monkey -p {package_name} -c android.intent.category.LAUNCHER 1",
            serial=serial,
        )
        return {
            "success": True,
            "message": f"App {package_name} launched.",
            "package_name": package_name,
        }

    async def list_packages(
        self, filter: Optional[str] = None, serial: Optional[str] = None
    ) -> Dict[str, Any]:
        output = await self.session.shell("pm list packages", serial=serial)
        packages = []
        for line in output.split("\n"):
            line = line.strip()
            if not line:
                continue
            packages.append(line[len("package:"):] if line.startswith("package:") else line)
        if filter:
            packages = [name for name in packages if filter in name]
        return {
            "success": True,
            "message": "Packages fetched.",
            "items": packages,
            "count": len(packages),
        }

    async def tap_element(
        self,
        criteria: FindCriteria,
        index: int = 0,
        prefer_clickable: bool = True,
        serial: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Find an element and tap its center.

        Misses, out-of-range indexes and degenerate bounds are reported with
        `tapped: False`; they are expected when the screen changed between
        inspection and action.
        """
        elements = await self.ui_inspector.fetch_elements(serial=serial)
        matches = find_elements(elements, criteria)

        if not matches:
            return self._not_tapped("No matching elements found.", None)

        candidates = matches
        if prefer_clickable and any(element.clickable for element in matches):
            candidates = [element for element in matches if element.clickable]

        if index < 0 or index >= len(candidates):
            return self._not_tapped("Element index out of range.", None, total_found=len(candidates))

        element = candidates[index]
        if not element.bounds.is_valid:
            logger.info(f"Refusing tap on element #{element.index} with bounds {element.bounds}")
            return self._not_tapped(
                "Element bounds invalid; tap aborted.", element, total_found=len(candidates)
            )

        center = element.center
        await self.session.shell(f"input tap {center.x} {center.y}", serial=serial)
        return {
            "success": True,
            "tapped": True,
            "message": "Element tapped.",
            "element": element.to_dict(),
            "index_used": index,
            "total_found": len(candidates),
        }

    @staticmethod
    def _not_tapped(message: str, element: Optional[UIElement], **extra: Any) -> Dict[str, Any]:
        result = {
            "success": True,
            "tapped": False,
            "message": message,
            "element": _element_dict(element),
        }
        result.update(extra)
        return result

    async def wait_for_element(
        self,
        criteria: FindCriteria,
        timeout_ms: int = config.WAIT_DEFAULT_TIMEOUT_MS,
        interval_ms: int = config.WAIT_DEFAULT_INTERVAL_MS,
        should_be_checked: Optional[bool] = None,
        should_be_enabled: Optional[bool] = None,
        should_be_clickable: Optional[bool] = None,
        serial: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Poll the UI until a matching element in the wanted state appears.

        The screen is sampled at least once. Total waiting never exceeds
        `timeout_ms`.
        """
        timeout = max(0, timeout_ms) / 1000.0
        interval = max(config.WAIT_MIN_INTERVAL_MS, interval_ms) / 1000.0
        start = self.clock()

        while True:
            elements = await self.ui_inspector.fetch_elements(serial=serial)
            matched = self._first_in_state(
                find_elements(elements, criteria),
                should_be_checked,
                should_be_enabled,
                should_be_clickable,
            )
            elapsed = self.clock() - start
            if matched is not None:
                elapsed_ms = int(elapsed * 1000)
                return {
                    "success": True,
                    "found": True,
                    "message": f"Element found after {elapsed_ms}ms.",
                    "element": matched.to_dict(),
                    "elapsed_ms": elapsed_ms,
                }

            remaining = timeout - elapsed
            if remaining <= 0:
                break
            await self.sleep(min(interval, remaining))

        elapsed_ms = int((self.clock() - start) * 1000)
        return {
            "success": True,
            "found": False,
            "message": f"Element not found after {elapsed_ms}ms.",
            "element": None,
            "elapsed_ms": elapsed_ms,
        }

    async def assert_element(
        self,
        criteria: FindCriteria,
        should_exist: bool = True,
        should_be_checked: Optional[bool] = None,
        should_be_enabled: Optional[bool] = None,
        should_be_clickable: Optional[bool] = None,
        serial: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Check presence (or absence) and state of an element."""
        elements = await self.ui_inspector.fetch_elements(serial=serial)
        matches = find_elements(elements, criteria)

        if not should_exist:
            if not matches:
                return self._assertion(True, "Element not found as expected.", None)
            return self._assertion(False, "Element found but should not exist.", matches[0])

        if not matches:
            return self._assertion(False, "Element not found.", None)

        matched = self._first_in_state(
            matches, should_be_checked, should_be_enabled, should_be_clickable
        )
        if matched is None:
            return self._assertion(False, "Element found but state does not match.", matches[0])

        return self._assertion(True, "Element assertion passed.", matched)

    @staticmethod
    def _first_in_state(
        matches: List[UIElement],
        checked: Optional[bool],
        enabled: Optional[bool],
        clickable: Optional[bool],
    ) -> Optional[UIElement]:
        for element in matches:
            if matches_state(element, checked=checked, enabled=enabled, clickable=clickable):
                return element
        return None

    @staticmethod
    def _assertion(passed: bool, message: str, actual: Optional[UIElement]) -> Dict[str, Any]:
        return {
            "success": True,
            "passed": passed,
            "message": message,
            "actual": _element_dict(actual),
        }
