"""Screenshot capture."""

from __future__ import annotations

import base64
import logging
import tempfile
import time
import uuid
from pathlib import Path
from typing import Optional, TypedDict

from .device_session import DeviceSession

logger = logging.getLogger(__name__)

PNG_MIME_TYPE = "image/png"


class ScreenshotResult(TypedDict, total=False):
    """Type definition for screenshot operation results."""

    success: bool
    message: str
    mode: str
    path: Optional[str]
    base64: Optional[str]
    mime_type: str
    file_size_bytes: int


class MediaCapture:
    """Handle screenshot operations."""

    def __init__(self, session: DeviceSession, output_dir: Optional[str] = None) -> None:
        self.session = session
        self.output_dir = Path(output_dir) if output_dir else Path(tempfile.gettempdir())

    async def capture_png(self, serial: Optional[str] = None) -> bytes:
        """Raw PNG bytes of the current screen."""
        return await self.session.exec_out(["screencap", "-p"], serial=serial)

    def default_path(self) -> Path:
        millis = int(time.time() * 1000)
        return self.output_dir / f"expo-android-{millis}-{uuid.uuid4()}.png"

    async def take_screenshot(
        self,
        mode: str = "base64",
        path: Optional[str] = None,
        serial: Optional[str] = None,
    ) -> ScreenshotResult:
        """
        Capture device screenshot.

        Args:
            mode: "base64" to inline the image, "path" to write it to disk
            path: Destination file in path mode (temp file if None)
            serial: Device to capture instead of the session target
        """
        if mode not in ("base64", "path"):
            raise ValueError(f"Unsupported screenshot mode: {mode}")

        png = await self.capture_png(serial=serial)

        if mode == "path":
            target = Path(path) if path else self.default_path()
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(png)
            logger.info(f"Screenshot saved to {target} ({len(png)} bytes)")
            return {
                "success": True,
                "message": "Screenshot captured.",
                "mode": "path",
                "path": str(target),
                "base64": None,
                "mime_type": PNG_MIME_TYPE,
                "file_size_bytes": len(png),
            }

        return {
            "success": True,
            "message": "Screenshot captured.",
            "mode": "base64",
            "path": None,
            "base64": base64.b64encode(png).decode("ascii"),
            "mime_type": PNG_MIME_TYPE,
            "file_size_bytes": len(png),
        }
