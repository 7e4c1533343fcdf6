"""Media capture tools for MCP server."""

import logging
from typing import Any, Dict

from ..decorators import timeout_wrapper
from ..tool_models import ScreenshotParams

logger = logging.getLogger(__name__)

# Module-level components reference
_components = {}


@timeout_wrapper()
async def screenshot(params: ScreenshotParams) -> Dict[str, Any]:
    """Capture a PNG screenshot.

    When to use:
    - Visual confirmation of the current screen, or evidence after a step.

    Tips:
    - `mode="base64"` returns the image inline; `mode="path"` writes it to
      `path` (or a temp file) and returns the location.
    """
    media_capture = _components.get("media_capture")
    if not media_capture:
        return {
            "success": False,
            "error": "Media capture not initialized",
            "message": "Media capture not initialized",
        }

    return await media_capture.take_screenshot(
        mode=params.mode, path=params.path, serial=params.serial
    )


def register_media_tools(mcp, components):
    """Register media capture tools with the MCP server.

    Args:
        mcp: FastMCP server instance
        components: Dictionary containing initialized components
    """
    global _components
    _components = components

    mcp.tool(description="Capture a screenshot as base64 PNG or to a file path.")(
        screenshot
    )
