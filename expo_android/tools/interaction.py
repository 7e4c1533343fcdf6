"""Screen interaction tools for MCP server."""

import logging
from typing import Any, Dict

from ..decorators import timeout_wrapper
from ..tool_models import (
    KeyEventParams,
    LongPressParams,
    SwipeParams,
    TapCoordinatesParams,
    TapElementParams,
    TextInputParams,
)
from ..validation import (
    KeyCodeValidator,
    create_validation_error_response,
    log_validation_attempt,
)

logger = logging.getLogger(__name__)

# Module-level components reference
_components = {}


def _interactor():
    return _components.get("screen_interactor")


NOT_INITIALIZED = {
    "success": False,
    "error": "Screen interactor not initialized",
    "message": "Screen interactor not initialized",
}


@timeout_wrapper()
async def tap(params: TapCoordinatesParams) -> Dict[str, Any]:
    """Tap screen at specific coordinates.

    When to use:
    - You know exact coordinates (e.g. from `inspect` element centers).

    Tips:
    - Prefer `tap_element` to avoid brittle coordinates.
    """
    interactor = _interactor()
    if not interactor:
        return dict(NOT_INITIALIZED)
    return await interactor.tap(params.x, params.y, serial=params.serial)


@timeout_wrapper()
async def swipe(params: SwipeParams) -> Dict[str, Any]:
    """Swipe from one point to another.

    Tips:
    - Start and end away from screen edges to avoid system gestures.
    - Longer `duration_ms` gives slower, more controlled scrolling.
    """
    interactor = _interactor()
    if not interactor:
        return dict(NOT_INITIALIZED)
    return await interactor.swipe(
        params.x1,
        params.y1,
        params.x2,
        params.y2,
        duration_ms=params.duration_ms,
        serial=params.serial,
    )


@timeout_wrapper()
async def long_press(params: LongPressParams) -> Dict[str, Any]:
    """Press and hold at coordinates (context menus, drag handles)."""
    interactor = _interactor()
    if not interactor:
        return dict(NOT_INITIALIZED)
    return await interactor.long_press(
        params.x, params.y, duration_ms=params.duration_ms, serial=params.serial
    )


@timeout_wrapper()
async def input_text(params: TextInputParams) -> Dict[str, Any]:
    """Type text into the focused field.

    When to use:
    - After focusing an input with `tap_element`.

    Tips:
    - Spaces and quotes are escaped for the device shell.
    """
    interactor = _interactor()
    if not interactor:
        return dict(NOT_INITIALIZED)
    return await interactor.input_text(params.text, serial=params.serial)


@timeout_wrapper()
async def key_event(params: KeyEventParams) -> Dict[str, Any]:
    """Send a key event.

    Tips:
    - Accepts numeric codes or names; BACK becomes KEYCODE_BACK.
    """
    interactor = _interactor()
    if not interactor:
        return dict(NOT_INITIALIZED)

    validation_result = KeyCodeValidator.validate_keycode(params.key_code)
    if not validation_result.is_valid:
        log_validation_attempt(
            "key_event", {"key_code": params.key_code}, validation_result, logger
        )
        return create_validation_error_response(validation_result, "key event")

    return await interactor.key_event(validation_result.sanitized_value, serial=params.serial)


@timeout_wrapper()
async def tap_element(params: TapElementParams) -> Dict[str, Any]:
    """Find an element by criteria and tap its center.

    When to use:
    - Robust taps without coordinates (buttons, list items, tabs).

    Tips:
    - When several elements match, clickable ones are preferred; disable with
      `prefer_clickable=False`.
    - `index` picks among the remaining matches in screen order.
    - Check `tapped` in the result: a miss is reported, not raised.

    Common combos:
    - `inspect` → `tap_element` → `wait_for_element`.
    """
    interactor = _interactor()
    if not interactor:
        return dict(NOT_INITIALIZED)
    return await interactor.tap_element(
        params.to_criteria(),
        index=params.index,
        prefer_clickable=params.prefer_clickable,
        serial=params.serial,
    )


def register_interaction_tools(mcp, components):
    """Register screen interaction tools with the MCP server.

    Args:
        mcp: FastMCP server instance
        components: Dictionary containing initialized components
    """
    global _components
    _components = components

    mcp.tool(description="Tap the screen at coordinates.")(tap)
    mcp.tool(description="Swipe between two points.")(swipe)
    mcp.tool(description="Long press at coordinates.")(long_press)
    mcp.tool(description="Type text into the focused field.")(input_text)
    mcp.tool(description="Send a key event such as KEYCODE_BACK or KEYCODE_ENTER.")(
        key_event
    )
    mcp.tool(description="Find an element by criteria and tap its center.")(tap_element)
