"""UI inspection and element finding tools for MCP server."""

import logging
from typing import Any, Dict, Optional

from .. import config
from ..decorators import timeout_wrapper
from ..element_matcher import find_elements, generate_summary, is_interactive
from ..tool_models import (
    AssertElementParams,
    FindElementParams,
    InspectParams,
    WaitForElementParams,
)

logger = logging.getLogger(__name__)

# Module-level components reference
_components = {}


def _not_initialized(name: str) -> Dict[str, Any]:
    message = f"{name} not initialized"
    return {"success": False, "error": message, "message": message}


@timeout_wrapper()
async def inspect(params: InspectParams) -> Dict[str, Any]:
    """Capture the UI hierarchy (and optionally a screenshot) as structured elements.

    When to use:
    - First step on a new screen to learn what can be tapped or asserted.
    - After navigation, to confirm the expected screen is shown.

    Tips:
    - Waits briefly for the screen to settle (loading spinners are retried).
    - `only_interactive=True` keeps clickable, checkable and scrollable elements.
    - `summary` lists the first interactive elements in one line.

    Common combos:
    - `inspect` → `tap_element` → `wait_for_element`.
    """
    ui_inspector = _components.get("ui_inspector")
    if not ui_inspector:
        return _not_initialized("UI inspector")

    elements = await ui_inspector.fetch_stable_elements(
        only_interactive=params.only_interactive,
        attempts=config.STABLE_FETCH_ATTEMPTS,
        delay=config.STABLE_FETCH_DELAY,
        serial=params.serial,
    )
    if params.only_interactive:
        elements = [element for element in elements if is_interactive(element)]

    summary = generate_summary(elements)
    limited = elements[: params.max_elements] if params.max_elements else elements

    screenshot: Optional[str] = None
    screenshot_path: Optional[str] = None
    if params.include_screenshot:
        media_capture = _components.get("media_capture")
        if not media_capture:
            return _not_initialized("Media capture")
        shot = await media_capture.take_screenshot(
            mode=params.screenshot_mode,
            path=params.screenshot_path,
            serial=params.serial,
        )
        screenshot = shot["base64"]
        screenshot_path = shot["path"]

    return {
        "success": True,
        "message": summary,
        "summary": summary,
        "elements": [element.to_dict() for element in limited] if params.include_elements else [],
        "elements_total": len(elements),
        "elements_returned": len(limited) if params.include_elements else 0,
        "screenshot": screenshot,
        "screenshot_path": screenshot_path,
        "screenshot_mode": params.screenshot_mode if params.include_screenshot else None,
    }


@timeout_wrapper()
async def find_element(params: FindElementParams) -> Dict[str, Any]:
    """Find UI elements by text, class, resource id, content description or flags.

    When to use:
    - Check what matches before tapping, or read element bounds and state.

    Tips:
    - Every given criterion must match; `*_contains` does substring matching.
    - Combine `normalize_whitespace` and `case_insensitive` for labels that wrap.
    """
    ui_inspector = _components.get("ui_inspector")
    if not ui_inspector:
        return _not_initialized("UI inspector")

    elements = await ui_inspector.fetch_elements(serial=params.serial)
    matches = find_elements(elements, params.to_criteria())
    return {
        "success": True,
        "message": f"Found {len(matches)} element(s).",
        "found": bool(matches),
        "count": len(matches),
        "elements": [element.to_dict() for element in matches],
    }


@timeout_wrapper()
async def wait_for_element(params: WaitForElementParams) -> Dict[str, Any]:
    """Wait until an element matching the criteria (and state) appears.

    When to use:
    - After an action that triggers navigation, loading or animation.

    Tips:
    - `timeout_ms` bounds the total wait; polling happens every `interval_ms`
      (never faster than 50 ms).
    - Use the `should_be_*` flags to wait for a state change, e.g. a switch
      becoming checked.
    """
    screen_interactor = _components.get("screen_interactor")
    if not screen_interactor:
        return _not_initialized("Screen interactor")

    return await screen_interactor.wait_for_element(
        params.to_criteria(),
        timeout_ms=params.timeout_ms,
        interval_ms=params.interval_ms,
        should_be_checked=params.should_be_checked,
        should_be_enabled=params.should_be_enabled,
        should_be_clickable=params.should_be_clickable,
        serial=params.serial,
    )


@timeout_wrapper()
async def assert_element(params: AssertElementParams) -> Dict[str, Any]:
    """Assert that an element exists (or not) and is in the expected state.

    When to use:
    - Verification steps in a test flow.

    Tips:
    - `passed` carries the verdict; `actual` is the element that was judged.
    """
    screen_interactor = _components.get("screen_interactor")
    if not screen_interactor:
        return _not_initialized("Screen interactor")

    return await screen_interactor.assert_element(
        params.to_criteria(),
        should_exist=params.should_exist,
        should_be_checked=params.should_be_checked,
        should_be_enabled=params.should_be_enabled,
        should_be_clickable=params.should_be_clickable,
        serial=params.serial,
    )


def register_ui_tools(mcp, components):
    """Register UI inspection tools with the MCP server.

    Args:
        mcp: FastMCP server instance
        components: Dictionary containing initialized components
    """
    global _components
    _components = components

    mcp.tool(
        description="Capture the UI hierarchy as structured elements with a short summary."
    )(inspect)
    mcp.tool(description="Find UI elements by criteria.")(find_element)
    mcp.tool(
        description="Wait for a UI element to appear, optionally in a given state."
    )(wait_for_element)
    mcp.tool(description="Assert presence or absence and state of a UI element.")(
        assert_element
    )
