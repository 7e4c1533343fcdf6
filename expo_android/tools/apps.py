"""Application tools for MCP server."""

import logging
from typing import Any, Dict

from ..decorators import timeout_wrapper
from ..tool_models import ListPackagesParams, OpenAppParams
from ..validation import (
    PackageNameValidator,
    create_validation_error_response,
    log_validation_attempt,
)

logger = logging.getLogger(__name__)

# Module-level components reference
_components = {}


@timeout_wrapper()
async def open_app(params: OpenAppParams) -> Dict[str, Any]:
    """Launch an app by package name.

    When to use:
    - Start of a flow, or to bring an app back to the foreground.

    Common combos:
    - `list_packages` → `open_app` → `wait_for_element`.
    """
    interactor = _components.get("screen_interactor")
    if not interactor:
        return {
            "success": False,
            "error": "Screen interactor not initialized",
            "message": "Screen interactor not initialized",
        }

    validation_result = PackageNameValidator.validate_package_name(params.package_name)
    if not validation_result.is_valid:
        log_validation_attempt(
            "open_app", {"package_name": params.package_name}, validation_result, logger
        )
        return create_validation_error_response(validation_result, "app launch")

    return await interactor.open_app(validation_result.sanitized_value, serial=params.serial)


@timeout_wrapper()
async def list_packages(params: ListPackagesParams) -> Dict[str, Any]:
    """List installed packages, optionally filtered by substring."""
    interactor = _components.get("screen_interactor")
    if not interactor:
        return {
            "success": False,
            "error": "Screen interactor not initialized",
            "message": "Screen interactor not initialized",
        }
    return await interactor.list_packages(filter=params.filter, serial=params.serial)


def register_app_tools(mcp, components):
    """Register application tools with the MCP server."""
    global _components
    _components = components

    mcp.tool(description="Launch an app by package name.")(open_app)
    mcp.tool(description="List installed packages, optionally filtered.")(list_packages)
