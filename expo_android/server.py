"""Main MCP server implementation for Android device automation."""

import asyncio
import logging
import sys

from mcp.server.fastmcp import FastMCP

from . import config
from .error_handler import AdbNotFoundError
from .initialization import initialize_components, warm_up

# Import tool registration functions
from .tools.apps import register_app_tools
from .tools.device import register_device_tools
from .tools.interaction import register_interaction_tools
from .tools.media import register_media_tools
from .tools.ui import register_ui_tools

# Re-export tool functions for testing
from .tools.apps import list_packages, open_app  # noqa: F401
from .tools.device import devices, doctor, set_device  # noqa: F401
from .tools.interaction import (  # noqa: F401
    input_text,
    key_event,
    long_press,
    swipe,
    tap,
    tap_element,
)
from .tools.media import screenshot  # noqa: F401
from .tools.ui import assert_element, find_element, inspect, wait_for_element  # noqa: F401

logger = logging.getLogger(__name__)

TRANSPORTS = ("stdio", "http", "both")

# Initialize FastMCP server
mcp = FastMCP(
    "expo-android",
    host=config.MCP_HTTP_HOST,
    port=config.MCP_HTTP_PORT,
    streamable_http_path="/mcp",
    stateless_http=True,
    json_response=True,
)

# Component storage
components = {}


def init_and_register() -> None:
    """Initialize components and register all MCP tools."""
    global components

    components = initialize_components()

    register_device_tools(mcp, components)
    register_ui_tools(mcp, components)
    register_interaction_tools(mcp, components)
    register_app_tools(mcp, components)
    register_media_tools(mcp, components)

    logger.info("All MCP tools registered successfully")


async def serve(transport: str) -> None:
    """Warm up adb, then serve on the requested transport(s)."""
    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown MCP_TRANSPORT: {transport}")

    await warm_up(components)

    if transport == "stdio":
        await mcp.run_stdio_async()
    elif transport == "http":
        logger.info(f"MCP HTTP server listening on {config.MCP_HTTP_HOST}:{config.MCP_HTTP_PORT}/mcp")
        await mcp.run_streamable_http_async()
    else:
        logger.info(f"MCP HTTP server listening on {config.MCP_HTTP_HOST}:{config.MCP_HTTP_PORT}/mcp")
        await asyncio.gather(mcp.run_stdio_async(), mcp.run_streamable_http_async())


def main() -> None:
    """Run the MCP server."""
    transport = config.MCP_TRANSPORT
    if transport not in TRANSPORTS:
        logger.error(f"Unknown MCP_TRANSPORT: {transport}")
        sys.exit(2)

    logger.info(f"Starting expo-android MCP server ({transport})...")
    init_and_register()

    try:
        asyncio.run(serve(transport))
    except AdbNotFoundError:
        sys.exit(1)


if __name__ == "__main__":
    main()
