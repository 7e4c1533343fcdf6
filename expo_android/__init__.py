"""MCP server for Android device automation over adb."""

__version__ = "0.1.0"
