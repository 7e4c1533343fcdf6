"""Mock infrastructure for expo-android MCP server testing."""

from .adb_mock import (
    ADB_VERSION_OUTPUT,
    MockADBCommand,
    MockErrorScenarios,
    create_mock_adb_manager,
)

__all__ = [
    "ADB_VERSION_OUTPUT",
    "MockADBCommand",
    "MockErrorScenarios",
    "create_mock_adb_manager",
]
