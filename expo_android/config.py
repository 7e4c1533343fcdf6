"""Configuration constants for the expo-android MCP server.

Values are read from the environment once, at import time.
"""

import logging
import os
import shutil
from typing import List, Optional, Tuple


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


ADB_DEBUG = _env_flag("ADB_DEBUG")

# Configure logging to stderr (not stdout for STDIO transport)
logging.basicConfig(
    level=logging.DEBUG if ADB_DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)


def _resolve_adb_path() -> Tuple[str, str, List[str]]:
    """Pick the adb executable.

    Returns (path, source, candidates) where source is one of
    env, ANDROID_HOME, ANDROID_SDK_ROOT, PATH or default.
    """
    candidates: List[str] = []

    explicit = os.environ.get("ADB_PATH")
    if explicit:
        return explicit, "env", [explicit]

    for var in ("ANDROID_HOME", "ANDROID_SDK_ROOT"):
        sdk_root = os.environ.get(var)
        if not sdk_root:
            continue
        candidate = os.path.join(sdk_root, "platform-tools", "adb")
        candidates.append(candidate)
        if os.path.isfile(candidate):
            return candidate, var, candidates

    candidates.append("adb (PATH)")
    on_path: Optional[str] = shutil.which("adb")
    if on_path:
        return on_path, "PATH", candidates

    return "adb", "default", candidates


ADB_PATH, ADB_PATH_SOURCE, ADB_PATH_CANDIDATES = _resolve_adb_path()

# Environment default serial; fixed for the process lifetime
ADB_SERIAL: Optional[str] = os.environ.get("ADB_SERIAL") or None

# Per-command timeout (seconds) and output ceiling (bytes)
ADB_TIMEOUT = _env_number("ADB_TIMEOUT_MS", 15000) / 1000.0
ADB_MAX_OUTPUT_BYTES = int(max(1.0, _env_number("ADB_MAX_BUFFER_MB", 10)) * 1024 * 1024)

MCP_TRANSPORT = os.environ.get("MCP_TRANSPORT", "stdio").strip().lower()
MCP_HTTP_HOST = os.environ.get("HOST", "127.0.0.1")
MCP_HTTP_PORT = int(_env_number("PORT", 7332))

# UI dump location on the device
UI_DUMP_DEVICE_PATH = "/sdcard/ui.xml"

# Stabilization defaults for UI sampling
STABLE_FETCH_ATTEMPTS = 3
STABLE_FETCH_DELAY = 0.4  # seconds

SUMMARY_MAX_ITEMS = 8

# wait_for_element polling
WAIT_DEFAULT_TIMEOUT_MS = 10000
WAIT_DEFAULT_INTERVAL_MS = 500
WAIT_MIN_INTERVAL_MS = 50
# Leaves headroom for the final UI sample inside the wait_for_element tool budget
WAIT_MAX_TIMEOUT_MS = 100000

# Timeout configuration for MCP tools (in seconds)
TOOL_TIMEOUTS = {
    # Device tools
    "devices": 15,
    "doctor": 30,
    "set_device": 15,
    # UI tools
    "inspect": 45,
    "find_element": 30,
    "wait_for_element": 120,
    "assert_element": 30,
    # Interaction tools
    "tap": 15,
    "tap_element": 30,
    "swipe": 15,
    "long_press": 20,
    "input_text": 20,
    "key_event": 15,
    # App tools
    "open_app": 20,
    "list_packages": 20,
    # Media tools
    "screenshot": 20,
}

DEFAULT_TOOL_TIMEOUT = 30  # Default timeout for tools not in the list
