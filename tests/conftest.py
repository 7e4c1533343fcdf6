"""Test configuration and fixtures for expo-android MCP server tests."""

from typing import Any, Dict, List
from unittest.mock import AsyncMock

import pytest

from expo_android.device_session import DeviceSession
from expo_android.media_capture import MediaCapture
from expo_android.screen_interactor import ScreenInteractor
from expo_android.ui_inspector import UILayoutExtractor
from expo_android.ui_parser import Bounds, UIElement

from tests.data.sample_ui_dumps import SAMPLE_UI_XML
from tests.mocks import MockADBCommand, create_mock_adb_manager

MOCK_DEVICE_ID = "emulator-5554"


class FakeClock:
    """Monotonic clock advanced only by FakeSleep."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class FakeSleep:
    """Records requested sleeps and advances the paired clock."""

    def __init__(self, clock: FakeClock = None) -> None:
        self.clock = clock
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.now += seconds


def make_element(index: int = 0, **overrides: Any) -> UIElement:
    """Build a UIElement with sensible defaults for matcher tests."""
    values: Dict[str, Any] = {
        "index": index,
        "text": "",
        "class_name": "android.widget.TextView",
        "resource_id": "",
        "content_desc": "",
        "bounds": Bounds(0, 0, 100, 100),
        "enabled": True,
    }
    values.update(overrides)
    return UIElement(**values)


@pytest.fixture
def bridge() -> MockADBCommand:
    """Scripted device bridge with one online emulator."""
    return MockADBCommand()


@pytest.fixture
def mock_adb_manager(bridge) -> AsyncMock:
    return create_mock_adb_manager(bridge)


@pytest.fixture
def device_session(mock_adb_manager) -> DeviceSession:
    return DeviceSession(mock_adb_manager, env_serial=None)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep(fake_clock) -> FakeSleep:
    return FakeSleep(fake_clock)


@pytest.fixture
def ui_inspector(device_session, fake_sleep) -> UILayoutExtractor:
    return UILayoutExtractor(device_session, sleep=fake_sleep)


@pytest.fixture
def screen_interactor(device_session, ui_inspector, fake_clock, fake_sleep) -> ScreenInteractor:
    return ScreenInteractor(device_session, ui_inspector, clock=fake_clock, sleep=fake_sleep)


@pytest.fixture
def media_capture(device_session, tmp_path) -> MediaCapture:
    return MediaCapture(device_session, output_dir=str(tmp_path))


@pytest.fixture
def server_components(
    mock_adb_manager, device_session, ui_inspector, screen_interactor, media_capture
) -> Dict[str, Any]:
    """Component dict as built by initialize_components, over the mock bridge."""
    return {
        "adb_manager": mock_adb_manager,
        "device_session": device_session,
        "ui_inspector": ui_inspector,
        "screen_interactor": screen_interactor,
        "media_capture": media_capture,
    }


@pytest.fixture
def sample_ui_xml() -> str:
    return SAMPLE_UI_XML
