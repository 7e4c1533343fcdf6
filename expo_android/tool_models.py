"""Pydantic models for MCP tool parameters."""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from . import config
from .element_matcher import FindCriteria


class DeviceTargetParams(BaseModel):
    """Base for tools that act on a device."""

    serial: Optional[str] = Field(
        default=None,
        description="Device serial for this call only (defaults to the session device)",
    )


class SetDeviceParams(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"serial": "emulator-5554"},
                {"serial": "auto"},
                {"serial": None},
            ]
        }
    )
    serial: Optional[str] = Field(
        default=None, description='Serial to pin the session to; "auto" or empty clears it'
    )


class ElementCriteriaParams(DeviceTargetParams):
    """Text, class, resource id and content description criteria."""

    text: Optional[str] = Field(default=None, description="Exact text to match")
    text_contains: Optional[str] = Field(default=None, description="Substring of the text")
    class_name: Optional[str] = Field(
        default=None, description="Exact widget class, e.g. android.widget.Button"
    )
    resource_id: Optional[str] = Field(default=None, description="Exact resource id")
    resource_id_contains: Optional[str] = Field(
        default=None, description="Substring of the resource id"
    )
    content_desc: Optional[str] = Field(
        default=None, description="Exact content description"
    )
    content_desc_contains: Optional[str] = Field(
        default=None, description="Substring of the content description"
    )
    normalize_whitespace: bool = Field(
        default=False, description="Collapse whitespace runs in text comparisons"
    )
    case_insensitive: bool = Field(default=False, description="Compare case-insensitively")

    def criteria_fields(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "text_contains": self.text_contains,
            "class_name": self.class_name,
            "resource_id": self.resource_id,
            "resource_id_contains": self.resource_id_contains,
            "content_desc": self.content_desc,
            "content_desc_contains": self.content_desc_contains,
            "normalize_whitespace": self.normalize_whitespace,
            "case_insensitive": self.case_insensitive,
        }

    def to_criteria(self) -> FindCriteria:
        return FindCriteria(**self.criteria_fields())


class ElementStateParams(ElementCriteriaParams):
    should_be_checked: Optional[bool] = Field(
        default=None, description="Required checked state"
    )
    should_be_enabled: Optional[bool] = Field(
        default=None, description="Required enabled state"
    )
    should_be_clickable: Optional[bool] = Field(
        default=None, description="Required clickable state"
    )


class InspectParams(DeviceTargetParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"only_interactive": True, "max_elements": 50},
                {"include_screenshot": True, "screenshot_mode": "path"},
                {"include_elements": False},
            ]
        }
    )
    only_interactive: bool = Field(
        default=False, description="Keep only clickable, checkable or scrollable elements"
    )
    include_elements: bool = Field(default=True, description="Return the element list")
    max_elements: Optional[int] = Field(
        default=None, gt=0, description="Maximum number of elements to return"
    )
    include_screenshot: bool = Field(default=False, description="Also capture a screenshot")
    screenshot_mode: Literal["base64", "path"] = Field(
        default="base64", description="Inline base64 image or a file path"
    )
    screenshot_path: Optional[str] = Field(
        default=None, description="Screenshot destination in path mode"
    )


class FindElementParams(ElementCriteriaParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"text": "Settings"},
                {"resource_id_contains": "login_button", "clickable": True},
                {"text_contains": "sign in", "case_insensitive": True},
            ]
        }
    )
    checkable: Optional[bool] = Field(default=None, description="Required checkable flag")
    clickable: Optional[bool] = Field(default=None, description="Required clickable flag")

    def to_criteria(self) -> FindCriteria:
        return FindCriteria(
            checkable=self.checkable, clickable=self.clickable, **self.criteria_fields()
        )


class WaitForElementParams(ElementStateParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"text": "Welcome", "timeout_ms": 15000},
                {"resource_id": "com.app:id/spinner", "interval_ms": 250},
            ]
        }
    )
    timeout_ms: int = Field(
        default=config.WAIT_DEFAULT_TIMEOUT_MS,
        ge=0,
        le=config.WAIT_MAX_TIMEOUT_MS,
        description="Maximum wait in milliseconds",
    )
    interval_ms: int = Field(
        default=500, description="Polling interval in milliseconds (minimum 50)"
    )


class AssertElementParams(ElementStateParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"text": "Remember me", "should_be_checked": True},
                {"text": "Error", "should_exist": False},
            ]
        }
    )
    should_exist: bool = Field(default=True, description="Whether the element must exist")


class TapElementParams(ElementCriteriaParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"text": "Login", "index": 0},
                {"resource_id": "com.app:id/submit"},
                {"content_desc": "Navigate up", "prefer_clickable": False},
            ]
        }
    )
    index: int = Field(default=0, description="Index of element if multiple matches")
    prefer_clickable: bool = Field(
        default=True, description="Only consider clickable matches when any exist"
    )


class TapCoordinatesParams(DeviceTargetParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"x": 540, "y": 1600},
                {"x": 100, "y": 300, "serial": "emulator-5554"},
            ]
        }
    )
    x: int = Field(ge=0, description="X coordinate")
    y: int = Field(ge=0, description="Y coordinate")


class SwipeParams(DeviceTargetParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"x1": 540, "y1": 1600, "x2": 540, "y2": 600, "duration_ms": 400},
                {"x1": 100, "y1": 400, "x2": 900, "y2": 400},
            ]
        }
    )
    x1: int = Field(ge=0, description="Start X coordinate")
    y1: int = Field(ge=0, description="Start Y coordinate")
    x2: int = Field(ge=0, description="End X coordinate")
    y2: int = Field(ge=0, description="End Y coordinate")
    duration_ms: int = Field(default=300, ge=0, description="Swipe duration in milliseconds")


class LongPressParams(DeviceTargetParams):
    x: int = Field(ge=0, description="X coordinate")
    y: int = Field(ge=0, description="Y coordinate")
    duration_ms: int = Field(default=1000, ge=0, description="Press duration in milliseconds")


class TextInputParams(DeviceTargetParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"text": "hello world"},
                {"text": "user@example.com"},
            ]
        }
    )
    text: str = Field(description="Text to input into the focused field")


class KeyEventParams(DeviceTargetParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"key_code": "KEYCODE_BACK"},
                {"key_code": "ENTER"},
                {"key_code": "3"},
            ]
        }
    )
    key_code: str = Field(description="Key code number or name (BACK, HOME, KEYCODE_ENTER, ...)")


class OpenAppParams(DeviceTargetParams):
    package_name: str = Field(description="Application package, e.g. com.example.app")


class ListPackagesParams(DeviceTargetParams):
    filter: Optional[str] = Field(
        default=None, description="Only return packages containing this substring"
    )


class ScreenshotParams(DeviceTargetParams):
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"mode": "base64"},
                {"mode": "path", "path": "/tmp/before_login.png"},
            ]
        }
    )
    mode: Literal["base64", "path"] = Field(
        default="base64", description="Inline base64 image or a file path"
    )
    path: Optional[str] = Field(
        default=None, description="Destination file in path mode (temp file if omitted)"
    )
