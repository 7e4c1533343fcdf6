"""Validation of values that are interpolated into device shell commands."""

import logging
import re
from typing import Any, List

from .error_handler import ErrorCode

logger = logging.getLogger(__name__)


class ValidationResult:
    """Validation result with detailed feedback."""

    def __init__(
        self,
        is_valid: bool,
        sanitized_value: Any = None,
        errors: List[str] = None,
        warnings: List[str] = None,
    ):
        self.is_valid = is_valid
        self.sanitized_value = sanitized_value
        self.errors = errors or []
        self.warnings = warnings or []

    def add_error(self, error: str):
        """Add validation error."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str):
        self.warnings.append(warning)


class DeviceIdValidator:
    """Validates adb serials."""

    DEVICE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9\-\._:]+$")
    EMULATOR_PATTERN = re.compile(r"^emulator-\d+$")

    @staticmethod
    def validate_device_id(device_id: str) -> ValidationResult:
        """Validate serial format; "auto" is accepted as-is."""
        result = ValidationResult(True)

        if not isinstance(device_id, str):
            result.add_error(f"Device ID must be string, got {type(device_id).__name__}")
            return result

        device_id = device_id.strip()
        if not device_id:
            result.add_error("Device ID cannot be empty")
            return result

        if len(device_id) > 100:
            result.add_error(f"Device ID too long ({len(device_id)} characters)")
            return result

        if not DeviceIdValidator.DEVICE_ID_PATTERN.match(device_id):
            result.add_error(f"Invalid device ID format: {device_id}")
            return result

        if DeviceIdValidator.EMULATOR_PATTERN.match(device_id):
            result.add_warning("Emulator device detected")
        elif ":" in device_id:
            result.add_warning("Network device detected")

        result.sanitized_value = device_id
        return result


class PackageNameValidator:
    """Validates Android application package names."""

    PACKAGE_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z][A-Za-z0-9_]*)+$")

    @staticmethod
    def validate_package_name(package_name: str) -> ValidationResult:
        result = ValidationResult(True)
        package_name = (package_name or "").strip()
        if not PackageNameValidator.PACKAGE_PATTERN.match(package_name):
            result.add_error(f"Invalid package name: {package_name!r}")
            return result
        result.sanitized_value = package_name
        return result


class KeyCodeValidator:
    """Validates key event codes (numeric or KEYCODE_* names)."""

    KEYCODE_PATTERN = re.compile(r"^(\d+|[A-Za-z][A-Za-z0-9_]*)$")

    @staticmethod
    def validate_keycode(keycode: str) -> ValidationResult:
        result = ValidationResult(True)
        keycode = (keycode or "").strip()
        if not KeyCodeValidator.KEYCODE_PATTERN.match(keycode):
            result.add_error(f"Invalid key code: {keycode!r}")
            return result
        if keycode.isdigit():
            result.sanitized_value = keycode
            return result
        upper = keycode.upper()
        if not upper.startswith("KEYCODE_"):
            result.add_warning(f"Key name normalized to KEYCODE_{upper}")
            upper = f"KEYCODE_{upper}"
        result.sanitized_value = upper
        return result


def create_validation_error_response(validation_result: ValidationResult, operation: str) -> dict:
    """Failure result for rejected tool input."""
    message = f"Invalid {operation} parameters: {'; '.join(validation_result.errors)}"
    return {
        "success": False,
        "error": message,
        "message": message,
        "error_code": ErrorCode.INVALID_PARAMETER.value,
        "validation_errors": validation_result.errors,
        "validation_warnings": validation_result.warnings,
    }


def log_validation_attempt(
    operation: str, params: dict, validation_result: ValidationResult, logger_instance=None
):
    """Log validation outcome for auditing."""
    log = logger_instance or logger
    if not validation_result.is_valid:
        log.warning(f"Validation failed for {operation}: {validation_result.errors} (params: {params})")
    elif validation_result.warnings:
        log.info(f"Validation warnings for {operation}: {validation_result.warnings}")
