"""Configuration-related exceptions.

This module defines exceptions for configuration errors:
- ConfigurationError: Base class for configuration errors
- ConfigFileInvalidError: Config file is missing or has invalid syntax
- ConfigValidationError: Config values fail validation
"""

from typing import Any, Optional

from .base import StatusLedsError


class ConfigurationError(StatusLedsError):
    """Configuration is invalid or cannot be loaded."""
    pass


class ConfigFileInvalidError(ConfigurationError):
    """Configuration file is unreadable or has invalid YAML syntax."""

    def __init__(self, file_path: str, parse_error: str):
        """
        Initialize config file invalid error.

        Args:
            file_path: Path to the invalid config file
            parse_error: The parsing error message
        """
        user_msg = "Configuration file has invalid syntax"
        recovery = "Check for common YAML errors:\n"
        recovery += "  - Tabs used for indentation (use spaces)\n"
        recovery += "  - Inconsistent indentation under 'services' or 'strip'\n"
        recovery += f"  - Edit: {file_path}"

        lowered = parse_error.lower()
        if "not found" in lowered or "no such file" in lowered:
            user_msg = "Configuration file not found"
            recovery = f"Create {file_path} or pass --config with the path to your file"
        elif "empty" in lowered:
            user_msg = "Configuration file is empty"
            recovery = f"Add 'services' and 'strip' sections to {file_path}"

        super().__init__(
            user_message=user_msg,
            technical_message=f"YAML parse error in {file_path}: {parse_error}",
            recoverable=True,
            recovery_hint=recovery
        )
        self.file_path = file_path
        self.parse_error = parse_error


class ConfigValidationError(ConfigurationError):
    """Configuration values fail validation."""

    def __init__(self, field: str, value: Any, error_msg: str, file_path: Optional[str] = None):
        """
        Initialize config validation error.

        Args:
            field: The configuration field that failed validation
            value: The invalid value
            error_msg: Why the value is invalid
            file_path: Path to the config file (optional)
        """
        user_msg = f"Invalid configuration value for '{field}': {error_msg}"
        recovery = f"Update the '{field}' value in your configuration"
        if file_path:
            recovery += f"\nConfig file: {file_path}"

        if "colour" in field.lower() or "states_map" in field.lower():
            recovery += "\nColours are hex strings: RRGGBBWW (or RRGGBB on 3-channel strips)"
        elif "services" in field.lower():
            recovery += "\nEach service needs a unique name and one pixel on the strip"
        elif "channels" in field.lower():
            recovery += "\nUse 4 for RGBW strips or 3 for RGB strips"

        super().__init__(
            user_message=user_msg,
            technical_message=f"Config validation failed for {field}={value}: {error_msg}",
            recoverable=True,
            recovery_hint=recovery
        )
        self.field = field
        self.value = value
        self.file_path = file_path
