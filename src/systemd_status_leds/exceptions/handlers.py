"""
Helpers that turn failures into log lines and terminal output.

Errors are translated layer by layer:

1. **Low level** (subprocess, device files, YAML) raises standard Python exceptions
2. **Services** (bus, devices, config loader) convert them to `StatusLedsError`
   subclasses with a user message, a technical message and a recovery hint
3. **CLI** shows `user_message` and `recovery_hint`, logs `technical_message`

## Quick Reference

| Scenario | Use This |
|----------|----------|
| Config file unreadable / bad YAML | `ConfigFileInvalidError(path, reason)` |
| Pydantic rejected config values | `wrap_pydantic_error(error, path)` |
| systemctl call failed | `BusError(message, unit=...)` |
| systemd not running | `BusUnavailableError(reason)` |
| SPI device missing | `OutputDeviceNotFoundError(device)` |
| Startup step with auto-logging | `with ErrorContext("open output device"): ...` |
"""

import logging
from typing import Optional

from .base import StatusLedsError
from .config import ConfigValidationError

logger = logging.getLogger(__name__)


class ErrorContext:
    """
    Log the outcome of one startup step. Failures are logged and re-raised.

    Example:

        with ErrorContext("open output device", logger_instance=logger):
            device = SpiDevice(spidev, frame_length)
    """

    def __init__(
        self,
        operation: str,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.operation = operation
        self.logger = logger_instance or logger

    def __enter__(self):
        self.logger.debug(f"Begin {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None:
            self.logger.debug(f"Done {self.operation}")
            return False

        if isinstance(exc_val, StatusLedsError):
            # Known errors already describe themselves
            self.logger.error(f"Failed to {self.operation}: {exc_val.technical_message}")
        else:
            self.logger.error(f"Failed to {self.operation}: {exc_val}", exc_info=True)
        return False


def wrap_pydantic_error(error: Exception, file_path: str) -> StatusLedsError:
    """
    Convert Pydantic validation errors to ConfigValidationError.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the config file that failed validation

    Returns:
        A ConfigValidationError naming the offending field(s)
    """
    from pydantic import ValidationError

    if isinstance(error, ValidationError):
        errors = error.errors()
        if len(errors) == 1:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get('loc', ())) or "config"
            reason = first_error.get('msg', 'validation failed')
            value = first_error.get('input', None)

            return ConfigValidationError(
                field=field,
                value=value,
                error_msg=reason,
                file_path=file_path
            )
        elif errors:
            error_lines = []
            for err in errors:
                field = ".".join(str(loc) for loc in err.get('loc', ())) or "config"
                msg = err.get('msg', 'validation failed')
                error_lines.append(f"  - {field}: {msg}")

            combined_msg = f"{len(errors)} validation errors:\n" + "\n".join(error_lines)

            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=combined_msg,
                file_path=file_path
            )

    return ConfigValidationError(
        field="config",
        value=None,
        error_msg=str(error),
        file_path=file_path
    )


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """Return the message and optional hint the CLI prints for ``error``.

    Unknown exceptions are shown with their type name and no hint.
    """
    if isinstance(error, StatusLedsError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None
