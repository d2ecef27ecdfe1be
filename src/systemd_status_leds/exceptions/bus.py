"""Service manager bus exceptions."""

from typing import Optional

from .base import StatusLedsError


class BusError(StatusLedsError):
    """A query against the service manager failed.

    These are treated as transient: watchers log them and keep going.
    """

    def __init__(self, message: str, unit: Optional[str] = None, original_error: Optional[str] = None):
        technical = message
        if unit:
            technical = f"{message} (unit={unit})"
        if original_error:
            technical += f": {original_error}"

        super().__init__(
            user_message=message,
            technical_message=technical,
            recoverable=True,
        )
        self.unit = unit
        self.original_error = original_error


class BusUnavailableError(BusError):
    """The service manager cannot be reached at all."""

    def __init__(self, reason: str):
        super().__init__(f"systemd is not available: {reason}")
        self.recoverable = False
        self.recovery_hint = (
            "This program needs a running systemd instance.\n"
            "Check that the host booted with systemd and that 'systemctl' is on PATH.\n"
            "For per-user services pass --user."
        )
