"""Root of the systemd-status-leds exception tree.

Every error the daemon raises on purpose derives from StatusLedsError, so the
CLI can catch one type and print a clean message. Each error carries two
texts: a short one for the terminal and a detailed one for the log.
"""

from typing import Optional


class StatusLedsError(Exception):
    """
    An error the daemon knows how to report.

    Attributes:
        user_message: Short text printed by the CLI
        technical_message: Detail written to the log, falls back to user_message
        recoverable: False when the daemon cannot keep running after it
        recovery_hint: What the operator can change to fix it, if known
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """User message followed by the recovery hint, when there is one."""
        if not self.recovery_hint:
            return self.user_message
        return f"{self.user_message}\n\nSuggestion: {self.recovery_hint}"


class PixelOwnershipError(StatusLedsError):
    """A pixel was claimed twice or outside the strip."""

    def __init__(self, index: int, reason: str):
        super().__init__(
            user_message=f"Cannot assign pixel {index}: {reason}",
            technical_message=f"Pixel ownership violation at index {index}: {reason}",
            recoverable=False,
        )
        self.index = index
