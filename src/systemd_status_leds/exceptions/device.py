"""Output device exceptions."""

from typing import Optional

from .base import StatusLedsError


class OutputDeviceError(StatusLedsError):
    """Writing a frame to the LED strip failed."""

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        device: Optional[str] = None,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(
            user_message=user_message,
            technical_message=technical_message,
            recoverable=True,
            recovery_hint=recovery_hint,
        )
        self.device = device


class OutputDeviceNotFoundError(OutputDeviceError):
    """The SPI device node could not be opened."""

    def __init__(self, device: str, original_error: Optional[str] = None):
        technical = f"Failed to open SPI device {device}"
        if original_error:
            technical += f": {original_error}"

        super().__init__(
            user_message=f"Cannot open LED strip device {device}",
            technical_message=technical,
            device=device,
            recovery_hint=(
                "Enable SPI (e.g. dtparam=spi=on on a Raspberry Pi), check the 'spidev' value "
                "in your configuration, and make sure this user may write to the device.\n"
                "Use --dry-run to test without hardware."
            ),
        )
        self.recoverable = False
