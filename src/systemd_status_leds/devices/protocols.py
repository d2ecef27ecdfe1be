"""Output device protocol."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class OutputDevice(Protocol):
    """
    Sink for encoded LED frames.

    A frame is exactly ``pixel_count * channels`` bytes in strip order.
    Devices are otherwise stateless from the monitor's point of view.
    """

    @property
    def frame_length(self) -> int:
        """Number of bytes every frame must have."""
        ...

    def write(self, frame: bytes) -> None:
        """
        Send one frame to the strip.

        Raises:
            OutputDeviceError: If the frame cannot be written
        """
        ...

    def close(self) -> None:
        """Release the device."""
        ...
