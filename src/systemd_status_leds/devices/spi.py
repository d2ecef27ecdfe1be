"""Raw SPI device node output."""

import logging
from pathlib import Path
from threading import Lock
from typing import BinaryIO, Optional

from systemd_status_leds.exceptions import OutputDeviceError, OutputDeviceNotFoundError

logger = logging.getLogger(__name__)

SPIDEV_ROOT = Path("/dev")


def spidev_path(spidev: str) -> Path:
    """Map a ``<bus>.<chip select>`` string such as ``0.0`` to ``/dev/spidev0.0``.

    Absolute paths are returned unchanged.
    """
    if spidev.startswith("/"):
        return Path(spidev)
    return SPIDEV_ROOT / f"spidev{spidev}"


class SpiDevice:
    """
    Writes frames to a Linux spidev node.

    The device node is opened once at construction; failing to open it is a
    startup error. Bit timing for the LED protocol is left to the SPI driver.
    """

    def __init__(self, spidev: str, frame_length: int, hertz: Optional[int] = None):
        """
        Args:
            spidev: ``<bus>.<cs>`` (e.g. ``0.0``) or an absolute device path
            frame_length: Bytes per frame
            hertz: SPI clock the strip expects, logged for reference

        Raises:
            OutputDeviceNotFoundError: If the device node cannot be opened
        """
        self._path = spidev_path(spidev)
        self._frame_length = frame_length
        self._lock = Lock()

        try:
            self._file: Optional[BinaryIO] = open(self._path, "wb", buffering=0)
        except OSError as e:
            raise OutputDeviceNotFoundError(str(self._path), str(e)) from e

        if hertz:
            logger.info(f"Opened SPI device {self._path} ({frame_length} bytes/frame, {hertz} Hz)")
        else:
            logger.info(f"Opened SPI device {self._path} ({frame_length} bytes/frame)")

    @property
    def frame_length(self) -> int:
        return self._frame_length

    @property
    def path(self) -> Path:
        return self._path

    def write(self, frame: bytes) -> None:
        if len(frame) != self._frame_length:
            raise OutputDeviceError(
                user_message="Frame has the wrong length for this strip",
                technical_message=f"Expected {self._frame_length} bytes, got {len(frame)}",
                device=str(self._path),
            )

        with self._lock:
            if self._file is None:
                raise OutputDeviceError(
                    user_message=f"SPI device {self._path} is closed",
                    device=str(self._path),
                )
            try:
                written = self._file.write(frame)
            except OSError as e:
                raise OutputDeviceError(
                    user_message=f"Failed to write to SPI device {self._path}",
                    technical_message=f"Write to {self._path} failed: {e}",
                    device=str(self._path),
                ) from e

        if written is not None and written != len(frame):
            logger.warning(f"Partial write to SPI device: {written} of {len(frame)} bytes written")

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                try:
                    self._file.close()
                except OSError as e:
                    logger.error(f"Error closing SPI device {self._path}: {e}")
                self._file = None
        logger.debug(f"Closed SPI device {self._path}")
