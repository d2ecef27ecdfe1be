"""Devices that do not need hardware."""

import logging
from threading import Lock
from typing import Optional

from systemd_status_leds.exceptions import OutputDeviceError

logger = logging.getLogger(__name__)


def _check_length(frame: bytes, frame_length: int, device: str) -> None:
    if len(frame) != frame_length:
        raise OutputDeviceError(
            user_message="Frame has the wrong length for this strip",
            technical_message=f"Expected {frame_length} bytes, got {len(frame)}",
            device=device,
        )


class MemoryDevice:
    """Keeps every frame it receives. Thread-safe."""

    def __init__(self, frame_length: int, max_frames: Optional[int] = None):
        """
        Args:
            frame_length: Bytes per frame
            max_frames: Keep only the most recent frames (None = all)
        """
        self._frame_length = frame_length
        self._max_frames = max_frames
        self._frames: list[bytes] = []
        self._lock = Lock()
        self.closed = False

    @property
    def frame_length(self) -> int:
        return self._frame_length

    def write(self, frame: bytes) -> None:
        _check_length(frame, self._frame_length, "memory")
        with self._lock:
            self._frames.append(bytes(frame))
            if self._max_frames is not None and len(self._frames) > self._max_frames:
                del self._frames[0]

    @property
    def frames(self) -> list[bytes]:
        with self._lock:
            return list(self._frames)

    @property
    def last_frame(self) -> Optional[bytes]:
        with self._lock:
            return self._frames[-1] if self._frames else None

    def close(self) -> None:
        self.closed = True


class LoggingDevice:
    """Logs each frame as hex, one pixel per group. Used for ``--dry-run``."""

    def __init__(self, frame_length: int, channels: int = 4):
        self._frame_length = frame_length
        self._channels = channels

    @property
    def frame_length(self) -> int:
        return self._frame_length

    def write(self, frame: bytes) -> None:
        _check_length(frame, self._frame_length, "log")
        pixels = [
            frame[i:i + self._channels].hex()
            for i in range(0, len(frame), self._channels)
        ]
        logger.info(f"Frame: {' '.join(pixels)}")

    def close(self) -> None:
        pass
