"""Shared pixel buffer and per-pixel ownership handles."""

import logging
from threading import Lock
from typing import Optional

from systemd_status_leds.exceptions import PixelOwnershipError
from systemd_status_leds.models import Color

logger = logging.getLogger(__name__)


class PixelBuffer:
    """
    Fixed-size frame of pixel colours shared by all watchers and the refresh loop.

    The buffer is allocated once as ``pixel_count * channels`` bytes and never
    resized. Each index is handed to at most one owner through ``claim()``, so
    writers never compete for the same pixel. The single lock only makes sure
    ``snapshot()`` never observes a half-written colour.

    Threading:
        All public methods are thread-safe.
    """

    def __init__(self, pixel_count: int, channels: int = 4):
        """
        Initialize the buffer with every pixel off.

        Args:
            pixel_count: Number of LEDs on the strip
            channels: Bytes per pixel, 4 for RGBW or 3 for RGB
        """
        if pixel_count < 1:
            raise ValueError("pixel_count must be at least 1")
        if channels not in (3, 4):
            raise ValueError("channels must be 3 or 4")

        self._pixel_count = pixel_count
        self._channels = channels
        self._frame = bytearray(pixel_count * channels)
        self._lock = Lock()
        self._owners: dict[int, str] = {}

    @property
    def pixel_count(self) -> int:
        return self._pixel_count

    @property
    def channels(self) -> int:
        return self._channels

    def __len__(self) -> int:
        """Length of the encoded frame in bytes."""
        return len(self._frame)

    def claim(self, index: int, owner: str) -> "PixelSlot":
        """
        Give ``owner`` exclusive write access to one pixel.

        Args:
            index: Pixel index (0-based)
            owner: Name of the owner, normally the unit name

        Returns:
            A handle that can only write this pixel

        Raises:
            PixelOwnershipError: If the index is out of range or already claimed
        """
        self._check_index(index)
        with self._lock:
            current = self._owners.get(index)
            if current is not None:
                raise PixelOwnershipError(index, f"already owned by '{current}'")
            self._owners[index] = owner

        logger.debug(f"Pixel {index} claimed by '{owner}'")
        return PixelSlot(self, index, owner)

    def owner_of(self, index: int) -> Optional[str]:
        """Name of the owner of a pixel, or None if unclaimed."""
        with self._lock:
            return self._owners.get(index)

    def set_pixel(self, index: int, color: Color) -> None:
        """Write one pixel's colour."""
        self._check_index(index)
        encoded = color.to_bytes(self._channels)
        offset = index * self._channels
        with self._lock:
            self._frame[offset:offset + self._channels] = encoded

    def get_pixel(self, index: int) -> Color:
        """Read one pixel's colour."""
        self._check_index(index)
        offset = index * self._channels
        with self._lock:
            raw = bytes(self._frame[offset:offset + self._channels])

        if self._channels == 3:
            return Color(r=raw[0], g=raw[1], b=raw[2])
        return Color(r=raw[0], g=raw[1], b=raw[2], w=raw[3])

    def fill(self, color: Color, indices: Optional[list[int]] = None) -> None:
        """
        Set many pixels to one colour under a single lock.

        Args:
            color: Colour to write
            indices: Pixels to set (default: every pixel)
        """
        encoded = color.to_bytes(self._channels)
        targets = range(self._pixel_count) if indices is None else indices
        for index in targets:
            self._check_index(index)

        with self._lock:
            for index in targets:
                offset = index * self._channels
                self._frame[offset:offset + self._channels] = encoded

    def clear(self) -> None:
        """Turn every pixel off."""
        with self._lock:
            self._frame[:] = bytes(len(self._frame))

    def snapshot(self) -> bytes:
        """Copy of the whole frame, consistent per pixel."""
        with self._lock:
            return bytes(self._frame)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self._pixel_count:
            raise PixelOwnershipError(index, f"strip only has {self._pixel_count} LEDs")


class PixelSlot:
    """
    Write handle for exactly one pixel of a PixelBuffer.

    Obtained from ``PixelBuffer.claim()``. A UnitWatcher holds one of these
    instead of the buffer itself, so it cannot touch another unit's pixel.
    """

    __slots__ = ("_buffer", "_index", "_owner")

    def __init__(self, buffer: PixelBuffer, index: int, owner: str):
        self._buffer = buffer
        self._index = index
        self._owner = owner

    @property
    def index(self) -> int:
        return self._index

    @property
    def owner(self) -> str:
        return self._owner

    def set(self, color: Color) -> None:
        """Write this pixel's colour."""
        self._buffer.set_pixel(self._index, color)

    def get(self) -> Color:
        """Read this pixel's colour."""
        return self._buffer.get_pixel(self._index)

    def __repr__(self) -> str:
        return f"PixelSlot(index={self._index}, owner={self._owner!r})"
