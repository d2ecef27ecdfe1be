"""Periodic push of the pixel buffer to the output device."""

import logging
import threading
from typing import Optional

from systemd_status_leds.devices import OutputDevice
from systemd_status_leds.exceptions import OutputDeviceError

from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class RefreshLoop:
    """
    Writes a snapshot of the buffer to the device every ``interval`` seconds.

    Output is timer driven: pixel writes never trigger a device write, so a
    burst of state changes costs one frame per tick at most. A failed write is
    logged and the next tick simply tries again.
    """

    def __init__(
        self,
        buffer: PixelBuffer,
        device: OutputDevice,
        interval: float,
        clear_on_exit: bool = False,
    ):
        """
        Args:
            buffer: Pixel buffer to snapshot
            device: Frame sink
            interval: Seconds between ticks
            clear_on_exit: Write one all-off frame after stopping
        """
        if interval <= 0:
            raise ValueError("interval must be positive")

        self._buffer = buffer
        self._device = device
        self._interval = interval
        self._clear_on_exit = clear_on_exit
        self._write_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._frames_written = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def frames_written(self) -> int:
        return self._frames_written

    def refresh(self) -> bool:
        """
        Run one tick now.

        Returns:
            True if the frame reached the device
        """
        frame = self._buffer.snapshot()
        with self._write_lock:
            try:
                self._device.write(frame)
            except OutputDeviceError as e:
                logger.error(f"Failed to write frame: {e.technical_message}")
                return False
            except Exception as e:
                logger.error(f"Unexpected error writing frame: {e}", exc_info=True)
                return False
            self._frames_written += 1
        return True

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            logger.warning("RefreshLoop is already running")
            return

        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="refresh", daemon=True)
        self._thread.start()
        logger.debug(f"RefreshLoop started ({self._interval}s interval)")

    def stop(self, timeout: float = 2.0) -> None:
        """
        Stop ticking. An in-flight write completes first.

        With ``clear_on_exit`` the buffer is cleared and one final frame written.
        """
        self._stop.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None

        if self._clear_on_exit:
            self._buffer.clear()
            self.refresh()
            logger.debug("Wrote final all-off frame")

        logger.debug("RefreshLoop stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.refresh()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
