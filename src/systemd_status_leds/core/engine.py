"""
Status engine: wires watchers, dispatcher and refresh loop together.

Architecture:
    StatusEngine (this class)
    ├── PixelBuffer: one slot per configured service
    ├── ColorResolver: from strip colours and service overrides
    ├── SubscriptionDispatcher: polls the bus, broadcasts change batches
    ├── UnitWatcher x N: one thread per service
    └── RefreshLoop: pushes the buffer to the output device on a timer
"""

import logging
import threading
from typing import Optional

from systemd_status_leds.bus import SubscriptionDispatcher, UnitBus
from systemd_status_leds.devices import OutputDevice
from systemd_status_leds.exceptions import OutputDeviceError
from systemd_status_leds.models import AppConfig

from .pixel_buffer import PixelBuffer
from .refresh import RefreshLoop
from .resolver import ColorResolver
from .watcher import UnitWatcher

logger = logging.getLogger(__name__)


class StatusEngine:
    """
    Top-level runtime of the status monitor.

    Pixel ownership is fixed here: service ``i`` in the configuration owns
    pixel ``i`` for the whole run. Unused pixels past the last service stay off.
    """

    def __init__(self, config: AppConfig, bus: UnitBus, device: OutputDevice):
        """
        Args:
            config: Validated application configuration
            bus: Service manager access
            device: Frame sink; the caller keeps ownership and closes it

        Raises:
            OutputDeviceError: If the device expects a different frame size
        """
        self.config = config
        self._bus = bus
        self._device = device

        strip = config.strip
        self.buffer = PixelBuffer(strip.length, strip.channels)
        if device.frame_length != len(self.buffer):
            raise OutputDeviceError(
                user_message="Output device does not match the configured strip",
                technical_message=(
                    f"Device frame is {device.frame_length} bytes, strip needs {len(self.buffer)}"
                ),
            )

        self.resolver = ColorResolver.from_config(config)
        self.dispatcher = SubscriptionDispatcher(bus, poll_interval=config.monitor.poll_interval)

        self.watchers: list[UnitWatcher] = []
        for index, service in enumerate(config.services):
            slot = self.buffer.claim(index, service.name)
            self.watchers.append(
                UnitWatcher(
                    service.name,
                    slot,
                    self.resolver,
                    bus,
                    self.dispatcher,
                    probe_interval=config.monitor.probe_interval,
                )
            )

        self.refresh_loop = RefreshLoop(
            self.buffer,
            device,
            strip.refresh_interval,
            clear_on_exit=config.monitor.clear_on_exit,
        )

        self._shutdown = threading.Event()
        self._running = False

    def start(self) -> None:
        """Show the loading pattern, then start polling, watchers and refresh."""
        if self._running:
            logger.warning("StatusEngine is already running")
            return

        logger.info(f"Starting status monitor for {len(self.watchers)} unit(s)")

        owned = [watcher.index for watcher in self.watchers]
        self.buffer.fill(self.config.monitor.loading, owned)
        self.refresh_loop.refresh()

        self._shutdown.clear()
        self.dispatcher.start()
        for watcher in self.watchers:
            watcher.start()
        self.refresh_loop.start()
        self._running = True

    def stop(self) -> None:
        """Stop every thread. Safe to call more than once."""
        if not self._running:
            return

        logger.info("Stopping status monitor")
        self._shutdown.set()

        # Closing the dispatcher wakes every watcher blocked on its mailbox
        self.dispatcher.close()
        for watcher in self.watchers:
            watcher.stop()
        self.refresh_loop.stop()

        self._running = False
        logger.info("Status monitor stopped")

    def request_stop(self) -> None:
        """Make ``wait()`` return. Safe to call from a signal handler."""
        self._shutdown.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until ``request_stop()`` or ``stop()`` is called.

        Returns:
            True if a stop was requested, False on timeout
        """
        return self._shutdown.wait(timeout)

    @property
    def is_running(self) -> bool:
        return self._running

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
