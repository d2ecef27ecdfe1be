"""Per-unit watch state machine."""

import logging
import threading
from queue import Empty
from typing import Optional

from systemd_status_leds.bus import Message, SubscriptionDispatcher, UnitBus
from systemd_status_leds.exceptions import BusError
from systemd_status_leds.models import LOAD_STATE_NOT_FOUND, WatchState

from .pixel_buffer import PixelSlot
from .resolver import ColorResolver

logger = logging.getLogger(__name__)


class UnitWatcher:
    """
    Keeps one pixel in step with one systemd unit.

    State machine::

        PROBING --not found / bus error--> ABSENT --probe_interval--> PROBING
        PROBING --loaded--> TRACKING (subscribed, follows change batches)
        TRACKING --unit reported gone--> ABSENT (unsubscribed)

    While TRACKING the watcher blocks on its subscription mailbox. Change
    batches that mention its unit update the pixel; bus errors are logged and
    the watcher keeps waiting. The load state is not re-probed while tracking,
    but a batch reporting the unit gone (a ``None`` entry) unsubscribes it and
    sends the watcher back to ABSENT, so the pixel is left alone until a probe
    finds the unit again.

    The watcher only holds a ``PixelSlot``, so it can write no pixel but its own.

    Threading:
        ``start()`` runs the state machine on a daemon thread. ``step()`` runs
        one transition on the caller's thread and is what the thread loops on.
    """

    def __init__(
        self,
        unit: str,
        slot: PixelSlot,
        resolver: ColorResolver,
        bus: UnitBus,
        dispatcher: SubscriptionDispatcher,
        probe_interval: float = 5.0,
    ):
        """
        Args:
            unit: Unit name, e.g. 'sshd.service'
            slot: Write handle for this unit's pixel
            resolver: State to colour mapping
            bus: Used for load-state probes
            dispatcher: Source of change batches
            probe_interval: Seconds to wait in ABSENT before probing again
        """
        self._unit = unit
        self._slot = slot
        self._resolver = resolver
        self._bus = bus
        self._dispatcher = dispatcher
        self._probe_interval = probe_interval

        self._state = WatchState.PROBING
        self._subscribed = False
        # Subscribe up front so no batch is missed between probe and add()
        self._subscription = dispatcher.subscribe()

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def unit(self) -> str:
        return self._unit

    @property
    def index(self) -> int:
        return self._slot.index

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def present(self) -> bool:
        """Whether the unit is in the subscription set on this watcher's behalf."""
        return self._subscribed

    # =================================================================
    # Lifecycle
    # =================================================================

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            logger.warning(f"Watcher for {self._unit} is already running")
            return

        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=f"watch-{self._unit}", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        """Stop at the next suspension point and wait for the thread."""
        self._stop.set()
        self._subscription.unsubscribe()
        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Watcher for {self._unit} did not stop within {timeout}s")
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        logger.debug(f"Watching {self._unit} on LED {self.index}")
        while not self._stop.is_set():
            try:
                self.step()
            except Exception as e:
                logger.error(f"Unexpected error watching {self._unit}: {e}", exc_info=True)
                self._stop.wait(self._probe_interval)
        logger.debug(f"Stopped watching {self._unit}")

    # =================================================================
    # State machine
    # =================================================================

    def step(self, timeout: Optional[float] = None) -> WatchState:
        """
        Run one transition of the state machine.

        Args:
            timeout: Longest wait for a message while TRACKING (None = forever)

        Returns:
            The state after the transition
        """
        if self._state is WatchState.PROBING:
            self._probe()
        elif self._state is WatchState.ABSENT:
            self._wait_absent()
        else:
            try:
                message = self._subscription.get(timeout=timeout)
            except Empty:
                return self._state
            if message is None:
                # Subscription closed: shutting down
                self._stop.set()
            else:
                self.handle_message(message)
        return self._state

    def _probe(self) -> None:
        try:
            load_state = self._bus.get_load_state(self._unit)
        except BusError as e:
            logger.warning(f"Could not probe {self._unit}: {e.technical_message}")
            self._go_absent()
            return

        if load_state == LOAD_STATE_NOT_FOUND:
            logger.info(f"Unit {self._unit} not found, retrying in {self._probe_interval}s")
            self._go_absent()
            return

        if not self._subscribed:
            self._dispatcher.add(self._unit)
            self._subscribed = True

        self._state = WatchState.TRACKING
        logger.info(f"Tracking {self._unit} on LED {self.index} (LoadState={load_state})")

    def _go_absent(self) -> None:
        if self._subscribed:
            self._dispatcher.remove(self._unit)
            self._subscribed = False
        self._state = WatchState.ABSENT

    def _wait_absent(self) -> None:
        dropped = self._subscription.drain()
        if dropped:
            logger.debug(f"Discarded {dropped} queued message(s) for absent unit {self._unit}")

        if not self._stop.wait(self._probe_interval):
            self._state = WatchState.PROBING

    def handle_message(self, message: Message) -> None:
        """Apply one change batch or bus error received while tracking."""
        if isinstance(message, BusError):
            logger.warning(f"Bus error while tracking {self._unit}: {message.technical_message}")
            return

        if self._unit not in message:
            return

        status = message[self._unit]
        if status is None:
            logger.warning(
                f"Unit {self._unit} is no longer known to the service manager, "
                f"probing again in {self._probe_interval}s"
            )
            self._go_absent()
            return

        state = status.recognized_state
        if state is None:
            logger.warning(
                f"Unit {self._unit} reported unrecognized state '{status.active_state}', "
                f"leaving LED {self.index} unchanged"
            )
            return

        colour = self._resolver.resolve(self._unit, state.value)
        self._slot.set(colour)
        logger.debug(f"{self._unit} is {state.value} ({status.sub_state}): LED {self.index} -> {colour.to_hex()}")

    def __repr__(self) -> str:
        return f"UnitWatcher(unit={self._unit!r}, index={self.index}, state={self._state.value})"
