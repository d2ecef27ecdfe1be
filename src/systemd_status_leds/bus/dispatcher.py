"""Fan-out of unit change notifications to watchers."""

import logging
import threading
from queue import Empty, Queue
from typing import Optional, Union

from systemd_status_leds.exceptions import BusError
from systemd_status_leds.models import LOAD_STATE_NOT_FOUND, UnitChanges, UnitStatus

from .protocols import UnitBus
from .subscription import SubscriptionSet

logger = logging.getLogger(__name__)

# What a subscriber can receive: a batch of changes or a bus error
Message = Union[UnitChanges, BusError]

_CLOSED = object()


class Subscription:
    """
    One subscriber's mailbox.

    Change batches and bus errors share a single FIFO queue, so one blocking
    ``get()`` waits on both and the delivery order is preserved.
    """

    def __init__(self, dispatcher: "SubscriptionDispatcher"):
        self._dispatcher = dispatcher
        self._queue: Queue = Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def get(self, timeout: Optional[float] = None) -> Optional[Message]:
        """
        Wait for the next message.

        Args:
            timeout: Seconds to wait (None = forever)

        Returns:
            The next batch or error, or None once the subscription is closed

        Raises:
            queue.Empty: If ``timeout`` elapsed with nothing delivered
        """
        if self._closed.is_set():
            return None

        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            return None
        return item

    def drain(self) -> int:
        """Discard everything queued so far. Returns the number of messages dropped."""
        dropped = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except Empty:
                return dropped
            if item is _CLOSED:
                # Keep the close marker for the next get()
                self._queue.put(_CLOSED)
                return dropped
            dropped += 1

    def close(self) -> None:
        """Wake any blocked ``get()``; further gets return None."""
        if not self._closed.is_set():
            self._closed.set()
            self._queue.put(_CLOSED)

    def unsubscribe(self) -> None:
        """Stop receiving messages and close."""
        self._dispatcher.unsubscribe(self)
        self.close()

    def _deliver(self, message: Message) -> None:
        if not self._closed.is_set():
            self._queue.put(message)


class SubscriptionDispatcher:
    """
    Polls the service manager for subscribed units and broadcasts changes.

    Every subscriber receives every batch; a watcher picks out its own unit
    by name. A batch maps unit name to its new ``UnitStatus``, or to ``None``
    when the unit has disappeared from the service manager.

    The poller reports a unit the first time it sees it after ``add()``, so a
    freshly subscribed watcher learns the unit's current state without
    waiting for a transition.

    Threading:
        ``subscribe``, ``add``, ``remove`` and ``publish*`` are safe from any
        thread. Delivery happens outside the subscriber lock.
    """

    def __init__(
        self,
        bus: UnitBus,
        poll_interval: float = 1.0,
        subscription_set: Optional[SubscriptionSet] = None,
    ):
        """
        Args:
            bus: Service manager access
            poll_interval: Seconds between polls of subscribed units
            subscription_set: Set of subscribed units (created if omitted)
        """
        self._bus = bus
        self._poll_interval = poll_interval
        self._set = subscription_set or SubscriptionSet()
        self._subscribers: list[Subscription] = []
        self._subscribers_lock = threading.Lock()
        self._last_seen: dict[str, UnitStatus] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # =================================================================
    # Subscribers
    # =================================================================

    def subscribe(self) -> Subscription:
        """Create a new mailbox that receives every change batch and error."""
        subscription = Subscription(self)
        with self._subscribers_lock:
            self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._subscribers_lock:
            if subscription in self._subscribers:
                self._subscribers.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._subscribers_lock:
            return len(self._subscribers)

    # =================================================================
    # Subscription set
    # =================================================================

    @property
    def subscription_set(self) -> SubscriptionSet:
        return self._set

    def add(self, unit: str) -> None:
        """Register a unit for change delivery (idempotent)."""
        self._set.add(unit)

    def remove(self, unit: str) -> None:
        """Unregister a unit (idempotent)."""
        self._set.remove(unit)

    # =================================================================
    # Delivery
    # =================================================================

    def publish(self, changes: UnitChanges) -> None:
        """
        Broadcast a change batch to every subscriber.

        Subscribers share the batch and must treat it as read-only.
        """
        if not changes:
            return

        batch = dict(changes)
        with self._subscribers_lock:
            subscribers = list(self._subscribers)

        for subscription in subscribers:
            subscription._deliver(batch)

    def publish_error(self, error: BusError) -> None:
        """Broadcast a bus error to every subscriber."""
        with self._subscribers_lock:
            subscribers = list(self._subscribers)

        for subscription in subscribers:
            subscription._deliver(error)

    def poll_once(self) -> UnitChanges:
        """
        Query every subscribed unit and publish what changed since the last poll.

        Returns:
            The published batch (empty if nothing changed or the query failed)
        """
        units = self._set.snapshot()

        # Forget units that left the set so a re-add is reported again
        for unit in list(self._last_seen):
            if unit not in units:
                del self._last_seen[unit]

        if not units:
            return {}

        try:
            statuses = self._bus.get_unit_statuses(units)
        except BusError as e:
            logger.warning(f"Failed to poll unit states: {e.technical_message}")
            self.publish_error(e)
            return {}
        except Exception as e:
            logger.error(f"Unexpected error polling unit states: {e}", exc_info=True)
            self.publish_error(BusError("Unexpected error polling unit states", original_error=str(e)))
            return {}

        changes: UnitChanges = {}
        for unit in units:
            status = statuses.get(unit)
            previous = self._last_seen.get(unit)

            if status is None or status.load_state == LOAD_STATE_NOT_FOUND:
                if previous is not None:
                    changes[unit] = None
                    del self._last_seen[unit]
                continue

            if status != previous:
                changes[unit] = status
                self._last_seen[unit] = status

        if changes:
            logger.debug(f"Publishing changes for {len(changes)} unit(s): {sorted(changes)}")
            self.publish(changes)

        return changes

    # =================================================================
    # Lifecycle
    # =================================================================

    def start(self) -> None:
        """Start the polling thread."""
        if self._thread and self._thread.is_alive():
            logger.warning("SubscriptionDispatcher is already running")
            return

        self._stop.clear()
        self._thread = threading.Thread(target=self._poll_loop, name="dispatcher", daemon=True)
        self._thread.start()
        logger.debug("SubscriptionDispatcher started")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop polling. Subscribers stay open."""
        self._stop.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None
        logger.debug("SubscriptionDispatcher stopped")

    def close(self) -> None:
        """Stop polling and wake every subscriber with a close marker."""
        self.stop()
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
            self._subscribers.clear()

        for subscription in subscribers:
            subscription.close()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _poll_loop(self) -> None:
        logger.debug(f"Polling subscribed units every {self._poll_interval}s")
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Error in unit polling loop: {e}", exc_info=True)
            self._stop.wait(self._poll_interval)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
