"""The set of units registered for change delivery."""

import logging
from threading import Lock

logger = logging.getLogger(__name__)


class SubscriptionSet:
    """
    Thread-safe set of unit names whose changes should be delivered.

    ``add`` and ``remove`` are idempotent: adding a member or removing a
    non-member is a no-op. Neither returns a value and neither blocks beyond
    the time needed to update the set.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        # dict keeps insertion order for stable polling
        self._units: dict[str, None] = {}

    def add(self, unit: str) -> None:
        with self._lock:
            if unit in self._units:
                return
            self._units[unit] = None
        logger.debug(f"Subscribed to unit '{unit}'")

    def remove(self, unit: str) -> None:
        with self._lock:
            if unit not in self._units:
                return
            del self._units[unit]
        logger.debug(f"Unsubscribed from unit '{unit}'")

    def snapshot(self) -> list[str]:
        """Current members, in the order they were added."""
        with self._lock:
            return list(self._units)

    def __contains__(self, unit: str) -> bool:
        with self._lock:
            return unit in self._units

    def __len__(self) -> int:
        with self._lock:
            return len(self._units)
