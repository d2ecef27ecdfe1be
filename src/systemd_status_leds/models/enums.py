"""Enumerations for unit and watcher state."""

from enum import Enum
from typing import Optional


class ActiveState(str, Enum):
    """systemd unit active states that map to a colour."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    RELOADING = "reloading"
    FAILED = "failed"
    ACTIVATING = "activating"
    DEACTIVATING = "deactivating"

    @classmethod
    def parse(cls, value: str) -> Optional["ActiveState"]:
        """Return the matching state, or None for anything systemd adds later."""
        try:
            return cls(value)
        except ValueError:
            return None


class WatchState(str, Enum):
    """Phases of a UnitWatcher."""

    PROBING = "probing"  # Asking the service manager whether the unit is loaded
    ABSENT = "absent"  # Unit not found, waiting before probing again
    TRACKING = "tracking"  # Subscribed, following the unit's change events


# LoadState reported for units systemd knows nothing about
LOAD_STATE_NOT_FOUND = "not-found"
