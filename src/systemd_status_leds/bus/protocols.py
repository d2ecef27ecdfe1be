"""Interface to the service manager."""

from typing import Protocol, runtime_checkable

from systemd_status_leds.models import UnitStatus


@runtime_checkable
class UnitBus(Protocol):
    """
    Read access to the service manager's view of units.

    Implementations raise ``BusError`` when a query cannot be answered.
    A unit that does not exist is not an error: its load state is
    ``"not-found"``.
    """

    def is_running(self) -> bool:
        """Whether the service manager can be reached at all."""
        ...

    def get_load_state(self, unit: str) -> str:
        """
        Return the unit's LoadState (``loaded``, ``not-found``, ``masked``, ...).

        Raises:
            BusError: If the query fails
        """
        ...

    def get_unit_statuses(self, units: list[str]) -> dict[str, UnitStatus]:
        """
        Return the current status of each requested unit, keyed by the requested name.

        Raises:
            BusError: If the query fails
        """
        ...
