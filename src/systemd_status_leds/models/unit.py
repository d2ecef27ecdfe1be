"""Snapshots of unit state as reported by the service manager."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from .enums import ActiveState


class UnitStatus(BaseModel):
    """State of one unit at the time of a poll."""

    model_config = ConfigDict(frozen=True)

    name: str
    load_state: str = ""
    active_state: str = ""
    sub_state: str = ""

    @property
    def recognized_state(self) -> Optional[ActiveState]:
        """The active state as an enum, or None if it has no colour mapping."""
        return ActiveState.parse(self.active_state)


# One broadcast batch: unit name -> new status, or None if the unit vanished
UnitChanges = dict[str, Optional[UnitStatus]]
