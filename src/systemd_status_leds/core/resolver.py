"""Mapping from (unit, active state) to colour."""

from collections.abc import Mapping
from typing import Optional

from systemd_status_leds.models import AppConfig, Color


class ColorResolver:
    """
    Resolves the colour for a unit's active state.

    Lookup order: the unit's own override map, then the global defaults,
    then ``fallback`` (off unless given). Unknown state names are ordinary
    lookup misses and never raise.

    Instances are immutable after construction and safe to share between
    watcher threads.
    """

    def __init__(
        self,
        defaults: Mapping[str, Color],
        overrides: Optional[Mapping[str, Mapping[str, Color]]] = None,
        fallback: Optional[Color] = None,
    ):
        """
        Args:
            defaults: Global state -> colour map
            overrides: Unit name -> (state -> colour) map
            fallback: Colour for states neither map defines
        """
        self._defaults = dict(defaults)
        self._overrides = {unit: dict(states) for unit, states in (overrides or {}).items()}
        self._fallback = fallback or Color.off()

    @classmethod
    def from_config(cls, config: AppConfig) -> "ColorResolver":
        """Build a resolver from the strip colours and per-service overrides."""
        overrides = {
            service.name: service.states_map
            for service in config.services
            if service.states_map
        }
        return cls(config.strip.colours, overrides)

    @property
    def fallback(self) -> Color:
        return self._fallback

    def resolve(self, unit: str, state: str) -> Color:
        """Colour for ``unit`` in ``state``."""
        unit_map = self._overrides.get(unit)
        if unit_map is not None and state in unit_map:
            return unit_map[state]
        return self._defaults.get(state, self._fallback)

    def table(self, unit: str, states: list[str]) -> dict[str, Color]:
        """Resolved colours for several states, e.g. for display."""
        return {state: self.resolve(unit, state) for state in states}
