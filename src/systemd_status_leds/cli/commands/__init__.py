"""CLI commands for systemd-status-leds."""

from .colors import colors
from .probe import probe
from .validate import validate

__all__ = ["colors", "probe", "validate"]
