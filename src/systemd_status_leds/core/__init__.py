"""Core status-monitoring engine."""

from .engine import StatusEngine
from .pixel_buffer import PixelBuffer, PixelSlot
from .refresh import RefreshLoop
from .resolver import ColorResolver
from .watcher import UnitWatcher

__all__ = [
    "ColorResolver",
    "PixelBuffer",
    "PixelSlot",
    "RefreshLoop",
    "StatusEngine",
    "UnitWatcher",
]
