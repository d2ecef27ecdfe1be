"""Data models for the status monitor."""

from .color import Color
from .config import AppConfig, MonitorConfig, ServiceConfig, StripConfig, default_colours
from .enums import LOAD_STATE_NOT_FOUND, ActiveState, WatchState
from .unit import UnitChanges, UnitStatus

__all__ = [
    # Enums
    "ActiveState",
    "AppConfig",
    "Color",
    "LOAD_STATE_NOT_FOUND",
    "MonitorConfig",
    "ServiceConfig",
    "StripConfig",
    "UnitChanges",
    "UnitStatus",
    "WatchState",
    "default_colours",
]
