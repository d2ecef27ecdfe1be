"""Pytest fixtures for tests."""

import threading
import time
from typing import Callable, Optional

import pytest

from systemd_status_leds.bus import SubscriptionDispatcher
from systemd_status_leds.core import ColorResolver, PixelBuffer
from systemd_status_leds.devices import MemoryDevice
from systemd_status_leds.exceptions import BusError
from systemd_status_leds.models import (
    LOAD_STATE_NOT_FOUND,
    AppConfig,
    Color,
    ServiceConfig,
    StripConfig,
    UnitStatus,
    default_colours,
)


class FakeBus:
    """In-memory UnitBus. Units not in ``units`` report LoadState not-found."""

    def __init__(self):
        self._lock = threading.Lock()
        self.units: dict[str, UnitStatus] = {}
        self.probe_error: Optional[BusError] = None
        self.status_error: Optional[BusError] = None
        self.probes: list[str] = []

    def set_state(self, unit: str, active_state: str, sub_state: str = "running") -> None:
        with self._lock:
            self.units[unit] = UnitStatus(
                name=unit, load_state="loaded", active_state=active_state, sub_state=sub_state
            )

    def remove_unit(self, unit: str) -> None:
        with self._lock:
            self.units.pop(unit, None)

    def is_running(self) -> bool:
        return True

    def get_load_state(self, unit: str) -> str:
        with self._lock:
            self.probes.append(unit)
            if self.probe_error is not None:
                raise self.probe_error
            return "loaded" if unit in self.units else LOAD_STATE_NOT_FOUND

    def get_unit_statuses(self, units: list[str]) -> dict[str, UnitStatus]:
        with self._lock:
            if self.status_error is not None:
                raise self.status_error
            return {
                unit: self.units.get(unit, UnitStatus(name=unit, load_state=LOAD_STATE_NOT_FOUND))
                for unit in units
            }


def wait_for(condition: Callable[[], bool], timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll ``condition`` until it is true or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(interval)
    return condition()


@pytest.fixture
def fake_bus():
    """Create an in-memory service manager."""
    return FakeBus()


@pytest.fixture
def dispatcher(fake_bus):
    """Create a dispatcher over the fake bus (not started)."""
    dispatcher = SubscriptionDispatcher(fake_bus, poll_interval=0.01)
    yield dispatcher
    dispatcher.close()


@pytest.fixture
def buffer():
    """Create a 5 LED RGBW buffer."""
    return PixelBuffer(5, 4)


@pytest.fixture
def resolver():
    """Create a resolver with the default colours."""
    return ColorResolver(default_colours())


@pytest.fixture
def memory_device(buffer):
    """Create a recording device sized for the buffer."""
    return MemoryDevice(len(buffer))


@pytest.fixture
def two_unit_config():
    """Config with units A and B and fast timings."""
    return AppConfig(
        services=[ServiceConfig(name="a.service"), ServiceConfig(name="b.service")],
        strip=StripConfig(length=5, refresh_interval=0.02),
        monitor={"probe_interval": 0.02, "poll_interval": 0.01, "loading": Color(r=60, g=60, b=60, w=60)},
    )


@pytest.fixture
def config_file(tmp_path):
    """Write a valid config file and return its path."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "services:\n"
        "  - name: sshd.service\n"
        "    states_map:\n"
        "      active: 00ff5500\n"
        "  - name: nginx.service\n"
        "strip:\n"
        "  spidev: \"0.0\"\n"
        "  channels: 4\n"
        "  length: 5\n"
        "  colours:\n"
        "    active: 00ff0000\n"
        "    inactive: 01010101\n"
        "    reloading: 11551100\n"
        "    failed: 55002200\n"
        "    activating: 00442200\n"
        "    deactivating: 22440000\n"
    )
    return path
