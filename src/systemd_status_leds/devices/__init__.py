"""LED strip output devices."""

from .protocols import OutputDevice
from .spi import SpiDevice, spidev_path
from .virtual import LoggingDevice, MemoryDevice

__all__ = [
    "LoggingDevice",
    "MemoryDevice",
    "OutputDevice",
    "SpiDevice",
    "spidev_path",
]
