"""systemd-status-leds: show systemd unit states on an addressable RGBW LED strip."""

__version__ = "0.1.0"
