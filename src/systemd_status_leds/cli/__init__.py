"""Command-line interface."""

from .main import cli, run_monitor, setup_logging

__all__ = ["cli", "run_monitor", "setup_logging"]
