"""Helpers shared by CLI commands."""

import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click

from systemd_status_leds.exceptions import format_error_for_display
from systemd_status_leds.models import AppConfig

logger = logging.getLogger(__name__)


def load_config(path: Path) -> AppConfig:
    """Load the configuration, exiting with a readable message on failure."""
    try:
        return AppConfig.load(path)
    except Exception as e:
        fail(e)


def fail(error: BaseException, log_path: Optional[Path] = None) -> NoReturn:
    """Print an error without a traceback and exit with status 1."""
    logger.debug("Command failed", exc_info=error)

    user_message, recovery_hint = format_error_for_display(error)

    click.echo("\n" + "=" * 70, err=True)
    click.echo(f"ERROR: {user_message}", err=True)
    click.echo("=" * 70, err=True)

    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)

    if log_path:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)
    click.echo("For logging options, run: systemd-status-leds --help", err=True)

    sys.exit(1)
