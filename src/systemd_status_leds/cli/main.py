"""Main CLI entry point."""

import logging
import logging.handlers
import signal
from pathlib import Path
from typing import Optional

import click

from systemd_status_leds import __version__
from systemd_status_leds.models.config import DEFAULT_CONFIG_PATH

from .commands import colors, probe, validate

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Handlers installed by setup_logging, replaced on each call
_handlers: list[logging.Handler] = []


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Optional[Path]:
    """
    Configure logging for the application.

    Messages always go to stderr. A rotating log file is added when
    ``log_file`` is given, or in debug mode.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, log at DEBUG and also to ./systemd-status-leds-debug.log
        log_file: Log file path (optional)
        log_level: Level for the log file (DEBUG/INFO/WARNING/ERROR)

    Returns:
        Path of the log file, if one is written
    """
    if debug or verbose >= 2:
        console_level = logging.DEBUG
    elif verbose == 1:
        console_level = logging.INFO
    else:
        console_level = logging.WARNING

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    root_logger.addHandler(console_handler)
    _handlers.append(console_handler)
    root_level = console_level

    if debug and not log_file:
        log_path: Optional[Path] = Path.cwd() / "systemd-status-leds-debug.log"
        file_level = logging.DEBUG
    elif log_file:
        log_path = log_file
        file_level = getattr(logging, log_level.upper())
    else:
        log_path = None
        file_level = console_level

    if log_path:
        # Keeps last 5 files, max 10MB each
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        _handlers.append(file_handler)
        root_level = min(root_level, file_level)

    root_logger.setLevel(root_level)

    logger.info(
        f"Logging configured: level={logging.getLevelName(console_level)}, "
        f"file={log_path or 'none'}"
    )
    return log_path


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version=__version__, prog_name="systemd-status-leds")
@click.option(
    '--config',
    '-c',
    'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help='YAML configuration file'
)
@click.option(
    '--dry-run',
    is_flag=True,
    help='Log frames instead of writing to the SPI device (use with -v)'
)
@click.option(
    '--user',
    is_flag=True,
    help='Watch the per-user service manager (systemctl --user)'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./systemd-status-leds-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Also log to this file (rotated at 10MB)'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    ctx,
    config_path: Path,
    dry_run: bool,
    user: bool,
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    systemd-status-leds - show systemd unit states on an RGBW LED strip.

    Each configured service owns one LED. The LED colour follows the
    unit's active state (active, inactive, reloading, failed, activating,
    deactivating) using the colours from the configuration file.

    \b
    Examples:
      # Run the monitor with ./config.yaml
      systemd-status-leds

      # Use another config and the user service manager
      systemd-status-leds -c /etc/status-leds.yaml --user

      # Run without hardware, printing frames
      systemd-status-leds --dry-run -v

      # Check a configuration file
      systemd-status-leds validate

      # Show current unit states once
      systemd-status-leds probe
    """
    log_path = setup_logging(verbose, debug, log_file, log_level)
    ctx.obj = {"config_path": config_path, "user": user, "log_path": log_path}

    # If a subcommand was invoked, don't run the monitor
    if ctx.invoked_subcommand is not None:
        return

    run_monitor(config_path, dry_run=dry_run, user=user, log_path=log_path)


def run_monitor(config_path: Path, dry_run: bool = False, user: bool = False,
                log_path: Optional[Path] = None) -> None:
    """Load the configuration and run the status monitor until interrupted."""
    from systemd_status_leds.bus import SystemdBus
    from systemd_status_leds.core import StatusEngine
    from systemd_status_leds.devices import LoggingDevice, SpiDevice
    from systemd_status_leds.exceptions import ErrorContext
    from systemd_status_leds.models import AppConfig

    from .commands.common import fail

    logger.info("Starting systemd-status-leds")

    device = None
    engine = None
    previous_sigterm = signal.getsignal(signal.SIGTERM)
    try:
        config = AppConfig.load(config_path)
        strip = config.strip

        bus = SystemdBus(user=user or config.monitor.user)
        with ErrorContext("connect to systemd", logger_instance=logger):
            bus.ensure_running()

        with ErrorContext("open output device", logger_instance=logger):
            if dry_run:
                device = LoggingDevice(strip.frame_length, strip.channels)
            else:
                device = SpiDevice(strip.spidev, strip.frame_length, strip.hertz)

        engine = StatusEngine(config, bus, device)

        # SIGTERM (systemctl stop) ends the run like Ctrl+C
        signal.signal(signal.SIGTERM, lambda signum, frame: engine.request_stop())

        engine.start()
        engine.wait()
        logger.info("Stop requested")

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        click.echo("\nShutting down...", err=True)
    except click.Abort:
        raise
    except Exception as e:
        logger.exception("Error running status monitor")
        fail(e, log_path)
    finally:
        signal.signal(signal.SIGTERM, previous_sigterm)
        if engine is not None:
            engine.stop()
        if device is not None:
            device.close()


# Register utility commands
cli.add_command(validate)
cli.add_command(probe)
cli.add_command(colors)

if __name__ == "__main__":
    cli()
