"""Allow ``python -m systemd_status_leds``."""

from systemd_status_leds.cli.main import cli

if __name__ == "__main__":
    cli()
