"""Validate command - checks a configuration file without touching hardware."""

import click

from .common import load_config


@click.command()
@click.pass_obj
def validate(obj: dict):
    """Check the configuration file and summarise it."""
    config_path = obj["config_path"]
    config = load_config(config_path)

    strip = config.strip
    click.echo(f"Configuration OK: {config_path}")
    click.echo(
        f"  Strip: {strip.length} LEDs, {strip.channels} channels, "
        f"/dev/spidev{strip.spidev}, refresh every {strip.refresh_interval}s"
    )
    click.echo(f"  Services ({len(config.services)}):")
    for index, service in enumerate(config.services):
        overrides = f" ({len(service.states_map)} colour overrides)" if service.states_map else ""
        click.echo(f"    [{index}] {service.name}{overrides}")
