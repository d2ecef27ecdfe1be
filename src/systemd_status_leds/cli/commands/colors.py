"""Colors command - prints the resolved colour table."""

import click

from systemd_status_leds.core import ColorResolver
from systemd_status_leds.models import ActiveState

from .common import load_config


@click.command()
@click.option(
    '--service',
    '-s',
    'services',
    multiple=True,
    help='Only show these services (repeatable)'
)
@click.pass_obj
def colors(obj: dict, services: tuple[str, ...]):
    """Show which colour each service gets in each state."""
    config = load_config(obj["config_path"])
    resolver = ColorResolver.from_config(config)
    states = [state.value for state in ActiveState]

    selected = [s for s in config.services if not services or s.name in services]
    if not selected:
        click.echo("No matching services.")
        return

    for service in selected:
        click.echo(f"{service.name}:")
        for state, colour in resolver.table(service.name, states).items():
            marker = " *" if state in service.states_map else ""
            click.echo(f"  {state:<13} {colour.to_hex()}{marker}")

    if any(service.states_map for service in selected):
        click.echo("\n* per-service override")
