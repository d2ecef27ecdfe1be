"""Probe command - one-shot query of every configured unit."""

import logging

import click

from systemd_status_leds.bus import SystemdBus
from systemd_status_leds.core import ColorResolver
from systemd_status_leds.exceptions import BusError
from systemd_status_leds.models import LOAD_STATE_NOT_FOUND

from .common import fail, load_config

logger = logging.getLogger(__name__)


@click.command()
@click.pass_obj
def probe(obj: dict):
    """
    Show the current state of every configured unit and the colour it maps to.

    Queries the service manager once and exits; the LED strip is not used.
    """
    config = load_config(obj["config_path"])
    bus = SystemdBus(user=obj["user"] or config.monitor.user)
    resolver = ColorResolver.from_config(config)

    try:
        bus.ensure_running()
        present = []
        for index, service in enumerate(config.services):
            load_state = bus.get_load_state(service.name)
            if load_state == LOAD_STATE_NOT_FOUND:
                click.echo(f"  [{index}] {service.name}: not found")
            else:
                present.append(service.name)

        statuses = bus.get_unit_statuses(present) if present else {}
    except BusError as e:
        fail(e)

    for index, service in enumerate(config.services):
        status = statuses.get(service.name)
        if status is None:
            continue

        state = status.recognized_state
        if state is None:
            colour = "unchanged (unrecognized state)"
        else:
            colour = resolver.resolve(service.name, state.value).to_hex()
        click.echo(f"  [{index}] {service.name}: {status.active_state} ({status.sub_state}) -> {colour}")
