"""systemd access through the ``systemctl`` command line tool."""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from systemd_status_leds.exceptions import BusError, BusUnavailableError
from systemd_status_leds.models import UnitStatus

logger = logging.getLogger(__name__)

# Exists only when the host was booted with systemd (sd_booted())
SYSTEMD_RUNTIME_DIR = Path("/run/systemd/system")

STATUS_PROPERTIES = ("Id", "LoadState", "ActiveState", "SubState")


def parse_systemctl_output(stdout: str) -> list[dict[str, str]]:
    """
    Parse ``systemctl show`` output into one property dict per unit.

    ``systemctl show`` prints ``KEY=VALUE`` lines, with a blank line between
    units when several are requested.

    Args:
        stdout: Output from systemctl show

    Returns:
        List of property dicts, in the order the units were requested
    """
    blocks: list[dict[str, str]] = []
    current: dict[str, str] = {}

    for line in stdout.split("\n"):
        if not line.strip():
            if current:
                blocks.append(current)
                current = {}
            continue
        if "=" in line:
            key, value = line.split("=", 1)
            current[key] = value

    if current:
        blocks.append(current)

    return blocks


class SystemdBus:
    """
    Queries unit state from systemd by running ``systemctl show``.

    Each query is a short-lived subprocess with a timeout, so one slow call
    cannot block a watcher forever.
    """

    def __init__(self, user: bool = False, systemctl: str = "systemctl", timeout: float = 5.0):
        """
        Args:
            user: Talk to the per-user service manager (``systemctl --user``)
            systemctl: Name or path of the systemctl binary
            timeout: Seconds before a single query is abandoned
        """
        self._user = user
        self._systemctl = systemctl
        self._timeout = timeout

    def is_running(self) -> bool:
        """Check that the host runs systemd and systemctl is available."""
        if not SYSTEMD_RUNTIME_DIR.is_dir():
            logger.warning(f"{SYSTEMD_RUNTIME_DIR} does not exist, host was not booted with systemd")
            return False
        if shutil.which(self._systemctl) is None:
            logger.warning(f"'{self._systemctl}' not found on PATH")
            return False
        return True

    def ensure_running(self) -> None:
        """
        Raises:
            BusUnavailableError: If systemd cannot be used
        """
        if not self.is_running():
            raise BusUnavailableError("systemd is not running or systemctl is missing")

    def get_load_state(self, unit: str) -> str:
        stdout = self._run(["show", unit, "-p", "LoadState", "--no-pager"], unit=unit)
        blocks = parse_systemctl_output(stdout)
        if not blocks or "LoadState" not in blocks[0]:
            raise BusError("systemctl returned no LoadState", unit=unit)

        load_state = blocks[0]["LoadState"]
        logger.debug(f"Unit '{unit}' LoadState={load_state}")
        return load_state

    def get_unit_statuses(self, units: list[str]) -> dict[str, UnitStatus]:
        if not units:
            return {}

        stdout = self._run(
            ["show", *units, "-p", ",".join(STATUS_PROPERTIES), "--no-pager"]
        )
        blocks = parse_systemctl_output(stdout)
        if len(blocks) != len(units):
            raise BusError(
                f"systemctl returned {len(blocks)} status blocks for {len(units)} units"
            )

        # Blocks come back in request order; Id may name an alias target instead
        statuses = {}
        for unit, props in zip(units, blocks):
            statuses[unit] = UnitStatus(
                name=unit,
                load_state=props.get("LoadState", ""),
                active_state=props.get("ActiveState", ""),
                sub_state=props.get("SubState", ""),
            )
        return statuses

    def _run(self, args: list[str], unit: Optional[str] = None) -> str:
        cmd = [self._systemctl]
        if self._user:
            cmd.append("--user")
        cmd.extend(args)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise BusError(f"systemctl timed out after {self._timeout}s", unit=unit) from e
        except OSError as e:
            raise BusError("Failed to run systemctl", unit=unit, original_error=str(e)) from e

        if result.returncode != 0:
            raise BusError(
                f"systemctl exited with status {result.returncode}",
                unit=unit,
                original_error=result.stderr.strip(),
            )

        return result.stdout
