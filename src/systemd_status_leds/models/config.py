"""Application configuration model.

The configuration file is YAML:

```yaml
services:
  - name: sshd.service
    states_map:
      active: 00ff5500
strip:
  spidev: "0.0"
  channels: 4
  length: 5
  colours:
    active: 00ff0000
    failed: 55002200
```

Scalars are read as plain strings (``yaml.BaseLoader``) and converted by
pydantic. Colour values such as ``00442200`` would otherwise be read by YAML
as octal integers and lose their leading zeros.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_serializer, field_validator, model_validator

from systemd_status_leds.exceptions import ConfigFileInvalidError, wrap_pydantic_error

from .color import Color
from .enums import ActiveState

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")


def default_colours() -> dict[str, Color]:
    """Global state colours used when the configuration does not set them."""
    return {
        ActiveState.ACTIVE.value: Color.from_hex("00ff0000"),
        ActiveState.INACTIVE.value: Color.from_hex("01010101"),
        ActiveState.RELOADING.value: Color.from_hex("11551100"),
        ActiveState.FAILED.value: Color.from_hex("55002200"),
        ActiveState.ACTIVATING.value: Color.from_hex("00442200"),
        ActiveState.DEACTIVATING.value: Color.from_hex("22440000"),
    }


def _parse_colour(value: Any) -> Any:
    if isinstance(value, str):
        return Color.from_hex(value)
    return value


def _parse_colour_map(value: Any) -> Any:
    # BaseLoader turns an empty mapping ("states_map:") into ""
    if value is None or value == "":
        return {}
    if isinstance(value, dict):
        return {str(state): _parse_colour(colour) for state, colour in value.items()}
    return value


def _dump_colour_map(colours: dict[str, Color]) -> dict[str, str]:
    return {state: colour.to_hex() for state, colour in colours.items()}


class ServiceConfig(BaseModel):
    """A systemd unit to show on the strip."""

    name: str = Field(min_length=1, description="Unit name, e.g. 'sshd.service'")
    states_map: dict[str, Color] = Field(
        default_factory=dict,
        description="Per-unit colour overrides keyed by active state",
    )

    @field_validator("states_map", mode="before")
    @classmethod
    def parse_states_map(cls, v: Any) -> Any:
        return _parse_colour_map(v)

    @field_serializer("states_map")
    def serialize_states_map(self, colours: dict[str, Color]) -> dict[str, str]:
        return _dump_colour_map(colours)


class StripConfig(BaseModel):
    """LED strip geometry and global colours."""

    spidev: str = Field(default="0.0", description="SPI bus and chip select, opened as /dev/spidev<spidev>")
    channels: int = Field(default=4, description="Colour channels per LED: 4 for RGBW, 3 for RGB")
    length: int = Field(default=5, ge=1, description="Number of LEDs on the strip")
    hertz: int = Field(default=1200, gt=0, description="SPI clock frequency in Hz")
    refresh_interval: float = Field(
        default=5.0, gt=0, description="Seconds between pushes of the pixel buffer to the strip"
    )
    colours: dict[str, Color] = Field(
        default_factory=default_colours,
        description="Global colours keyed by active state",
    )

    @field_validator("channels")
    @classmethod
    def validate_channels(cls, v: int) -> int:
        if v not in (3, 4):
            raise ValueError("channels must be 3 (RGB) or 4 (RGBW)")
        return v

    @field_validator("colours", mode="before")
    @classmethod
    def parse_colours(cls, v: Any) -> Any:
        return _parse_colour_map(v)

    @field_serializer("colours")
    def serialize_colours(self, colours: dict[str, Color]) -> dict[str, str]:
        return _dump_colour_map(colours)

    @property
    def frame_length(self) -> int:
        """Bytes per frame sent to the device."""
        return self.length * self.channels


class MonitorConfig(BaseModel):
    """Timing and behaviour of the status monitor."""

    probe_interval: float = Field(
        default=5.0, gt=0, description="Seconds to wait before probing a missing unit again"
    )
    poll_interval: float = Field(
        default=1.0, gt=0, description="Seconds between state polls of subscribed units"
    )
    user: bool = Field(default=False, description="Watch the per-user service manager instead of the system one")
    loading: Color = Field(
        default_factory=lambda: Color(r=60, g=60, b=60, w=60),
        description="Colour shown on every monitored pixel until its unit reports a state",
    )
    clear_on_exit: bool = Field(default=True, description="Turn the strip off on shutdown")

    @field_validator("loading", mode="before")
    @classmethod
    def parse_loading(cls, v: Any) -> Any:
        return _parse_colour(v)

    @field_serializer("loading")
    def serialize_loading(self, colour: Color) -> str:
        return colour.to_hex()


class AppConfig(BaseModel):
    """Application configuration."""

    services: list[ServiceConfig] = Field(default_factory=list, description="Units to monitor, one per pixel")
    strip: StripConfig = Field(default_factory=StripConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)

    @field_validator("services", mode="before")
    @classmethod
    def parse_services(cls, v: Any) -> Any:
        if v is None or v == "":
            return []
        return v

    @model_validator(mode="after")
    def validate_layout(self) -> "AppConfig":
        if not self.services:
            raise ValueError("No services configured")

        if len(self.services) > self.strip.length:
            raise ValueError(
                f"More services ({len(self.services)}) than LEDs ({self.strip.length})"
            )

        seen: set[str] = set()
        for service in self.services:
            if service.name in seen:
                raise ValueError(f"Service '{service.name}' is listed more than once")
            seen.add(service.name)

        return self

    @classmethod
    def default(cls) -> "AppConfig":
        """Configuration with a single example service and default strip."""
        return cls(services=[ServiceConfig(name="example.service")])

    @classmethod
    def from_yaml(cls, text: str, source: str = "<string>") -> "AppConfig":
        """
        Parse and validate configuration from YAML text.

        Args:
            text: YAML document
            source: Where the text came from, used in error messages

        Raises:
            ConfigFileInvalidError: If the YAML is empty or malformed
            ConfigValidationError: If values fail validation
        """
        if not text or not text.strip():
            raise ConfigFileInvalidError(source, "File is empty")

        try:
            data = yaml.load(text, Loader=yaml.BaseLoader)
        except yaml.YAMLError as e:
            raise ConfigFileInvalidError(source, str(e)) from e

        if not isinstance(data, dict):
            raise ConfigFileInvalidError(source, "Top level must be a mapping with 'services' and 'strip'")

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            logger.error(f"Validation error loading configuration from {source}: {e}")
            raise wrap_pydantic_error(e, source) from e

        logger.debug(f"Loaded configuration from {source}: {len(config.services)} services")
        return config

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppConfig":
        """
        Load configuration from a YAML file.

        Args:
            path: Config file path (defaults to ./config.yaml)

        Raises:
            ConfigFileInvalidError: If the file is missing, unreadable or malformed
            ConfigValidationError: If values fail validation
        """
        if path is None:
            path = DEFAULT_CONFIG_PATH

        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigFileInvalidError(str(path), "File not found") from e
        except OSError as e:
            raise ConfigFileInvalidError(str(path), f"Cannot read file: {e}") from e

        return cls.from_yaml(text, source=str(path))

    def to_yaml(self) -> str:
        """Serialize to YAML with colours as hex strings."""
        return yaml.safe_dump(self.model_dump(), sort_keys=False)
