"""Unit tests for Pydantic models."""

from pathlib import Path

import pytest

from systemd_status_leds.exceptions import ConfigFileInvalidError, ConfigValidationError
from systemd_status_leds.models import (
    ActiveState,
    AppConfig,
    Color,
    MonitorConfig,
    StripConfig,
    UnitStatus,
)


class TestColor:
    """Test Color model."""

    @pytest.mark.unit
    def test_from_hex_rgbw(self):
        """Test parsing an 8 digit colour."""
        assert Color.from_hex("55002200") == Color(r=0x55, g=0, b=0x22, w=0)
        assert Color.from_hex("01020304") == Color(r=1, g=2, b=3, w=4)

    @pytest.mark.unit
    def test_from_hex_rgb_has_no_white(self):
        """Test that 6 digit colours leave white at 0."""
        assert Color.from_hex("ff8000") == Color(r=255, g=128, b=0, w=0)

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["0x00ff0000", "0X00FF0000", "#00ff0000", "00FF0000"])
    def test_from_hex_prefixes_and_case(self, value):
        """Test that prefixes and upper case digits are accepted."""
        assert Color.from_hex(value) == Color(r=0, g=255, b=0, w=0)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value", ["", "fff", "00ff00001", "0000zz00", "0x", "00 ff 00", "00ff 0000", "0x00 ff00"]
    )
    def test_from_hex_invalid(self, value):
        """Test that bad lengths and digits are rejected."""
        with pytest.raises(ValueError):
            Color.from_hex(value)

    @pytest.mark.unit
    def test_channel_range_validation(self):
        """Test that channels must be 0-255."""
        with pytest.raises(ValueError):
            Color(r=256)

        with pytest.raises(ValueError):
            Color(w=-1)

    @pytest.mark.unit
    def test_to_hex(self):
        """Test hex output is lowercase rrggbbww."""
        assert Color(r=255, g=128, b=64, w=32).to_hex() == "ff804020"
        assert Color.from_hex("3C3C3C3C").to_hex() == "3c3c3c3c"

    @pytest.mark.unit
    def test_to_bytes(self):
        """Test wire encoding for 4 and 3 channel strips."""
        color = Color(r=1, g=2, b=3, w=4)
        assert color.to_bytes(4) == b"\x01\x02\x03\x04"
        assert color.to_bytes(3) == b"\x01\x02\x03"

    @pytest.mark.unit
    def test_off(self):
        """Test off color factory method."""
        assert Color.off() == Color(r=0, g=0, b=0, w=0)

    @pytest.mark.unit
    def test_frozen(self):
        """Test colours cannot be modified."""
        color = Color(r=1)
        with pytest.raises(ValueError):
            color.r = 2


class TestUnitStatus:
    """Test UnitStatus model."""

    @pytest.mark.unit
    def test_recognized_state(self):
        status = UnitStatus(name="a.service", load_state="loaded", active_state="failed")
        assert status.recognized_state is ActiveState.FAILED

    @pytest.mark.unit
    def test_unrecognized_state(self):
        status = UnitStatus(name="a.service", load_state="loaded", active_state="weird-state")
        assert status.recognized_state is None

    @pytest.mark.unit
    def test_equality(self):
        """Test statuses compare by value so the poller can diff them."""
        a = UnitStatus(name="a", load_state="loaded", active_state="active", sub_state="running")
        b = UnitStatus(name="a", load_state="loaded", active_state="active", sub_state="running")
        assert a == b


class TestAppConfig:
    """Test AppConfig loading and validation."""

    @pytest.mark.unit
    def test_load_valid_file(self, config_file):
        """Test loading a complete config file."""
        config = AppConfig.load(config_file)

        assert [s.name for s in config.services] == ["sshd.service", "nginx.service"]
        assert config.services[0].states_map == {"active": Color.from_hex("00ff5500")}
        assert config.services[1].states_map == {}
        assert config.strip.spidev == "0.0"
        assert config.strip.channels == 4
        assert config.strip.length == 5
        assert config.strip.frame_length == 20
        assert config.strip.colours["failed"] == Color(r=0x55, g=0, b=0x22, w=0)

    @pytest.mark.unit
    def test_leading_zero_colours_are_not_numbers(self):
        """Test colours like 00442200 keep their leading zeros."""
        config = AppConfig.from_yaml(
            "services:\n"
            "  - name: a.service\n"
            "strip:\n"
            "  colours:\n"
            "    activating: 00442200\n"
            "    inactive: 01010101\n"
        )
        assert config.strip.colours["activating"] == Color(r=0, g=0x44, b=0x22, w=0)
        assert config.strip.colours["inactive"] == Color(r=1, g=1, b=1, w=1)

    @pytest.mark.unit
    def test_numeric_fields_are_converted(self):
        """Test string scalars become ints, floats and bools."""
        config = AppConfig.from_yaml(
            "services:\n"
            "  - name: a.service\n"
            "strip:\n"
            "  length: 8\n"
            "  channels: 3\n"
            "  refresh_interval: 0.5\n"
            "monitor:\n"
            "  user: true\n"
            "  probe_interval: 2\n"
        )
        assert config.strip.length == 8
        assert config.strip.channels == 3
        assert config.strip.refresh_interval == 0.5
        assert config.monitor.user is True
        assert config.monitor.probe_interval == 2.0

    @pytest.mark.unit
    def test_defaults(self):
        """Test omitted sections fall back to defaults."""
        config = AppConfig.from_yaml("services:\n  - name: a.service\n")

        assert config.strip == StripConfig()
        assert config.monitor == MonitorConfig()
        assert config.monitor.loading == Color(r=60, g=60, b=60, w=60)
        assert config.monitor.clear_on_exit is True
        assert config.strip.colours["active"] == Color.from_hex("00ff0000")

    @pytest.mark.unit
    def test_empty_states_map(self):
        """Test an empty states_map is treated as no overrides."""
        config = AppConfig.from_yaml("services:\n  - name: a.service\n    states_map:\n")
        assert config.services[0].states_map == {}

    @pytest.mark.unit
    def test_empty_services_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            AppConfig.from_yaml("services: []\nstrip:\n  length: 5\n")
        assert "No services configured" in exc_info.value.user_message

    @pytest.mark.unit
    def test_more_services_than_leds_rejected(self):
        text = "services:\n" + "".join(f"  - name: u{i}.service\n" for i in range(3))
        text += "strip:\n  length: 2\n"

        with pytest.raises(ConfigValidationError) as exc_info:
            AppConfig.from_yaml(text)
        assert "More services (3) than LEDs (2)" in exc_info.value.user_message

    @pytest.mark.unit
    def test_services_equal_to_leds_accepted(self):
        text = "services:\n  - name: a.service\n  - name: b.service\nstrip:\n  length: 2\n"
        assert len(AppConfig.from_yaml(text).services) == 2

    @pytest.mark.unit
    def test_duplicate_services_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            AppConfig.from_yaml("services:\n  - name: a.service\n  - name: a.service\n")
        assert "more than once" in exc_info.value.user_message

    @pytest.mark.unit
    def test_invalid_colour_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            AppConfig.from_yaml(
                "services:\n  - name: a.service\nstrip:\n  colours:\n    failed: nothex00\n"
            )
        assert exc_info.value.field == "strip.colours"

    @pytest.mark.unit
    def test_colour_with_spaces_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            AppConfig.from_yaml(
                "services:\n  - name: a.service\nstrip:\n  colours:\n    active: \"00 ff 00\"\n"
            )
        assert exc_info.value.field == "strip.colours"

    @pytest.mark.unit
    def test_invalid_override_colour_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            AppConfig.from_yaml(
                "services:\n  - name: a.service\n    states_map:\n      active: 123\n"
            )
        assert "states_map" in exc_info.value.field

    @pytest.mark.unit
    def test_invalid_channel_count_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            AppConfig.from_yaml("services:\n  - name: a.service\nstrip:\n  channels: 5\n")
        assert exc_info.value.field == "strip.channels"

    @pytest.mark.unit
    def test_non_positive_interval_rejected(self):
        with pytest.raises(ConfigValidationError):
            AppConfig.from_yaml("services:\n  - name: a.service\nmonitor:\n  probe_interval: 0\n")

    @pytest.mark.unit
    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.yaml"
        with pytest.raises(ConfigFileInvalidError) as exc_info:
            AppConfig.load(path)
        assert exc_info.value.user_message == "Configuration file not found"
        assert not path.exists()

    @pytest.mark.unit
    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("   \n")
        with pytest.raises(ConfigFileInvalidError) as exc_info:
            AppConfig.load(path)
        assert exc_info.value.user_message == "Configuration file is empty"

    @pytest.mark.unit
    def test_yaml_syntax_error(self):
        with pytest.raises(ConfigFileInvalidError) as exc_info:
            AppConfig.from_yaml("services: [a.service\nstrip: {")
        assert exc_info.value.user_message == "Configuration file has invalid syntax"

    @pytest.mark.unit
    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigFileInvalidError):
            AppConfig.from_yaml("- a.service\n- b.service\n")

    @pytest.mark.unit
    def test_default(self):
        config = AppConfig.default()
        assert len(config.services) == 1
        assert config.strip.length == 5

    @pytest.mark.unit
    def test_yaml_round_trip(self, config_file):
        """Test to_yaml output loads back to the same configuration."""
        config = AppConfig.load(config_file)
        assert AppConfig.from_yaml(config.to_yaml()) == config

    @pytest.mark.unit
    def test_example_config_is_valid(self):
        """Test the shipped example configuration loads."""
        path = Path(__file__).parent.parent / "config.example.yaml"
        config = AppConfig.load(path)
        assert [s.name for s in config.services] == ["sshd.service", "nginx.service", "docker.service"]
        assert config.monitor.loading == Color(r=60, g=60, b=60, w=60)
