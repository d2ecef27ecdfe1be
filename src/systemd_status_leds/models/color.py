"""Color model for LED control."""

import re

from pydantic import BaseModel, ConfigDict, Field

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


class Color(BaseModel):
    """8-bit RGBW color.

    Colours are exchanged as hex strings with one pair of digits per channel
    in ``RRGGBBWW`` order (``RRGGBB`` for RGB strips, where white is 0).

    The model is frozen so colours can be shared between threads and used as
    dict keys.
    """

    model_config = ConfigDict(frozen=True)

    r: int = Field(default=0, ge=0, le=255, description="Red (0-255)")
    g: int = Field(default=0, ge=0, le=255, description="Green (0-255)")
    b: int = Field(default=0, ge=0, le=255, description="Blue (0-255)")
    w: int = Field(default=0, ge=0, le=255, description="White (0-255)")

    @classmethod
    def off(cls) -> "Color":
        """Create off (black) color."""
        return cls(r=0, g=0, b=0, w=0)

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """Parse a ``RRGGBBWW`` or ``RRGGBB`` hex string.

        A leading ``0x`` or ``#`` is ignored and digits are case-insensitive.

        Raises:
            ValueError: If the string is not 6 or 8 hex digits

        Example:
            >>> Color.from_hex("55002200")
            Color(r=85, g=0, b=34, w=0)
        """
        if not isinstance(value, str):
            raise ValueError(f"colour must be a hex string, got {type(value).__name__}")

        digits = value.strip()
        if digits[:2].lower() == "0x":
            digits = digits[2:]
        elif digits.startswith("#"):
            digits = digits[1:]

        if len(digits) not in (6, 8):
            raise ValueError(
                f"invalid hex colour '{value}': expected 6 or 8 hex digits, got {len(digits)}"
            )
        if not _HEX_DIGITS.fullmatch(digits):
            raise ValueError(f"invalid hex colour '{value}': only 0-9 and a-f are allowed")

        channels = bytes.fromhex(digits)

        if len(channels) == 3:
            return cls(r=channels[0], g=channels[1], b=channels[2])
        return cls(r=channels[0], g=channels[1], b=channels[2], w=channels[3])

    def to_bytes(self, channels: int = 4) -> bytes:
        """Encode for the wire: RGBW for 4 channels, RGB for 3."""
        if channels == 3:
            return bytes((self.r, self.g, self.b))
        return bytes((self.r, self.g, self.b, self.w))

    def to_hex(self) -> str:
        """Convert to a lowercase ``rrggbbww`` string.

        Example:
            >>> Color(r=255, g=128, b=64, w=32).to_hex()
            'ff804020'
        """
        return f"{self.r:02x}{self.g:02x}{self.b:02x}{self.w:02x}"
