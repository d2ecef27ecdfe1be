"""
Custom exception hierarchy for systemd-status-leds.

## Exception Hierarchy

```
StatusLedsError (base)
├── ConfigurationError
│   ├── ConfigFileInvalidError
│   └── ConfigValidationError
├── BusError
│   └── BusUnavailableError
├── OutputDeviceError
│   └── OutputDeviceNotFoundError
└── PixelOwnershipError
```

All custom exceptions inherit from `StatusLedsError`, which provides:

- `user_message`: Human-friendly message for display to users
- `technical_message`: Detailed message for logging
- `recoverable`: Whether the error can be recovered from
- `recovery_hint`: Optional suggestion for how to fix the issue

Only startup failures are fatal. A `BusError` or `OutputDeviceError` raised
while the monitor is running is logged and the affected loop carries on.
"""

from .base import PixelOwnershipError, StatusLedsError
from .bus import BusError, BusUnavailableError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .device import OutputDeviceError, OutputDeviceNotFoundError
from .handlers import ErrorContext, format_error_for_display, wrap_pydantic_error

__all__ = [
    # Base
    "PixelOwnershipError",
    "StatusLedsError",
    # Bus
    "BusError",
    "BusUnavailableError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Device
    "OutputDeviceError",
    "OutputDeviceNotFoundError",
    # Handlers
    "ErrorContext",
    "format_error_for_display",
    "wrap_pydantic_error",
]
