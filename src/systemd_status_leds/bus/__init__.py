"""Service manager access and change fan-out."""

from .dispatcher import Message, Subscription, SubscriptionDispatcher
from .protocols import UnitBus
from .subscription import SubscriptionSet
from .systemd import SystemdBus, parse_systemctl_output

__all__ = [
    "Message",
    "Subscription",
    "SubscriptionDispatcher",
    "SubscriptionSet",
    "SystemdBus",
    "UnitBus",
    "parse_systemctl_output",
]
