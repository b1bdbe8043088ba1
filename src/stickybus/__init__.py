"""In-process publish/subscribe event bus with sticky events."""

from stickybus.bus import EventBus, get_default_bus
from stickybus.config import BusSettings, get_bus_settings
from stickybus.contracts.events import NoSubscriberEvent
from stickybus.contracts.models import Binding, Subscription
from stickybus.contracts.types import DeliveryMode
from stickybus.discovery import bindings_for, subscribe
from stickybus.errors import EventBusError, ExecutorShutdownError, TypeMismatchError

__all__ = [
    "EventBus",
    "get_default_bus",
    "BusSettings",
    "get_bus_settings",
    "NoSubscriberEvent",
    "Binding",
    "Subscription",
    "DeliveryMode",
    "bindings_for",
    "subscribe",
    "EventBusError",
    "ExecutorShutdownError",
    "TypeMismatchError",
]
