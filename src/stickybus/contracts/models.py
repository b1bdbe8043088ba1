"""Binding and subscription records held by the registry."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from stickybus.contracts.types import DeliveryMode
from stickybus.errors import EventBusError, TypeMismatchError
from stickybus.observability.logging import safe_repr

Callback = Callable[[Any], Any]


def callback_name(callback: Callback) -> str:
    return getattr(callback, "__qualname__", None) or safe_repr(callback)


@dataclass(slots=True)
class Binding:
    """A declared (event type, delivery mode, callback) capability.

    Bindings are built by the subscriber itself, either directly or through
    ``stickybus.discovery``; the bus never inspects subscriber objects.
    """

    event_type: type
    mode: DeliveryMode
    callback: Callback

    def __post_init__(self) -> None:
        if not isinstance(self.event_type, type):
            raise TypeMismatchError(type, self.event_type)
        if not callable(self.callback):
            raise EventBusError(f"Callback must be callable, got {type(self.callback)}.")
        self.mode = DeliveryMode(self.mode)


@dataclass(slots=True, eq=False)
class Subscription:
    """Registry entry for one subscriber callback.

    Two subscriptions are equal when they share the same subscriber object and
    equal callbacks. The delivery mode does not take part in equality, so a
    subscriber is removed from whichever partition it was registered under.
    """

    subscriber: Any
    callback: Callback
    mode: DeliveryMode

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Subscription):
            return NotImplemented
        return self.subscriber is other.subscriber and self.callback == other.callback

    def __hash__(self) -> int:
        return hash(id(self.subscriber))

    def matches(self, subscriber: Any) -> bool:
        return self.subscriber is subscriber

    @property
    def name(self) -> str:
        return callback_name(self.callback)
