"""Explicit handler declarations that build bindings for a subscriber.

Only methods marked with :func:`subscribe` become bindings; method names and
signatures are never inspected::

    class Display:
        @subscribe(Ping)
        def show(self, event: Ping) -> None: ...

        @subscribe(Ping, DeliveryMode.BACKGROUND_QUEUED)
        def persist(self, event: Ping) -> None: ...

    bus.register(display, bindings_for(display))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import logging
from typing import Any, Protocol, TypeVar, runtime_checkable

from stickybus.contracts.models import Binding
from stickybus.contracts.types import DeliveryMode

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_MARKER = "__stickybus_bindings__"


@runtime_checkable
class Subscriber(Protocol):
    """An object that declares its own bindings."""

    def bindings(self) -> Iterable[Binding]:
        """Return the bindings to register for this object."""


def subscribe(
    event_type: type, mode: DeliveryMode | str = DeliveryMode.IMMEDIATE
) -> Callable[[F], F]:
    """Mark a method as the handler of ``event_type`` in ``mode``; stackable."""
    resolved = DeliveryMode(mode)

    def decorator(fn: F) -> F:
        declared: list[tuple[type, DeliveryMode]] = list(getattr(fn, _MARKER, ()))
        # decorators apply bottom-up; keep the order they are written in
        declared.insert(0, (event_type, resolved))
        setattr(fn, _MARKER, tuple(declared))
        return fn

    return decorator


def bindings_for(subscriber: Any) -> list[Binding]:
    """Build bindings for ``subscriber`` from its declared handlers."""
    if isinstance(subscriber, Subscriber):
        return list(subscriber.bindings())

    bindings: list[Binding] = []
    seen: set[str] = set()
    for klass in reversed(type(subscriber).__mro__):
        for name, attr in vars(klass).items():
            if name in seen or not hasattr(attr, _MARKER):
                continue
            seen.add(name)
            # resolve through the instance so overrides in subclasses win
            method = getattr(subscriber, name)
            for event_type, mode in getattr(method, _MARKER, ()):
                bindings.append(Binding(event_type, mode, method))
    logger.debug(
        "discovery.bindings",
        extra={"extra": {"subscriber": type(subscriber).__qualname__, "count": len(bindings)}},
    )
    return bindings
