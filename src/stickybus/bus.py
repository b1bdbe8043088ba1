"""Public event bus facade: posting, registration and sticky lookups."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from threading import Lock
from types import TracebackType
from typing import Any, TypeVar

from stickybus.config import BusSettings, get_bus_settings
from stickybus.contracts.models import Binding, Callback, Subscription
from stickybus.contracts.types import DeliveryMode
from stickybus.dispatch.dispatcher import Dispatcher, invoke
from stickybus.dispatch.executor import BackgroundExecutor
from stickybus.errors import TypeMismatchError
from stickybus.observability.logging import safe_repr
from stickybus.registry.sticky import StickyEventStore
from stickybus.registry.subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")

BindingLike = Binding | tuple[type, DeliveryMode | str, Callback]


class EventBus:
    """In-process publish/subscribe bus with sticky event caching.

    Subscribers declare their bindings explicitly; ``stickybus.discovery``
    can build them from decorated methods.
    """

    def __init__(
        self,
        settings: BusSettings | None = None,
        executor: BackgroundExecutor | None = None,
    ) -> None:
        self.settings = settings or get_bus_settings()
        self._executor = executor or BackgroundExecutor(
            keepalive_seconds=self.settings.executor_keepalive_seconds,
            thread_name_prefix=self.settings.thread_name_prefix,
        )
        self._registry = SubscriptionRegistry()
        self._sticky_events = StickyEventStore()
        self._dispatcher = Dispatcher(self, self._registry, self._sticky_events, self._executor)

    def post(self, event: Any) -> None:
        """Deliver ``event`` to every subscription registered for its type."""
        self._dispatcher.post(event, sticky=False)

    def post_sticky(self, event: Any) -> None:
        """Cache ``event`` as the latest of its type, then deliver it like ``post``."""
        self._dispatcher.post(event, sticky=True)

    def register(self, subscriber: Any, bindings: Iterable[BindingLike]) -> int:
        """Register the subscriber's bindings; returns how many were added."""
        return self._register(subscriber, bindings, sticky=False)

    def register_sticky(self, subscriber: Any, bindings: Iterable[BindingLike]) -> int:
        """Register bindings and replay the cached sticky event of each bound type."""
        return self._register(subscriber, bindings, sticky=True)

    def subscribe(
        self,
        event_type: type,
        callback: Callback,
        mode: DeliveryMode | str = DeliveryMode.IMMEDIATE,
        *,
        subscriber: Any = None,
        sticky: bool = False,
    ) -> Any:
        """Register a single callback; returns the subscriber identity to unregister with.

        The callback itself is the subscriber unless one is given.
        """
        owner = callback if subscriber is None else subscriber
        self._register(owner, [Binding(event_type, mode, callback)], sticky=sticky)
        return owner

    def unregister(self, subscriber: Any) -> int:
        """Remove all of the subscriber's bindings; unknown subscribers are a no-op."""
        removed = self._registry.remove_subscriptions(subscriber)
        logger.info(
            "subscriber.unregistered",
            extra={"extra": {"subscriber": safe_repr(subscriber), "removed": removed}},
        )
        return removed

    def get_sticky_event(self, event_type: type[T]) -> T | None:
        return self._sticky_events.get(event_type)

    def has_subscribers(self, event_type: type) -> bool:
        return self._registry.has_subscriptions(event_type)

    def shutdown(self, wait: bool = True, timeout: float | None = None) -> None:
        self._executor.shutdown(wait=wait, timeout=timeout)

    def __enter__(self) -> EventBus:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()

    def _register(self, subscriber: Any, bindings: Iterable[BindingLike], sticky: bool) -> int:
        # validate everything first so a bad element never leaves a partial registration
        resolved = [_as_binding(item) for item in bindings]
        added = 0
        for binding in resolved:
            subscription = Subscription(subscriber, binding.callback, binding.mode)
            if not self._registry.add_subscription(binding.event_type, binding.mode, subscription):
                continue
            added += 1
            if sticky:
                event = self._sticky_events.get_for_registration(binding.event_type)
                if event is not None:
                    invoke(subscription, event)
        logger.info(
            "subscriber.registered",
            extra={
                "extra": {"subscriber": safe_repr(subscriber), "bindings": added, "sticky": sticky}
            },
        )
        return added


def _as_binding(item: BindingLike) -> Binding:
    if isinstance(item, Binding):
        return item
    if isinstance(item, tuple) and len(item) == 3:
        return Binding(*item)
    raise TypeMismatchError(Binding, type(item))


_default_bus: EventBus | None = None
_default_bus_lock = Lock()


def get_default_bus() -> EventBus:
    """Return the process-wide bus, created on first use and never torn down."""
    global _default_bus
    with _default_bus_lock:
        if _default_bus is None:
            _default_bus = EventBus()
        return _default_bus
