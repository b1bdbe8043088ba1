"""Routes posted events to subscriptions across the three delivery modes.

Dispatch behavior:
1. Resolve the event type from the runtime class of the event
2. Store sticky events before fan-out
3. Deliver IMMEDIATE subscriptions on the posting thread, in order
4. Submit BACKGROUND_QUEUED subscriptions as one ordered unit of work
5. Submit each BACKGROUND_FIRE_AND_FORGET subscription as its own unit
6. Post a NoSubscriberEvent when no partition had a subscription

Subscriber failures are caught per subscription, logged and counted. They
never reach the poster and never stop delivery to the other subscribers.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
from typing import Any

from stickybus.contracts.events import NoSubscriberEvent
from stickybus.contracts.models import Subscription
from stickybus.contracts.types import DeliveryMode
from stickybus.dispatch.executor import BackgroundExecutor
from stickybus.errors import ExecutorShutdownError
from stickybus.observability.logging import safe_repr
from stickybus.observability.metrics import (
    CALLBACK_FAILURES,
    DELIVERIES,
    EVENTS_POSTED,
    NO_SUBSCRIBER_EVENTS,
)
from stickybus.observability.telemetry import (
    get_tracer,
    mark_found,
    post_span,
    record_subscriber_failure,
)
from stickybus.registry.sticky import StickyEventStore
from stickybus.registry.subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


def invoke(subscription: Subscription, event: Any) -> bool:
    """Call one subscriber callback, isolating any failure.

    Returns True when the callback completed without raising.
    """
    try:
        subscription.callback(event)
    except Exception as exc:  # noqa: BLE001
        CALLBACK_FAILURES.labels(mode=subscription.mode.value).inc()
        logger.exception(
            "subscriber.failed",
            extra={
                "extra": {
                    "callback": subscription.name,
                    "subscriber": safe_repr(subscription.subscriber),
                    "event": safe_repr(event),
                    "mode": subscription.mode.value,
                }
            },
        )
        record_subscriber_failure(exc, subscription.name, subscription.mode.value)
        return False
    DELIVERIES.labels(mode=subscription.mode.value).inc()
    return True


def invoke_in_order(subscriptions: Sequence[Subscription], event: Any) -> None:
    for subscription in subscriptions:
        invoke(subscription, event)


class Dispatcher:
    """Fan-out engine behind ``EventBus.post`` and ``EventBus.post_sticky``."""

    def __init__(
        self,
        owner: Any,
        registry: SubscriptionRegistry,
        sticky_store: StickyEventStore,
        executor: BackgroundExecutor,
        tracer: Any | None = None,
    ) -> None:
        self._owner = owner
        self._registry = registry
        self._sticky_store = sticky_store
        self._executor = executor
        self._tracer = tracer or get_tracer("stickybus.dispatcher")

    def post(self, event: Any, sticky: bool = False) -> None:
        event_type = type(event)
        EVENTS_POSTED.labels(sticky=str(sticky).lower()).inc()
        with post_span(self._tracer, event_type, sticky) as span:
            if sticky:
                self._sticky_store.put(event_type, event)

            found = False

            immediate = self._registry.lookup(event_type, DeliveryMode.IMMEDIATE)
            if immediate:
                found = True
                invoke_in_order(immediate, event)

            queued = self._registry.lookup(event_type, DeliveryMode.BACKGROUND_QUEUED)
            if queued:
                found = True
                self._submit(event, invoke_in_order, queued, event)

            fire_and_forget = self._registry.lookup(
                event_type, DeliveryMode.BACKGROUND_FIRE_AND_FORGET
            )
            if fire_and_forget:
                found = True
                for subscription in fire_and_forget:
                    self._submit(event, invoke, subscription, event)

            mark_found(span, found)

        if not found and event_type is not NoSubscriberEvent:
            NO_SUBSCRIBER_EVENTS.inc()
            logger.debug(
                "event.no_subscriber", extra={"extra": {"event_type": event_type.__qualname__}}
            )
            self.post(NoSubscriberEvent(self._owner, event), sticky=False)

    def _submit(self, event: Any, fn: Callable[..., Any], *args: Any) -> None:
        try:
            self._executor.submit(fn, *args)
        except ExecutorShutdownError:
            logger.error(
                "event.dropped",
                extra={"extra": {"event": safe_repr(event), "reason": "executor shut down"}},
            )
