"""Subscription registry partitioned by delivery mode.

Each delivery mode owns an independent mapping of event type to an ordered
list of subscriptions. A single lock guards every bucket; readers receive an
immutable snapshot so delivery never happens while the lock is held.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any

from stickybus.contracts.models import Subscription
from stickybus.contracts.types import DeliveryMode

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """In-memory registry of subscriptions keyed by event type and mode."""

    def __init__(self) -> None:
        self._buckets: dict[DeliveryMode, dict[type, list[Subscription]]] = {
            mode: {} for mode in DeliveryMode
        }
        self._lock = Lock()

    def add_subscription(
        self, event_type: type, mode: DeliveryMode, subscription: Subscription
    ) -> bool:
        """Append a subscription to the (event_type, mode) bucket.

        Returns False without adding anything when an equal subscription is
        already registered for this event type under any mode.
        """
        with self._lock:
            for bucket in self._buckets.values():
                if subscription in bucket.get(event_type, ()):
                    duplicate = True
                    break
            else:
                duplicate = False
                self._buckets[mode].setdefault(event_type, []).append(subscription)

        if duplicate:
            logger.debug(
                "subscription.duplicate",
                extra={
                    "extra": {"event_type": event_type.__qualname__, "callback": subscription.name}
                },
            )
            return False
        logger.debug(
            "subscription.added",
            extra={
                "extra": {
                    "event_type": event_type.__qualname__,
                    "mode": mode.value,
                    "callback": subscription.name,
                }
            },
        )
        return True

    def remove_subscriptions(self, subscriber: Any) -> int:
        """Remove every subscription owned by ``subscriber``; unknown subscribers are a no-op."""
        removed = 0
        with self._lock:
            for bucket in self._buckets.values():
                for event_type in list(bucket):
                    kept = [sub for sub in bucket[event_type] if not sub.matches(subscriber)]
                    removed += len(bucket[event_type]) - len(kept)
                    if kept:
                        bucket[event_type] = kept
                    else:
                        del bucket[event_type]
        if removed:
            logger.debug("subscriptions.removed", extra={"extra": {"count": removed}})
        return removed

    def lookup(self, event_type: type, mode: DeliveryMode) -> tuple[Subscription, ...]:
        """Return a snapshot of the bucket; empty when nothing is registered."""
        with self._lock:
            return tuple(self._buckets[mode].get(event_type, ()))

    def has_subscriptions(self, event_type: type) -> bool:
        with self._lock:
            return any(bucket.get(event_type) for bucket in self._buckets.values())

    def subscriber_count(self, event_type: type) -> int:
        with self._lock:
            return sum(len(bucket.get(event_type, ())) for bucket in self._buckets.values())

    def event_types(self) -> frozenset[type]:
        with self._lock:
            return frozenset(
                event_type for bucket in self._buckets.values() for event_type in bucket
            )
