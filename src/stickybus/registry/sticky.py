"""Latest-value cache for sticky events."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, TypeVar

from stickybus.errors import TypeMismatchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StickyEventStore:
    """Holds at most one event per type, overwritten by each sticky post."""

    def __init__(self) -> None:
        self._events: dict[type, Any] = {}
        self._lock = Lock()

    def put(self, event_type: type, event: Any) -> None:
        """Cache ``event`` under ``event_type``; the event must be an instance of it."""
        if not isinstance(event, event_type):
            raise TypeMismatchError(event_type, type(event))
        with self._lock:
            self._events[event_type] = event
        logger.debug("sticky.stored", extra={"extra": {"event_type": event_type.__qualname__}})

    def get(self, event_type: type[T]) -> T | None:
        """Return the cached event for ``event_type`` or None."""
        if not isinstance(event_type, type):
            raise TypeMismatchError(type, event_type)
        with self._lock:
            return self._events.get(event_type)

    def get_for_registration(self, event_type: type) -> Any | None:
        with self._lock:
            return self._events.get(event_type)

    def event_types(self) -> frozenset[type]:
        with self._lock:
            return frozenset(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
