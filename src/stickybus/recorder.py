"""Event recording helper."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Condition, current_thread
from typing import Any


@dataclass(slots=True)
class RecordedEvent:
    """An event together with the thread that delivered it."""

    event: Any
    thread_name: str


@dataclass(slots=True, eq=False)
class EventRecorder:
    """Thread-safe callback that records every event it receives."""

    records: list[RecordedEvent] = field(default_factory=list)
    _cond: Condition = field(default_factory=Condition, repr=False)

    def __call__(self, event: Any) -> None:
        with self._cond:
            self.records.append(RecordedEvent(event, current_thread().name))
            self._cond.notify_all()

    @property
    def events(self) -> list[Any]:
        with self._cond:
            return [record.event for record in self.records]

    def wait_for(self, count: int = 1, timeout: float = 5.0) -> list[Any]:
        """Block until ``count`` events were recorded; raises TimeoutError otherwise."""
        with self._cond:
            if not self._cond.wait_for(lambda: len(self.records) >= count, timeout):
                raise TimeoutError(f"Timeout waiting for {count} events, got {len(self.records)}")
            return [record.event for record in self.records]
