"""Error types raised at the bus call boundary."""

from __future__ import annotations

from typing import Any


class EventBusError(Exception):
    """Base error for event bus operations."""


class TypeMismatchError(EventBusError):
    """A value or binding does not match the declared event type."""

    def __init__(self, expected: Any, actual: Any) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected event type {expected!r}, got {actual!r}.")


class ExecutorShutdownError(EventBusError):
    """Work was submitted to a background executor that has been shut down."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Background executor '{name}' is shut down.")
