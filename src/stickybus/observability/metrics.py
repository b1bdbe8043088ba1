"""Prometheus-style counters for bus activity without external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock


@dataclass
class _LabeledCounter:
    value: float = 0.0
    _lock: Lock = field(default_factory=Lock, repr=False)

    def inc(self, amount: float = 1.0) -> None:
        with self._lock:
            self.value += amount


@dataclass
class Counter:
    name: str
    description: str
    label_names: tuple[str, ...] = ()
    values: dict[tuple[str, ...], _LabeledCounter] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def labels(self, **labels: str) -> _LabeledCounter:
        key = tuple(labels[name] for name in self.label_names)
        with self._lock:
            if key not in self.values:
                self.values[key] = _LabeledCounter()
            return self.values[key]

    def inc(self, amount: float = 1.0) -> None:
        self.labels().inc(amount)

    def value(self, **labels: str) -> float:
        key = tuple(labels[name] for name in self.label_names)
        with self._lock:
            counter = self.values.get(key)
        return counter.value if counter else 0.0

    def reset(self) -> None:
        with self._lock:
            self.values.clear()


EVENTS_POSTED = Counter(
    name="stickybus_events_posted_total",
    description="Count of posted events by sticky flag",
    label_names=("sticky",),
)

DELIVERIES = Counter(
    name="stickybus_deliveries_total",
    description="Count of successful callback invocations by delivery mode",
    label_names=("mode",),
)

CALLBACK_FAILURES = Counter(
    name="stickybus_callback_failures_total",
    description="Count of subscriber callbacks that raised, by delivery mode",
    label_names=("mode",),
)

NO_SUBSCRIBER_EVENTS = Counter(
    name="stickybus_no_subscriber_events_total",
    description="Count of events posted without any matching subscription",
)

EXECUTOR_TASK_FAILURES = Counter(
    name="stickybus_executor_task_failures_total",
    description="Count of background units of work that raised",
)

ALL_COUNTERS: tuple[Counter, ...] = (
    EVENTS_POSTED,
    DELIVERIES,
    CALLBACK_FAILURES,
    NO_SUBSCRIBER_EVENTS,
    EXECUTOR_TASK_FAILURES,
)


def render_metrics() -> str:
    """Render all counters in Prometheus text exposition format."""
    lines: list[str] = []
    for counter in ALL_COUNTERS:
        lines.append(f"# HELP {counter.name} {counter.description}")
        lines.append(f"# TYPE {counter.name} counter")
        for labels, value in list(counter.values.items()):
            if counter.label_names:
                label_str = ",".join(
                    f'{name}="{label}"' for name, label in zip(counter.label_names, labels)
                )
                lines.append(f"{counter.name}{{{label_str}}} {value.value}")
            else:
                lines.append(f"{counter.name} {value.value}")
    return "\n".join(lines) + "\n"


def reset_metrics() -> None:
    for counter in ALL_COUNTERS:
        counter.reset()
