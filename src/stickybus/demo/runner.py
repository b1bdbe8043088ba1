"""Scenario runner for bus demos."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from typing import Any

from stickybus.bus import EventBus
from stickybus.config import BusSettings, get_bus_settings
from stickybus.contracts.events import NoSubscriberEvent
from stickybus.contracts.types import DeliveryMode
from stickybus.demo.fixtures import Ping, Status, Unhandled
from stickybus.observability.logging import configure_logging
from stickybus.observability.metrics import render_metrics
from stickybus.observability.telemetry import setup_tracing
from stickybus.recorder import EventRecorder

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScenarioResult:
    """Events observed by each named subscriber during a scenario."""

    name: str
    observed: dict[str, list[Any]] = field(default_factory=dict)
    threads: dict[str, set[str]] = field(default_factory=dict)
    metrics: str = ""

    def record(self, subscriber: str, recorder: EventRecorder) -> None:
        self.observed[subscriber] = recorder.events
        self.threads[subscriber] = {record.thread_name for record in recorder.records}


def _ping(bus: EventBus, result: ScenarioResult) -> None:
    immediate, queued = EventRecorder(), EventRecorder()
    bus.subscribe(Ping, immediate, DeliveryMode.IMMEDIATE)
    bus.subscribe(Ping, queued, DeliveryMode.BACKGROUND_QUEUED)

    bus.post(Ping(id=1))
    queued.wait_for(1)
    bus.unregister(immediate)
    bus.post(Ping(id=2))
    queued.wait_for(2)

    result.record("immediate", immediate)
    result.record("queued", queued)


def _sticky(bus: EventBus, result: ScenarioResult) -> None:
    bus.post_sticky(Status(state="booting"))
    bus.post_sticky(Status(state="ready"))
    late = EventRecorder()
    bus.subscribe(Status, late, sticky=True)
    result.record("late", late)


def _unhandled(bus: EventBus, result: ScenarioResult) -> None:
    watcher = EventRecorder()
    bus.subscribe(NoSubscriberEvent, watcher)
    bus.post(Unhandled())
    result.record("no_subscriber", watcher)


SCENARIOS: dict[str, Callable[[EventBus, ScenarioResult], None]] = {
    "ping": _ping,
    "sticky": _sticky,
    "unhandled": _unhandled,
}


def run_scenario(
    name: str,
    *,
    settings: BusSettings | None = None,
    configure: bool = False,
) -> ScenarioResult:
    """Run a named scenario on a fresh bus and collect what subscribers observed."""
    if name not in SCENARIOS:
        raise ValueError(f"Unknown scenario {name!r}; choose from {sorted(SCENARIOS)}")
    settings = settings or get_bus_settings()
    if configure:
        configure_logging(settings.log_level)
        setup_tracing("stickybus-demo")

    result = ScenarioResult(name=name)
    with EventBus(settings=settings) as bus:
        logger.info("scenario.start", extra={"extra": {"scenario": name}})
        SCENARIOS[name](bus, result)
    result.metrics = render_metrics()
    logger.info("scenario.end", extra={"extra": {"scenario": name}})
    return result
