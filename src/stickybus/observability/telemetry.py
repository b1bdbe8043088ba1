"""OpenTelemetry spans around bus posts.

Each post runs in a ``stickybus.post`` span carrying the event type, the
sticky flag and whether any subscription matched. Subscriber failures raised
on the posting thread are recorded as exceptions on that span.
Set ``STICKYBUS_DISABLE_TRACING=1`` to skip OpenTelemetry entirely.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

DISABLE_TRACING_ENV = "STICKYBUS_DISABLE_TRACING"
POST_SPAN = "stickybus.post"


class _NoOpSpan:
    def __enter__(self) -> _NoOpSpan:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def set_attribute(self, key: str, value: Any) -> None:
        return None

    def record_exception(
        self, exception: BaseException, attributes: dict[str, Any] | None = None
    ) -> None:
        return None


class _NoOpTracer:
    def start_as_current_span(self, name: str) -> _NoOpSpan:
        return _NOOP_SPAN


_NOOP_SPAN = _NoOpSpan()
_NOOP_TRACER = _NoOpTracer()


def tracing_disabled() -> bool:
    return os.getenv(DISABLE_TRACING_ENV) == "1"


def get_tracer(name: str) -> Any:
    if tracing_disabled():
        return _NOOP_TRACER
    from opentelemetry import trace

    return trace.get_tracer(name)


@contextmanager
def post_span(tracer: Any, event_type: type, sticky: bool) -> Iterator[Any]:
    """Open the span for one post; the caller reports the match with ``mark_found``."""
    with tracer.start_as_current_span(POST_SPAN) as span:
        span.set_attribute("stickybus.event_type", event_type.__qualname__)
        span.set_attribute("stickybus.sticky", sticky)
        yield span


def mark_found(span: Any, found: bool) -> None:
    span.set_attribute("stickybus.found", found)


def record_subscriber_failure(exc: BaseException, callback: str, mode: str) -> None:
    """Attach a callback failure to the active span, if any."""
    if tracing_disabled():
        return
    from opentelemetry import trace

    trace.get_current_span().record_exception(
        exc, attributes={"stickybus.callback": callback, "stickybus.mode": mode}
    )


def setup_tracing(service_name: str = "stickybus", exporter: Any | None = None) -> None:
    """Install a TracerProvider exporting bus spans (console by default)."""
    if tracing_disabled():
        logger.info("tracing.disabled", extra={"extra": {"service": service_name}})
        return
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(exporter or ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    logger.info("tracing.configured", extra={"extra": {"service": service_name}})
