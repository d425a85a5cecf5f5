"""OpenTelemetry tracing for engine operations.

Spans come from whatever tracer provider is installed globally. Until
``init_tracing`` (or the host application) installs one, the API's no-op
provider makes every span free.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer

from local_doc_search.observability.context import update_span_id


logger = logging.getLogger(__name__)

# Cached tracer; reset_tracer drops it so the next span rebinds to the global provider
_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(
    service_name: str = "local-doc-search",
    resource_attributes: Mapping[str, str] | None = None,
) -> TracerProvider:
    """Install an SDK tracer provider for ``service_name`` and cache a tracer from it.

    Exporters are left to the caller: add span processors to the returned
    provider to ship spans anywhere.
    """
    provider = TracerProvider(resource=Resource.create({"service.name": service_name, **(resource_attributes or {})}))
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = trace.get_tracer("local_doc_search")
    logger.info("Tracing initialized for service: %s", service_name)
    return provider


def get_tracer() -> Tracer:
    tracer = _tracer_holder["tracer"]
    if tracer is None:
        tracer = trace.get_tracer("local_doc_search")
        _tracer_holder["tracer"] = tracer
    return tracer


def reset_tracer() -> None:
    """Drop the cached tracer so the next span picks up the current global provider."""
    _tracer_holder["tracer"] = None


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Mapping[str, Any] | None = None,
) -> Iterator[Span]:
    """Run the block inside a span; an exception marks the span as failed and propagates.

    The span id is copied into the logging context so log lines emitted inside
    the block carry it.
    """
    span_cm = get_tracer().start_as_current_span(
        name,
        kind=kind,
        attributes=dict(attributes or {}),
        record_exception=False,
        set_status_on_exception=False,
    )
    with span_cm as span:
        span_context = span.get_span_context()
        if span_context.is_valid:
            update_span_id(format(span_context.span_id, "016x"))
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))
            raise
