"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from local_doc_search.observability.context import (
    get_trace_context,
    operation_scope,
    set_trace_context,
    trace_context,
)
from local_doc_search.observability.logging import JsonFormatter, configure_logging
from local_doc_search.observability.metrics import (
    DOCUMENTS_INGESTED,
    INDEX_TERMS,
    QUERIES,
    QUERY_LATENCY,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from local_doc_search.observability.tracing import create_span, get_tracer, init_tracing, reset_tracer


__all__ = [
    "DOCUMENTS_INGESTED",
    "INDEX_TERMS",
    "QUERIES",
    "QUERY_LATENCY",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "operation_scope",
    "reset_tracer",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
