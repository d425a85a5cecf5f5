"""Correlation state shared by spans and log records.

Holds the active trace/span ids plus the engine operation being served
(``add_document``, ``search``, ``ingest_file``...) so every log line emitted
while serving it can be tied back to the call.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
import secrets


trace_context: ContextVar[dict[str, str] | None] = ContextVar("doc_search_trace_context", default=None)


def new_trace_id() -> str:
    """32 hex chars, the width of an OpenTelemetry trace id."""
    return secrets.token_hex(16)


def new_span_id() -> str:
    return secrets.token_hex(8)


def get_trace_context() -> dict[str, str]:
    """Return the active correlation fields, starting a fresh trace when none is set."""
    current = trace_context.get()
    if not current or not current.get("trace_id"):
        current = {"trace_id": new_trace_id(), "span_id": new_span_id()}
        trace_context.set(current)
    return current


def set_trace_context(trace_id: str, span_id: str, **fields: str) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **fields})


def update_span_id(span_id: str) -> None:
    trace_context.set({**(trace_context.get() or {}), "span_id": span_id})


@contextmanager
def operation_scope(operation: str, **fields: str) -> Iterator[dict[str, str]]:
    """Tag everything logged inside the block with ``operation`` and ``fields``.

    The previous context is restored on exit, so scopes nest.
    """
    token = trace_context.set({**get_trace_context(), "operation": operation, **fields})
    try:
        yield get_trace_context()
    finally:
        trace_context.reset(token)
