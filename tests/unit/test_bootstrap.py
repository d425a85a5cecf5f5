"""Unit tests for process-level observability setup."""

import logging

from opentelemetry import trace
import pytest

from local_doc_search.bootstrap import init_observability
from local_doc_search.config import Settings
from local_doc_search.observability import tracing
from local_doc_search.observability.logging import JsonFormatter


pytestmark = pytest.mark.unit


@pytest.fixture
def restore_globals(monkeypatch):
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    monkeypatch.setattr(trace, "set_tracer_provider", lambda provider: None)
    monkeypatch.setitem(tracing._tracer_holder, "tracer", None)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_init_observability_uses_settings(restore_globals, data_dir):
    settings = Settings(data_dir=data_dir, storage_backend="memory", log_level="warning", log_json=True)

    returned = init_observability(settings)

    root = logging.getLogger()
    assert returned is settings
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert tracing._tracer_holder["tracer"] is not None


def test_init_observability_reads_environment(restore_globals, monkeypatch):
    monkeypatch.setenv("DOC_SEARCH_LOG_JSON", "false")

    settings = init_observability()

    assert settings.log_json is False
    assert not isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)
