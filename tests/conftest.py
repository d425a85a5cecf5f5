"""Shared test fixtures and configuration."""

import os
from pathlib import Path

import pytest

from local_doc_search.adapters.persistence import InMemoryPersistenceAdapter
from local_doc_search.config import Settings
from local_doc_search.search_engine import SearchEngine


ENV_PREFIX = "DOC_SEARCH_"

# Baseline environment applied to every test
TEST_ENV = {
    "DOC_SEARCH_STORAGE_BACKEND": "memory",
    "DOC_SEARCH_LOG_LEVEL": "debug",
    "DOC_SEARCH_LOG_JSON": "false",
}


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop inherited DOC_SEARCH_* variables and set test defaults."""
    for key in list(os.environ):
        if key.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "doc_search"
    path.mkdir()
    return path


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(data_dir=data_dir, storage_backend="memory")


@pytest.fixture
def memory_adapter() -> InMemoryPersistenceAdapter:
    return InMemoryPersistenceAdapter()


@pytest.fixture
def engine(settings: Settings, memory_adapter: InMemoryPersistenceAdapter) -> SearchEngine:
    engine = SearchEngine.open(settings=settings, adapter=memory_adapter)
    yield engine
    engine.close()
