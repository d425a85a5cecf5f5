"""Unit tests for SearchEngine."""

import pytest

from local_doc_search.adapters.persistence import InMemoryPersistenceAdapter, JsonFilePersistenceAdapter
from local_doc_search.config import Settings
from local_doc_search.domain.errors import (
    DocumentNotFoundError,
    EmptyQueryError,
    EngineClosedError,
    PersistenceError,
    SearchError,
)
from local_doc_search.search.analyzers import tokenize
from local_doc_search.search_engine import SearchEngine


pytestmark = pytest.mark.unit


class FailingAdapter(InMemoryPersistenceAdapter):
    """In-memory adapter whose saves can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def save(self, documents, index) -> None:
        if self.fail:
            raise PersistenceError("disk full")
        super().save(documents, index)


class TestAddDocument:
    def test_document_is_retrievable(self, engine):
        document = engine.add_document("pets.txt", "The cat sat on the mat")

        assert engine.get_document(document.id) == document
        assert document.word_count == 6
        assert engine.document_count == 1

    def test_ids_are_unique(self, engine):
        ids = {engine.add_document(f"doc{i}.txt", "same content").id for i in range(10)}

        assert len(ids) == 10

    def test_every_term_finds_its_document(self, engine):
        content = "Hi, a cat-nap! Quick brown foxes jump over lazy dogs."
        document = engine.add_document("mixed.txt", content)

        for term in tokenize(content):
            assert document.id in {result.document.id for result in engine.search(term)}

    def test_persists_after_each_ingest(self, engine, memory_adapter):
        engine.add_document("a.txt", "alpha")
        engine.add_document("b.txt", "beta")

        assert memory_adapter.save_count == 2
        assert [document.name for document in memory_adapter.load().documents] == ["a.txt", "b.txt"]

    def test_empty_content_is_stored_without_terms(self, engine):
        document = engine.add_document("empty.txt", "")

        assert document.word_count == 0
        assert engine.term_count == 0
        assert engine.documents() == [document]


class TestAtomicIngestion:
    def test_failed_save_rolls_back_insert_and_postings(self, settings):
        adapter = FailingAdapter()
        engine = SearchEngine.open(settings=settings, adapter=adapter)
        kept = engine.add_document("kept.txt", "dog")
        adapter.fail = True

        with pytest.raises(PersistenceError):
            engine.add_document("lost.txt", "cat dog")

        assert engine.documents() == [kept]
        assert "cat" not in engine.index
        assert [posting.doc_id for posting in engine.index.postings("dog")] == [kept.id]

        adapter.fail = False
        engine.close()

    def test_failed_indexing_leaves_store_unchanged(self, engine, monkeypatch):
        def explode(document):
            raise RuntimeError("analyzer crashed")

        monkeypatch.setattr(engine.index, "index_document", explode)

        with pytest.raises(RuntimeError, match="analyzer crashed"):
            engine.add_document("broken.txt", "cat")

        assert engine.document_count == 0
        assert engine.term_count == 0


class TestSearch:
    def test_blank_query_raises(self, engine):
        engine.add_document("a.txt", "cat")

        for query in ("", "   ", "\t\n"):
            with pytest.raises(EmptyQueryError, match="Enter a search term"):
                engine.search(query)

    def test_ranked_by_frequency(self, engine):
        low = engine.add_document("b.txt", "cat cat")
        high = engine.add_document("a.txt", "cat cat cat cat cat")

        results = engine.search("cat")

        assert [result.document.id for result in results] == [high.id, low.id]
        assert [result.frequency for result in results] == [5, 2]

    def test_ties_keep_insertion_order(self, engine):
        first = engine.add_document("first.txt", "cat")
        second = engine.add_document("second.txt", "cat")

        assert [result.document.id for result in engine.search("cat")] == [first.id, second.id]

    def test_prefix_and_case_insensitive(self, engine):
        document = engine.add_document("a.txt", "The Cataclysm began")

        results = engine.search("  CAT ")

        assert len(results) == 1
        assert results[0].document == document
        assert results[0].search_term == "cat"
        assert results[0].matched_term == "cataclysm"

    def test_no_match(self, engine):
        engine.add_document("a.txt", "dog")

        assert engine.search("cat") == []

    def test_multiple_matching_terms_yield_one_result_each(self, engine):
        document = engine.add_document("a.txt", "cat cats cats")

        results = engine.search("cat")

        assert [result.document.id for result in results] == [document.id, document.id]
        assert [(result.matched_term, result.frequency) for result in results] == [("cats", 2), ("cat", 1)]

    def test_deduplicate_results_keeps_highest_frequency(self, data_dir):
        settings = Settings(data_dir=data_dir, storage_backend="memory", deduplicate_results=True)
        with SearchEngine.open(settings=settings) as engine:
            engine.add_document("a.txt", "cat cats cats")

            results = engine.search("cat")

        assert len(results) == 1
        assert results[0].matched_term == "cats"

    def test_dangling_postings_are_skipped(self, engine):
        removed = engine.add_document("gone.txt", "cat")
        kept = engine.add_document("kept.txt", "cat")
        engine.store.remove(removed.id)

        assert [result.document.id for result in engine.search("cat")] == [kept.id]


class TestSuggest:
    def test_distinct_words_longer_than_prefix(self, engine):
        engine.add_document("a.txt", "Catalog cat ca category")
        engine.add_document("b.txt", "catalog cathedral")

        assert engine.suggest("CA") == ["catalog", "cat", "category", "cathedral"]

    def test_short_words_are_suggested(self, engine):
        engine.add_document("a.txt", "ox oxen")

        assert engine.suggest("o") == ["ox", "oxen"]

    def test_limit(self, engine):
        engine.add_document("a.txt", " ".join(f"word{i}" for i in range(20)))

        assert len(engine.suggest("word")) == 10
        assert engine.suggest("word", limit=3) == ["word0", "word1", "word2"]

    def test_blank_prefix(self, engine):
        engine.add_document("a.txt", "cat")

        assert engine.suggest("  ") == []


class TestClearAll:
    def test_clear_all_is_idempotent(self, engine, memory_adapter):
        engine.add_document("a.txt", "cat")

        engine.clear_all()
        engine.clear_all()

        assert engine.document_count == 0
        assert engine.term_count == 0
        assert memory_adapter.load().is_empty

    def test_get_document_after_clear(self, engine):
        document = engine.add_document("a.txt", "cat")
        engine.clear_all()

        with pytest.raises(DocumentNotFoundError):
            engine.get_document(document.id)


class TestLifecycle:
    def test_reopen_restores_documents_and_index(self, data_dir):
        settings = Settings(data_dir=data_dir, storage_backend="json")
        with SearchEngine.open(settings=settings) as engine:
            first = engine.add_document("a.txt", "cat cat dog")
            second = engine.add_document("b.txt", "Cataclysm\nstorm")
            index_before = engine.index.to_dict()

        with SearchEngine.open(settings=settings) as reopened:
            assert reopened.documents() == [first, second]
            assert reopened.index.to_dict() == index_before
            assert [result.document.id for result in reopened.search("cat")] == [first.id, second.id]
            assert int(reopened.add_document("c.txt", "bird").id) > int(second.id)

    def test_open_loads_existing_snapshot(self, tmp_path, settings):
        path = tmp_path / "store.json"
        with SearchEngine.open(settings=settings, adapter=JsonFilePersistenceAdapter(path)) as engine:
            engine.add_document("a.txt", "cat")

        engine = SearchEngine.open(settings=settings, adapter=JsonFilePersistenceAdapter(path))
        try:
            assert engine.document_count == 1
        finally:
            engine.close()

    def test_closed_engine_rejects_operations(self, settings):
        engine = SearchEngine.open(settings=settings)
        engine.close()
        engine.close()

        assert engine.closed
        with pytest.raises(EngineClosedError):
            engine.search("cat")
        with pytest.raises(EngineClosedError):
            engine.add_document("a.txt", "cat")

    def test_closed_engine_error_is_a_search_error(self, settings):
        engine = SearchEngine.open(settings=settings)
        engine.close()

        with pytest.raises(SearchError, match="closed") as excinfo:
            engine.suggest("cat")
        assert isinstance(excinfo.value, RuntimeError)

    def test_close_flushes_state(self, settings, memory_adapter):
        engine = SearchEngine.open(settings=settings, adapter=memory_adapter)
        engine.close()

        assert memory_adapter.save_count == 1


class TestResultRendering:
    def test_preview_highlights_first_match(self, engine):
        engine.add_document("a.txt", "Dogs bark.\nThe cataclysm began.")

        (result,) = engine.search("cat")

        assert engine.preview(result, style="plain") == "Dogs bark.\nThe [[cataclysm]] began."
        assert '<span class="highlight">cataclysm</span>' in engine.preview(result)

    def test_preview_respects_configured_length(self, data_dir):
        settings = Settings(data_dir=data_dir, storage_backend="memory", preview_chars=40)
        with SearchEngine.open(settings=settings) as engine:
            engine.add_document("a.txt", "filler " * 50 + "cataclysm " + "filler " * 50)
            (result,) = engine.search("cat")

            preview = engine.preview(result, style="plain")

        assert "[[cataclysm]]" in preview
        assert len(preview) <= 40 + len("[[]]")

    def test_occurrences_count_term_anywhere(self, engine):
        engine.add_document("a.txt", "Cat bobcat catalog")

        counts = [engine.occurrences(result) for result in engine.search("cat")]

        assert counts == [3, 3]
