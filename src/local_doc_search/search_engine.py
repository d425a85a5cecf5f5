"""Search engine - the single entry point for ingestion and queries.

Composes the document store, the inverted index and a persistence adapter
behind a small interface:

- add_document(name, content) -> Document
- search(query) -> list[SearchResult]
- suggest(prefix) -> list[str]
- preview(result) / occurrences(result) for rendering hits
- clear_all()

State is loaded once by ``SearchEngine.open`` and written back in full after
every mutation. The engine is not thread-safe; callers ingest one document at
a time from a single thread.
"""

from __future__ import annotations

import logging
from types import TracebackType

from local_doc_search.adapters.persistence import AbstractPersistenceAdapter, create_persistence_adapter
from local_doc_search.config import Settings
from local_doc_search.domain.errors import EmptyQueryError, EngineClosedError
from local_doc_search.domain.model import Document, SearchResult
from local_doc_search.observability.context import operation_scope
from local_doc_search.observability.metrics import DOCUMENTS_INGESTED, INDEX_TERMS, QUERIES, QUERY_LATENCY, track_latency
from local_doc_search.observability.tracing import create_span
from local_doc_search.search.analyzers import TermAnalyzer, extract_words
from local_doc_search.search.document_store import DocumentStore
from local_doc_search.search.highlight import HighlightStyle, build_preview, count_occurrences
from local_doc_search.search.inverted_index import InvertedIndex
from local_doc_search.service_layer.unit_of_work import IngestionUnitOfWork


logger = logging.getLogger(__name__)


class SearchEngine:
    """In-memory prefix search over uploaded documents with full-state persistence."""

    def __init__(
        self,
        adapter: AbstractPersistenceAdapter | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Create an empty engine. Use ``SearchEngine.open`` to load persisted state.

        Args:
            adapter: Persistence adapter; built from settings when omitted.
            settings: Engine configuration; read from the environment when omitted.
        """
        self.settings = settings or Settings()
        self._analyzer = TermAnalyzer(min_length=self.settings.min_term_length)
        self._adapter = adapter if adapter is not None else create_persistence_adapter(self.settings)
        self._store = DocumentStore()
        self._index = InvertedIndex(self._analyzer)
        self._closed = False

    @classmethod
    def open(
        cls,
        settings: Settings | None = None,
        adapter: AbstractPersistenceAdapter | None = None,
    ) -> SearchEngine:
        """Create an engine and load the persisted snapshot into memory."""
        engine = cls(adapter=adapter, settings=settings)
        engine.load()
        return engine

    def __enter__(self) -> SearchEngine:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def document_count(self) -> int:
        return len(self._store)

    @property
    def term_count(self) -> int:
        return len(self._index)

    @property
    def index(self) -> InvertedIndex:
        return self._index

    @property
    def store(self) -> DocumentStore:
        return self._store

    def load(self) -> None:
        """Replace in-memory state with the adapter's snapshot."""
        self._ensure_open()
        with create_span("doc_search.load"):
            snapshot = self._adapter.load()
            self._store = DocumentStore.from_documents(snapshot.documents)
            snapshot.index.analyzer = self._analyzer
            self._index = snapshot.index
        INDEX_TERMS.labels(store="default").set(len(self._index))
        logger.info("Loaded %d documents and %d terms", len(self._store), len(self._index))

    def flush(self) -> None:
        """Write the full current state through the persistence adapter."""
        self._ensure_open()
        with create_span("doc_search.persist", attributes={"documents": len(self._store)}):
            self._adapter.save(self._store.get_all(), self._index)

    def close(self) -> None:
        """Flush and release the adapter. Closing twice is a no-op."""
        if self._closed:
            return
        try:
            self.flush()
        finally:
            self._adapter.close()
            self._closed = True

    def add_document(self, name: str, content: str) -> Document:
        """Store, index and persist one document as a single transaction.

        If indexing or persisting fails, the insert is rolled back and the
        error propagates.
        """
        self._ensure_open()
        with (
            operation_scope("add_document", document_name=name),
            create_span("doc_search.add_document", attributes={"document.name": name}) as span,
        ):
            try:
                with IngestionUnitOfWork(self._store, self._index, on_commit=self.flush) as uow:
                    document = uow.add(name, content)
                    uow.commit()
            except Exception:
                DOCUMENTS_INGESTED.labels(status="failed").inc()
                raise
            span.set_attribute("document.id", document.id)

        DOCUMENTS_INGESTED.labels(status="ok").inc()
        INDEX_TERMS.labels(store="default").set(len(self._index))
        logger.info("Ingested %s as %s (%d words)", name, document.id, document.word_count)
        return document

    def search(self, query: str) -> list[SearchResult]:
        """Prefix search over indexed terms, ranked by descending frequency.

        Every indexed term starting with the query contributes one result per
        posting, so a document matched through several terms appears once per
        term unless ``settings.deduplicate_results`` is set. Equal frequencies
        keep index order.

        Raises:
            EmptyQueryError: if ``query`` is blank.
        """
        self._ensure_open()
        search_term = query.strip().lower()
        if not search_term:
            QUERIES.labels(outcome="empty").inc()
            raise EmptyQueryError(query)

        with (
            operation_scope("search", query=search_term),
            create_span("doc_search.search", attributes={"query": search_term}) as span,
            track_latency(QUERY_LATENCY, operation="search"),
        ):
            results: list[SearchResult] = []
            for term in self._index.prefix_lookup(search_term):
                for posting in self._index.postings(term):
                    document = self._store.find(posting.doc_id)
                    if document is None:
                        logger.debug("Skipping dangling posting %s -> %s", term, posting.doc_id)
                        continue
                    results.append(
                        SearchResult(
                            document=document,
                            frequency=posting.frequency,
                            search_term=search_term,
                            matched_term=term,
                        )
                    )
            results.sort(key=lambda result: result.frequency, reverse=True)
            if self.settings.deduplicate_results:
                results = _first_per_document(results)
            span.set_attribute("results", len(results))

        QUERIES.labels(outcome="hit" if results else "miss").inc()
        logger.debug("Search %r returned %d results", search_term, len(results))
        return results

    def suggest(self, prefix: str, limit: int | None = None) -> list[str]:
        """Autocomplete words that extend ``prefix``, in first-seen order.

        Words come from the raw document text (not the index), so short words
        are offered too; a word equal to the prefix is not a suggestion.
        """
        self._ensure_open()
        needle = prefix.strip().lower()
        if not needle:
            return []
        cap = limit if limit is not None else self.settings.suggestion_limit
        with track_latency(QUERY_LATENCY, operation="suggest"):
            suggestions: dict[str, None] = {}
            for document in self._store.get_all():
                for word in extract_words(document.content):
                    if len(word) > len(needle) and word.startswith(needle):
                        suggestions.setdefault(word)
        return list(suggestions)[:cap]

    def preview(self, result: SearchResult, style: HighlightStyle = "html") -> str:
        """Highlighted excerpt of the result's document around its first match."""
        return build_preview(
            result.document.content,
            result.search_term,
            max_chars=self.settings.preview_chars,
            style=style,
        )

    def occurrences(self, result: SearchResult) -> int:
        """Case-insensitive count of the search term anywhere in the result's document."""
        return count_occurrences(result.document.content, result.search_term)

    def get_document(self, doc_id: str) -> Document:
        """Return a stored document; raises ``DocumentNotFoundError`` for unknown ids."""
        self._ensure_open()
        return self._store.get_by_id(doc_id)

    def documents(self) -> list[Document]:
        self._ensure_open()
        return self._store.get_all()

    def clear_all(self) -> None:
        """Drop every document and posting, then persist the empty state."""
        self._ensure_open()
        with create_span("doc_search.clear_all", attributes={"documents": len(self._store)}):
            self._store.clear()
            self._index.clear()
            self.flush()
        INDEX_TERMS.labels(store="default").set(0)
        logger.info("Cleared all documents")

    def _ensure_open(self) -> None:
        if self._closed:
            raise EngineClosedError("Search engine is closed")


def _first_per_document(results: list[SearchResult]) -> list[SearchResult]:
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        if result.document.id in seen:
            continue
        seen.add(result.document.id)
        unique.append(result)
    return unique
