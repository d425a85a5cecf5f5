"""Document store keyed by time-derived ids."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
import logging
import time
from typing import Any

from local_doc_search.domain.errors import DocumentNotFoundError
from local_doc_search.domain.model import Document
from local_doc_search.search.analyzers import count_words


logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class DocumentIdGenerator:
    """Issues epoch-millisecond ids that strictly increase within a process.

    When the clock has not advanced past the last issued id (two inserts in the
    same millisecond, or ids loaded from a snapshot written "in the future"),
    the previous id is bumped by one.
    """

    def __init__(self, clock: Callable[[], int] = _epoch_millis) -> None:
        self._clock = clock
        self._last = 0

    def next_id(self) -> str:
        candidate = self._clock()
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)

    def observe(self, doc_id: str) -> None:
        """Make sure future ids sort after ``doc_id`` when it is numeric."""
        if doc_id.isdigit():
            self._last = max(self._last, int(doc_id))


class DocumentStore:
    """Holds documents in insertion order, indexed by id."""

    def __init__(self, id_generator: DocumentIdGenerator | None = None) -> None:
        self._ids = id_generator or DocumentIdGenerator()
        self._documents: dict[str, Document] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __iter__(self) -> Iterator[Document]:
        return iter(list(self._documents.values()))

    def insert(self, name: str, content: str) -> Document:
        document = Document(
            id=self._ids.next_id(),
            name=name,
            content=content,
            word_count=count_words(content),
        )
        self._documents[document.id] = document
        logger.debug("Stored document %s (%s, %d words)", document.id, name, document.word_count)
        return document

    def get_all(self) -> list[Document]:
        return list(self._documents.values())

    def get_by_id(self, doc_id: str) -> Document:
        document = self._documents.get(doc_id)
        if document is None:
            raise DocumentNotFoundError(doc_id)
        return document

    def find(self, doc_id: str) -> Document | None:
        return self._documents.get(doc_id)

    def remove(self, doc_id: str) -> Document | None:
        """Remove and return a document; used to undo a staged insert."""
        return self._documents.pop(doc_id, None)

    def clear(self) -> None:
        self._documents.clear()

    def to_list(self) -> list[dict[str, Any]]:
        return [document.to_dict() for document in self._documents.values()]

    @classmethod
    def from_documents(
        cls,
        documents: Iterable[Document | Mapping[str, Any]],
        id_generator: DocumentIdGenerator | None = None,
    ) -> DocumentStore:
        """Rebuild a store from persisted documents, keeping their order and ids."""
        store = cls(id_generator)
        for entry in documents:
            document = entry if isinstance(entry, Document) else Document.from_dict(dict(entry))
            if document.id in store._documents:
                logger.warning("Skipping duplicate document id %s in snapshot", document.id)
                continue
            store._documents[document.id] = document
            store._ids.observe(document.id)
        return store
