"""Unit of Work for document ingestion.

Inserting a document and indexing it are two mutations on two structures.
The unit of work stages both and either commits them together (including the
snapshot save) or rolls both back, so a failure in either step never leaves a
stored document without postings or postings without a document.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
import logging

from local_doc_search.domain.model import Document
from local_doc_search.search.document_store import DocumentStore
from local_doc_search.search.inverted_index import InvertedIndex


logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work."""

    _committed: bool = False

    def __enter__(self):
        """Enter transaction context."""
        self._committed = False
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit transaction context - rollback unless explicitly committed."""
        if not self._committed:
            self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Commit the transaction."""
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Rollback the transaction."""
        raise NotImplementedError


@dataclass
class _StagedDocument:
    document: Document
    terms: list[str] | None = None


class IngestionUnitOfWork(AbstractUnitOfWork):
    """Stages document inserts plus index updates against live structures.

    Args:
        store: Document store receiving the inserts.
        index: Inverted index receiving the postings.
        on_commit: Called before the commit is marked done, typically to persist
            the new state. If it raises, the staged mutations are rolled back.
    """

    def __init__(
        self,
        store: DocumentStore,
        index: InvertedIndex,
        *,
        on_commit: Callable[[], None] | None = None,
    ) -> None:
        self.store = store
        self.index = index
        self._on_commit = on_commit
        self._staged: list[_StagedDocument] = []
        self._committed = False

    @property
    def staged_documents(self) -> list[Document]:
        return [entry.document for entry in self._staged]

    def add(self, name: str, content: str) -> Document:
        """Insert and index one document inside the transaction."""
        document = self.store.insert(name, content)
        staged = _StagedDocument(document)
        self._staged.append(staged)
        staged.terms = self.index.index_document(document)
        return document

    def commit(self) -> None:
        if self._on_commit is not None:
            self._on_commit()
        self._staged.clear()
        self._committed = True

    def rollback(self) -> None:
        for entry in reversed(self._staged):
            removed = self.index.remove_document(entry.document.id, entry.terms)
            self.store.remove(entry.document.id)
            logger.warning(
                "Rolled back document %s (%s); removed %d postings",
                entry.document.id,
                entry.document.name,
                removed,
            )
        self._staged.clear()
        self._committed = False
