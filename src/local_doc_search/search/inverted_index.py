"""In-memory inverted index with prefix lookup.

Maps each term to the list of postings recorded for it. Terms and posting
lists keep insertion order, which search relies on for deterministic ranking
among equal frequencies.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator, Mapping, Sequence
import logging
from typing import Any

from local_doc_search.domain.model import Document, Posting
from local_doc_search.search.analyzers import TermAnalyzer


logger = logging.getLogger(__name__)


class InvertedIndex:
    """Term -> postings mapping.

    Postings referencing a document that was later removed from the store are
    not reconciled here; readers skip postings they cannot resolve.
    """

    def __init__(self, analyzer: TermAnalyzer | None = None) -> None:
        self.analyzer = analyzer or TermAnalyzer()
        self._postings: dict[str, list[Posting]] = {}

    def __len__(self) -> int:
        return len(self._postings)

    def __contains__(self, term: object) -> bool:
        return term in self._postings

    def __iter__(self) -> Iterator[str]:
        return iter(self._postings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InvertedIndex):
            return NotImplemented
        return self._postings == other._postings

    def index_document(self, document: Document) -> list[str]:
        """Append one posting per distinct term of ``document``.

        Returns the distinct terms that received a posting, in first-seen order.
        """
        frequencies = Counter(self.analyzer.terms(document.content))
        for term, frequency in frequencies.items():
            self._postings.setdefault(term, []).append(
                Posting(doc_id=document.id, frequency=frequency, doc_name=document.name)
            )
        logger.debug("Indexed %d distinct terms for document %s", len(frequencies), document.id)
        return list(frequencies)

    def prefix_lookup(self, prefix: str) -> list[str]:
        """Return every indexed term starting with ``prefix`` (already lowercased)."""
        return [term for term in self._postings if term.startswith(prefix)]

    def postings(self, term: str) -> list[Posting]:
        """Return the postings recorded for ``term`` (empty when unknown)."""
        return list(self._postings.get(term, ()))

    def terms(self) -> list[str]:
        return list(self._postings)

    def remove_document(self, doc_id: str, terms: Sequence[str] | None = None) -> int:
        """Drop every posting for ``doc_id``; terms left without postings are removed.

        ``terms`` narrows the scan to the given terms when the caller knows them.
        Returns the number of postings removed.
        """
        candidates = list(terms) if terms is not None else list(self._postings)
        removed = 0
        for term in candidates:
            postings = self._postings.get(term)
            if not postings:
                continue
            kept = [posting for posting in postings if posting.doc_id != doc_id]
            removed += len(postings) - len(kept)
            if kept:
                self._postings[term] = kept
            else:
                del self._postings[term]
        return removed

    def clear(self) -> None:
        self._postings.clear()

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Serialize as ``{term: [posting, ...]}``."""
        return {term: [posting.to_dict() for posting in postings] for term, postings in self._postings.items()}

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Sequence[Mapping[str, Any]]],
        analyzer: TermAnalyzer | None = None,
    ) -> InvertedIndex:
        index = cls(analyzer)
        for term, entries in data.items():
            postings = [Posting.from_dict(dict(entry)) for entry in entries]
            if postings:
                index._postings[str(term)] = postings
        return index
