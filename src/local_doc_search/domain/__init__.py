"""Domain layer - pure business logic with no infrastructure dependencies.

This layer contains:
- Entities: Document (identity = store-assigned id)
- Value Objects: Posting, SearchResult, ingestion report records
- Error kinds shared by the engine, adapters and service layer
"""

from local_doc_search.domain.errors import (
    DecodeError,
    DocumentNotFoundError,
    EmptyQueryError,
    EngineClosedError,
    PersistenceError,
    SearchError,
    UnsupportedFormatError,
)
from local_doc_search.domain.model import Document, IngestionFailure, IngestionReport, Posting, SearchResult


__all__ = [
    "DecodeError",
    "Document",
    "DocumentNotFoundError",
    "EmptyQueryError",
    "EngineClosedError",
    "IngestionFailure",
    "IngestionReport",
    "PersistenceError",
    "Posting",
    "SearchError",
    "SearchResult",
    "UnsupportedFormatError",
]
