"""Error kinds raised by the search core and its collaborators."""


class SearchError(Exception):
    """Base class for all errors raised by local-doc-search."""


class EmptyQueryError(SearchError, ValueError):
    """Raised when a search is requested with a blank or whitespace-only term."""

    def __init__(self, query: str = "") -> None:
        super().__init__("Enter a search term")
        self.query = query


class DocumentNotFoundError(SearchError, LookupError):
    """Raised when a document id does not resolve to a stored document."""

    def __init__(self, doc_id: str) -> None:
        super().__init__(f"Document not found: {doc_id}")
        self.doc_id = doc_id


class UnsupportedFormatError(SearchError):
    """Raised when no decoder is registered for a file extension."""

    def __init__(self, filename: str, extension: str) -> None:
        super().__init__(f"Unsupported: {filename}")
        self.filename = filename
        self.extension = extension


class DecodeError(SearchError):
    """Raised when a decoder cannot extract text from file bytes."""


class PersistenceError(SearchError):
    """Raised when a persisted snapshot cannot be read or written."""


class EngineClosedError(SearchError, RuntimeError):
    """Raised when an operation is attempted on a closed engine."""
