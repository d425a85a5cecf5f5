"""Domain model - entities and value objects.

- Documents are immutable once ingested (frozen Pydantic dataclass)
- Postings link one term to one document with its in-document frequency
- Search results are derived at query time and never persisted

Serialized field names (``wordCount``, ``docId``, ``docName``) match the
layout written by earlier versions of the store so existing snapshots load.
"""

from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.dataclasses import dataclass


@dataclass(frozen=True)
class Document:
    """Aggregate root for an uploaded document.

    Identity is the ``id`` assigned by the document store at insertion time.
    """

    id: Annotated[str, Field(min_length=1)]
    name: str
    content: str
    word_count: int = Field(default=0, ge=0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "wordCount": self.word_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create from dictionary, accepting both camelCase and snake_case keys."""
        word_count = data.get("wordCount", data.get("word_count", 0))
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            content=str(data.get("content", "")),
            word_count=int(word_count),
        )


@dataclass(frozen=True)
class Posting:
    """A posting represents a term occurrence in a document.

    ``doc_name`` is a denormalized copy of the document name so posting lists
    can be rendered without resolving the document.
    """

    doc_id: str
    frequency: Annotated[int, Field(ge=1)]
    doc_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "docId": self.doc_id,
            "frequency": self.frequency,
            "docName": self.doc_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        doc_id = data.get("docId", data.get("doc_id", ""))
        doc_name = data.get("docName", data.get("doc_name", ""))
        return cls(doc_id=str(doc_id), frequency=int(data["frequency"]), doc_name=str(doc_name))


class SearchResult(BaseModel):
    """Value object for a single search hit.

    A document that matches several indexed terms sharing the query prefix
    yields one result per term; ``matched_term`` tells them apart.
    """

    model_config = ConfigDict(frozen=True)

    document: Document
    frequency: int
    search_term: str
    matched_term: str


class IngestionFailure(BaseModel):
    """Record of a file that could not be ingested during a batch upload."""

    model_config = ConfigDict(frozen=True)

    filename: str
    error_kind: str
    message: str


class IngestionReport(BaseModel):
    """Outcome of a batch upload."""

    ingested: list[Document] = Field(default_factory=list)
    failures: list[IngestionFailure] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.ingested)

    @property
    def failed(self) -> int:
        return len(self.failures)
