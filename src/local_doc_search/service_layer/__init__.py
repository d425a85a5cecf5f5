"""Service layer - use-case orchestration.

- Unit of Work keeps document insert and index update atomic
- Batch ingestion decodes uploads and feeds them to the engine one by one
"""

from .ingestion import UploadedFile, ingest_files, ingest_paths
from .unit_of_work import AbstractUnitOfWork, IngestionUnitOfWork


__all__ = [
    "AbstractUnitOfWork",
    "IngestionUnitOfWork",
    "UploadedFile",
    "ingest_files",
    "ingest_paths",
]
