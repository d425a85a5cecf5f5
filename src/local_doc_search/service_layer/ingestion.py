"""Batch upload: decode files and ingest them one at a time.

A failure on one file (unsupported extension, undecodable bytes, or an
ingestion error) is logged and recorded in the report; the rest of the batch
still runs. Files are processed strictly in order and each is fully ingested
and persisted before the next one starts.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Self

from local_doc_search.adapters.decoders import file_extension, get_decoder
from local_doc_search.domain.errors import DecodeError, UnsupportedFormatError
from local_doc_search.domain.model import IngestionFailure, IngestionReport
from local_doc_search.observability.context import operation_scope
from local_doc_search.observability.tracing import create_span


if TYPE_CHECKING:
    from local_doc_search.search_engine import SearchEngine


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """A file as received from the caller: its name and raw bytes."""

    filename: str
    data: bytes

    @classmethod
    def from_path(cls, path: str | Path) -> Self:
        file_path = Path(path)
        return cls(filename=file_path.name, data=file_path.read_bytes())


def ingest_files(engine: SearchEngine, files: Iterable[UploadedFile]) -> IngestionReport:
    """Decode and ingest every file, collecting per-file failures.

    Args:
        engine: Open search engine receiving the documents.
        files: Uploads in the order they should be ingested.

    Returns:
        IngestionReport listing ingested documents and failures.
    """
    report = IngestionReport()
    for upload in files:
        with (
            operation_scope("ingest_file", file_name=upload.filename),
            create_span("doc_search.ingest_file", attributes={"file.name": upload.filename}),
        ):
            failure = _ingest_one(engine, upload, report)
        if failure is not None:
            report.failures.append(failure)

    logger.info("Batch upload finished: %d ingested, %d failed", report.succeeded, report.failed)
    return report


def ingest_paths(engine: SearchEngine, paths: Iterable[str | Path]) -> IngestionReport:
    """Read files from disk and ingest them; unreadable paths are reported as failures."""
    uploads: list[UploadedFile] = []
    unreadable: list[IngestionFailure] = []
    for path in paths:
        try:
            uploads.append(UploadedFile.from_path(path))
        except OSError as exc:
            logger.warning("Cannot read %s: %s", path, exc)
            unreadable.append(IngestionFailure(filename=str(path), error_kind="ReadFailure", message=str(exc)))

    report = ingest_files(engine, uploads)
    report.failures.extend(unreadable)
    return report


def _ingest_one(engine: SearchEngine, upload: UploadedFile, report: IngestionReport) -> IngestionFailure | None:
    extension = file_extension(upload.filename)
    if not engine.settings.is_supported(upload.filename):
        logger.warning("Unsupported: %s", upload.filename)
        return IngestionFailure(
            filename=upload.filename,
            error_kind="UnsupportedFormat",
            message=f"Unsupported file extension '{extension}'",
        )

    try:
        content = get_decoder(upload.filename).decode(upload.data)
    except UnsupportedFormatError as exc:
        logger.warning("Unsupported: %s", upload.filename)
        return IngestionFailure(filename=upload.filename, error_kind="UnsupportedFormat", message=str(exc))
    except DecodeError as exc:
        logger.warning("Failed to decode %s: %s", upload.filename, exc)
        return IngestionFailure(filename=upload.filename, error_kind="DecodeFailure", message=str(exc))
    except Exception as exc:
        logger.exception("Decoder crashed on %s", upload.filename)
        return IngestionFailure(filename=upload.filename, error_kind="DecodeFailure", message=str(exc))

    try:
        document = engine.add_document(upload.filename, content)
    except Exception as exc:
        logger.exception("Failed to ingest %s", upload.filename)
        return IngestionFailure(filename=upload.filename, error_kind=type(exc).__name__, message=str(exc))

    report.ingested.append(document)
    return None
