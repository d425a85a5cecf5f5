"""Persistence adapters for the document store and inverted index.

Every adapter stores the same two blobs the browser build kept in
local storage:

* ``documents`` - list of serialized documents, in insertion order
* ``searchIndex`` - mapping of term to serialized postings

Writes are full-state overwrites. Each adapter makes the overwrite atomic on
its own medium (temp file + rename for JSON, one transaction for SQLite), so a
crash mid-write leaves the previous snapshot readable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path
import sqlite3
from typing import Any, cast

import orjson
from pydantic import ValidationError

from local_doc_search.config import Settings
from local_doc_search.domain.errors import PersistenceError
from local_doc_search.domain.model import Document
from local_doc_search.search.inverted_index import InvertedIndex


logger = logging.getLogger(__name__)

DOCUMENTS_KEY = "documents"
INDEX_KEY = "searchIndex"


@dataclass
class IndexSnapshot:
    """Documents plus inverted index, as loaded from or saved to a store."""

    documents: list[Document] = field(default_factory=list)
    index: InvertedIndex = field(default_factory=InvertedIndex)

    @property
    def is_empty(self) -> bool:
        return not self.documents and len(self.index) == 0


def encode_snapshot(documents: Sequence[Document], index: InvertedIndex) -> dict[str, bytes]:
    """Serialize documents and index into the two persisted blobs."""
    return {
        DOCUMENTS_KEY: orjson.dumps([document.to_dict() for document in documents]),
        INDEX_KEY: orjson.dumps(index.to_dict()),
    }


def snapshot_from_payload(raw_documents: Any, raw_index: Any) -> IndexSnapshot:
    """Validate parsed blobs and rebuild the snapshot they describe."""
    if not isinstance(raw_documents, list) or not isinstance(raw_index, dict):
        raise PersistenceError("Corrupt snapshot: unexpected blob shapes")
    try:
        documents = [Document.from_dict(entry) for entry in raw_documents]
        index = InvertedIndex.from_dict(raw_index)
    except (ValidationError, KeyError, TypeError, ValueError) as exc:
        raise PersistenceError(f"Corrupt snapshot: {exc}") from exc
    return IndexSnapshot(documents=documents, index=index)


def decode_snapshot(blobs: Mapping[str, bytes | str | None]) -> IndexSnapshot:
    """Rebuild a snapshot from persisted blobs; missing blobs load as empty."""
    try:
        raw_documents = orjson.loads(blobs.get(DOCUMENTS_KEY) or b"[]")
        raw_index = orjson.loads(blobs.get(INDEX_KEY) or b"{}")
    except orjson.JSONDecodeError as exc:
        raise PersistenceError(f"Corrupt snapshot: {exc}") from exc
    return snapshot_from_payload(raw_documents, raw_index)


class AbstractPersistenceAdapter(ABC):
    """Durable blob store for the engine's full state."""

    @abstractmethod
    def load(self) -> IndexSnapshot:
        """Load the last saved snapshot, or an empty one when nothing was saved."""
        raise NotImplementedError

    @abstractmethod
    def save(self, documents: Sequence[Document], index: InvertedIndex) -> None:
        """Overwrite the stored snapshot with the given state."""
        raise NotImplementedError

    def close(self) -> None:
        """Optional hook for releasing resources held by the adapter."""

        return


class JsonFilePersistenceAdapter(AbstractPersistenceAdapter):
    """Persist both blobs in a single JSON file, replaced atomically."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> IndexSnapshot:
        if not self.path.exists():
            logger.info("No snapshot at %s; starting empty", self.path)
            return IndexSnapshot()
        try:
            payload = orjson.loads(self.path.read_bytes())
        except OSError as exc:
            raise PersistenceError(f"Failed to read snapshot {self.path}: {exc}") from exc
        except orjson.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt snapshot {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise PersistenceError(f"Corrupt snapshot {self.path}: expected an object")
        snapshot = snapshot_from_payload(payload.get(DOCUMENTS_KEY, []), payload.get(INDEX_KEY, {}))
        logger.debug("Loaded %d documents from %s", len(snapshot.documents), self.path)
        return snapshot

    def save(self, documents: Sequence[Document], index: InvertedIndex) -> None:
        payload = {
            DOCUMENTS_KEY: [document.to_dict() for document in documents],
            INDEX_KEY: index.to_dict(),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._atomic_write(orjson.dumps(payload))
        except OSError as exc:
            raise PersistenceError(f"Failed to write snapshot {self.path}: {exc}") from exc

    def _atomic_write(self, serialized: bytes) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_bytes(serialized)
        tmp_path.replace(self.path)


class SqlitePersistenceAdapter(AbstractPersistenceAdapter):
    """Persist both blobs in a two-row key-value table, written in one transaction."""

    _CREATE_TABLE = "CREATE TABLE IF NOT EXISTS kv_store (key TEXT PRIMARY KEY, value BLOB NOT NULL) WITHOUT ROWID"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._conn: sqlite3.Connection | None = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path)
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA synchronous = NORMAL")
            conn.execute(self._CREATE_TABLE)
            conn.commit()
            self._conn = conn
        return self._conn

    def load(self) -> IndexSnapshot:
        try:
            rows = self._connection().execute("SELECT key, value FROM kv_store").fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to read snapshot {self.path}: {exc}") from exc
        blobs = {str(key): cast("bytes", value) for key, value in rows}
        return decode_snapshot(blobs)

    def save(self, documents: Sequence[Document], index: InvertedIndex) -> None:
        blobs = encode_snapshot(documents, index)
        try:
            conn = self._connection()
            with conn:
                conn.executemany(
                    "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                    list(blobs.items()),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to write snapshot {self.path}: {exc}") from exc

    def close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.close()
            except sqlite3.Error:
                logger.warning("Failed to close sqlite snapshot %s", self.path)
            self._conn = None


class InMemoryPersistenceAdapter(AbstractPersistenceAdapter):
    """Keeps serialized blobs in memory; used for tests and ephemeral engines."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.save_count = 0

    def load(self) -> IndexSnapshot:
        return decode_snapshot(self.blobs)

    def save(self, documents: Sequence[Document], index: InvertedIndex) -> None:
        self.blobs = encode_snapshot(documents, index)
        self.save_count += 1


def create_persistence_adapter(settings: Settings) -> AbstractPersistenceAdapter:
    """Create the adapter selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        return InMemoryPersistenceAdapter()
    if settings.storage_backend == "sqlite":
        return SqlitePersistenceAdapter(settings.store_path())
    return JsonFilePersistenceAdapter(settings.store_path())
