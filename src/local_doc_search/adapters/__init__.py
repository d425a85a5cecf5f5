"""Adapters layer - persistence and file decoding implementations.

Abstracts snapshot storage and upload decoding away from the search core.
"""

from .decoders import DocxDecoder, PdfDecoder, TextDecoder, decode_file, get_decoder
from .persistence import (
    AbstractPersistenceAdapter,
    IndexSnapshot,
    InMemoryPersistenceAdapter,
    JsonFilePersistenceAdapter,
    SqlitePersistenceAdapter,
    create_persistence_adapter,
)


__all__ = [
    "AbstractPersistenceAdapter",
    "DocxDecoder",
    "InMemoryPersistenceAdapter",
    "IndexSnapshot",
    "JsonFilePersistenceAdapter",
    "PdfDecoder",
    "SqlitePersistenceAdapter",
    "TextDecoder",
    "create_persistence_adapter",
    "decode_file",
    "get_decoder",
]
