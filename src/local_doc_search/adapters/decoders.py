"""File decoders that turn uploaded bytes into plain text.

Decoders are chosen by file extension. Anything without a registered decoder
is rejected with ``UnsupportedFormatError`` before it reaches the engine.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import ClassVar, Protocol

import docx
from pypdf import PdfReader

from local_doc_search.domain.errors import DecodeError, UnsupportedFormatError


logger = logging.getLogger(__name__)


class Decoder(Protocol):
    """Protocol implemented by file decoders."""

    extensions: ClassVar[tuple[str, ...]]

    def decode(self, data: bytes) -> str:  # pragma: no cover - interface definition
        ...


class TextDecoder:
    """Plain-text files, read as UTF-8 with undecodable bytes replaced."""

    extensions: ClassVar[tuple[str, ...]] = (".txt",)

    def decode(self, data: bytes) -> str:
        return data.decode("utf-8-sig", errors="replace")


class PdfDecoder:
    """PDF text layer extraction via pypdf; pages are separated by a blank line."""

    extensions: ClassVar[tuple[str, ...]] = (".pdf",)

    def decode(self, data: bytes) -> str:
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [(page.extract_text() or "") + "\n\n" for page in reader.pages]
        except Exception as exc:  # pypdf raises well beyond PdfReadError on damaged files
            raise DecodeError(f"Failed to read PDF: {exc}") from exc
        logger.debug("Extracted text from %d PDF pages", len(pages))
        return "".join(pages)


class DocxDecoder:
    """Word documents via python-docx; one line per paragraph."""

    extensions: ClassVar[tuple[str, ...]] = (".docx",)

    def decode(self, data: bytes) -> str:
        try:
            document = docx.Document(io.BytesIO(data))
            return "\n".join(paragraph.text for paragraph in document.paragraphs)
        except Exception as exc:  # zipfile, lxml and python-docx errors alike
            raise DecodeError(f"Failed to read DOCX: {exc}") from exc


_DECODERS: dict[str, Decoder] = {
    extension: decoder
    for decoder in (TextDecoder(), PdfDecoder(), DocxDecoder())
    for extension in decoder.extensions
}


def file_extension(filename: str) -> str:
    return Path(filename).suffix.lower()


def get_decoder(filename: str) -> Decoder:
    """Return the decoder for ``filename`` based on its extension."""
    extension = file_extension(filename)
    decoder = _DECODERS.get(extension)
    if decoder is None:
        raise UnsupportedFormatError(filename, extension)
    return decoder


def decode_file(filename: str, data: bytes) -> str:
    """Decode ``data`` with the decoder registered for ``filename``'s extension."""
    return get_decoder(filename).decode(data)
