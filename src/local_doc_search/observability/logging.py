"""Structured logging for the search engine.

Log lines are single JSON objects carrying the trace correlation fields and
the engine operation from ``observability.context``. Document text can end up
in ``extra`` fields, so long values are clipped and secret-looking keys are
masked before serialization.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from local_doc_search.observability.context import get_trace_context


# Attributes every LogRecord carries; anything else came in through ``extra``
_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Render records as JSON with trace ids, operation tags and masked extras."""

    REDACT_KEYS = frozenset({"password", "token", "api_key", "secret", "authorization"})
    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
        }
        if "." in record.name:
            entry["component"] = record.name.rsplit(".", 1)[-1]

        # trace_id, span_id and any operation tags
        entry.update(get_trace_context())

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(self._extras(record))
        return orjson.dumps(entry, default=_to_jsonable).decode("utf-8")

    def _extras(self, record: logging.LogRecord) -> dict[str, Any]:
        extras: dict[str, Any] = {}
        for key, value in vars(record).items():
            if key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            if key.lower() in self.REDACT_KEYS:
                extras[key] = "[REDACTED]"
            elif isinstance(value, str):
                extras[key] = _clip(value, self.MAX_FIELD_LEN)
            else:
                extras[key] = value
        return extras


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    return repr(value)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Root log level name, case-insensitive.
        json_output: Use ``JsonFormatter`` when True, a plain text line otherwise.
        logger_levels: Per-logger level overrides (logger name -> level name).
    """
    root = logging.getLogger()
    root.setLevel(_level(level))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)

    # pypdf warns on every malformed object it recovers from
    logging.getLogger("pypdf").setLevel(logging.ERROR)

    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_level(name_level))


def _level(name: str) -> int:
    resolved = logging.getLevelName(name.upper())
    return resolved if isinstance(resolved, int) else logging.INFO
