"""Centralized configuration for local-doc-search using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every variable is read with the ``DOC_SEARCH_`` prefix, e.g.
    ``DOC_SEARCH_STORAGE_BACKEND=sqlite``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOC_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Storage
    data_dir: Path = Field(default=Path(".doc_search"), description="Directory holding the persisted snapshot")
    storage_backend: Literal["json", "sqlite", "memory"] = Field(
        default="json", description="Persistence adapter: json file, sqlite key-value table, or memory only"
    )
    store_filename: str = Field(
        default="", description="Snapshot filename inside data_dir; defaults to store.json / store.db"
    )

    # Indexing and query behaviour
    min_term_length: int = Field(default=3, ge=1, description="Shortest token kept as an index term")
    suggestion_limit: int = Field(default=10, ge=1, description="Maximum autocomplete suggestions")
    deduplicate_results: bool = Field(
        default=False,
        description="Collapse results for the same document matched through several terms",
    )
    preview_chars: int = Field(default=300, ge=40, description="Maximum characters in a result preview")

    # Upload
    supported_extensions: list[str] = Field(
        default_factory=lambda: [".txt", ".pdf", ".docx"],
        description="File extensions accepted by batch upload",
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("supported_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized = []
        for extension in value:
            ext = extension.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized

    @model_validator(mode="after")
    def _check_store_filename(self) -> "Settings":
        if self.store_filename and Path(self.store_filename).name != self.store_filename:
            raise ValueError("DOC_SEARCH_STORE_FILENAME must be a bare filename, not a path")
        return self

    def store_path(self) -> Path:
        """Get the full path of the persisted snapshot for the configured backend."""
        filename = self.store_filename or ("store.db" if self.storage_backend == "sqlite" else "store.json")
        return self.data_dir.expanduser() / filename

    def is_supported(self, filename: str) -> bool:
        """Check whether a file's extension is accepted for upload."""
        return Path(filename).suffix.lower() in self.supported_extensions
