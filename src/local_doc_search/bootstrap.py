"""Process-level setup for applications embedding the search engine."""

import logging

from local_doc_search.config import Settings
from local_doc_search.observability.logging import configure_logging
from local_doc_search.observability.tracing import init_tracing


logger = logging.getLogger(__name__)


def init_observability(settings: Settings | None = None, *, service_name: str = "local-doc-search") -> Settings:
    """Configure logging and tracing from settings and return the settings used.

    Call once at startup, before opening an engine. Libraries embedding the
    engine without calling this keep their own logging setup.
    """
    settings = settings or Settings()
    configure_logging(level=settings.log_level, json_output=settings.log_json)
    init_tracing(service_name=service_name, resource_attributes={"doc_search.backend": settings.storage_backend})
    logger.info("Observability initialized (backend=%s, data_dir=%s)", settings.storage_backend, settings.data_dir)
    return settings
