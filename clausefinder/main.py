"""clausefinder composition root.

Wires providers and services together via constructor injection.  Loads
configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and returns ready-to-use ingestion and search services.

Typical scripting use::

    components = build_pipeline()
    run = await components["ingestion_service"].ingest_folder("docs/")
    result = await components["search_coordinator"].search(
        components["search_coordinator"].make_query("hydraulic pump pressure")
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from clausefinder.config.loader import load_config
from clausefinder.config.settings import Settings
from clausefinder.interfaces.embedding_provider import IEmbeddingProvider
from clausefinder.interfaces.graph_index import IGraphIndex
from clausefinder.interfaces.keyword_index import IKeywordIndex
from clausefinder.interfaces.ocr_provider import IOCRProvider
from clausefinder.interfaces.vector_index import IVectorIndex
from clausefinder.models.options import ChunkingOptions, IngestionOptions, SearchOptions
from clausefinder.providers.embedding.ngram_embedding_provider import (
    DEFAULT_DIMENSIONS,
    NgramEmbeddingProvider,
)
from clausefinder.providers.extraction.pymupdf_extractor import PyMuPDFExtractor
from clausefinder.providers.graph.memory_graph_index import InMemoryGraphIndex
from clausefinder.providers.keyword.memory_keyword_index import InMemoryKeywordIndex
from clausefinder.providers.ocr.http_ocr_provider import HttpOCRProvider
from clausefinder.providers.vector.memory_vector_index import InMemoryVectorIndex
from clausefinder.services.extraction_service import PageExtractionService
from clausefinder.services.ingestion.chunker import ClauseChunker
from clausefinder.services.ingestion.ingestion_service import IngestionService
from clausefinder.services.ingestion.metadata_extractor import MetadataExtractor
from clausefinder.services.search.coordinator import SearchCoordinator
from clausefinder.utils.errors import ConfigurationError
from clausefinder.utils.logging import configure_logging

logger = structlog.get_logger(logger_name=__name__)


@dataclass(frozen=True)
class Backends:
    """The store adapters and embedder shared by ingestion and search."""

    keyword_index: IKeywordIndex
    vector_index: IVectorIndex
    graph_index: IGraphIndex
    embedding_provider: IEmbeddingProvider


# ---------------------------------------------------------------------------
# Settings and options
# ---------------------------------------------------------------------------


def build_settings() -> Settings:
    """Read settings from the environment and ``.env``."""
    return Settings()


def _options(model: type, section: dict[str, Any] | None, name: str) -> Any:
    try:
        return model(**(section or {}))
    except ValidationError as exc:
        raise ConfigurationError(message=f"Invalid '{name}' configuration: {exc}") from exc


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


def build_ocr_provider(
    config: dict[str, Any],
    http_client: httpx.AsyncClient | None = None,
) -> IOCRProvider | None:
    """Return the OCR fallback provider, or ``None`` when no endpoint is configured."""
    ocr = config.get("ocr") or {}
    endpoint = ocr.get("endpoint")
    if not endpoint:
        logger.info("ocr_fallback_disabled")
        return None
    return HttpOCRProvider(
        endpoint=endpoint,
        api_key=ocr.get("api_key") or None,
        timeout=float(ocr.get("timeout_seconds") or 120.0),
        http_client=http_client,
    )


def build_backends(config: dict[str, Any] | None = None) -> Backends:
    """Construct the in-memory keyword, vector and graph stores plus the embedder."""
    embedding = (config or {}).get("embedding") or {}
    return Backends(
        keyword_index=InMemoryKeywordIndex(),
        vector_index=InMemoryVectorIndex(),
        graph_index=InMemoryGraphIndex(),
        embedding_provider=NgramEmbeddingProvider(
            dimensions=int(embedding.get("dimensions", DEFAULT_DIMENSIONS))
        ),
    )


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


def build_ingestion_service(
    config: dict[str, Any],
    backends: Backends,
    ocr_provider: IOCRProvider | None = None,
) -> IngestionService:
    """Assemble the ingestion pipeline over *backends*."""
    metadata_extractor = MetadataExtractor()
    chunker = ClauseChunker(
        options=_options(ChunkingOptions, config.get("chunking"), "chunking"),
        metadata_extractor=metadata_extractor,
    )
    return IngestionService(
        extraction=PageExtractionService(PyMuPDFExtractor(), ocr_provider),
        chunker=chunker,
        embedding_provider=backends.embedding_provider,
        keyword_index=backends.keyword_index,
        vector_index=backends.vector_index,
        graph_index=backends.graph_index,
        options=_options(IngestionOptions, config.get("ingestion"), "ingestion"),
        metadata_extractor=metadata_extractor,
    )


def build_search_coordinator(config: dict[str, Any], backends: Backends) -> SearchCoordinator:
    """Assemble the search coordinator over *backends*."""
    return SearchCoordinator(
        keyword_index=backends.keyword_index,
        vector_index=backends.vector_index,
        graph_index=backends.graph_index,
        embedding_provider=backends.embedding_provider,
        options=_options(SearchOptions, config.get("search"), "search"),
    )


def build_pipeline(custom_settings: Settings | None = None) -> dict[str, Any]:
    """Construct and return every service with injected dependencies.

    Parameters
    ----------
    custom_settings:
        Application settings.  Read from the environment if not provided.

    Returns
    -------
    dict
        Components keyed by role name: ``settings``, ``config``,
        ``backends``, ``ingestion_service``, ``search_coordinator``.
    """
    s = custom_settings or build_settings()
    config = load_config(settings=s)

    logging_config = config["logging"]
    configure_logging(
        log_level=str(logging_config["level"]),
        json_output=bool(logging_config.get("json", False)),
        app_env=str(config["app"]["env"]),
    )

    backends = build_backends(config)
    ocr_provider = build_ocr_provider(config)
    ingestion_service = build_ingestion_service(config, backends, ocr_provider)
    search_coordinator = build_search_coordinator(config, backends)

    logger.info(
        "pipeline_built",
        env=config["app"]["env"],
        ocr_enabled=ocr_provider is not None,
    )
    return {
        "settings": s,
        "config": config,
        "backends": backends,
        "ingestion_service": ingestion_service,
        "search_coordinator": search_coordinator,
    }
