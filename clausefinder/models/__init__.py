"""Pydantic v2 data models for clausefinder.

Re-exports
----------
Chunk, ChunkKind, DocumentFingerprint, PageText
    Document and chunk models (``chunk.py``).
SearchMode, SearchFilters, SearchQuery, SearchCandidate, GraphNeighbor,
HitExplanation, SearchHit, SearchResult
    Query and result models (``search.py``).
IngestionStage, SkippedFile, StoreFailure, IngestionReport, IngestionRun
    Ingestion outcome models (``ingestion.py``).
ChunkingOptions, IngestionOptions, SearchOptions
    Component options (``options.py``).
"""

from clausefinder.models.chunk import (
    Chunk,
    ChunkKind,
    DocumentFingerprint,
    PageText,
    make_chunk_id,
    make_document_id,
)
from clausefinder.models.ingestion import (
    IngestionReport,
    IngestionRun,
    IngestionStage,
    SkippedFile,
    StoreFailure,
)
from clausefinder.models.options import ChunkingOptions, IngestionOptions, SearchOptions
from clausefinder.models.search import (
    GraphNeighbor,
    HitExplanation,
    SearchCandidate,
    SearchFilters,
    SearchHit,
    SearchMode,
    SearchQuery,
    SearchResult,
)

__all__ = [
    "Chunk",
    "ChunkKind",
    "ChunkingOptions",
    "DocumentFingerprint",
    "GraphNeighbor",
    "HitExplanation",
    "IngestionOptions",
    "IngestionReport",
    "IngestionRun",
    "IngestionStage",
    "PageText",
    "SearchCandidate",
    "SearchFilters",
    "SearchHit",
    "SearchMode",
    "SearchOptions",
    "SearchQuery",
    "SearchResult",
    "SkippedFile",
    "StoreFailure",
    "make_chunk_id",
    "make_document_id",
]
