"""Tunable options for chunking, ingestion and search.

Each options model is frozen and carries its own defaults, so components can
be constructed without any configuration.  :mod:`clausefinder.main` builds
them from the merged YAML/environment config.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChunkingOptions(BaseModel):
    """Chunk-size controls for :class:`~clausefinder.services.ingestion.chunker.ClauseChunker`."""

    model_config = ConfigDict(frozen=True)

    max_chars: int = Field(default=1200, ge=50, description="Upper bound on chunk length in characters.")
    # A sentence longer than max_chars is cut at the last space after this fraction of the window.
    min_cut_ratio: float = Field(default=0.5, gt=0.0, le=1.0)
    # Tail of a hard-cut piece repeated at the start of the next; capped at half the piece.
    overlap_chars: int = Field(default=120, ge=0)


class IngestionOptions(BaseModel):
    """Discovery and concurrency controls for the ingestion pipeline."""

    model_config = ConfigDict(frozen=True)

    extensions: tuple[str, ...] = Field(default=(".pdf",), description="Candidate file suffixes.")
    max_workers: int = Field(default=4, ge=1, description="Files processed concurrently.")

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        normalized = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return tuple(normalized)


class SearchOptions(BaseModel):
    """Fusion and fan-out controls for the search coordinator."""

    model_config = ConfigDict(frozen=True)

    rrf_k: int = Field(default=60, gt=0, description="Reciprocal Rank Fusion damping constant.")
    default_top_k: int = Field(default=10, gt=0)
    max_top_k: int = Field(default=100, gt=0, description="Requested top_k is clamped to this.")
    candidate_multiplier: int = Field(
        default=4,
        ge=1,
        description="Each backend is asked for top_k * candidate_multiplier candidates.",
    )
    graph_seed_count: int = Field(default=5, ge=0, description="Fused hits used as graph seeds.")
    graph_max_hops: int = Field(default=2, ge=1)
    graph_weight: float = Field(default=0.5, ge=0.0, description="RRF weight of graph neighbours.")
    backend_timeout_seconds: float = Field(default=10.0, ge=0.0, description="0 disables the deadline.")
    degrade_on_backend_failure: bool = Field(
        default=False,
        description="Continue with the surviving mode when one backend fails.",
    )
    prefilter_backends: bool = Field(
        default=False,
        description="Pass structural filters down to the backends as well.",
    )
    require_query_terms: bool = Field(
        default=False,
        description="Without explicit required_terms, require every query word in each hit.",
    )
