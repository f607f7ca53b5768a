"""Query, candidate and result models for the retrieval fusion coordinator.

A query fans out to the keyword and vector backends, each of which returns
ranked :class:`SearchCandidate` objects.  The coordinator fuses them with
Reciprocal Rank Fusion, widens the pool with graph neighbours
(:class:`GraphNeighbor`), filters, truncates and returns a
:class:`SearchResult` of :class:`SearchHit` objects.

All models use frozen config; the coordinator builds new instances at each
stage instead of mutating candidates in place.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from clausefinder.models.chunk import Chunk


class SearchMode(str, Enum):
    """Retrieval modes whose results are fused into one ranking."""

    KEYWORD = "keyword"
    VECTOR = "vector"
    GRAPH = "graph"


# ---------------------------------------------------------------------------
# Query side
# ---------------------------------------------------------------------------
class SearchFilters(BaseModel):
    """Optional structural constraints on the chunks a query may return.

    ``standard``, ``version`` and ``clause_id`` match exactly or as a prefix
    (``clause_id="4.2"`` admits ``4.2.1``); ``section_path`` and
    ``path_prefix`` are prefix matches.
    """

    model_config = ConfigDict(frozen=True)

    standard: str | None = Field(default=None, description="Standard designation, e.g. 'ISO9001'.")
    version: str | None = Field(default=None, description="Edition or revision marker.")
    section_path: str | None = Field(default=None, description="Required section-path prefix.")
    clause_id: str | None = Field(default=None, description="Clause number or clause prefix.")
    path_prefix: str | None = Field(default=None, description="Required source-path prefix.")

    def is_empty(self) -> bool:
        """Return ``True`` when no structural filter is set."""
        return all(
            value is None
            for value in (
                self.standard,
                self.version,
                self.section_path,
                self.clause_id,
                self.path_prefix,
            )
        )

    def matches(self, chunk: Chunk) -> bool:
        """Return ``True`` if *chunk* satisfies every populated filter.

        A filter value matches when the chunk's field equals it or starts
        with it; a chunk missing the field never matches a populated filter.
        """
        checks = (
            (self.standard, chunk.standard),
            (self.version, chunk.version),
            (self.section_path, chunk.section_path),
            (self.clause_id, chunk.clause_id),
            (self.path_prefix, chunk.source_path),
        )
        for wanted, actual in checks:
            if wanted is None:
                continue
            if actual is None or not actual.startswith(wanted):
                return False
        return True


class SearchQuery(BaseModel):
    """A single retrieval request."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Free-text query.")
    top_k: int = Field(default=10, gt=0, description="Maximum number of hits to return.")
    required_terms: tuple[str, ...] = Field(
        default=(),
        description="Terms that must all appear in a hit's normalized text.",
    )
    blocked_terms: tuple[str, ...] = Field(
        default=(),
        description="Terms that must not appear in a hit's normalized text.",
    )
    filters: SearchFilters = Field(default_factory=SearchFilters)
    explain: bool = Field(default=False, description="Attach per-mode rank explanations to hits.")

    def has_active_filters(self) -> bool:
        """Return ``True`` when any term or structural filter constrains the hits."""
        return bool(self.required_terms or self.blocked_terms or not self.filters.is_empty())


# ---------------------------------------------------------------------------
# Backend results
# ---------------------------------------------------------------------------
class SearchCandidate(BaseModel):
    """One ranked result from a single retrieval backend.

    ``chunk`` is the lazily attached payload; backends may leave it empty and
    the coordinator hydrates it only when a stage needs the text.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    document_id: str
    source_path: str
    score: float = Field(description="Backend-native relevance score (higher is better).")
    source: SearchMode
    chunk: Chunk | None = None


class GraphNeighbor(BaseModel):
    """A chunk reachable from the seed set by following citation edges."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    document_id: str
    source_path: str
    hops: int = Field(ge=1, description="Shortest path length from any seed chunk.")


# ---------------------------------------------------------------------------
# Output side
# ---------------------------------------------------------------------------
class HitExplanation(BaseModel):
    """Why a hit ranked where it did."""

    model_config = ConfigDict(frozen=True)

    ranks: dict[SearchMode, int] = Field(default_factory=dict, description="1-based rank per mode.")
    scores: dict[SearchMode, float] = Field(
        default_factory=dict,
        description="Backend-native score per mode.",
    )
    contributions: dict[SearchMode, float] = Field(
        default_factory=dict,
        description="Fused-score contribution per mode.",
    )
    graph_hops: int | None = Field(default=None, description="Hop distance if added by graph expansion.")


class SearchHit(BaseModel):
    """A fused, filtered result returned to the caller."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    document_id: str
    source_path: str
    score: float = Field(description="Fused RRF score.")
    sources: tuple[SearchMode, ...] = Field(description="Modes that surfaced this chunk.")
    chunk: Chunk | None = None
    explanation: HitExplanation | None = None


class SearchResult(BaseModel):
    """Ranked hits for one query, plus any modes lost under degraded operation."""

    model_config = ConfigDict(frozen=True)

    query: SearchQuery
    hits: list[SearchHit] = Field(default_factory=list)
    degraded_modes: tuple[SearchMode, ...] = Field(
        default=(),
        description="Modes whose backend failed when degradation was allowed.",
    )
