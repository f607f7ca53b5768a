"""Reciprocal Rank Fusion over per-mode candidate lists.

Each retrieval mode contributes ``weight / (k + rank)`` for every chunk it
returned, with 1-based ranks.  Scores from different backends (BM25 and
cosine similarity) are never compared directly; only ranks are, which is what
makes RRF robust to incomparable score scales.

Fused candidates are ordered by ``(-score, best rank, chunk_id)`` so that
ties resolve identically on every run.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from clausefinder.models.chunk import Chunk
from clausefinder.models.search import GraphNeighbor, HitExplanation, SearchCandidate, SearchMode

# Summation order for per-mode contributions; fixed so float sums are reproducible.
MODE_ORDER: tuple[SearchMode, ...] = (SearchMode.KEYWORD, SearchMode.VECTOR, SearchMode.GRAPH)


@dataclass
class FusedCandidate:
    """A chunk's accumulated evidence across retrieval modes."""

    chunk_id: str
    document_id: str
    source_path: str
    ranks: dict[SearchMode, int] = field(default_factory=dict)
    scores: dict[SearchMode, float] = field(default_factory=dict)
    contributions: dict[SearchMode, float] = field(default_factory=dict)
    graph_hops: int | None = None
    chunk: Chunk | None = None

    @property
    def score(self) -> float:
        return sum(self.contributions[mode] for mode in MODE_ORDER if mode in self.contributions)

    @property
    def best_rank(self) -> int:
        positions = list(self.ranks.values())
        if self.graph_hops is not None:
            positions.append(self.graph_hops)
        return min(positions) if positions else 0

    @property
    def sources(self) -> tuple[SearchMode, ...]:
        return tuple(mode for mode in MODE_ORDER if mode in self.contributions)

    def sort_key(self) -> tuple[float, int, str]:
        return (-self.score, self.best_rank, self.chunk_id)

    def explain(self) -> HitExplanation:
        return HitExplanation(
            ranks=dict(self.ranks),
            scores=dict(self.scores),
            contributions=dict(self.contributions),
            graph_hops=self.graph_hops,
        )


class ReciprocalRankFusion:
    """Combine ranked lists using Reciprocal Rank Fusion.

    Parameters
    ----------
    k:
        Damping constant; larger values flatten the advantage of top ranks.
    weights:
        Optional per-mode weights (default 1.0 for every mode).

    Examples
    --------
    >>> rrf = ReciprocalRankFusion(k=60)
    >>> rrf.fuse({})
    []
    """

    def __init__(self, k: int = 60, weights: Mapping[SearchMode, float] | None = None) -> None:
        if k <= 0:
            raise ValueError("k must be positive")
        self._k = k
        self._weights = dict(weights or {})

    @property
    def k(self) -> int:
        return self._k

    def contribution(self, rank: int, weight: float = 1.0) -> float:
        """Return ``weight / (k + rank)`` for a 1-based *rank*."""
        return weight / (self._k + rank)

    def fuse(self, ranked: Mapping[SearchMode, Sequence[SearchCandidate]]) -> list[FusedCandidate]:
        """Fuse best-first candidate lists into one ranking.

        Parameters
        ----------
        ranked:
            Candidate lists keyed by mode.  Only the first occurrence of a
            chunk within one list counts.

        Returns
        -------
        list[FusedCandidate]
            Sorted by descending fused score, then best rank, then chunk id.
        """
        fused: dict[str, FusedCandidate] = {}
        for mode in MODE_ORDER:
            candidates = ranked.get(mode)
            if not candidates:
                continue
            weight = self._weights.get(mode, 1.0)
            rank = 0
            for candidate in candidates:
                entry = fused.get(candidate.chunk_id)
                if entry is not None and mode in entry.ranks:
                    continue
                rank += 1
                if entry is None:
                    entry = FusedCandidate(
                        chunk_id=candidate.chunk_id,
                        document_id=candidate.document_id,
                        source_path=candidate.source_path,
                        chunk=candidate.chunk,
                    )
                    fused[candidate.chunk_id] = entry
                elif entry.chunk is None and candidate.chunk is not None:
                    entry.chunk = candidate.chunk
                entry.ranks[mode] = rank
                entry.scores[mode] = candidate.score
                entry.contributions[mode] = self.contribution(rank, weight)

        return sorted(fused.values(), key=FusedCandidate.sort_key)

    def add_graph_neighbors(
        self,
        fused: list[FusedCandidate],
        neighbors: Sequence[GraphNeighbor],
        weight: float,
    ) -> list[FusedCandidate]:
        """Merge graph neighbours that are not already ranked, then re-sort.

        Each new neighbour contributes ``weight / (k + hops)``, so closer
        neighbours rank higher.  Chunks already present keep their score.
        """
        present = {candidate.chunk_id for candidate in fused}
        merged = list(fused)
        for neighbor in neighbors:
            if neighbor.chunk_id in present:
                continue
            present.add(neighbor.chunk_id)
            merged.append(
                FusedCandidate(
                    chunk_id=neighbor.chunk_id,
                    document_id=neighbor.document_id,
                    source_path=neighbor.source_path,
                    scores={SearchMode.GRAPH: 1.0 / neighbor.hops},
                    contributions={SearchMode.GRAPH: self.contribution(neighbor.hops, weight)},
                    graph_hops=neighbor.hops,
                )
            )
        return sorted(merged, key=FusedCandidate.sort_key)
