"""Unit tests for Reciprocal Rank Fusion and graph-neighbour merging."""

from __future__ import annotations

import pytest

from clausefinder.models.search import GraphNeighbor, SearchMode
from clausefinder.services.search.fusion import ReciprocalRankFusion
from tests.conftest import make_candidate

K = SearchMode.KEYWORD
V = SearchMode.VECTOR
G = SearchMode.GRAPH


def _ranked(keyword: list[str], vector: list[str]) -> dict[SearchMode, list]:
    return {
        K: [make_candidate(cid, K, score=10.0 - i) for i, cid in enumerate(keyword)],
        V: [make_candidate(cid, V, score=0.9 - i / 10) for i, cid in enumerate(vector)],
    }


class TestFuse:
    def test_two_list_ordering(self) -> None:
        fused = ReciprocalRankFusion(k=60).fuse(_ranked(["A", "B", "C"], ["B", "A", "D"]))

        assert [c.chunk_id for c in fused] == ["A", "B", "C", "D"]
        assert fused[0].score == pytest.approx(1 / 61 + 1 / 62)
        assert fused[2].score == pytest.approx(1 / 63)

    def test_ranks_and_sources_recorded(self) -> None:
        fused = ReciprocalRankFusion().fuse(_ranked(["A", "B"], ["B", "C"]))
        by_id = {c.chunk_id: c for c in fused}

        assert by_id["B"].ranks == {K: 2, V: 1}
        assert by_id["B"].sources == (K, V)
        assert by_id["C"].sources == (V,)
        assert by_id["A"].scores[K] == 10.0

    def test_agreement_beats_single_mode(self) -> None:
        fused = ReciprocalRankFusion().fuse(_ranked(["X", "Y"], ["Y"]))
        assert [c.chunk_id for c in fused] == ["Y", "X"]

    def test_improving_rank_never_lowers_score(self) -> None:
        rrf = ReciprocalRankFusion()
        lower = {c.chunk_id: c.score for c in rrf.fuse(_ranked(["A", "B", "T"], ["C"]))}
        higher = {c.chunk_id: c.score for c in rrf.fuse(_ranked(["T", "A", "B"], ["C"]))}
        assert higher["T"] > lower["T"]

    def test_duplicate_in_one_list_counts_once(self) -> None:
        fused = ReciprocalRankFusion().fuse({K: [make_candidate(cid, K) for cid in ["A", "A", "B"]]})
        by_id = {c.chunk_id: c for c in fused}
        assert by_id["A"].ranks[K] == 1
        assert by_id["B"].ranks[K] == 2

    def test_weights(self) -> None:
        fused = ReciprocalRankFusion(weights={V: 2.0}).fuse(_ranked(["A"], ["B"]))
        assert [c.chunk_id for c in fused] == ["B", "A"]

    def test_empty_input(self) -> None:
        assert ReciprocalRankFusion().fuse({}) == []

    def test_invalid_k(self) -> None:
        with pytest.raises(ValueError):
            ReciprocalRankFusion(k=0)

    def test_explanation(self) -> None:
        fused = ReciprocalRankFusion().fuse(_ranked(["A"], ["A"]))
        explanation = fused[0].explain()
        assert explanation.ranks == {K: 1, V: 1}
        assert explanation.contributions[K] == pytest.approx(1 / 61)
        assert explanation.graph_hops is None


class TestGraphNeighbors:
    def _neighbor(self, chunk_id: str, hops: int) -> GraphNeighbor:
        return GraphNeighbor(
            chunk_id=chunk_id,
            document_id=f"doc-{chunk_id}",
            source_path=f"/docs/{chunk_id}.pdf",
            hops=hops,
        )

    def test_new_neighbors_added_with_hop_rank(self) -> None:
        rrf = ReciprocalRankFusion()
        fused = rrf.fuse(_ranked(["A"], ["A"]))
        merged = rrf.add_graph_neighbors(
            fused, [self._neighbor("N1", 1), self._neighbor("N2", 2)], weight=0.5
        )
        by_id = {c.chunk_id: c for c in merged}

        assert [c.chunk_id for c in merged] == ["A", "N1", "N2"]
        assert by_id["N1"].score == pytest.approx(0.5 / 61)
        assert by_id["N1"].sources == (G,)
        assert by_id["N2"].graph_hops == 2
        assert by_id["N2"].scores[G] == pytest.approx(0.5)

    def test_existing_candidates_keep_their_score(self) -> None:
        rrf = ReciprocalRankFusion()
        fused = rrf.fuse(_ranked(["A", "B"], []))
        before = {c.chunk_id: c.score for c in fused}
        merged = rrf.add_graph_neighbors(fused, [self._neighbor("B", 1)], weight=0.5)

        assert {c.chunk_id: c.score for c in merged} == before
        assert all(c.graph_hops is None for c in merged)
