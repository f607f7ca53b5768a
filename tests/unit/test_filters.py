"""Unit tests for post-fusion term and structural filters."""

from __future__ import annotations

from dataclasses import dataclass

from clausefinder.models.chunk import Chunk
from clausefinder.models.search import SearchFilters, SearchQuery
from clausefinder.services.search.filters import (
    apply_filters,
    implied_required_terms,
    passes_filters,
)
from tests.conftest import make_chunk


@dataclass
class _Hit:
    chunk: Chunk | None


_PUMP = make_chunk(
    "Inspect the Hydraulic  Pump seals weekly.",
    chunk_index=0,
    standard="ISO4413",
    clause_id="5.4",
)
_VALVE = make_chunk(
    "Relief valve setting must be recorded.",
    chunk_index=1,
    standard="ISO4413",
    clause_id="6.1",
)
_MANUAL = make_chunk(
    "Hydraulic pump spare parts list.",
    chunk_index=0,
    source_path="/docs/manual.pdf",
)


class TestPassesFilters:
    def test_required_terms_are_normalized(self) -> None:
        query = SearchQuery(text="pump", required_terms=("HYDRAULIC   pump",))
        assert passes_filters(_PUMP, query)
        assert not passes_filters(_VALVE, query)

    def test_blocked_terms(self) -> None:
        query = SearchQuery(text="pump", blocked_terms=("seals",))
        assert not passes_filters(_PUMP, query)
        assert passes_filters(_VALVE, query)

    def test_structural_filters(self) -> None:
        query = SearchQuery(text="pump", filters=SearchFilters(standard="ISO4413", clause_id="5"))
        assert passes_filters(_PUMP, query)
        assert not passes_filters(_VALVE, query)
        assert not passes_filters(_MANUAL, query)

    def test_blank_terms_ignored(self) -> None:
        query = SearchQuery(text="pump", required_terms=("  ",))
        assert passes_filters(_VALVE, query)


class TestApplyFilters:
    def test_keeps_order_and_drops_missing_payloads(self) -> None:
        hits = [_Hit(_MANUAL), _Hit(None), _Hit(_VALVE), _Hit(_PUMP)]
        query = SearchQuery(text="pump", required_terms=("hydraulic",))
        assert apply_filters(hits, query) == [_Hit(_MANUAL), _Hit(_PUMP)]

    def test_idempotent(self) -> None:
        hits = [_Hit(_MANUAL), _Hit(_VALVE), _Hit(_PUMP)]
        query = SearchQuery(text="pump", blocked_terms=("spare",))
        once = apply_filters(hits, query)
        assert apply_filters(once, query) == once


class TestImpliedRequiredTerms:
    def test_explicit_terms_win(self) -> None:
        query = SearchQuery(text="pump seals", required_terms=("relief valve",))
        assert implied_required_terms(query) == ("relief valve",)

    def test_query_tokens_deduplicated_in_order(self) -> None:
        query = SearchQuery(text="The pump, the PUMP seals of 4.2.1")
        assert implied_required_terms(query) == ("the", "pump", "seals", "4.2.1")

    def test_short_tokens_dropped(self) -> None:
        assert implied_required_terms(SearchQuery(text="an ok id")) == ()

    def test_implied_terms_filter_hits(self) -> None:
        query = SearchQuery(text="hydraulic pump")
        required = query.model_copy(update={"required_terms": implied_required_terms(query)})
        hits = [_Hit(_PUMP), _Hit(_VALVE), _Hit(_MANUAL)]
        assert apply_filters(hits, required) == [_Hit(_PUMP), _Hit(_MANUAL)]
