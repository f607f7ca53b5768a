"""Unit tests for clausefinder Pydantic models."""

from __future__ import annotations

import hashlib

import pytest
from pydantic import ValidationError

from clausefinder.models.chunk import make_chunk_id, make_document_id
from clausefinder.models.ingestion import (
    IngestionReport,
    IngestionStage,
    SkippedFile,
    StoreFailure,
)
from clausefinder.models.options import IngestionOptions, SearchOptions
from clausefinder.models.search import SearchFilters, SearchQuery
from tests.conftest import make_chunk

# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class TestIdentity:
    def test_document_id_is_sha256_of_path(self) -> None:
        expected = hashlib.sha256(b"/docs/a.pdf").hexdigest()
        assert make_document_id("/docs/a.pdf") == expected

    def test_chunk_id_is_deterministic(self) -> None:
        doc = make_document_id("/docs/a.pdf")
        assert make_chunk_id(doc, 0, "text") == make_chunk_id(doc, 0, "text")

    def test_chunk_id_changes_with_content_or_position(self) -> None:
        doc = make_document_id("/docs/a.pdf")
        base = make_chunk_id(doc, 0, "text")
        assert make_chunk_id(doc, 0, "text!") != base
        assert make_chunk_id(doc, 1, "text") != base
        assert make_chunk_id(make_document_id("/docs/b.pdf"), 0, "text") != base


# ---------------------------------------------------------------------------
# Chunk
# ---------------------------------------------------------------------------


class TestChunk:
    def test_page_span_must_be_ordered(self) -> None:
        with pytest.raises(ValidationError):
            make_chunk("text", page_start=3, page_end=2)

    def test_pages_are_one_based(self) -> None:
        with pytest.raises(ValidationError):
            make_chunk("text", page_start=0, page_end=1)

    def test_frozen(self) -> None:
        chunk = make_chunk("text")
        with pytest.raises(ValidationError):
            chunk.text_raw = "other"

    def test_content_hash(self) -> None:
        chunk = make_chunk("Records shall be retained.")
        assert chunk.content_hash == hashlib.sha256(b"Records shall be retained.").hexdigest()


# ---------------------------------------------------------------------------
# IngestionReport
# ---------------------------------------------------------------------------


def _report(path: str, chunked: bool) -> IngestionReport:
    if chunked:
        return IngestionReport(
            files_discovered=1,
            files_chunked=1,
            files_indexed=1,
            chunks_created=3,
        )
    return IngestionReport(
        files_discovered=1,
        skipped_files=(
            SkippedFile(path=path, stage=IngestionStage.EXTRACT, reason="corrupt document"),
        ),
    )


class TestIngestionReportMerge:
    def test_counts_add(self) -> None:
        merged = _report("/a.pdf", True).merge(_report("/b.pdf", False))
        assert merged.files_discovered == 2
        assert merged.files_chunked == 1
        assert merged.files_skipped == 1
        assert merged.chunks_created == 3

    def test_commutative(self) -> None:
        a = _report("/a.pdf", False)
        b = _report("/b.pdf", False)
        assert a.merge(b) == b.merge(a)

    def test_associative(self) -> None:
        a = _report("/a.pdf", False)
        b = _report("/b.pdf", True)
        c = IngestionReport(
            files_discovered=1,
            files_chunked=1,
            chunks_created=2,
            store_failures=(StoreFailure(path="/c.pdf", store="vector", reason="offline"),),
        )
        assert a.merge(b).merge(c) == a.merge(b.merge(c))

    def test_empty_is_identity(self) -> None:
        report = _report("/a.pdf", False)
        assert IngestionReport.empty().merge(report) == report
        assert report.merge(IngestionReport.empty()) == report

    def test_entries_are_sorted(self) -> None:
        merged = _report("/z.pdf", False).merge(_report("/a.pdf", False))
        assert [entry.path for entry in merged.skipped_files] == ["/a.pdf", "/z.pdf"]

    def test_store_failures_default_to_index_stage(self) -> None:
        failure = StoreFailure(path="/c.pdf", store="graph", reason="indexing failed")
        assert failure.stage == IngestionStage.INDEX
        assert failure.detail == ""


# ---------------------------------------------------------------------------
# Search models
# ---------------------------------------------------------------------------


class TestSearchFilters:
    def test_empty(self) -> None:
        assert SearchFilters().is_empty()
        assert not SearchFilters(standard="ISO9001").is_empty()

    def test_exact_and_prefix_matches(self) -> None:
        chunk = make_chunk(
            "text",
            source_path="/docs/iso/quality.pdf",
            standard="ISO9001",
            clause_id="4.2.1",
            section_path="4 Context > 4.2 Needs",
        )
        assert SearchFilters(standard="ISO9001").matches(chunk)
        assert SearchFilters(clause_id="4.2").matches(chunk)
        assert SearchFilters(section_path="4 Context").matches(chunk)
        assert SearchFilters(path_prefix="/docs/iso/").matches(chunk)
        assert not SearchFilters(path_prefix="/docs/en/").matches(chunk)
        assert not SearchFilters(clause_id="5").matches(chunk)

    def test_missing_field_fails_populated_filter(self) -> None:
        chunk = make_chunk("text", standard=None)
        assert not SearchFilters(standard="ISO9001").matches(chunk)
        assert SearchFilters().matches(chunk)


class TestSearchQuery:
    def test_top_k_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            SearchQuery(text="pump", top_k=0)

    def test_active_filters(self) -> None:
        assert not SearchQuery(text="pump").has_active_filters()
        assert SearchQuery(text="pump", required_terms=("seal",)).has_active_filters()
        assert SearchQuery(text="pump", blocked_terms=("seal",)).has_active_filters()
        assert SearchQuery(
            text="pump", filters=SearchFilters(version="2015")
        ).has_active_filters()


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class TestOptions:
    def test_extensions_normalized(self) -> None:
        options = IngestionOptions(extensions=("PDF", ".Txt", " "))
        assert options.extensions == (".pdf", ".txt")

    def test_search_defaults(self) -> None:
        options = SearchOptions()
        assert options.rrf_k == 60
        assert options.degrade_on_backend_failure is False

    def test_rejects_invalid_rrf_k(self) -> None:
        with pytest.raises(ValidationError):
            SearchOptions(rrf_k=0)
