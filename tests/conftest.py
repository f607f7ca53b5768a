"""Shared pytest fixtures for the clausefinder test suite."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import fitz
import pytest

from clausefinder.interfaces.embedding_provider import IEmbeddingProvider
from clausefinder.interfaces.graph_index import IGraphIndex
from clausefinder.interfaces.keyword_index import IKeywordIndex
from clausefinder.interfaces.page_extractor import IPageExtractor
from clausefinder.interfaces.vector_index import IVectorIndex
from clausefinder.models.chunk import (
    Chunk,
    DocumentFingerprint,
    PageText,
    make_chunk_id,
    make_document_id,
)
from clausefinder.models.search import SearchCandidate, SearchMode
from clausefinder.providers.embedding.ngram_embedding_provider import NgramEmbeddingProvider
from clausefinder.providers.graph.memory_graph_index import InMemoryGraphIndex
from clausefinder.providers.keyword.memory_keyword_index import InMemoryKeywordIndex
from clausefinder.providers.vector.memory_vector_index import InMemoryVectorIndex
from clausefinder.utils.text_normalizer import normalize_text

# ---------------------------------------------------------------------------
# Sample document text
# ---------------------------------------------------------------------------

QUALITY_MANUAL_PAGES = [
    PageText(
        page=1,
        text=(
            "Quality management systems\n"
            "4 Context of the organization\n"
            "The organization shall determine external and internal issues.\n"
            "4.1 Understanding the organization\n"
            "Issues relevant to its purpose shall be monitored. See 4.2.1 for records.\n"
            "\n"
            "4.2 Needs of interested parties\n"
            "The organization shall determine interested parties.\n"
        ),
    ),
    PageText(
        page=2,
        text=(
            "4.2.1 Control of records\n"
            "Records shall be retained for 10 years at 20 °C.\n"
            "5 Leadership\n"
            "Top management shall demonstrate commitment, as required by clause 4.1.\n"
        ),
    ),
]

MAINTENANCE_MANUAL_PAGES = [
    PageText(
        page=1,
        text=(
            "1 Hydraulic pump maintenance\n"
            "Inspect the hydraulic pump seals every 500 hours.\n"
            "Maintenance records shall be kept with the pump logbook.\n"
            "2 Pressure limits\n"
            "Operating pressure must not exceed 210 bar.\n"
        ),
    ),
]


def make_fingerprint(
    source_path: str = "/docs/iso_9001_2015.pdf",
    standard: str | None = "ISO9001",
    version: str | None = "2015",
) -> DocumentFingerprint:
    """Build a fingerprint the way the ingestion service would for *source_path*."""
    return DocumentFingerprint(
        document_id=make_document_id(source_path),
        title=Path(source_path).name,
        source_path=source_path,
        checksum="0" * 64,
        standard=standard,
        version=version,
    )


def make_chunk(
    text: str,
    chunk_index: int = 0,
    source_path: str = "/docs/manual.pdf",
    chunk_id: str | None = None,
    **fields: object,
) -> Chunk:
    """Build a standalone chunk with a derived identity unless *chunk_id* is given."""
    document_id = make_document_id(source_path)
    return Chunk(
        chunk_id=chunk_id or make_chunk_id(document_id, chunk_index, text),
        document_id=document_id,
        source_path=source_path,
        title=Path(source_path).name,
        text_raw=text,
        text_normalized=normalize_text(text),
        page_start=fields.pop("page_start", 1),
        page_end=fields.pop("page_end", 1),
        chunk_index=chunk_index,
        **fields,
    )


def make_candidate(chunk_id: str, mode: SearchMode, score: float = 1.0) -> SearchCandidate:
    """Build a backend candidate without payload."""
    return SearchCandidate(
        chunk_id=chunk_id,
        document_id=f"doc-{chunk_id}",
        source_path=f"/docs/{chunk_id}.pdf",
        score=score,
        source=mode,
    )


def write_pdf(path: Path, pages: list[str]) -> Path:
    """Write a PDF with one page per entry; an empty string gives a page without text."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=10)
    doc.save(str(path))
    doc.close()
    return path


# ---------------------------------------------------------------------------
# Fake providers
# ---------------------------------------------------------------------------


class ScriptedExtractor(IPageExtractor):
    """IPageExtractor that answers from a file-name keyed script.

    Each script entry is either a list of pages or an exception instance to
    raise.  Unknown files yield no pages.
    """

    def __init__(self, script: dict[str, list[PageText] | Exception] | None = None) -> None:
        self.script = dict(script or {})
        self.calls: list[str] = []

    def extract(self, source_path: str, data: bytes) -> list[PageText]:
        self.calls.append(source_path)
        outcome = self.script.get(Path(source_path).name, [])
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)

    def get_provider_name(self) -> str:
        return "scripted"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quality_pages() -> list[PageText]:
    return list(QUALITY_MANUAL_PAGES)


@pytest.fixture
def embedding_provider() -> NgramEmbeddingProvider:
    return NgramEmbeddingProvider(dimensions=64)


@pytest.fixture
def keyword_index() -> InMemoryKeywordIndex:
    return InMemoryKeywordIndex()


@pytest.fixture
def vector_index() -> InMemoryVectorIndex:
    return InMemoryVectorIndex()


@pytest.fixture
def graph_index() -> InMemoryGraphIndex:
    return InMemoryGraphIndex()


@pytest.fixture
def mock_keyword_index() -> IKeywordIndex:
    """Mock IKeywordIndex; tests set ``search`` and ``fetch_chunks`` results."""
    mock = MagicMock(spec=IKeywordIndex)
    mock.get_provider_name.return_value = "mock-keyword"
    mock.is_available.return_value = True
    mock.index_chunks = AsyncMock(return_value=0)
    mock.search = AsyncMock(return_value=[])
    mock.fetch_chunks = AsyncMock(return_value={})
    return mock


@pytest.fixture
def mock_vector_index() -> IVectorIndex:
    mock = MagicMock(spec=IVectorIndex)
    mock.get_provider_name.return_value = "mock-vector"
    mock.is_available.return_value = True
    mock.index_chunks = AsyncMock(return_value=0)
    mock.search = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def mock_graph_index() -> IGraphIndex:
    mock = MagicMock(spec=IGraphIndex)
    mock.get_provider_name.return_value = "mock-graph"
    mock.is_available.return_value = True
    mock.index_chunks = AsyncMock(return_value=0)
    mock.related_chunks = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def mock_embedding_provider() -> IEmbeddingProvider:
    mock = MagicMock(spec=IEmbeddingProvider)
    mock.get_provider_name.return_value = "mock-embedding"
    mock.is_available.return_value = True
    mock.get_dimension.return_value = 2
    mock.embed = AsyncMock(side_effect=lambda texts: [[1.0, 0.0] for _ in texts])
    mock.embed_single = AsyncMock(return_value=[1.0, 0.0])
    return mock
