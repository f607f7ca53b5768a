"""Document and chunk models for the clausefinder evidence store.

Defines Pydantic v2 models for extracted pages, source-document fingerprints
and the retrievable :class:`Chunk`.  All models use frozen config: a chunk is
immutable once the chunker creates it, and re-ingestion produces a new
generation rather than editing a chunk in place.

Identity overview:
    * ``document_id`` -- SHA-256 of the resolved source path, so a file keeps
      its identity across runs even when its bytes change.
    * ``chunk_id`` -- SHA-256 over (document_id, chunk_index, SHA-256 of the
      raw chunk text).  Unchanged input therefore reproduces identical chunk
      ids, and any content change yields a fresh id.
"""

from __future__ import annotations

import hashlib
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from clausefinder.utils.text_normalizer import content_hash


def make_document_id(source_path: str) -> str:
    """Return the stable document identifier for *source_path*."""
    return hashlib.sha256(source_path.encode("utf-8")).hexdigest()


def make_chunk_id(document_id: str, chunk_index: int, text_raw: str) -> str:
    """Return the deterministic chunk identifier.

    A pure function of the document, the ordinal and the content hash; never
    random and never tied to process lifetime.
    """
    payload = f"{document_id}\x1f{chunk_index}\x1f{content_hash(text_raw)}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# PageText: one page of text as returned by an extractor or OCR endpoint.
# ---------------------------------------------------------------------------
class PageText(BaseModel):
    """Raw text of one page, numbered from 1."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1, description="1-based page number.")
    text: str = Field(description="Extracted page text, layout line breaks preserved.")


class DocumentFingerprint(BaseModel):
    """Provenance record for one source file in one ingestion run."""

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(description="Stable identifier derived from the source path.")
    title: str = Field(description="Human-readable title (the file name).")
    source_path: str = Field(description="Resolved POSIX path of the source file.")
    checksum: str = Field(description="SHA-256 of the file bytes.")
    standard: str | None = Field(
        default=None,
        description="Standard designation detected from the file name, e.g. 'ISO9001'.",
    )
    version: str | None = Field(
        default=None,
        description="Edition or revision detected from the file name.",
    )


class ChunkKind(str, Enum):
    """Structural role of a chunk within its document."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"


# ---------------------------------------------------------------------------
# Chunk: the atomic retrievable unit.
# ---------------------------------------------------------------------------
class Chunk(BaseModel):
    """A traceable slice of one document, ready for keyword, vector and graph indexing.

    Structural fields are optional: absence means the pattern detectors found
    nothing, which is not an error.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Deterministic SHA-256 identity.")
    document_id: str = Field(description="Identifier of the parent document.")
    source_path: str = Field(description="Path of the source file.")
    title: str = Field(default="", description="Title of the source document.")
    text_raw: str = Field(description="Chunk text as extracted (case preserved).")
    text_normalized: str = Field(description="Lower-cased, whitespace-collapsed matching form.")
    section_path: str | None = Field(
        default=None,
        description="Heading trail from outermost to innermost, joined with ' > '.",
    )
    clause_id: str | None = Field(default=None, description="Innermost clause number, e.g. '4.2.1'.")
    standard: str | None = Field(default=None, description="Standard designation, e.g. 'ISO9001'.")
    version: str | None = Field(default=None, description="Edition, revision or version marker.")
    page_start: int = Field(ge=1, description="First page contributing to this chunk.")
    page_end: int = Field(ge=1, description="Last page contributing to this chunk.")
    chunk_index: int = Field(ge=0, description="0-based ordinal within the document.")
    kind: ChunkKind = Field(default=ChunkKind.PARAGRAPH)
    references: tuple[str, ...] = Field(
        default=(),
        description="Reference targets such as 'clause:4.2' or 'standard:ISO9001'.",
    )
    units: tuple[str, ...] = Field(default=(), description="Engineering unit tokens found in the text.")

    @model_validator(mode="after")
    def _check_page_span(self) -> Chunk:
        if self.page_start > self.page_end:
            raise ValueError(
                f"page_start ({self.page_start}) must not exceed page_end ({self.page_end})"
            )
        return self

    @property
    def content_hash(self) -> str:
        """SHA-256 of ``text_raw``; used for identity-conflict detection."""
        return content_hash(self.text_raw)
