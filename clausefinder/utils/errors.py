"""Custom exception hierarchy for clausefinder.

All application exceptions inherit from :class:`ClauseFinderError`, which
carries an optional ``provider_name`` so error handlers can identify which
backend (e.g. "pymupdf", "llm-ocr", "memory-keyword") caused the failure.

The hierarchy is organized by failure domain:

    ClauseFinderError  (base -- catch-all for any clausefinder error)
    +-- ConfigurationError        (startup / missing config)
    +-- IngestionError            (per-file, recoverable; never aborts a batch)
    |   +-- UnreadableFileError
    |   +-- EncryptedDocumentError
    |   +-- CorruptDocumentError
    |   +-- NoExtractableTextError
    |   +-- OCRExtractionError
    |   +-- ChunkingError
    |   +-- IndexingError
    +-- SearchError               (query-fatal; surfaced to the caller)
    |   +-- InvalidQueryError
    |   +-- BackendUnavailableError
    +-- ChunkIdentityError        (data-integrity fault)

Ingestion errors carry a short ``reason`` string that ends up verbatim in the
skip entries of an :class:`~clausefinder.models.ingestion.IngestionReport`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clausefinder.models.search import SearchMode


class ClauseFinderError(Exception):
    """Base exception for all clausefinder errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which backend triggered the error.  The
    ``__str__`` method prefixes the provider name in brackets for structured
    log output, e.g. ``[llm-ocr] OCR endpoint returned HTTP 502``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class ConfigurationError(ClauseFinderError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Ingestion-local errors
# ---------------------------------------------------------------------------

class IngestionError(ClauseFinderError):
    """Raised when a single file cannot make it through the ingestion pipeline.

    Subclasses override :attr:`reason` with the short classification that is
    recorded in the ingestion report.
    """

    reason = "ingestion failed"

    def __init__(
        self,
        message: str = "Ingestion failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnreadableFileError(IngestionError):
    """Raised when a file cannot be read from disk."""

    reason = "unreadable file"

    def __init__(
        self,
        message: str = "File could not be read",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EncryptedDocumentError(IngestionError):
    """Raised when a document is password protected."""

    reason = "encrypted document"

    def __init__(
        self,
        message: str = "Document is encrypted",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CorruptDocumentError(IngestionError):
    """Raised when the extractor cannot parse the document structure."""

    reason = "corrupt document"

    def __init__(
        self,
        message: str = "Document is corrupt or not a supported format",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoExtractableTextError(IngestionError):
    """Raised when neither direct extraction nor OCR recovered any text."""

    reason = "no extractable text"

    def __init__(
        self,
        message: str = "No extractable text",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class OCRExtractionError(IngestionError):
    """Raised when the OCR fallback call fails or returns an unusable payload."""

    reason = "ocr failed"

    def __init__(
        self,
        message: str = "OCR text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ChunkingError(IngestionError):
    """Raised when extracted pages cannot be turned into chunks."""

    reason = "chunking failed"

    def __init__(
        self,
        message: str = "Chunking failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IndexingError(IngestionError):
    """Raised by a store adapter when a write fails."""

    reason = "indexing failed"

    def __init__(
        self,
        message: str = "Indexing failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Query-fatal errors
# ---------------------------------------------------------------------------

class SearchError(ClauseFinderError):
    """Raised when a query cannot produce a complete, unbiased result."""

    def __init__(
        self,
        message: str = "Search failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidQueryError(SearchError):
    """Raised when a query is rejected during validation."""

    def __init__(
        self,
        message: str = "Query is invalid",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class BackendUnavailableError(SearchError):
    """Raised when a retrieval backend fails or times out during a query.

    ``mode`` names the retrieval mode whose backend was lost so callers can
    tell the user exactly which component is unavailable.
    """

    def __init__(
        self,
        mode: SearchMode,
        message: str = "Search backend unavailable",
        provider_name: str | None = None,
        timed_out: bool = False,
    ) -> None:
        self._mode = mode
        self._timed_out = timed_out
        super().__init__(message=message, provider_name=provider_name)

    @property
    def mode(self) -> SearchMode:
        return self._mode

    @property
    def timed_out(self) -> bool:
        return self._timed_out


# ---------------------------------------------------------------------------
# Data-integrity faults
# ---------------------------------------------------------------------------

class ChunkIdentityError(ClauseFinderError):
    """Raised when one ``chunk_id`` is presented with two different contents."""

    def __init__(
        self,
        chunk_id: str,
        message: str = "Chunk identity conflict",
        provider_name: str | None = None,
    ) -> None:
        self._chunk_id = chunk_id
        super().__init__(message=message, provider_name=provider_name)

    @property
    def chunk_id(self) -> str:
        return self._chunk_id
