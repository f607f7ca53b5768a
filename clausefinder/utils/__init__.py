"""Utility modules for clausefinder.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at
  ClauseFinderError; ingestion errors are recoverable per file, search errors
  are fatal per query.
- **concurrency** -- Bounded ``asyncio.gather`` and per-call timeouts used by
  the ingestion worker pool and the search fan-out.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- Matching-form normalization, tokenization, content
  hashing and abbreviation-aware sentence splitting.
"""

from clausefinder.utils.concurrency import throttled_gather, with_timeout
from clausefinder.utils.errors import (
    BackendUnavailableError,
    ChunkIdentityError,
    ChunkingError,
    ClauseFinderError,
    ConfigurationError,
    CorruptDocumentError,
    EncryptedDocumentError,
    IndexingError,
    IngestionError,
    InvalidQueryError,
    NoExtractableTextError,
    OCRExtractionError,
    SearchError,
    UnreadableFileError,
)
from clausefinder.utils.logging import configure_logging, get_logger
from clausefinder.utils.text_normalizer import (
    collapse_whitespace,
    content_hash,
    normalize_text,
    split_sentences,
    tokenize,
)

__all__ = [
    "BackendUnavailableError",
    "ChunkIdentityError",
    "ChunkingError",
    "ClauseFinderError",
    "ConfigurationError",
    "CorruptDocumentError",
    "EncryptedDocumentError",
    "IndexingError",
    "IngestionError",
    "InvalidQueryError",
    "NoExtractableTextError",
    "OCRExtractionError",
    "SearchError",
    "UnreadableFileError",
    "collapse_whitespace",
    "configure_logging",
    "content_hash",
    "get_logger",
    "normalize_text",
    "split_sentences",
    "throttled_gather",
    "tokenize",
    "with_timeout",
]
