"""Abstract base class for keyword (lexical) search backends.

The keyword index is also the payload store: the search coordinator hydrates
fused candidates through :meth:`IKeywordIndex.fetch_chunks` only when a stage
needs chunk text, so backends may return id-only candidates from
:meth:`IKeywordIndex.search`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from clausefinder.models.chunk import Chunk
from clausefinder.models.search import SearchCandidate, SearchFilters


# Concrete implementation: InMemoryKeywordIndex (clausefinder/providers/keyword/)
# Could be swapped for an OpenSearch or Tantivy adapter via this interface.
class IKeywordIndex(ABC):
    """Contract for lexical retrieval over indexed chunks."""

    @abstractmethod
    async def index_chunks(self, chunks: list[Chunk]) -> int:
        """Index (or replace) *chunks* and return how many were written.

        Chunks of a document that is re-indexed replace that document's
        previous generation.

        Raises
        ------
        clausefinder.utils.errors.ChunkIdentityError
            If a ``chunk_id`` already stored carries different text.
        clausefinder.utils.errors.IndexingError
            If the backend write fails.
        """

    @abstractmethod
    async def search(
        self,
        query_text: str,
        top_k: int,
        filters: SearchFilters | None = None,
    ) -> list[SearchCandidate]:
        """Return up to *top_k* candidates, best first, with ``source=keyword``.

        Parameters
        ----------
        query_text:
            The free-text query.
        top_k:
            Maximum number of candidates.
        filters:
            Optional structural filters a backend may apply natively.  The
            coordinator re-applies them regardless.
        """

    @abstractmethod
    async def fetch_chunks(self, chunk_ids: list[str]) -> dict[str, Chunk]:
        """Return the stored payloads for *chunk_ids*; unknown ids are omitted."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this backend."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the backend is configured and reachable."""
