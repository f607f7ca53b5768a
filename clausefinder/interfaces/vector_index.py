"""Abstract base class for vector (semantic) search backends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from clausefinder.models.chunk import Chunk
from clausefinder.models.search import SearchCandidate, SearchFilters


# Concrete implementation: InMemoryVectorIndex (clausefinder/providers/vector/)
# Could be swapped for Qdrant, ChromaDB or pgvector via this interface.
class IVectorIndex(ABC):
    """Contract for nearest-neighbour retrieval over chunk embeddings.

    All methods are async to support network-backed stores without blocking
    the event loop.
    """

    @abstractmethod
    async def index_chunks(self, chunks: list[Chunk], embeddings: list[list[float]]) -> int:
        """Store *chunks* alongside their *embeddings*.

        Parameters
        ----------
        chunks:
            Chunks to write; a document's previous generation is replaced.
        embeddings:
            One vector per chunk, positionally aligned with *chunks*.

        Returns
        -------
        int
            Number of chunks written.

        Raises
        ------
        ValueError
            If ``len(chunks) != len(embeddings)``.
        clausefinder.utils.errors.ChunkIdentityError
            If a stored ``chunk_id`` is presented with different text.
        clausefinder.utils.errors.IndexingError
            If the embeddings cannot be stored, e.g. their dimension differs
            from the index dimension.
        """

    @abstractmethod
    async def search(
        self,
        query_vector: list[float],
        top_k: int,
        filters: SearchFilters | None = None,
    ) -> list[SearchCandidate]:
        """Return up to *top_k* candidates ranked by similarity (descending)."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this backend."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the backend is configured and reachable."""
