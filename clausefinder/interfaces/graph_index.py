"""Abstract base class for citation-graph backends.

The graph holds one node per chunk, a membership link from each document to
its chunks, and reference links derived from the ``references`` detected on
each chunk (``clause:4.2``, ``standard:ISO9001``).  Search uses it to widen a
fused candidate pool with clauses the top hits cite or are cited by.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from clausefinder.models.chunk import Chunk
from clausefinder.models.search import GraphNeighbor


# Concrete implementation: InMemoryGraphIndex (clausefinder/providers/graph/)
# Could be swapped for a Neo4j adapter via this interface.
class IGraphIndex(ABC):
    """Contract for relationship lookups between chunks."""

    @abstractmethod
    async def index_chunks(self, chunks: list[Chunk]) -> int:
        """Add chunk nodes, document links and reference links for *chunks*.

        Returns
        -------
        int
            Number of chunk nodes written.
        """

    @abstractmethod
    async def related_chunks(self, seed_ids: list[str], max_hops: int) -> list[GraphNeighbor]:
        """Return chunks reachable from *seed_ids* within *max_hops*.

        Parameters
        ----------
        seed_ids:
            Chunk ids to start from.  Unknown ids are ignored.
        max_hops:
            Maximum path length to follow.

        Returns
        -------
        list[GraphNeighbor]
            Reachable chunks excluding the seeds themselves, each with its
            shortest hop count, ordered by ``(hops, chunk_id)``.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this backend."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the backend is configured and reachable."""
