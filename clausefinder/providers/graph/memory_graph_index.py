"""In-memory citation graph.

Nodes are chunks.  Each document links to its chunks (membership is recorded
but not traversed, otherwise every chunk would be one hop from its whole
document).  Reference edges come from the targets the metadata extractor
detected on each chunk:

* ``clause:X`` links to the chunks of the *same* document whose
  ``clause_id`` is ``X``;
* ``standard:S`` links to the lead chunk (``chunk_index == 0``) of every
  *other* document whose standard is ``S``.

Edges are traversed in both directions, so a clause is related both to what
it cites and to what cites it.  Adjacency is rebuilt lazily after writes
because a new document can resolve references held by older ones.
"""

from __future__ import annotations

from collections import deque

import structlog

from clausefinder.interfaces.graph_index import IGraphIndex
from clausefinder.models.chunk import Chunk
from clausefinder.models.search import GraphNeighbor
from clausefinder.providers.generation_store import ChunkGenerationStore

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "memory-graph"

_CLAUSE_PREFIX = "clause:"
_STANDARD_PREFIX = "standard:"


class InMemoryGraphIndex(IGraphIndex):
    """Reference graph over chunks held in process memory."""

    def __init__(self) -> None:
        self._store = ChunkGenerationStore(_PROVIDER_NAME)
        self._adjacency: dict[str, list[str]] | None = None

    # ------------------------------------------------------------------
    # IGraphIndex implementation
    # ------------------------------------------------------------------

    async def index_chunks(self, chunks: list[Chunk]) -> int:
        if not chunks:
            return 0
        self._store.replace(chunks)
        self._adjacency = None
        logger.debug("graph_index_updated", chunks=len(chunks), total=len(self._store))
        return len(chunks)

    async def related_chunks(self, seed_ids: list[str], max_hops: int) -> list[GraphNeighbor]:
        adjacency = self._ensure_adjacency()
        seeds = sorted({seed for seed in seed_ids if seed in self._store})
        if not seeds or max_hops < 1:
            return []

        hops: dict[str, int] = {seed: 0 for seed in seeds}
        queue: deque[str] = deque(seeds)
        while queue:
            current = queue.popleft()
            depth = hops[current]
            if depth >= max_hops:
                continue
            for neighbour in adjacency.get(current, []):
                if neighbour not in hops:
                    hops[neighbour] = depth + 1
                    queue.append(neighbour)

        neighbours: list[GraphNeighbor] = []
        for chunk_id, distance in hops.items():
            if distance == 0:
                continue
            chunk = self._store.get(chunk_id)
            neighbours.append(
                GraphNeighbor(
                    chunk_id=chunk_id,
                    document_id=chunk.document_id,
                    source_path=chunk.source_path,
                    hops=distance,
                )
            )
        neighbours.sort(key=lambda n: (n.hops, n.chunk_id))
        return neighbours

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Graph construction
    # ------------------------------------------------------------------

    def document_chunk_ids(self, document_id: str) -> list[str]:
        """Return the chunk ids linked to *document_id* (membership edges)."""
        return self._store.document_chunk_ids(document_id)

    def _ensure_adjacency(self) -> dict[str, list[str]]:
        if self._adjacency is None:
            self._adjacency = self._build_adjacency()
        return self._adjacency

    def _build_adjacency(self) -> dict[str, list[str]]:
        chunks = list(self._store)

        by_clause: dict[tuple[str, str], list[str]] = {}
        lead_chunk: dict[str, str] = {}
        document_standard: dict[str, str] = {}
        for chunk in sorted(chunks, key=lambda c: (c.document_id, c.chunk_index)):
            if chunk.clause_id:
                by_clause.setdefault((chunk.document_id, chunk.clause_id), []).append(chunk.chunk_id)
            if chunk.chunk_index == 0:
                lead_chunk[chunk.document_id] = chunk.chunk_id
            if chunk.standard and chunk.document_id not in document_standard:
                document_standard[chunk.document_id] = chunk.standard

        leads_by_standard: dict[str, list[tuple[str, str]]] = {}
        for document_id, standard in document_standard.items():
            if document_id in lead_chunk:
                leads_by_standard.setdefault(standard, []).append(
                    (document_id, lead_chunk[document_id])
                )

        edges: dict[str, set[str]] = {}

        def link(a: str, b: str) -> None:
            if a == b:
                return
            edges.setdefault(a, set()).add(b)
            edges.setdefault(b, set()).add(a)

        for chunk in chunks:
            for reference in chunk.references:
                if reference.startswith(_CLAUSE_PREFIX):
                    clause = reference[len(_CLAUSE_PREFIX):]
                    for target in by_clause.get((chunk.document_id, clause), []):
                        link(chunk.chunk_id, target)
                elif reference.startswith(_STANDARD_PREFIX):
                    standard = reference[len(_STANDARD_PREFIX):]
                    for document_id, target in leads_by_standard.get(standard, []):
                        if document_id != chunk.document_id:
                            link(chunk.chunk_id, target)

        return {node: sorted(targets) for node, targets in edges.items()}
