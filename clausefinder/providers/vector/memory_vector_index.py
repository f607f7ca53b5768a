"""In-memory cosine-similarity vector index.

Brute-force nearest-neighbour search: embeddings are L2-normalized when
written, so a query is scored against every candidate with one matrix-vector
product.  Adequate for tests and local corpora of a few thousand chunks;
swap in Qdrant or another ANN store via :class:`IVectorIndex` beyond that.
"""

from __future__ import annotations

import numpy as np
import structlog

from clausefinder.interfaces.vector_index import IVectorIndex
from clausefinder.models.chunk import Chunk
from clausefinder.models.search import SearchCandidate, SearchFilters, SearchMode
from clausefinder.providers.generation_store import ChunkGenerationStore
from clausefinder.utils.errors import IndexingError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "memory-vector"


def _normalize_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0.0] = 1.0
    return matrix / norms


class InMemoryVectorIndex(IVectorIndex):
    """Vector index held in process memory.

    The dimension is fixed by the first write; later writes with a
    different vector length are rejected with :class:`IndexingError`.
    """

    def __init__(self) -> None:
        self._store = ChunkGenerationStore(_PROVIDER_NAME)
        self._vectors: dict[str, np.ndarray] = {}
        self._dimension: int | None = None

    # ------------------------------------------------------------------
    # IVectorIndex implementation
    # ------------------------------------------------------------------

    async def index_chunks(self, chunks: list[Chunk], embeddings: list[list[float]]) -> int:
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"Got {len(chunks)} chunks but {len(embeddings)} embeddings"
            )
        if not chunks:
            return 0

        try:
            matrix = np.asarray(embeddings, dtype=np.float64)
        except ValueError as exc:
            raise IndexingError(
                message=f"Embeddings of unequal length: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        if matrix.ndim != 2 or (self._dimension is not None and matrix.shape[1] != self._dimension):
            raise IndexingError(
                message=(
                    f"Embedding dimension {matrix.shape[-1]} does not match "
                    f"index dimension {self._dimension}"
                ),
                provider_name=_PROVIDER_NAME,
            )

        removed = self._store.replace(chunks)
        for chunk_id in removed:
            self._vectors.pop(chunk_id, None)
        for chunk, row in zip(chunks, _normalize_rows(matrix)):
            self._vectors[chunk.chunk_id] = row
        self._dimension = matrix.shape[1]

        logger.debug("vector_index_updated", chunks=len(chunks), total=len(self._store))
        return len(chunks)

    async def search(
        self,
        query_vector: list[float],
        top_k: int,
        filters: SearchFilters | None = None,
    ) -> list[SearchCandidate]:
        if top_k <= 0 or not self._vectors:
            return []

        chunks = [
            chunk for chunk in self._store if filters is None or filters.matches(chunk)
        ]
        if not chunks:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        if query.shape != (self._dimension,):
            raise ValueError(
                f"Query vector has shape {query.shape}, index dimension is {self._dimension}"
            )
        query_norm = np.linalg.norm(query) or 1.0
        matrix = np.vstack([self._vectors[chunk.chunk_id] for chunk in chunks])
        scores = matrix @ (query / query_norm)

        ranked = sorted(range(len(chunks)), key=lambda i: (-scores[i], chunks[i].chunk_id))
        return [
            SearchCandidate(
                chunk_id=chunks[i].chunk_id,
                document_id=chunks[i].document_id,
                source_path=chunks[i].source_path,
                score=float(scores[i]),
                source=SearchMode.VECTOR,
            )
            for i in ranked[:top_k]
        ]

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return True
