"""Deterministic character-trigram embedding provider.

Hashes every overlapping character trigram of the lower-cased text into a
fixed number of buckets (64-bit FNV-1a), counts occurrences with
``np.bincount`` and L2-normalizes the result.  No model download, no network,
no randomness: the same text always yields the same vector, which makes it
the default for local runs and tests.  Swap in a learned embedding model via
:class:`IEmbeddingProvider` for production-quality semantic recall.

Embedding is CPU-bound, so batches run in a worker thread to keep the event
loop free for concurrent ingestion workers and in-flight queries.
"""

from __future__ import annotations

import asyncio
from functools import lru_cache

import numpy as np
import structlog

from clausefinder.interfaces.embedding_provider import IEmbeddingProvider

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_DIMENSIONS = 128

_FNV_OFFSET_BASIS = 1469598103934665603
_FNV_PRIME = 1099511628211
_MASK_64 = (1 << 64) - 1


@lru_cache(maxsize=65536)
def _trigram_hash(trigram: str) -> int:
    """64-bit FNV-1a over the UTF-8 bytes of *trigram*."""
    value = _FNV_OFFSET_BASIS
    for byte in trigram.encode("utf-8"):
        value ^= byte
        value = (value * _FNV_PRIME) & _MASK_64
    return value


class NgramEmbeddingProvider(IEmbeddingProvider):
    """Hashed character-trigram embeddings.

    Parameters
    ----------
    dimensions:
        Number of hash buckets (vector length).  Values below 1 are raised
        to 1.
    """

    def __init__(self, dimensions: int = DEFAULT_DIMENSIONS) -> None:
        self._dimensions = max(1, dimensions)

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        matrix = await asyncio.to_thread(self.embed_matrix, texts)
        logger.debug("ngram_embedding_batch", batch_size=len(texts))
        return matrix.tolist()

    async def embed_single(self, text: str) -> list[float]:
        matrix = await asyncio.to_thread(self.embed_matrix, [text])
        return matrix[0].tolist()

    def get_dimension(self) -> int:
        return self._dimensions

    def get_provider_name(self) -> str:
        return "ngram_embedding"

    def is_available(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Synchronous core
    # ------------------------------------------------------------------

    def embed_matrix(self, texts: list[str]) -> np.ndarray:
        """Return a ``(len(texts), dimensions)`` array of unit-length rows.

        Texts shorter than three characters have no trigrams and map to the
        zero vector.
        """
        matrix = np.zeros((len(texts), self._dimensions), dtype=np.float64)
        for row, text in enumerate(texts):
            lowered = text.lower()
            count = len(lowered) - 2
            if count <= 0:
                continue
            buckets = np.fromiter(
                (_trigram_hash(lowered[i : i + 3]) % self._dimensions for i in range(count)),
                dtype=np.int64,
                count=count,
            )
            matrix[row] = np.bincount(buckets, minlength=self._dimensions)

        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0.0] = 1.0
        return matrix / norms
