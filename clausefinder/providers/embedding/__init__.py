"""Embedding provider implementations.

NgramEmbeddingProvider hashes character trigrams into a fixed-size,
L2-normalized vector.  It is deterministic and dependency-free, which makes
it the default for local runs and tests.
"""

from clausefinder.providers.embedding.ngram_embedding_provider import NgramEmbeddingProvider

__all__ = ["NgramEmbeddingProvider"]
