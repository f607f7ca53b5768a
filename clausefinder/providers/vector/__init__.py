"""Vector index implementations."""

from clausefinder.providers.vector.memory_vector_index import InMemoryVectorIndex

__all__ = ["InMemoryVectorIndex"]
