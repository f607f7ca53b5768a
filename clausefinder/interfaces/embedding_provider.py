"""Abstract base class for text-embedding service providers.

Turns chunk text (at ingestion) and query text (at search) into dense
vectors.  Both sides feed :class:`~clausefinder.interfaces.vector_index.IVectorIndex`,
so the same provider instance, and therefore the same dimension, must be
used for indexing and querying.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: NgramEmbeddingProvider (clausefinder/providers/embedding/)
class IEmbeddingProvider(ABC):
    """Contract for embedding chunk and query text."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of chunk texts.

        Parameters
        ----------
        texts:
            Texts to embed, usually the ``text_raw`` of one document's chunks.

        Returns
        -------
        list[list[float]]
            One vector per input text, in input order, each of length
            :meth:`get_dimension`.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Embed one text; used for query vectors."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Vector length, fixed for the provider's lifetime."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Identifier used in logs and store-failure reports."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider can embed right now."""
