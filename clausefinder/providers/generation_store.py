"""Chunk bookkeeping shared by the in-memory backends.

Each ``index_chunks`` call carries the complete current generation of one or
more documents.  :class:`ChunkGenerationStore` swaps a document's previous
generation for the new one in a single step, and rejects a batch outright
(before touching any state) if it would bind an existing ``chunk_id`` to
different text.
"""

from __future__ import annotations

from collections.abc import Iterator

from clausefinder.models.chunk import Chunk
from clausefinder.utils.errors import ChunkIdentityError


class ChunkGenerationStore:
    """Chunks keyed by id, grouped by document.

    Parameters
    ----------
    provider_name:
        Name of the owning backend, used on raised errors.
    """

    def __init__(self, provider_name: str) -> None:
        self._provider_name = provider_name
        self._chunks: dict[str, Chunk] = {}
        self._by_document: dict[str, list[str]] = {}

    def __len__(self) -> int:
        return len(self._chunks)

    def __contains__(self, chunk_id: object) -> bool:
        return chunk_id in self._chunks

    def __iter__(self) -> Iterator[Chunk]:
        for chunk_id in sorted(self._chunks):
            yield self._chunks[chunk_id]

    def get(self, chunk_id: str) -> Chunk | None:
        return self._chunks.get(chunk_id)

    def document_chunk_ids(self, document_id: str) -> list[str]:
        return list(self._by_document.get(document_id, []))

    def check_identity(self, chunks: list[Chunk]) -> None:
        """Raise :class:`ChunkIdentityError` if any id in *chunks* conflicts."""
        seen: dict[str, str] = {}
        for chunk in chunks:
            existing = self._chunks.get(chunk.chunk_id)
            known_hash = seen.get(chunk.chunk_id) or (existing.content_hash if existing else None)
            if known_hash is not None and known_hash != chunk.content_hash:
                raise ChunkIdentityError(
                    chunk_id=chunk.chunk_id,
                    message=(
                        f"chunk_id {chunk.chunk_id[:12]} already bound to different content "
                        f"({chunk.source_path}#{chunk.chunk_index})"
                    ),
                    provider_name=self._provider_name,
                )
            seen[chunk.chunk_id] = chunk.content_hash

    def replace(self, chunks: list[Chunk]) -> list[str]:
        """Store *chunks*, replacing the previous generation of their documents.

        Returns
        -------
        list[str]
            Ids of previously stored chunks that were dropped (sorted).

        Raises
        ------
        ChunkIdentityError
            If the batch conflicts with stored content; nothing is modified.
        """
        self.check_identity(chunks)

        incoming: dict[str, list[str]] = {}
        for chunk in chunks:
            ids = incoming.setdefault(chunk.document_id, [])
            if chunk.chunk_id not in ids:
                ids.append(chunk.chunk_id)

        removed: list[str] = []
        for document_id, new_ids in incoming.items():
            keep = set(new_ids)
            for old_id in self._by_document.get(document_id, []):
                if old_id not in keep:
                    self._chunks.pop(old_id, None)
                    removed.append(old_id)
            self._by_document[document_id] = new_ids

        for chunk in chunks:
            self._chunks[chunk.chunk_id] = chunk

        return sorted(removed)
