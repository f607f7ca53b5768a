"""In-memory BM25 keyword index.

Scores chunks with Okapi BM25 over the same tokens :func:`tokenize` produces
for queries, so clause numbers (``4.2.1``) and hyphenated designations
(``iso-9001``) survive as single terms.  Suitable for development, tests and
single-process use; can be swapped for OpenSearch or another engine via the
:class:`IKeywordIndex` interface.

The index also serves as the payload store for lazy hydration through
:meth:`InMemoryKeywordIndex.fetch_chunks`.
"""

from __future__ import annotations

import math
from collections import Counter

import structlog

from clausefinder.interfaces.keyword_index import IKeywordIndex
from clausefinder.models.chunk import Chunk
from clausefinder.models.search import SearchCandidate, SearchFilters, SearchMode
from clausefinder.providers.generation_store import ChunkGenerationStore
from clausefinder.utils.text_normalizer import tokenize

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "memory-keyword"


class InMemoryKeywordIndex(IKeywordIndex):
    """BM25 keyword index held in process memory.

    Parameters
    ----------
    k1:
        Term-frequency saturation parameter.
    b:
        Document-length normalization parameter.
    """

    def __init__(self, k1: float = 1.2, b: float = 0.75) -> None:
        self._k1 = k1
        self._b = b
        self._store = ChunkGenerationStore(_PROVIDER_NAME)
        self._postings: dict[str, dict[str, int]] = {}
        self._lengths: dict[str, int] = {}

    # ------------------------------------------------------------------
    # IKeywordIndex implementation
    # ------------------------------------------------------------------

    async def index_chunks(self, chunks: list[Chunk]) -> int:
        if not chunks:
            return 0

        previous = {chunk.document_id for chunk in chunks}
        stale = [cid for doc in sorted(previous) for cid in self._store.document_chunk_ids(doc)]

        self._store.replace(chunks)

        for chunk_id in stale:
            self._remove_postings(chunk_id)
        for chunk in chunks:
            self._remove_postings(chunk.chunk_id)
            self._add_postings(chunk)

        logger.debug("keyword_index_updated", chunks=len(chunks), total=len(self._store))
        return len(chunks)

    async def search(
        self,
        query_text: str,
        top_k: int,
        filters: SearchFilters | None = None,
    ) -> list[SearchCandidate]:
        terms = sorted(set(tokenize(query_text)))
        if not terms or top_k <= 0 or not self._lengths:
            return []

        total_docs = len(self._lengths)
        avg_length = sum(self._lengths.values()) / total_docs

        scores: dict[str, float] = {}
        for term in terms:
            postings = self._postings.get(term)
            if not postings:
                continue
            df = len(postings)
            idf = math.log(1.0 + (total_docs - df + 0.5) / (df + 0.5))
            for chunk_id, tf in postings.items():
                norm = self._k1 * (1.0 - self._b + self._b * self._lengths[chunk_id] / avg_length)
                scores[chunk_id] = scores.get(chunk_id, 0.0) + idf * tf * (self._k1 + 1.0) / (tf + norm)

        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))

        candidates: list[SearchCandidate] = []
        for chunk_id, score in ranked:
            chunk = self._store.get(chunk_id)
            if chunk is None:
                continue
            if filters is not None and not filters.matches(chunk):
                continue
            candidates.append(
                SearchCandidate(
                    chunk_id=chunk_id,
                    document_id=chunk.document_id,
                    source_path=chunk.source_path,
                    score=score,
                    source=SearchMode.KEYWORD,
                )
            )
            if len(candidates) >= top_k:
                break
        return candidates

    async def fetch_chunks(self, chunk_ids: list[str]) -> dict[str, Chunk]:
        found: dict[str, Chunk] = {}
        for chunk_id in chunk_ids:
            chunk = self._store.get(chunk_id)
            if chunk is not None:
                found[chunk_id] = chunk
        return found

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _terms_for(chunk: Chunk) -> list[str]:
        terms = tokenize(chunk.text_raw)
        if chunk.section_path:
            terms.extend(tokenize(chunk.section_path))
        return terms

    def _add_postings(self, chunk: Chunk) -> None:
        counts = Counter(self._terms_for(chunk))
        for term, tf in counts.items():
            self._postings.setdefault(term, {})[chunk.chunk_id] = tf
        self._lengths[chunk.chunk_id] = max(1, sum(counts.values()))

    def _remove_postings(self, chunk_id: str) -> None:
        if self._lengths.pop(chunk_id, None) is None:
            return
        empty_terms = []
        for term, postings in self._postings.items():
            if postings.pop(chunk_id, None) is not None and not postings:
                empty_terms.append(term)
        for term in empty_terms:
            del self._postings[term]
