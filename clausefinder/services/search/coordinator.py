"""Retrieval fusion coordinator.

Answers one :class:`~clausefinder.models.search.SearchQuery` in six stages:

1. **Validate** -- reject empty queries before touching any backend and
   clamp ``top_k``.
2. **Retrieve** -- run the keyword lookup and the embed-then-vector lookup
   concurrently, each under its own deadline.
3. **Fuse** -- combine both rankings with Reciprocal Rank Fusion.
4. **Expand** -- use the top fused chunks as graph seeds and merge their
   citation neighbours into the ranking.
5. **Filter** -- hydrate payloads lazily and drop candidates failing the
   term or structural filters.  With ``require_query_terms`` a query without
   explicit required terms requires its own words.
6. **Truncate** -- keep ``top_k`` hits, optionally with explanations.

Backend failure policy: by default any lost backend fails the query with
:class:`~clausefinder.utils.errors.BackendUnavailableError`, because a
ranking silently missing a mode is biased in a way the caller cannot see.
With ``degrade_on_backend_failure`` the surviving mode carries on alone and
the lost mode is listed in ``SearchResult.degraded_modes``; losing both
retrieval modes always fails.  There are no automatic retries, and nothing
is shared between queries.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING, TypeVar

import structlog

from clausefinder.models.options import SearchOptions
from clausefinder.models.search import (
    SearchCandidate,
    SearchFilters,
    SearchHit,
    SearchMode,
    SearchQuery,
    SearchResult,
)
from clausefinder.services.search.filters import apply_filters, implied_required_terms
from clausefinder.services.search.fusion import MODE_ORDER, FusedCandidate, ReciprocalRankFusion
from clausefinder.utils.concurrency import with_timeout
from clausefinder.utils.errors import BackendUnavailableError, InvalidQueryError

if TYPE_CHECKING:
    from clausefinder.interfaces.embedding_provider import IEmbeddingProvider
    from clausefinder.interfaces.graph_index import IGraphIndex
    from clausefinder.interfaces.keyword_index import IKeywordIndex
    from clausefinder.interfaces.vector_index import IVectorIndex

logger = structlog.get_logger(logger_name=__name__)

_T = TypeVar("_T")


class SearchCoordinator:
    """Fans a query out to the retrieval backends and fuses the results.

    Parameters
    ----------
    keyword_index:
        Lexical backend; also the payload store used for hydration.
    vector_index:
        Semantic backend.
    graph_index:
        Citation graph used for candidate expansion.
    embedding_provider:
        Embeds query text for the vector lookup.
    options:
        Fusion, fan-out and failure-policy settings.
    fusion:
        Rank fusion strategy; defaults to RRF with ``options.rrf_k``.
    """

    def __init__(
        self,
        keyword_index: IKeywordIndex,
        vector_index: IVectorIndex,
        graph_index: IGraphIndex,
        embedding_provider: IEmbeddingProvider,
        options: SearchOptions | None = None,
        fusion: ReciprocalRankFusion | None = None,
    ) -> None:
        self._keyword = keyword_index
        self._vector = vector_index
        self._graph = graph_index
        self._embedding_provider = embedding_provider
        self._options = options or SearchOptions()
        self._fusion = fusion or ReciprocalRankFusion(k=self._options.rrf_k)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def make_query(
        self,
        text: str,
        top_k: int | None = None,
        required_terms: tuple[str, ...] = (),
        blocked_terms: tuple[str, ...] = (),
        filters: SearchFilters | None = None,
        explain: bool = False,
    ) -> SearchQuery:
        """Build a :class:`SearchQuery` using the configured default ``top_k``."""
        return SearchQuery(
            text=text,
            top_k=top_k if top_k is not None else self._options.default_top_k,
            required_terms=required_terms,
            blocked_terms=blocked_terms,
            filters=filters or SearchFilters(),
            explain=explain,
        )

    async def search(self, query: SearchQuery) -> SearchResult:
        """Run *query* through every stage and return the ranked hits.

        Raises
        ------
        InvalidQueryError
            If the query text is empty or whitespace; no backend is contacted.
        BackendUnavailableError
            If a backend fails or times out and degradation is not allowed,
            or if both retrieval modes fail.
        """
        start = time.monotonic()
        text = query.text.strip()
        if not text:
            logger.warning("search_rejected", reason="empty query")
            raise InvalidQueryError(message="Query text must not be empty")

        top_k = min(query.top_k, self._options.max_top_k)
        pool = top_k * self._options.candidate_multiplier
        backend_filters = (
            query.filters
            if self._options.prefilter_backends and not query.filters.is_empty()
            else None
        )

        ranked, degraded = await self._retrieve(text, pool, backend_filters)
        fused = self._fusion.fuse(ranked)
        fused_count = len(fused)

        fused = await self._expand(fused, pool, degraded)
        graph_added = len(fused) - fused_count

        filter_query = query
        if self._options.require_query_terms and not query.required_terms:
            filter_query = query.model_copy(
                update={"required_terms": implied_required_terms(query)}
            )
        selected = await self._select(fused, filter_query, top_k, degraded)
        hits = [self._to_hit(candidate, query.explain) for candidate in selected]

        degraded_modes = tuple(mode for mode in MODE_ORDER if mode in degraded)
        logger.info(
            "search_complete",
            top_k=top_k,
            keyword_candidates=len(ranked.get(SearchMode.KEYWORD, [])),
            vector_candidates=len(ranked.get(SearchMode.VECTOR, [])),
            fused=fused_count,
            graph_added=graph_added,
            returned=len(hits),
            degraded_modes=[mode.value for mode in degraded_modes],
            elapsed_ms=round((time.monotonic() - start) * 1000, 1),
        )
        return SearchResult(query=query, hits=hits, degraded_modes=degraded_modes)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def _retrieve(
        self,
        text: str,
        pool: int,
        filters: SearchFilters | None,
    ) -> tuple[dict[SearchMode, list[SearchCandidate]], set[SearchMode]]:
        """Query keyword and vector backends concurrently."""
        results = await asyncio.gather(
            self._guarded(
                SearchMode.KEYWORD,
                self._keyword.get_provider_name(),
                self._keyword.search(text, pool, filters),
            ),
            self._guarded(
                SearchMode.VECTOR,
                self._vector.get_provider_name(),
                self._vector_lookup(text, pool, filters),
            ),
            return_exceptions=True,
        )

        ranked: dict[SearchMode, list[SearchCandidate]] = {}
        failures: list[BackendUnavailableError] = []
        for mode, result in zip((SearchMode.KEYWORD, SearchMode.VECTOR), results):
            if isinstance(result, BackendUnavailableError):
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                ranked[mode] = result

        if failures and (not self._options.degrade_on_backend_failure or not ranked):
            raise failures[0]

        degraded = {failure.mode for failure in failures}
        for failure in failures:
            logger.warning("search_degraded", mode=failure.mode.value, error=str(failure))
        return ranked, degraded

    async def _vector_lookup(
        self,
        text: str,
        pool: int,
        filters: SearchFilters | None,
    ) -> list[SearchCandidate]:
        query_vector = await self._embedding_provider.embed_single(text)
        return await self._vector.search(query_vector, pool, filters)

    async def _guarded(self, mode: SearchMode, provider: str, call: Awaitable[_T]) -> _T:
        """Await *call* under the backend deadline, translating any failure."""
        timeout = self._options.backend_timeout_seconds
        try:
            return await with_timeout(call, timeout)
        except asyncio.TimeoutError as exc:
            logger.warning(
                "search_backend_timeout",
                mode=mode.value,
                provider=provider,
                timeout_s=timeout,
            )
            raise BackendUnavailableError(
                mode=mode,
                message=f"{mode.value} backend timed out after {timeout}s",
                provider_name=provider,
                timed_out=True,
            ) from exc
        except Exception as exc:
            logger.warning(
                "search_backend_failed",
                mode=mode.value,
                provider=provider,
                error=str(exc),
            )
            raise BackendUnavailableError(
                mode=mode,
                message=f"{mode.value} backend failed: {exc}",
                provider_name=provider,
            ) from exc

    # ------------------------------------------------------------------
    # Graph expansion
    # ------------------------------------------------------------------

    async def _expand(
        self,
        fused: list[FusedCandidate],
        pool: int,
        degraded: set[SearchMode],
    ) -> list[FusedCandidate]:
        seed_count = min(self._options.graph_seed_count, pool)
        seeds = [candidate.chunk_id for candidate in fused[:seed_count]]
        if not seeds:
            return fused

        try:
            neighbors = await self._guarded(
                SearchMode.GRAPH,
                self._graph.get_provider_name(),
                self._graph.related_chunks(seeds, self._options.graph_max_hops),
            )
        except BackendUnavailableError as exc:
            if not self._options.degrade_on_backend_failure:
                raise
            logger.warning("search_degraded", mode=SearchMode.GRAPH.value, error=str(exc))
            degraded.add(SearchMode.GRAPH)
            return fused

        return self._fusion.add_graph_neighbors(fused, neighbors, self._options.graph_weight)

    # ------------------------------------------------------------------
    # Hydration, filtering and truncation
    # ------------------------------------------------------------------

    async def _select(
        self,
        fused: list[FusedCandidate],
        query: SearchQuery,
        top_k: int,
        degraded: set[SearchMode],
    ) -> list[FusedCandidate]:
        """Hydrate payloads only where needed, filter, and truncate to *top_k*.

        With any filter active every candidate must be checked, so all are
        hydrated and a candidate without a payload is dropped.  Otherwise
        only the surviving ``top_k`` are hydrated.
        """
        if query.has_active_filters():
            await self._hydrate(fused, degraded, required=True)
            return apply_filters(fused, query)[:top_k]

        selected = fused[:top_k]
        await self._hydrate(selected, degraded, required=False)
        return selected

    async def _hydrate(
        self,
        candidates: list[FusedCandidate],
        degraded: set[SearchMode],
        required: bool,
    ) -> None:
        missing = [candidate.chunk_id for candidate in candidates if candidate.chunk is None]
        if not missing:
            return

        try:
            payloads = await self._guarded(
                SearchMode.KEYWORD,
                self._keyword.get_provider_name(),
                self._keyword.fetch_chunks(missing),
            )
        except BackendUnavailableError:
            # Without payloads the filters cannot be evaluated.
            if required or not self._options.degrade_on_backend_failure:
                raise
            degraded.add(SearchMode.KEYWORD)
            return

        for candidate in candidates:
            if candidate.chunk is None:
                candidate.chunk = payloads.get(candidate.chunk_id)

    @staticmethod
    def _to_hit(candidate: FusedCandidate, explain: bool) -> SearchHit:
        return SearchHit(
            chunk_id=candidate.chunk_id,
            document_id=candidate.document_id,
            source_path=candidate.source_path,
            score=candidate.score,
            sources=candidate.sources,
            chunk=candidate.chunk,
            explanation=candidate.explain() if explain else None,
        )
