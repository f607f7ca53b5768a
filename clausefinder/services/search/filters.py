"""Post-fusion term and structural filters.

Filters run after fusion and graph expansion, so they act on the full
evidence set rather than on one backend's raw output.  Both functions are
pure: filtering an already-filtered list returns it unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, TypeVar

from clausefinder.models.chunk import Chunk
from clausefinder.models.search import SearchQuery
from clausefinder.utils.text_normalizer import normalize_text, tokenize


class _HasChunk(Protocol):
    @property
    def chunk(self) -> Chunk | None: ...


_T = TypeVar("_T", bound=_HasChunk)


def implied_required_terms(query: SearchQuery) -> tuple[str, ...]:
    """Return the terms every hit must contain when query words count as required.

    Explicit ``required_terms`` win.  Otherwise the query's own tokens longer
    than two characters are used, deduplicated in order of appearance.
    """
    if query.required_terms:
        return query.required_terms
    return tuple(dict.fromkeys(token for token in tokenize(query.text) if len(token) > 2))


def passes_filters(chunk: Chunk, query: SearchQuery) -> bool:
    """Return ``True`` if *chunk* satisfies every term and structural filter of *query*.

    Required terms must all occur in ``chunk.text_normalized``; blocked terms
    must all be absent.  Terms are normalized the same way chunk text is, so
    ``"Hydraulic  PUMP"`` matches ``"hydraulic pump"``.
    """
    text = chunk.text_normalized
    for term in query.required_terms:
        needle = normalize_text(term)
        if needle and needle not in text:
            return False
    for term in query.blocked_terms:
        needle = normalize_text(term)
        if needle and needle in text:
            return False
    return query.filters.matches(chunk)


def apply_filters(hits: Sequence[_T], query: SearchQuery) -> list[_T]:
    """Keep the hits whose payload passes :func:`passes_filters`, in order.

    Hits without a payload cannot be checked and are dropped.
    """
    return [hit for hit in hits if hit.chunk is not None and passes_filters(hit.chunk, query)]
