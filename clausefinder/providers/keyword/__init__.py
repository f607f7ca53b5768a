"""Keyword index implementations."""

from clausefinder.providers.keyword.memory_keyword_index import InMemoryKeywordIndex

__all__ = ["InMemoryKeywordIndex"]
