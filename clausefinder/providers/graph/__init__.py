"""Citation-graph index implementations."""

from clausefinder.providers.graph.memory_graph_index import InMemoryGraphIndex

__all__ = ["InMemoryGraphIndex"]
