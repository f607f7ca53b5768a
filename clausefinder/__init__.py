"""clausefinder: evidence retrieval over industrial document libraries.

Ingests folders of PDFs into clause-aligned chunks with deterministic ids,
indexes them in keyword, vector and citation-graph stores, and answers
queries by fusing the stores' rankings with Reciprocal Rank Fusion.
"""

__version__ = "0.1.0"
