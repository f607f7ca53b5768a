"""Public interface definitions for all pluggable backends.

Every external store or service in the clausefinder pipeline is accessed
exclusively through the abstract base classes defined in this package.
Concrete adapters implement these interfaces and are injected at
construction time (see :mod:`clausefinder.main`), so unit tests can hand a
service a fake backend and production code can swap an in-memory index for
a networked one without touching call sites.

CONCRETE PROVIDER MAP:
    Interface              ->  Concrete implementations (in clausefinder/providers/)
    -------------------------------------------------------------------------
    IPageExtractor         ->  PyMuPDFExtractor
    IOCRProvider           ->  HttpOCRProvider
    IEmbeddingProvider     ->  NgramEmbeddingProvider
    IKeywordIndex          ->  InMemoryKeywordIndex
    IVectorIndex           ->  InMemoryVectorIndex
    IGraphIndex            ->  InMemoryGraphIndex
"""

from clausefinder.interfaces.embedding_provider import IEmbeddingProvider
from clausefinder.interfaces.graph_index import IGraphIndex
from clausefinder.interfaces.keyword_index import IKeywordIndex
from clausefinder.interfaces.ocr_provider import IOCRProvider
from clausefinder.interfaces.page_extractor import IPageExtractor
from clausefinder.interfaces.vector_index import IVectorIndex

__all__ = [
    "IEmbeddingProvider",
    "IGraphIndex",
    "IKeywordIndex",
    "IOCRProvider",
    "IPageExtractor",
    "IVectorIndex",
]
