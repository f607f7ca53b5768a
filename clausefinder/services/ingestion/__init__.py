"""Document ingestion pipeline for the clausefinder evidence stores.

Orchestrates the full pipeline: **discover -> extract -> chunk -> embed -> store**.

Pipeline stages overview:

1. **Discover** (ingestion_service.discover_files) -- Recursive, sorted,
   case-insensitive suffix match under the ingestion root.

2. **Extract** (clausefinder.services.extraction_service) -- Direct PDF text
   extraction, with one OCR attempt when a document has no text layer.

3. **Chunk** (chunker.py / ClauseChunker) -- Splits pages into
   clause-aligned windows of bounded length; MetadataExtractor fills in
   standard, version, references and units.

4. **Embed** (via IEmbeddingProvider) -- Generates vectors for each chunk.

5. **Store** (via IKeywordIndex, IVectorIndex, IGraphIndex) -- Each store is
   written independently; partial failures are reported, not dropped.
"""

from clausefinder.services.ingestion.chunker import ClauseChunker
from clausefinder.services.ingestion.ingestion_service import IngestionService, discover_files
from clausefinder.services.ingestion.metadata_extractor import ChunkMetadata, MetadataExtractor

__all__ = [
    "ChunkMetadata",
    "ClauseChunker",
    "IngestionService",
    "MetadataExtractor",
    "discover_files",
]
