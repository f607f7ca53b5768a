"""Direct page-text extractors (text-layer PDFs)."""

from clausefinder.providers.extraction.pymupdf_extractor import PyMuPDFExtractor

__all__ = ["PyMuPDFExtractor"]
