"""Abstract base class for direct (non-OCR) page-text extractors.

Extraction is synchronous: PDF parsers are CPU-bound C extensions, so the
extraction service runs them in a worker thread via ``asyncio.to_thread``
rather than pretending they are async.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from clausefinder.models.chunk import PageText


# Concrete implementation: PyMuPDFExtractor (clausefinder/providers/extraction/)
class IPageExtractor(ABC):
    """Contract for turning document bytes into per-page text."""

    @abstractmethod
    def extract(self, source_path: str, data: bytes) -> list[PageText]:
        """Extract the text of every page that carries any.

        Parameters
        ----------
        source_path:
            Path of the source file; used for error messages only.
        data:
            The raw file bytes.

        Returns
        -------
        list[PageText]
            Non-blank pages in page order.  An empty list means the document
            opened fine but has no text layer (e.g. a scan), which is the
            signal for the OCR fallback.

        Raises
        ------
        clausefinder.utils.errors.EncryptedDocumentError
            If the document is password protected.
        clausefinder.utils.errors.CorruptDocumentError
            If the bytes cannot be parsed as a document.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"pymupdf"``."""
