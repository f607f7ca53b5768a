"""Abstract base class for OCR service providers.

OCR is the fallback path for scanned documents whose text layer is empty.
Implementations may call a remote OCR/LLM endpoint or wrap a local engine;
the extraction service only cares that pages come back as
:class:`~clausefinder.models.chunk.PageText`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from clausefinder.models.chunk import PageText


# Concrete implementation: HttpOCRProvider (clausefinder/providers/ocr/)
# The extraction service (clausefinder/services/extraction_service.py) calls it
# at most once per file, and only when direct extraction found no text.
class IOCRProvider(ABC):
    """Contract for OCR services that recover page text from document bytes."""

    @abstractmethod
    async def extract_pages(self, source_path: str, data: bytes) -> list[PageText]:
        """Run OCR over the whole document.

        Parameters
        ----------
        source_path:
            Path of the source file, forwarded to the service for context.
        data:
            The raw document bytes.

        Returns
        -------
        list[PageText]
            Non-blank pages in page order; empty when the service found no
            text at all.

        Raises
        ------
        clausefinder.utils.errors.OCRExtractionError
            On network failure, a non-success status, or a malformed response.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"llm-ocr"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (endpoint present)."""
