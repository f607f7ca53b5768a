"""Page-text extraction with a single OCR fallback.

Direct extraction runs first, in a worker thread because PDF parsing is
blocking.  If it finds no text at all and an OCR provider is configured, OCR
is tried exactly once; OCR failures surface as
:class:`~clausefinder.utils.errors.OCRExtractionError`.  Encrypted or corrupt
documents never reach OCR: those are properties of the file, not of its text
layer.
"""

from __future__ import annotations

import asyncio

from clausefinder.interfaces.ocr_provider import IOCRProvider
from clausefinder.interfaces.page_extractor import IPageExtractor
from clausefinder.models.chunk import PageText
from clausefinder.utils.errors import NoExtractableTextError
from clausefinder.utils.logging import get_logger


class PageExtractionService:
    """Runs direct extraction and, when it comes back empty, OCR.

    Parameters
    ----------
    extractor:
        The direct text-layer extractor.
    ocr_provider:
        Optional OCR fallback.  ``None`` (or a provider reporting itself
        unavailable) disables the fallback.
    """

    def __init__(
        self,
        extractor: IPageExtractor,
        ocr_provider: IOCRProvider | None = None,
    ) -> None:
        self._extractor = extractor
        self._ocr = ocr_provider
        self._logger = get_logger(__name__)

    @property
    def ocr_enabled(self) -> bool:
        return self._ocr is not None and self._ocr.is_available()

    async def extract(self, source_path: str, data: bytes) -> list[PageText]:
        """Return the non-blank pages of the document.

        Raises
        ------
        EncryptedDocumentError, CorruptDocumentError
            Propagated from the direct extractor.
        OCRExtractionError
            If the OCR fallback ran and failed.
        NoExtractableTextError
            If neither path produced any text.
        """
        pages = await asyncio.to_thread(self._extractor.extract, source_path, data)
        if pages:
            return pages

        if not self.ocr_enabled:
            raise NoExtractableTextError(
                message=f"{source_path} has no text layer and OCR is not configured",
                provider_name=self._extractor.get_provider_name(),
            )

        self._logger.info(
            "ocr_fallback_attempting",
            source_path=source_path,
            provider=self._ocr.get_provider_name(),
        )
        pages = await self._ocr.extract_pages(source_path, data)
        if not pages:
            raise NoExtractableTextError(
                message=f"OCR found no text in {source_path}",
                provider_name=self._ocr.get_provider_name(),
            )

        self._logger.info("ocr_fallback_succeeded", source_path=source_path, pages=len(pages))
        return pages
