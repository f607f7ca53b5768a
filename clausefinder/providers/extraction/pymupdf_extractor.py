"""Direct PDF text extraction using PyMuPDF (fitz).

Opens the document from its bytes, refuses password-protected files, and
returns the text layer of every page that has one.  Scanned PDFs without a
text layer come back as an empty list, which the extraction service treats
as the cue for OCR.
"""

from __future__ import annotations

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from clausefinder.interfaces.page_extractor import IPageExtractor
from clausefinder.models.chunk import PageText
from clausefinder.utils.errors import CorruptDocumentError, EncryptedDocumentError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "pymupdf"


class PyMuPDFExtractor(IPageExtractor):
    """Extracts per-page text from PDF bytes with PyMuPDF."""

    def extract(self, source_path: str, data: bytes) -> list[PageText]:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise CorruptDocumentError(
                message=f"Cannot open {source_path}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        pages: list[PageText] = []
        try:
            if doc.needs_pass:
                raise EncryptedDocumentError(
                    message=f"{source_path} is password protected",
                    provider_name=_PROVIDER_NAME,
                )

            for page_num in range(len(doc)):
                try:
                    text = doc[page_num].get_text("text")
                except Exception as exc:
                    raise CorruptDocumentError(
                        message=f"Cannot read page {page_num + 1} of {source_path}: {exc}",
                        provider_name=_PROVIDER_NAME,
                    ) from exc
                if text.strip():
                    pages.append(PageText(page=page_num + 1, text=text))
        finally:
            doc.close()

        if not pages:
            logger.info("pdf_no_text_layer", source_path=source_path)
        else:
            logger.debug("pdf_extracted", source_path=source_path, pages=len(pages))
        return pages

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME
