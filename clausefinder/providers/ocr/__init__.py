"""OCR provider implementations.

The OCR path is a fallback: it runs only when direct extraction returns no
text (scanned PDFs), and at most once per file.
"""

from clausefinder.providers.ocr.http_ocr_provider import HttpOCRProvider

__all__ = ["HttpOCRProvider"]
