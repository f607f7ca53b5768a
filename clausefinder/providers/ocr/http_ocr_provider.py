"""Remote OCR provider that posts whole documents to an HTTP endpoint.

The endpoint receives ``{"pdf_base64": ..., "source_path": ...}`` and answers
with either::

    {"pages": [{"page": 1, "text": "..."}, ...]}

or a single text blob with form-feed (``\\f``) page separators::

    {"text": "page one\\fpage two"}

Anything else is treated as a malformed response.  Blank pages are dropped.
The ``httpx.AsyncClient`` can be injected for testability; when omitted a
short-lived client is opened per call.
"""

from __future__ import annotations

import base64

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from clausefinder.interfaces.ocr_provider import IOCRProvider
from clausefinder.models.chunk import PageText
from clausefinder.utils.errors import OCRExtractionError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "llm-ocr"
_PAGE_BREAK = "\f"


class _OCRPagePayload(BaseModel):
    page: int = Field(ge=1)
    text: str


class _OCRResponsePayload(BaseModel):
    pages: list[_OCRPagePayload] | None = None
    text: str | None = None


class HttpOCRProvider(IOCRProvider):
    """OCR fallback backed by a remote text-recognition service.

    Parameters
    ----------
    endpoint:
        Full URL of the OCR endpoint.
    api_key:
        Optional bearer token sent in the ``Authorization`` header.
    timeout:
        Per-request timeout in seconds.
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._http = http_client

    # ------------------------------------------------------------------
    # IOCRProvider implementation
    # ------------------------------------------------------------------

    async def extract_pages(self, source_path: str, data: bytes) -> list[PageText]:
        payload = {
            "pdf_base64": base64.b64encode(data).decode("ascii"),
            "source_path": source_path,
        }
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            if self._http is not None:
                response = await self._http.post(
                    self._endpoint, json=payload, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._endpoint, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("ocr_request_failed", source_path=source_path, error=str(exc))
            raise OCRExtractionError(
                message=f"OCR request failed for {source_path}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if not response.is_success:
            logger.warning(
                "ocr_unexpected_status",
                source_path=source_path,
                status=response.status_code,
            )
            raise OCRExtractionError(
                message=f"OCR endpoint returned HTTP {response.status_code} for {source_path}",
                provider_name=_PROVIDER_NAME,
            )

        pages = self._parse_response(source_path, response)
        logger.info("ocr_pages_extracted", source_path=source_path, pages=len(pages))
        return pages

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return bool(self._endpoint)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_response(source_path: str, response: httpx.Response) -> list[PageText]:
        """Validate the response body and convert it to non-blank pages."""
        try:
            body = _OCRResponsePayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise OCRExtractionError(
                message=f"Malformed OCR response for {source_path}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if body.pages is not None:
            raw_pages = sorted(((p.page, p.text) for p in body.pages), key=lambda item: item[0])
        elif body.text is not None:
            raw_pages = [
                (index, text) for index, text in enumerate(body.text.split(_PAGE_BREAK), start=1)
            ]
        else:
            raise OCRExtractionError(
                message=f"Malformed OCR response for {source_path}: expected 'pages' or 'text'",
                provider_name=_PROVIDER_NAME,
            )

        return [PageText(page=page, text=text) for page, text in raw_pages if text.strip()]
