"""Unit tests for the HTTP OCR provider, using httpx.MockTransport."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from clausefinder.models.chunk import PageText
from clausefinder.providers.ocr.http_ocr_provider import HttpOCRProvider
from clausefinder.utils.errors import OCRExtractionError

_ENDPOINT = "https://ocr.test/v1/extract"
_PDF_BYTES = b"%PDF-1.7 scanned"


def _provider(handler, api_key: str | None = None) -> HttpOCRProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpOCRProvider(endpoint=_ENDPOINT, api_key=api_key, http_client=client)


class TestHttpOCRProvider:
    def test_provider_name_and_availability(self) -> None:
        assert HttpOCRProvider(endpoint=_ENDPOINT).get_provider_name() == "llm-ocr"
        assert HttpOCRProvider(endpoint=_ENDPOINT).is_available() is True
        assert HttpOCRProvider(endpoint="").is_available() is False

    @pytest.mark.asyncio
    async def test_pages_payload(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(
                200,
                json={
                    "pages": [
                        {"page": 2, "text": "Second page"},
                        {"page": 1, "text": "First page"},
                        {"page": 3, "text": "   "},
                    ]
                },
            )

        pages = await _provider(handler, api_key="secret").extract_pages("/docs/scan.pdf", _PDF_BYTES)

        assert pages == [PageText(page=1, text="First page"), PageText(page=2, text="Second page")]
        assert seen["body"]["pdf_base64"] == base64.b64encode(_PDF_BYTES).decode("ascii")
        assert seen["body"]["source_path"] == "/docs/scan.pdf"
        assert seen["auth"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_text_payload_split_on_form_feed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert "Authorization" not in request.headers
            return httpx.Response(200, json={"text": "Page one\f\fPage three"})

        pages = await _provider(handler).extract_pages("/docs/scan.pdf", _PDF_BYTES)

        assert pages == [PageText(page=1, text="Page one"), PageText(page=3, text="Page three")]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"unexpected": True}),
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"pages": [{"page": 0, "text": "bad number"}]}),
            httpx.Response(502, json={"error": "upstream"}),
        ],
    )
    async def test_bad_responses_raise(self, response: httpx.Response) -> None:
        provider = _provider(lambda request: response)
        with pytest.raises(OCRExtractionError) as exc_info:
            await provider.extract_pages("/docs/scan.pdf", _PDF_BYTES)
        assert exc_info.value.provider_name == "llm-ocr"
        assert exc_info.value.reason == "ocr failed"

    @pytest.mark.asyncio
    async def test_network_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(OCRExtractionError, match="OCR request failed"):
            await _provider(handler).extract_pages("/docs/scan.pdf", _PDF_BYTES)
