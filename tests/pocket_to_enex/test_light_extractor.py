"""Tests for the HTTP extractor using mocked httpx responses."""

from __future__ import annotations

import httpx
import pytest
import respx

from src.functions.pocket_to_enex.core.contracts import ExtractionMethod
from src.functions.pocket_to_enex.core.extractors import LightExtractor

from tests.pocket_to_enex.fakes import ARTICLE_TEXT

ARTICLE_URL = "https://news.example.com/2024/transit"


def _page(body: str) -> str:
    return f"<html><head><title>T</title></head><body><main><p>{body}</p></main></body></html>"


@pytest.mark.asyncio
class TestLightExtractor:
    async def test_extracts_article_paragraphs(self) -> None:
        with respx.mock:
            route = respx.get(ARTICLE_URL).mock(
                return_value=httpx.Response(200, html=_page(ARTICLE_TEXT))
            )
            result = await LightExtractor(timeout=5).extract(ARTICLE_URL)

        assert route.called
        assert result.ok
        assert result.method is ExtractionMethod.LIGHTWEIGHT
        assert result.text.count("<p>") == 2
        assert "transit plan" in result.text

    async def test_binary_url_skips_network(self) -> None:
        with respx.mock:
            route = respx.get("https://cdn.example.com/report.pdf")
            result = await LightExtractor().extract("https://cdn.example.com/report.pdf")

        assert not route.called
        assert result.ok
        assert "PDF document" in result.text

    async def test_non_text_content_type_becomes_reference(self) -> None:
        url = "https://files.example.com/download?id=7"
        with respx.mock:
            respx.get(url).mock(
                return_value=httpx.Response(
                    200,
                    content=b"%PDF-1.4",
                    headers={"content-type": "application/pdf"},
                )
            )
            result = await LightExtractor().extract(url)

        assert result.ok
        assert "Content-Type: application/pdf" in result.text

    async def test_decodes_shift_jis_pages(self) -> None:
        url = "https://jp.example.com/kiji"
        sentence = "新しい交通計画が火曜日の夜に長い議論の末に承認されました。"
        html = (
            '<html><head><meta charset="Shift_JIS"></head><body><article>'
            + sentence * 4
            + "</article></body></html>"
        )
        with respx.mock:
            respx.get(url).mock(
                return_value=httpx.Response(
                    200,
                    content=html.encode("shift_jis"),
                    headers={"content-type": "text/html"},
                )
            )
            result = await LightExtractor().extract(url)

        assert result.ok
        assert "新しい交通計画" in result.text

    async def test_timeout_is_reported_as_failure(self) -> None:
        with respx.mock:
            respx.get(ARTICLE_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))
            result = await LightExtractor(timeout=7.0).extract(ARTICLE_URL)

        assert not result.ok
        assert result.reason == "timeout of 7s exceeded"
        assert result.text.startswith(f"<p>Failed to scrape content from {ARTICLE_URL}:")

    async def test_http_error_status_is_reported(self) -> None:
        with respx.mock:
            respx.get(ARTICLE_URL).mock(return_value=httpx.Response(404))
            result = await LightExtractor().extract(ARTICLE_URL)

        assert not result.ok
        assert result.reason == "Request failed with status code 404"

    async def test_short_page_is_insufficient(self) -> None:
        with respx.mock:
            respx.get(ARTICLE_URL).mock(return_value=httpx.Response(200, html=_page("Too short.")))
            result = await LightExtractor().extract(ARTICLE_URL)

        assert not result.ok
        assert "Content could not be extracted" in result.text

    async def test_uses_injected_client(self) -> None:
        with respx.mock:
            respx.get(ARTICLE_URL).mock(return_value=httpx.Response(200, html=_page(ARTICLE_TEXT)))
            async with httpx.AsyncClient() as client:
                result = await LightExtractor(client=client).extract(ARTICLE_URL)

        assert result.ok
