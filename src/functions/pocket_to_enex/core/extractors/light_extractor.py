"""HTTP-only extractor implementation using httpx and BeautifulSoup."""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from ..contracts.extraction import ExtractionMethod, ExtractionResult, ExtractionSuccess
from ..processors.binary_detector import (
    binary_reference,
    content_type_reference,
    is_binary_url,
    is_text_content_type,
)
from ..processors.content_cleaner import extract_region_text
from ..processors.encoding import decode_html
from ..processors.markers import fetch_failure
from ..processors.result_builder import build_result

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


def describe_http_error(exc: Exception, timeout: float) -> str:
    """Short, user-facing reason for a failed request."""
    if isinstance(exc, httpx.TimeoutException):
        return f"timeout of {timeout:g}s exceeded"
    if isinstance(exc, httpx.HTTPStatusError):
        return f"Request failed with status code {exc.response.status_code}"
    return str(exc) or exc.__class__.__name__


class LightExtractor:
    """Performs a single HTTP GET and extracts the article region."""

    _DEFAULT_HEADERS = {
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept-Language": "en-US,en;q=0.9,ja;q=0.8",
    }

    def __init__(
        self,
        *,
        timeout: float = 7.0,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.timeout = timeout
        self._client = client
        self._logger = logger or logging.getLogger(__name__)

    async def extract(self, url: str) -> ExtractionResult:
        """Extract article text from ``url``. Never raises."""

        if is_binary_url(url):
            self._logger.debug("Binary resource detected by extension: %s", url)
            return ExtractionSuccess(text=binary_reference(url), method=ExtractionMethod.LIGHTWEIGHT)

        start = time.perf_counter()
        try:
            response = await self._fetch(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            reason = describe_http_error(exc, self.timeout)
            self._logger.debug("HTTP extraction failed for %s: %s", url, reason)
            return fetch_failure(url, reason, ExtractionMethod.LIGHTWEIGHT)

        content_type = response.headers.get("content-type", "")
        if not is_text_content_type(content_type):
            self._logger.debug("Non-text content type %s for %s", content_type, url)
            return ExtractionSuccess(
                text=content_type_reference(url, content_type),
                method=ExtractionMethod.LIGHTWEIGHT,
            )

        try:
            text = extract_region_text(decode_html(response.content))
        except Exception as exc:  # parser failures on hostile markup
            self._logger.warning("Failed to parse %s: %s", url, exc)
            return fetch_failure(url, f"parse error: {exc}", ExtractionMethod.LIGHTWEIGHT)

        result = build_result(url, text, ExtractionMethod.LIGHTWEIGHT)
        self._logger.debug(
            "Lightweight extraction for %s finished in %.2fs (ok=%s)",
            url,
            time.perf_counter() - start,
            result.ok,
        )
        return result

    async def _fetch(self, url: str) -> httpx.Response:
        if self._client is not None:
            response = await self._client.get(
                url,
                headers=self._DEFAULT_HEADERS,
                timeout=self.timeout,
                follow_redirects=True,
            )
            response.raise_for_status()
            return response

        async with httpx.AsyncClient(
            headers=self._DEFAULT_HEADERS,
            follow_redirects=True,
            timeout=self.timeout,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response
