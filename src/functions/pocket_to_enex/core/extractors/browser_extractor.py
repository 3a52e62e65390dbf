"""Headless-browser extractor for pages that need JavaScript rendering."""

from __future__ import annotations

import logging
import time
from typing import Optional

from ..contracts.extraction import ExtractionMethod, ExtractionResult
from ..processors.content_cleaner import CONTENT_SELECTORS, MIN_REGION_CHARS, REMOVAL_SELECTORS
from ..processors.markers import fetch_failure
from ..processors.result_builder import build_result
from .browser_manager import BrowserManager

# Runs inside the page: drop boilerplate, then return the first selector
# region with enough text, falling back to the whole body.
_REGION_SCRIPT = """
([removal, candidates, minChars]) => {
  for (const element of document.querySelectorAll(removal.join(', '))) {
    element.remove();
  }
  for (const selector of candidates) {
    let element = null;
    try {
      element = document.querySelector(selector);
    } catch (err) {
      continue;
    }
    if (element && element.innerText && element.innerText.trim().length > minChars) {
      return element.innerText.trim();
    }
  }
  return document.body ? document.body.innerText.trim() : '';
}
"""


class BrowserExtractor:
    """Renders a URL in a pooled page and extracts the article region."""

    def __init__(
        self,
        manager: BrowserManager,
        *,
        timeout: float = 7.0,
        settle_seconds: float = 2.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.manager = manager
        self.timeout = timeout
        self.settle_seconds = settle_seconds
        self._logger = logger or logging.getLogger(__name__)

    async def extract(self, url: str) -> ExtractionResult:
        """Extract article text from ``url``. Never raises."""

        start = time.perf_counter()
        try:
            async with self.manager.page() as page:
                await page.goto(url, wait_until="networkidle", timeout=self.timeout * 1000)
                await page.wait_for_timeout(self.settle_seconds * 1000)
                text = await page.evaluate(
                    _REGION_SCRIPT,
                    [list(REMOVAL_SELECTORS), list(CONTENT_SELECTORS), MIN_REGION_CHARS],
                )
        except Exception as exc:
            reason = str(exc).splitlines()[0] if str(exc) else exc.__class__.__name__
            self._logger.debug("Browser extraction failed for %s: %s", url, reason)
            return fetch_failure(url, reason, ExtractionMethod.BROWSER)

        result = build_result(url, text or "", ExtractionMethod.BROWSER)
        self._logger.debug(
            "Browser extraction for %s finished in %.2fs (ok=%s)",
            url,
            time.perf_counter() - start,
            result.ok,
        )
        return result
