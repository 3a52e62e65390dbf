"""User-visible failure paragraphs and extraction-method markers."""

from __future__ import annotations

import re
from html import escape

from ..contracts.extraction import ExtractionFailure, ExtractionMethod

_FIRST_PARAGRAPH = re.compile(r"(<p>.*?</p>)", re.DOTALL)


def _suffix(method: ExtractionMethod) -> str:
    return " (browser)" if method is ExtractionMethod.BROWSER else ""


def fetch_failure(url: str, reason: str, method: ExtractionMethod) -> ExtractionFailure:
    """Failure for a network, navigation or evaluation error."""
    text = (
        f"<p>Failed to scrape content from {escape(url)}{_suffix(method)}: "
        f"{escape(reason, quote=False)}</p>"
    )
    return ExtractionFailure(reason=reason, text=text, method=method)


def insufficient_content(url: str, method: ExtractionMethod, length: int = 0) -> ExtractionFailure:
    """Failure for a page whose article text is too short."""
    text = f"<p>Content could not be extracted from {escape(url)}{_suffix(method)}</p>"
    return ExtractionFailure(
        reason=f"insufficient content ({length} chars)", text=text, method=method
    )


def method_marker(method: ExtractionMethod) -> str:
    return f"<p><small>[{method.label}]</small></p>"


def label_method(text: str, method: ExtractionMethod) -> str:
    """Attach the method marker to an extracted body.

    The failure marker goes right after the first paragraph so it stays next
    to the failure message; success markers trail the content.
    """
    marker = method_marker(method)
    if method is ExtractionMethod.FAILED:
        labelled, count = _FIRST_PARAGRAPH.subn(lambda match: f"{match.group(1)}\n{marker}", text, count=1)
        if count:
            return labelled
    return f"{text}\n{marker}"
