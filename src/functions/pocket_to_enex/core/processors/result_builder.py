"""Turn region text into an extraction result, identically for both extractors."""

from __future__ import annotations

from ..contracts.extraction import ExtractionMethod, ExtractionResult, ExtractionSuccess
from .markers import insufficient_content
from .paragraphs import MIN_CONTENT_CHARS, content_length, render_paragraphs, segment_paragraphs


def build_result(url: str, text: str, method: ExtractionMethod) -> ExtractionResult:
    """Segment ``text`` into paragraphs and render them, or report a failure.

    Text shorter than ``MIN_CONTENT_CHARS``, before or after segmentation,
    fails. The boundary itself passes.
    """

    raw_length = len((text or "").strip())
    if raw_length < MIN_CONTENT_CHARS:
        return insufficient_content(url, method, raw_length)

    paragraphs = segment_paragraphs(text)
    length = content_length(paragraphs)
    if length < MIN_CONTENT_CHARS:
        return insufficient_content(url, method, length)

    return ExtractionSuccess(text=render_paragraphs(paragraphs), method=method)
