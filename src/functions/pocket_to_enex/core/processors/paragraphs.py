"""Re-segment flat scraped text into ENML paragraphs.

Scraped regions often lose their structural markup, so paragraphs are
rebuilt from sentences: fragments are accumulated until a paragraph is long
enough or a section-break marker appears.
"""

from __future__ import annotations

import re
from html import escape

# Extracted text shorter than this is treated as a failed extraction
MIN_CONTENT_CHARS = 50
MIN_FRAGMENT_CHARS = 20
PARAGRAPH_TARGET_CHARS = 150
SECTION_BREAK_MARKERS = ("：", "■")

_WHITESPACE = re.compile(r"\s+")
_SENTENCE_END = re.compile(r"(?<=[。．！？])|(?<=[.!?])\s+")
_CJK_TERMINATORS = ("。", "．", "！", "？")


def _join(paragraph: str, fragment: str) -> str:
    if not paragraph:
        return fragment
    if paragraph.endswith(_CJK_TERMINATORS):
        return paragraph + fragment
    return f"{paragraph} {fragment}"


def segment_paragraphs(text: str) -> list[str]:
    """Split text into paragraphs of roughly ``PARAGRAPH_TARGET_CHARS``.

    Fragments shorter than ``MIN_FRAGMENT_CHARS`` are dropped.
    """

    flattened = _WHITESPACE.sub(" ", text or "").strip()
    fragments = [
        fragment.strip()
        for fragment in _SENTENCE_END.split(flattened)
        if fragment and len(fragment.strip()) >= MIN_FRAGMENT_CHARS
    ]

    paragraphs: list[str] = []
    current = ""
    for fragment in fragments:
        current = _join(current, fragment)
        if len(current) > PARAGRAPH_TARGET_CHARS or any(
            marker in fragment for marker in SECTION_BREAK_MARKERS
        ):
            paragraphs.append(current.strip())
            current = ""
    if current.strip():
        paragraphs.append(current.strip())
    return paragraphs


def content_length(paragraphs: list[str]) -> int:
    return sum(len(paragraph) for paragraph in paragraphs)


def render_paragraphs(paragraphs: list[str]) -> str:
    """Render paragraphs as escaped ``<p>`` containers."""

    return "".join(f"<p>{escape(paragraph, quote=False)}</p>\n" for paragraph in paragraphs)
