"""Text processing helpers shared by both extractors."""

from .binary_detector import (
    binary_reference,
    classify_url,
    content_type_reference,
    is_binary_url,
    is_text_content_type,
)
from .content_cleaner import CONTENT_SELECTORS, REMOVAL_SELECTORS, extract_region_text
from .encoding import decode_html, detect_encoding
from .markers import fetch_failure, insufficient_content, label_method, method_marker
from .paragraphs import MIN_CONTENT_CHARS, content_length, render_paragraphs, segment_paragraphs
from .result_builder import build_result

__all__ = [
    "binary_reference",
    "classify_url",
    "content_type_reference",
    "is_binary_url",
    "is_text_content_type",
    "CONTENT_SELECTORS",
    "REMOVAL_SELECTORS",
    "extract_region_text",
    "decode_html",
    "detect_encoding",
    "fetch_failure",
    "insufficient_content",
    "label_method",
    "method_marker",
    "MIN_CONTENT_CHARS",
    "content_length",
    "render_paragraphs",
    "segment_paragraphs",
    "build_result",
]
