"""Character encoding sniffing for fetched pages."""

from __future__ import annotations

import re

_SNIFF_BYTES = 1024
_CHARSET_PATTERN = re.compile(rb"charset\s*=\s*[\"']?\s*(euc-jp|shift_jis)", re.IGNORECASE)
_CODECS = {b"euc-jp": "euc_jp", b"shift_jis": "shift_jis"}


def detect_encoding(data: bytes) -> str:
    """Return the codec declared in the first KiB of a page, defaulting to UTF-8.

    Only EUC-JP and Shift_JIS declarations are honoured; everything else is
    read as UTF-8.
    """
    match = _CHARSET_PATTERN.search(data[:_SNIFF_BYTES])
    if match:
        return _CODECS[match.group(1).lower()]
    return "utf-8"


def decode_html(data: bytes) -> str:
    return data.decode(detect_encoding(data), errors="replace")
