"""Build ENML notes from Pocket records."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

from ..contracts.records import OutputNote, SourceRecord

ENML_DOCTYPE = '<!DOCTYPE en-note SYSTEM "http://xml.evernote.com/pub/enml2.dtd">'
ENML_HEADER = '<?xml version="1.0" encoding="UTF-8" standalone="no"?>'

# Control characters not allowed in XML 1.0
_INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}


def format_date(timestamp: str | int | float | None) -> str:
    """Format epoch seconds as an ENEX timestamp (``YYYYMMDDTHHMMSSZ``, UTC)."""

    try:
        seconds = int(float(timestamp))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        seconds = 0
    try:
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        moment = datetime.fromtimestamp(0, tz=timezone.utc)
    return moment.strftime("%Y%m%dT%H%M%SZ")


def remove_invalid_xml_chars(text: Optional[str]) -> str:
    if not text:
        return ""
    return _INVALID_XML_CHARS.sub("", text)


def escape_html(text: Optional[str]) -> str:
    """Strip invalid XML characters, then escape markup-significant ones."""
    cleaned = remove_invalid_xml_chars(text)
    return "".join(_HTML_ESCAPES.get(char, char) for char in cleaned)


def _scraped_body(title: str, url: str, status: str, content: str, scraped_on: str) -> str:
    return (
        f"\n<h1>{title}</h1>\n"
        f'<div>\n<a href="{url}">Original Article</a>\n</div>\n'
        "<hr/>\n"
        f"<div>\n{content}\n</div>\n"
        "<hr/>\n"
        "<div>\n<small>\n"
        f"URL: {url}<br/>\n"
        f"Status: {status}<br/>\n"
        f"Scraped: {scraped_on}\n"
        "</small>\n</div>"
    )


def _link_body(title: str, url: str, status: str) -> str:
    return (
        f'\n<div>\n<a href="{url}">{title}</a>\n</div>\n'
        "<div>\n<br/>\n</div>\n"
        f"<div>\nURL: {url}\n</div>\n"
        f"<div>\nStatus: {status}\n</div>"
    )


def create_note(
    record: SourceRecord,
    scraped_content: Optional[str] = None,
    *,
    scraped_on: Optional[str] = None,
) -> OutputNote:
    """Create the note for ``record``.

    With ``scraped_content`` the body carries the article between the link
    header and a footer; without it the note only links to the source.

    Args:
        record: Source row
        scraped_content: Already-rendered article markup, if any
        scraped_on: Date shown in the footer (defaults to today, UTC)
    """

    raw_title = remove_invalid_xml_chars(record.title or record.url)
    title = escape_html(raw_title)
    url = escape_html(record.url)
    status = escape_html(record.status)
    created = format_date(record.time_added)

    if scraped_content:
        day = scraped_on or datetime.now(timezone.utc).strftime("%Y-%m-%d")
        body = _scraped_body(title, url, status, remove_invalid_xml_chars(scraped_content), day)
    else:
        body = _link_body(title, url, status)

    content = f"{ENML_HEADER}\n{ENML_DOCTYPE}\n<en-note>\n{body}\n</en-note>"

    return OutputNote(
        title=raw_title,
        content=content,
        created=created,
        updated=created,
        source_url=remove_invalid_xml_chars(record.url),
        tags=tuple(remove_invalid_xml_chars(tag) for tag in record.tag_list),
    )
