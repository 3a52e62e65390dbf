"""Detect non-text resources and describe them instead of scraping."""

from __future__ import annotations

from html import escape
from typing import Optional
from urllib.parse import urlparse

_CATEGORIES: dict[str, frozenset[str]] = {
    "image": frozenset(
        {"jpg", "jpeg", "png", "gif", "webp", "bmp", "svg", "ico", "tiff", "tif", "psd", "ai", "eps"}
    ),
    "video": frozenset(
        {"mp4", "avi", "mov", "wmv", "flv", "webm", "mkv", "m4v", "3gp", "ogv", "mpg", "mpeg"}
    ),
    "audio": frozenset({"mp3", "wav", "ogg", "m4a", "aac", "flac", "wma", "opus", "amr"}),
    "pdf": frozenset({"pdf"}),
    "document": frozenset(
        {"doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "odp", "rtf"}
    ),
    "archive": frozenset({"zip", "rar", "7z", "tar", "gz", "bz2", "xz", "dmg", "iso"}),
    "other": frozenset(
        {
            # executables
            "exe", "msi", "app", "deb", "rpm", "apk", "ipa",
            # data
            "db", "sqlite", "bin", "dat", "pak",
            # fonts
            "ttf", "otf", "woff", "woff2", "eot",
            "swf", "fla", "sketch",
        }
    ),
}

_TEXT_CONTENT_TYPES = ("text/html", "text/plain", "application/xhtml+xml")


def _path_parts(url: str) -> tuple[str, str, str]:
    """Return (lowercased path, filename, extension) for a URL."""
    try:
        path = urlparse(url).path.lower()
    except ValueError:
        return "", "file", ""
    filename = path.rsplit("/", 1)[-1] or "file"
    extension = filename.rsplit(".", 1)[-1] if "." in filename else ""
    return path, filename, extension


def classify_url(url: str) -> Optional[str]:
    """Return the binary category for a URL, or None for likely text pages."""
    _, _, extension = _path_parts(url)
    if not extension:
        return None
    for category, extensions in _CATEGORIES.items():
        if extension in extensions:
            return category
    return None


def is_binary_url(url: str) -> bool:
    return classify_url(url) is not None


def binary_reference(url: str) -> str:
    """Describe a binary resource as a short ENML block linking to it."""
    category = classify_url(url)
    _, filename, extension = _path_parts(url)
    href = escape(url, quote=True)
    name = escape(filename, quote=False)

    if category == "image":
        return f'<div>\n<img src="{href}" alt="Image"/>\n<p>Image: {name}</p>\n</div>'
    if category == "video":
        return (
            f'<div>\n<p>Video file: <a href="{href}">{name}</a></p>\n'
            "<p><em>Video preview not available in Evernote</em></p>\n</div>"
        )
    if category == "audio":
        return (
            f'<div>\n<p>Audio file: <a href="{href}">{name}</a></p>\n'
            "<p><em>Audio preview not available in Evernote</em></p>\n</div>"
        )
    if category == "pdf":
        return f'<div>\n<p>PDF document: <a href="{href}">{name}</a></p>\n</div>'
    if category == "document":
        return f'<div>\n<p>Document: <a href="{href}">{name}</a></p>\n</div>'
    if category == "archive":
        return f'<div>\n<p>Archive file: <a href="{href}">{name}</a></p>\n</div>'

    label = (extension or "unknown").upper()
    return f'<div>\n<p>Binary file ({escape(label)}): <a href="{href}">{name}</a></p>\n</div>'


def is_text_content_type(content_type: str) -> bool:
    """Return True when a response can be parsed as markup.

    A missing header is treated as text.
    """
    if not content_type:
        return True
    lowered = content_type.lower()
    return any(kind in lowered for kind in _TEXT_CONTENT_TYPES)


def content_type_reference(url: str, content_type: str) -> str:
    """Describe a response whose declared type is not text."""
    _, filename, _ = _path_parts(url)
    mime_type = content_type.split(";", 1)[0].strip()
    return (
        f'<div>\n<p>File: <a href="{escape(url, quote=True)}">{escape(filename, quote=False)}</a></p>\n'
        f"<p><small>Content-Type: {escape(mime_type)}</small></p>\n</div>"
    )
