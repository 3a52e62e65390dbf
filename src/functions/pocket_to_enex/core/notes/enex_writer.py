"""Assemble notes into an Evernote export (ENEX) document."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, Optional, Sequence

from lxml import etree

from ..contracts.records import OutputNote
from .note_builder import format_date

logger = logging.getLogger(__name__)

ENEX_DOCTYPE = '<!DOCTYPE en-export SYSTEM "http://xml.evernote.com/pub/evernote-export3.dtd">'


class ArchiveError(RuntimeError):
    """Raised when no note could be written to the archive."""


def _text_element(parent: etree._Element, tag: str, text: str) -> etree._Element:
    element = etree.SubElement(parent, tag)
    element.text = text
    return element


def note_element(note: OutputNote) -> etree._Element:
    """Build the ``<note>`` element in ENEX element order.

    Raises:
        ValueError: If a field holds text XML cannot represent
    """

    element = etree.Element("note")
    _text_element(element, "title", note.title)
    content = etree.SubElement(element, "content")
    content.text = etree.CDATA(note.content)
    _text_element(element, "created", note.created)
    _text_element(element, "updated", note.updated)
    for tag in note.tags:
        _text_element(element, "tag", tag)
    attributes = etree.SubElement(element, "note-attributes")
    _text_element(attributes, "author", note.author)
    _text_element(attributes, "source", note.source)
    _text_element(attributes, "source-url", note.source_url)
    return element


def build_enex(notes: Iterable[OutputNote], *, export_date: Optional[str] = None) -> bytes:
    """Serialize ``notes`` into ENEX bytes.

    Notes that cannot be serialized are skipped and logged.

    Raises:
        ArchiveError: If no note could be serialized
    """

    root = etree.Element(
        "en-export",
        attrib={
            "export-date": export_date or format_date(time.time()),
            "application": "Evernote",
            "version": "10.0",
        },
    )

    skipped = 0
    for index, note in enumerate(notes):
        try:
            root.append(note_element(note))
        except (ValueError, TypeError) as exc:
            skipped += 1
            logger.error("Skipping note %d (%s): %s", index, getattr(note, "source_url", "?"), exc)

    if len(root) == 0:
        raise ArchiveError("No notes could be written to the archive")
    if skipped:
        logger.warning("Skipped %d notes that could not be serialized", skipped)

    return etree.tostring(
        root,
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=True,
        doctype=ENEX_DOCTYPE,
    )


def write_enex(notes: Sequence[OutputNote], path: str | Path) -> Path:
    """Write ``notes`` to ``path`` atomically and return the path."""

    target = Path(path)
    data = build_enex(notes)
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path = target.with_name(target.name + ".tmp")
    temp_path.write_bytes(data)
    temp_path.replace(target)
    logger.info("Wrote %d notes to %s (%.2f MB)", len(notes), target, len(data) / 1024 / 1024)
    return target
