"""Record loading, note construction and ENEX archive handling."""

from .csv_loader import POCKET_COLUMNS, load_records
from .enex_splitter import SplitError, split_enex
from .enex_writer import ArchiveError, build_enex, note_element, write_enex
from .note_builder import create_note, escape_html, format_date, remove_invalid_xml_chars

__all__ = [
    "POCKET_COLUMNS",
    "load_records",
    "SplitError",
    "split_enex",
    "ArchiveError",
    "build_enex",
    "note_element",
    "write_enex",
    "create_note",
    "escape_html",
    "format_date",
    "remove_invalid_xml_chars",
]
