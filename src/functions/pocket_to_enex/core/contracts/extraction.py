"""Extraction outcomes shared by both extractors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ExtractionMethod(str, Enum):
    """Which strategy produced a note body."""

    LIGHTWEIGHT = "lightweight"
    BROWSER = "browser"
    FAILED = "failed"

    @property
    def label(self) -> str:
        return METHOD_LABELS[self]


METHOD_LABELS = {
    ExtractionMethod.LIGHTWEIGHT: "Scraped via HTTP",
    ExtractionMethod.BROWSER: "Scraped via Browser",
    ExtractionMethod.FAILED: "Scraping Failed",
}


@dataclass(frozen=True, slots=True)
class ExtractionSuccess:
    """ENML fragment extracted from the page."""

    text: str
    method: ExtractionMethod

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class ExtractionFailure:
    """Extraction did not yield usable content.

    ``text`` is the user-facing paragraph placed in the note body instead.
    """

    reason: str
    text: str
    method: ExtractionMethod = ExtractionMethod.LIGHTWEIGHT

    @property
    def ok(self) -> bool:
        return False


ExtractionResult = Union[ExtractionSuccess, ExtractionFailure]
