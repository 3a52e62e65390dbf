"""Per-record extraction with browser fallback and note construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from ..contracts.extraction import ExtractionMethod, ExtractionResult
from ..contracts.options import ConversionOptions
from ..contracts.records import OutputNote, SourceRecord
from ..notes.note_builder import create_note
from ..processors.markers import fetch_failure, label_method

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    async def extract(self, url: str) -> ExtractionResult:
        ...


NoteFactory = Callable[[SourceRecord, Optional[str]], OutputNote]


@dataclass(frozen=True)
class ProcessedRecord:
    """Note built for one record and whether its extraction succeeded."""

    note: Optional[OutputNote]
    success: bool
    method: Optional[ExtractionMethod] = None


class RecordProcessor:
    """Runs the lightweight extractor, then the browser one if allowed.

    :meth:`process` never raises. Every failure ends up as a labelled body or
    a link-only note.
    """

    def __init__(
        self,
        light_extractor: Optional[Extractor] = None,
        browser_extractor: Optional[Extractor] = None,
        *,
        note_factory: NoteFactory = create_note,
    ) -> None:
        self.light_extractor = light_extractor
        self.browser_extractor = browser_extractor
        self._note_factory = note_factory

    def link_only(self, record: SourceRecord) -> Optional[OutputNote]:
        """Build the note without scraped content; None if even that fails."""
        try:
            return self._note_factory(record, None)
        except Exception as exc:
            logger.error("Failed to build fallback note for %s: %s", record.url, exc)
            return None

    async def process(self, record: SourceRecord, options: ConversionOptions) -> ProcessedRecord:
        if not options.scrape or self.light_extractor is None:
            return ProcessedRecord(note=self.link_only(record), success=True)

        result = await self._extract(record.url, options)
        method = result.method if result.ok else ExtractionMethod.FAILED
        body = label_method(result.text, method)

        try:
            note = self._note_factory(record, body)
        except Exception as exc:
            logger.warning("Note construction failed for %s: %s", record.url, exc)
            return ProcessedRecord(note=self.link_only(record), success=False, method=method)

        return ProcessedRecord(note=note, success=result.ok, method=method)

    async def _extract(self, url: str, options: ConversionOptions) -> ExtractionResult:
        result = await self._attempt(self.light_extractor, url, ExtractionMethod.LIGHTWEIGHT)
        if result.ok:
            return result

        logger.debug("Lightweight extraction failed for %s: %s", url, result.reason)
        if options.fallback_browser and self.browser_extractor is not None:
            result = await self._attempt(self.browser_extractor, url, ExtractionMethod.BROWSER)
            if not result.ok:
                logger.debug("Browser extraction failed for %s: %s", url, result.reason)
        return result

    @staticmethod
    async def _attempt(extractor: Extractor, url: str, method: ExtractionMethod) -> ExtractionResult:
        try:
            return await extractor.extract(url)
        except Exception as exc:
            logger.warning("Unexpected %s extractor error for %s: %s", method.value, url, exc)
            return fetch_failure(url, str(exc) or exc.__class__.__name__, method)
