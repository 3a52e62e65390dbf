"""End-to-end Pocket CSV to ENEX conversion."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

import httpx

from src.shared.batch import CheckpointManager, MemoryMonitor, ProgressTracker

from ..contracts.options import ConversionOptions
from ..contracts.records import OutputNote, SourceRecord
from ..extractors.browser_extractor import BrowserExtractor
from ..extractors.browser_manager import BrowserManager
from ..extractors.light_extractor import LightExtractor
from ..notes.csv_loader import load_records
from ..notes.enex_writer import ArchiveError, write_enex
from .batch_scheduler import BatchScheduler, Sleeper
from .record_processor import Extractor, RecordProcessor

logger = logging.getLogger(__name__)

FAILED_SAMPLE_SIZE = 10


@dataclass
class ConversionResult:
    """Outcome of a conversion run."""

    success: bool
    output_path: Optional[Path] = None
    total: int = 0
    processed: int = 0
    failed: int = 0
    failed_sample: List[str] = field(default_factory=list)
    notes_written: int = 0
    error: Optional[str] = None
    interrupted: bool = False

    @property
    def exit_code(self) -> int:
        if self.interrupted:
            return 130
        return 0 if self.success else 1


def log_failed_sample(failed_urls: Sequence[str], limit: int = FAILED_SAMPLE_SIZE) -> None:
    if not failed_urls:
        return
    lines = [f"  - {url}" for url in failed_urls[:limit]]
    if len(failed_urls) > limit:
        lines.append(f"  ... and {len(failed_urls) - limit} more")
    logger.warning("Failed to scrape %d URL(s):\n%s", len(failed_urls), "\n".join(lines))


class ConversionPipeline:
    """Loads records, processes them in batches and writes the archive.

    Collaborators can be injected; otherwise the HTTP client and, with
    browser fallback enabled, the browser manager are created and owned by
    the run.
    """

    def __init__(
        self,
        options: ConversionOptions,
        *,
        light_extractor: Optional[Extractor] = None,
        browser_extractor: Optional[Extractor] = None,
        browser_manager: Optional[BrowserManager] = None,
        delay_seconds: Optional[float] = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.options = options
        self._light_extractor = light_extractor
        self._browser_extractor = browser_extractor
        self.browser_manager = browser_manager
        self._delay_seconds = delay_seconds
        self._sleep = sleep
        self._http_client: Optional[httpx.AsyncClient] = None
        self.checkpoint = CheckpointManager(
            options.output_path,
            interval=options.checkpoint_interval,
            batch_size=options.batch_size,
            serialize_note=OutputNote.to_dict,
            deserialize_note=OutputNote.from_dict,
            write_partial=write_enex,
        )

    def _build_processor(self) -> RecordProcessor:
        options = self.options
        if not options.scrape:
            return RecordProcessor()

        light = self._light_extractor
        if light is None:
            self._http_client = httpx.AsyncClient(follow_redirects=True)
            light = LightExtractor(timeout=options.timeout_seconds, client=self._http_client)

        browser = self._browser_extractor
        if options.fallback_browser and browser is None:
            if self.browser_manager is None:
                self.browser_manager = BrowserManager(
                    max_pages=options.max_pages,
                    restart_interval=options.restart_interval,
                )
            browser = BrowserExtractor(
                self.browser_manager,
                timeout=options.timeout_seconds,
                settle_seconds=options.settle_seconds,
            )
        return RecordProcessor(light, browser)

    def _restore(self) -> tuple[int, List[OutputNote]]:
        if not self.options.resume:
            return 0, []
        if not self.checkpoint.has_checkpoint():
            logger.info("No checkpoint found at %s; starting fresh", self.checkpoint.checkpoint_path)
            return 0, []
        progress = self.checkpoint.load_checkpoint()
        if progress is None:
            return 0, []
        return progress.last_processed_index + 1, list(progress.processed_notes)

    async def _release_resources(self) -> None:
        if self.browser_manager is not None:
            await self.browser_manager.close()
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def run(self, records: Optional[Sequence[SourceRecord]] = None) -> ConversionResult:
        """Convert ``records`` (or the CSV at ``input_path``) into the archive.

        Never raises for per-record, checkpoint or archive failures; those are
        reported in the returned :class:`ConversionResult`.
        """

        options = self.options
        start_index, restored_notes = self._restore()

        if records is None:
            if options.input_path is None:
                return ConversionResult(success=False, error="No input file given")
            try:
                records = await asyncio.to_thread(load_records, options.input_path, options.limit)
            except (OSError, ValueError) as exc:
                logger.error("Failed to load records: %s", exc)
                return ConversionResult(success=False, error=str(exc))
        else:
            records = list(records)[: options.limit]

        if not records:
            logger.error("No records to convert")
            return ConversionResult(success=False, output_path=options.output_path, error="No records found")

        if start_index > 0:
            logger.info("Skipping first %d records (already processed)", start_index)
        remaining = list(records[start_index:])

        logger.info(
            "Starting %sconversion of %d records...",
            "scraping and " if options.scrape else "",
            len(remaining),
        )

        scheduler = BatchScheduler(
            self._build_processor(),
            self.checkpoint,
            memory_monitor=MemoryMonitor(),
            delay_seconds=self._delay_seconds,
            sleep=self._sleep,
        )
        tracker = ProgressTracker(total=len(remaining), label="convert")

        try:
            new_notes = await scheduler.run(
                remaining, options, start_index=start_index, tracker=tracker
            )
        except asyncio.CancelledError:
            self.checkpoint.save_checkpoint()
            logger.warning("Conversion interrupted; re-run with --resume to continue")
            return self._result(False, error="Interrupted", interrupted=True)
        except Exception as exc:
            logger.exception("Conversion failed: %s", exc)
            self.checkpoint.save_checkpoint()
            return self._result(False, error=str(exc))
        finally:
            await self._release_resources()

        tracker.log_summary()
        self.checkpoint.show_stats()
        log_failed_sample(self.checkpoint.progress.failed_urls)

        all_notes = restored_notes + new_notes
        if restored_notes:
            logger.info("Including %d notes from checkpoint", len(restored_notes))

        try:
            logger.info("Generating final ENEX file with %d notes...", len(all_notes))
            write_enex(all_notes, options.output_path)
        except (ArchiveError, OSError) as exc:
            logger.error("Error generating ENEX file: %s", exc)
            self.checkpoint.save_checkpoint()
            logger.error("Checkpoint saved. Use --resume to continue processing.")
            return self._result(False, error=str(exc))

        self.checkpoint.cleanup()
        logger.info("Successfully converted %d records to %s", len(all_notes), options.output_path)
        return self._result(True, notes_written=len(all_notes))

    def _result(self, success: bool, **extra) -> ConversionResult:
        progress = self.checkpoint.progress
        return ConversionResult(
            success=success,
            output_path=self.options.output_path,
            total=progress.total_count,
            processed=progress.processed_count,
            failed=len(progress.failed_urls),
            failed_sample=list(progress.failed_urls[:FAILED_SAMPLE_SIZE]),
            **extra,
        )


async def convert(
    options: ConversionOptions,
    records: Optional[Sequence[SourceRecord]] = None,
    **collaborators,
) -> ConversionResult:
    """Run a :class:`ConversionPipeline` with ``options``."""
    return await ConversionPipeline(options, **collaborators).run(records)
