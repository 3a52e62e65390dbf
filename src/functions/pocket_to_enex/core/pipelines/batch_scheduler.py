"""Order-preserving concurrent batch execution with progress accounting."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from src.shared.batch import CheckpointManager, MemoryMonitor, ProgressTracker

from ..contracts.options import ConversionOptions
from ..contracts.records import OutputNote, SourceRecord
from .record_processor import ProcessedRecord, RecordProcessor

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


def pacing_delay(batch_size: int) -> float:
    """Seconds to wait between batches; larger batches wait longer."""
    return max(1.0, batch_size * 0.1)


class BatchScheduler:
    """Processes records in fixed-size concurrent batches.

    Each batch runs to completion before the next one starts. Results are
    committed to the checkpoint in global index order, whatever order the
    concurrent work finished in.
    """

    def __init__(
        self,
        processor: RecordProcessor,
        checkpoint: CheckpointManager,
        *,
        memory_monitor: Optional[MemoryMonitor] = None,
        delay_seconds: Optional[float] = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialize scheduler.

        Args:
            processor: Builds the note for a single record
            checkpoint: Receives one progress update per committed record
            memory_monitor: Asked to reclaim memory after each batch
            delay_seconds: Fixed pause between batches instead of the
                batch-size based default
            sleep: Coroutine used for the pause
        """
        self.processor = processor
        self.checkpoint = checkpoint
        self.memory_monitor = memory_monitor
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self.batches_run = 0

    async def run(
        self,
        records: Sequence[SourceRecord],
        options: ConversionOptions,
        *,
        start_index: int = 0,
        tracker: Optional[ProgressTracker] = None,
    ) -> List[OutputNote]:
        """Process ``records`` whose first item sits at ``start_index`` globally.

        Returns:
            Notes in input order
        """

        batch_size = options.batch_size
        total = start_index + len(records)
        self.checkpoint.progress.total_count = total
        self.checkpoint.progress.processed_count = start_index

        notes: List[OutputNote] = []
        for batch_start in range(0, len(records), batch_size):
            batch = [
                (start_index + batch_start + offset, record)
                for offset, record in enumerate(records[batch_start:batch_start + batch_size])
            ]

            outcomes = await self._run_batch(batch, options)
            failed = self._commit(outcomes, total, notes)
            self.batches_run += 1

            snapshot = self.memory_monitor.reclaim() if self.memory_monitor else None
            if tracker is not None:
                tracker.advance(len(batch), failed=failed)
                if tracker.should_log():
                    extra = {"RSS MB": snapshot["rss_mb"]} if snapshot else None
                    tracker.log_progress(extra)

            if batch_start + batch_size < len(records):
                delay = self.delay_seconds if self.delay_seconds is not None else pacing_delay(batch_size)
                if delay > 0:
                    await self._sleep(delay)

        return notes

    async def _run_batch(
        self,
        batch: List[Tuple[int, SourceRecord]],
        options: ConversionOptions,
    ) -> List[Tuple[int, SourceRecord, ProcessedRecord]]:
        results = await asyncio.gather(
            *(self.processor.process(record, options) for _, record in batch),
            return_exceptions=True,
        )

        outcomes: List[Tuple[int, SourceRecord, ProcessedRecord]] = []
        for (index, record), result in zip(batch, results):
            if isinstance(result, ProcessedRecord):
                outcomes.append((index, record, result))
                continue
            if not isinstance(result, Exception):
                raise result
            logger.error("Batch member %d (%s) raised unexpectedly: %s", index, record.url, result)
            outcomes.append((index, record, self._degrade(record)))

        outcomes.sort(key=lambda item: item[0])
        return outcomes

    def _degrade(self, record: SourceRecord) -> ProcessedRecord:
        return ProcessedRecord(note=self.processor.link_only(record), success=False)

    def _commit(
        self,
        outcomes: List[Tuple[int, SourceRecord, ProcessedRecord]],
        total: int,
        notes: List[OutputNote],
    ) -> int:
        failed = 0
        for index, record, processed in outcomes:
            if processed.note is not None:
                notes.append(processed.note)
            if not processed.success:
                failed += 1
            self.checkpoint.update_progress(
                index + 1,
                total,
                index,
                note=processed.note,
                failed_id=None if processed.success else record.url,
            )
        return failed
