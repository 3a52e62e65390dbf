"""Checkpoint manager for resumable, order-preserving batch runs with atomic writes."""

from __future__ import annotations

import json
import logging
import math
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

CHECKPOINT_SUFFIX = ".checkpoint.json"


@dataclass
class Progress:
    """Cumulative progress of a run.

    ``processed_count`` equals ``last_processed_index + 1`` once records have
    been committed in order. ``processed_notes`` never grows past
    ``processed_count``.
    """

    processed_count: int = 0
    total_count: int = 0
    last_processed_index: int = -1
    failed_urls: List[str] = field(default_factory=list)
    processed_notes: List[Any] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)
    start_time: float = field(default_factory=time.time)


def derive_base_path(output_path: str | Path, suffix: str = ".enex") -> str:
    """Strip the archive suffix from an output path, keeping its directory."""
    text = str(output_path)
    if text.endswith(suffix):
        return text[: -len(suffix)]
    return text


class CheckpointManager:
    """Persists a single :class:`Progress` snapshot next to the output file.

    Snapshot and intermediate flushes happen when the processed count hits an
    exact multiple of ``interval``. All I/O failures are logged, never raised.

    Example:
        checkpoint = CheckpointManager("./out/pocket.enex", interval=100)
        if resume and checkpoint.has_checkpoint():
            checkpoint.load_checkpoint()

        for index, note in enumerate(notes):
            checkpoint.update_progress(index + 1, len(notes), index, note=note)

        checkpoint.cleanup()  # only after the final archive was written
    """

    def __init__(
        self,
        output_path: str | Path,
        *,
        interval: int = 100,
        batch_size: int = 10,
        serialize_note: Optional[Callable[[Any], Dict[str, Any]]] = None,
        deserialize_note: Optional[Callable[[Dict[str, Any]], Any]] = None,
        write_partial: Optional[Callable[[List[Any], Path], None]] = None,
    ):
        """Initialize checkpoint manager.

        Args:
            output_path: Final archive path; checkpoint files are derived from it
            interval: Save a snapshot every N processed records
            batch_size: Records per batch, used to report the batch count
            serialize_note: Converts a note into JSON-compatible data
            deserialize_note: Rebuilds a note from ``serialize_note`` output
            write_partial: Writes accumulated notes to an intermediate archive
        """
        if interval < 1:
            raise ValueError("interval must be positive")
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.output_path = Path(output_path)
        base = derive_base_path(output_path)
        self.checkpoint_path = Path(base + CHECKPOINT_SUFFIX)
        self._base = base
        self.interval = interval
        self.batch_size = batch_size
        self._serialize_note = serialize_note or (lambda note: note)
        self._deserialize_note = deserialize_note or (lambda data: data)
        self._write_partial = write_partial
        self.progress = Progress()

    def has_checkpoint(self) -> bool:
        return self.checkpoint_path.exists()

    def load_checkpoint(self) -> Optional[Progress]:
        """Restore progress from disk.

        Returns:
            The restored progress, or None if missing or unreadable
        """
        if not self.has_checkpoint():
            return None

        try:
            with open(self.checkpoint_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            restored = Progress(
                processed_count=int(raw["processed_count"]),
                total_count=int(raw["total_count"]),
                last_processed_index=int(raw["last_processed_index"]),
                failed_urls=list(raw.get("failed_urls", [])),
                processed_notes=[
                    self._deserialize_note(item) for item in raw.get("processed_notes", [])
                ],
                timestamp=float(raw.get("timestamp", time.time())),
                start_time=float(raw.get("start_time", time.time())),
            )
        except Exception as e:
            logger.error("Failed to load checkpoint: %s", e)
            return None

        self.progress = restored
        logger.info(
            "Resuming from checkpoint: processed %d/%d, failed URLs %d, last index %d",
            restored.processed_count,
            restored.total_count,
            len(restored.failed_urls),
            restored.last_processed_index,
        )
        return restored

    def save_checkpoint(self) -> bool:
        """Atomically write the current progress to disk.

        Returns:
            True when the snapshot was written
        """
        self.progress.timestamp = time.time()
        progress = self.progress
        try:
            payload = {
                "processed_count": progress.processed_count,
                "total_count": progress.total_count,
                "last_processed_index": progress.last_processed_index,
                "failed_urls": list(progress.failed_urls),
                "processed_notes": [self._serialize_note(note) for note in progress.processed_notes],
                "timestamp": progress.timestamp,
                "start_time": progress.start_time,
            }
            self.checkpoint_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.checkpoint_path.with_suffix(".tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            temp_path.replace(self.checkpoint_path)
            logger.debug("Checkpoint saved to %s", self.checkpoint_path)
            return True
        except Exception as e:
            logger.error("Failed to save checkpoint: %s", e)
            return False

    def intermediate_path(self, processed_count: Optional[int] = None) -> Path:
        count = self.progress.processed_count if processed_count is None else processed_count
        return Path(f"{self._base}.checkpoint_{count}.enex")

    def save_intermediate(self) -> Optional[Path]:
        """Flush accumulated notes to a partial archive. Never raises."""
        if not self.progress.processed_notes or self._write_partial is None:
            return None

        path = self.intermediate_path()
        try:
            self._write_partial(list(self.progress.processed_notes), path)
        except Exception as e:
            logger.debug("Intermediate archive %s not written: %s", path, e)
            return None
        return path

    def update_progress(
        self,
        processed_count: int,
        total_count: int,
        last_index: int,
        note: Any = None,
        failed_id: Optional[str] = None,
    ) -> bool:
        """Record one committed record.

        Args:
            processed_count: Cumulative processed records
            total_count: Total records in the run
            last_index: Global index of the committed record
            note: Note produced for the record, if any
            failed_id: Identifier to record as failed, if any

        Returns:
            True when this update triggered a snapshot
        """
        self.progress.processed_count = processed_count
        self.progress.total_count = total_count
        self.progress.last_processed_index = last_index

        if note is not None:
            self.progress.processed_notes.append(note)
        if failed_id:
            self.progress.failed_urls.append(failed_id)

        if processed_count % self.interval == 0:
            self.save_checkpoint()
            self.save_intermediate()
            return True
        return False

    def cleanup(self) -> None:
        """Delete the snapshot file after a successful run."""
        try:
            if self.has_checkpoint():
                self.checkpoint_path.unlink()
                logger.debug("Removed checkpoint %s", self.checkpoint_path)
        except Exception as e:
            logger.error("Failed to cleanup checkpoint: %s", e)

    def get_stats(self, now: Optional[float] = None) -> Dict[str, Any]:
        """Derive throughput and success statistics from the progress."""
        progress = self.progress
        elapsed = max(0.0, (now if now is not None else time.time()) - progress.start_time)
        processed = progress.processed_count
        failed = len(progress.failed_urls)
        return {
            "processed": processed,
            "total": progress.total_count,
            "failed": failed,
            "success_rate": ((processed - failed) / processed * 100) if processed > 0 else 0.0,
            "rate_per_second": processed / elapsed if elapsed > 0 else 0.0,
            "elapsed_seconds": elapsed,
            "checkpoints_saved": processed // self.interval,
            "batch_size": self.batch_size,
            "batches": math.ceil(processed / self.batch_size),
        }

    def show_stats(self) -> Dict[str, Any]:
        stats = self.get_stats()
        lines = [
            f"Total processed: {stats['processed']}/{stats['total']}",
            f"Success rate: {stats['success_rate']:.1f}%",
            f"Failed URLs: {stats['failed']}",
            f"Processing rate: {stats['rate_per_second']:.2f} items/sec",
            f"Batches: {stats['batches']} of {stats['batch_size']} records",
            f"Elapsed time: {stats['elapsed_seconds'] / 60:.1f} minutes",
        ]
        if stats["checkpoints_saved"] > 0:
            lines.append(f"Checkpoints saved: {stats['checkpoints_saved']}")
        logger.info("Processing Statistics:\n  " + "\n  ".join(lines))
        return stats
