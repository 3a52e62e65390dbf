"""Periodic progress log lines for long batch runs."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

import psutil

logger = logging.getLogger(__name__)

_GIB = 1024**3


def _memory_summary() -> str:
    try:
        memory = psutil.virtual_memory()
    except (psutil.Error, OSError):
        return "Memory: n/a"
    return f"Memory: {memory.percent:.0f}% ({memory.used / _GIB:.1f}/{memory.total / _GIB:.1f}GB)"


def _format_value(value: Any) -> str:
    return f"{value:.1f}" if isinstance(value, float) else str(value)


class ProgressTracker:
    """Counts committed records and logs rate, memory and ETA.

    Log lines replace an interactive progress bar so the output stays
    readable when redirected to a file. A line is due every
    ``log_every`` records, every ``log_seconds`` seconds, and at the end.

    Example:
        tracker = ProgressTracker(total=len(records), label="convert")

        for batch in batches:
            outcomes = await run(batch)
            tracker.advance(len(outcomes), failed=count_failures(outcomes))
            if tracker.should_log():
                tracker.log_progress()

        tracker.log_summary()
    """

    def __init__(
        self,
        total: int,
        label: str,
        *,
        log_every: int = 10,
        log_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.total = total
        self.label = label
        self.log_every = log_every
        self.log_seconds = log_seconds
        self._clock = clock

        self.started = clock()
        self.processed = 0
        self.failed = 0
        self._logged_at = self.started
        self._logged_count = 0

    @property
    def succeeded(self) -> int:
        return self.processed - self.failed

    def advance(self, count: int = 1, *, failed: int = 0) -> None:
        """Add ``count`` committed records, ``failed`` of which failed."""
        self.processed += count
        self.failed += failed

    def should_log(self) -> bool:
        if self.processed >= self.total:
            return True
        if self.processed - self._logged_count >= self.log_every:
            return True
        return self._clock() - self._logged_at >= self.log_seconds

    def log_progress(self, extra_stats: Optional[Dict[str, Any]] = None) -> None:
        stats = self.get_stats()
        fields = [
            f"Progress: {self.processed:,}/{self.total:,} ({stats['percent']:.1f}%)",
            f"Rate: {stats['rate_per_second']:.2f} rec/s",
            _memory_summary(),
        ]
        fields.extend(f"{key}: {_format_value(value)}" for key, value in (extra_stats or {}).items())
        fields.append(f"Failed: {self.failed}")
        fields.append(f"ETA: {stats['eta_seconds']:.0f}s")
        logger.info("[%s] %s", self.label, " | ".join(fields))

        self._logged_at = self._clock()
        self._logged_count = self.processed

    def log_summary(self) -> None:
        stats = self.get_stats()
        logger.info(
            "[%s] Finished %d records (%d ok, %d failed) in %.1fs, %.2f rec/s",
            self.label,
            self.processed,
            self.succeeded,
            self.failed,
            stats["elapsed_seconds"],
            stats["rate_per_second"],
        )

    def get_stats(self) -> Dict[str, Any]:
        elapsed = max(0.0, self._clock() - self.started)
        rate = self.processed / elapsed if elapsed > 0 else 0.0
        remaining = max(0, self.total - self.processed)
        return {
            "processed": self.processed,
            "successful": self.succeeded,
            "failed": self.failed,
            "total": self.total,
            "percent": (self.processed / self.total * 100) if self.total else 0.0,
            "rate_per_second": rate,
            "elapsed_seconds": elapsed,
            "eta_seconds": remaining / rate if rate > 0 else 0.0,
        }
