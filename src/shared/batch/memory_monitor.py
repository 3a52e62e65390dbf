"""Memory sampling and reclamation hints between processing batches."""

from __future__ import annotations

import gc
import logging
from typing import Any, Dict, Optional

import psutil

logger = logging.getLogger(__name__)


class MemoryMonitor:
    """Samples process and system memory and requests garbage collection.

    Meant to be called between batches: :meth:`reclaim` runs a collection
    pass, records the resident set size and logs a warning when system
    memory pressure crosses a threshold. Nothing here affects correctness.

    Example:
        monitor = MemoryMonitor(warning_threshold=85)

        for batch in batches:
            await run(batch)
            monitor.reclaim()

        print(monitor.get_stats())
    """

    def __init__(
        self,
        *,
        warning_threshold: float = 80.0,
        critical_threshold: float = 90.0,
    ):
        """Initialize memory monitor.

        Args:
            warning_threshold: System memory percent that logs a warning
            critical_threshold: System memory percent that logs at error level
        """
        self.warning_threshold = warning_threshold
        self.critical_threshold = critical_threshold

        self._process = psutil.Process()
        self._peak_rss = 0
        self._reclaim_count = 0
        self._collected_objects = 0
        self._warning_count = 0
        self._critical_count = 0

    def sample(self) -> Dict[str, float]:
        """Return current process RSS and system memory usage."""
        rss = self._process.memory_info().rss
        if rss > self._peak_rss:
            self._peak_rss = rss
        memory = psutil.virtual_memory()
        return {
            "rss_mb": rss / (1024**2),
            "system_percent": memory.percent,
            "system_used_gb": memory.used / (1024**3),
            "system_total_gb": memory.total / (1024**3),
        }

    def reclaim(self) -> Optional[Dict[str, float]]:
        """Run a garbage collection pass and check memory pressure.

        Returns:
            Memory sample taken after collection, or None if sampling failed
        """
        self._collected_objects += gc.collect()
        self._reclaim_count += 1

        try:
            snapshot = self.sample()
        except (psutil.Error, OSError) as e:
            logger.debug("Memory sampling failed: %s", e)
            return None

        percent = snapshot["system_percent"]
        if percent >= self.critical_threshold:
            self._critical_count += 1
            logger.error(
                "CRITICAL memory pressure: %.1f%% (%.1f/%.1f GB), process RSS %.0f MB",
                percent,
                snapshot["system_used_gb"],
                snapshot["system_total_gb"],
                snapshot["rss_mb"],
            )
        elif percent >= self.warning_threshold:
            self._warning_count += 1
            logger.warning(
                "High memory pressure: %.1f%% (%.1f/%.1f GB), process RSS %.0f MB",
                percent,
                snapshot["system_used_gb"],
                snapshot["system_total_gb"],
                snapshot["rss_mb"],
            )
        return snapshot

    def get_stats(self) -> Dict[str, Any]:
        return {
            "peak_rss_mb": self._peak_rss / (1024**2),
            "reclaim_count": self._reclaim_count,
            "collected_objects": self._collected_objects,
            "warning_count": self._warning_count,
            "critical_count": self._critical_count,
        }
