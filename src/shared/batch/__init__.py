"""Shared batch processing infrastructure.

Provides generic utilities for batch processing pipelines:
- CheckpointManager: Resumable progress snapshot with atomic writes
- Progress: The cumulative progress aggregate persisted by CheckpointManager
- ProgressTracker: Processing progress and metrics logging
- BrowserPool: Async page lease pool with a recycle-every-N policy
- MemoryMonitor: Memory sampling and reclamation hints between batches

Usage:
    from src.shared.batch import CheckpointManager, Progress, ProgressTracker
    from src.shared.batch import BrowserPool, MemoryMonitor
"""

from .checkpoint import CheckpointManager, Progress, derive_base_path
from .progress import ProgressTracker
from .browser_pool import BrowserPool
from .memory_monitor import MemoryMonitor

__all__ = [
    "CheckpointManager",
    "Progress",
    "derive_base_path",
    "ProgressTracker",
    "BrowserPool",
    "MemoryMonitor",
]
