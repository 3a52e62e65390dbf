"""Pipelines orchestrating Pocket to ENEX conversion."""

from .batch_scheduler import BatchScheduler, pacing_delay
from .conversion_pipeline import ConversionPipeline, ConversionResult, convert, log_failed_sample
from .record_processor import ProcessedRecord, RecordProcessor

__all__ = [
    "BatchScheduler",
    "pacing_delay",
    "ConversionPipeline",
    "ConversionResult",
    "convert",
    "log_failed_sample",
    "ProcessedRecord",
    "RecordProcessor",
]
