"""Data contracts for Pocket to ENEX conversion."""

from .extraction import (
    METHOD_LABELS,
    ExtractionFailure,
    ExtractionMethod,
    ExtractionResult,
    ExtractionSuccess,
)
from .options import ConversionOptions, parse_options
from .records import OutputNote, SourceRecord

__all__ = [
    "METHOD_LABELS",
    "ExtractionFailure",
    "ExtractionMethod",
    "ExtractionResult",
    "ExtractionSuccess",
    "ConversionOptions",
    "parse_options",
    "OutputNote",
    "SourceRecord",
]
