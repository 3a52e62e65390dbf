"""Run configuration consumed by the conversion pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator


class ConversionOptions(BaseModel):
    """Configuration provided to the pipeline at runtime."""

    input_path: Optional[Path] = None
    output_path: Path
    limit: int = 999999
    scrape: bool = False
    fallback_browser: bool = False
    timeout_seconds: float = 7.0
    resume: bool = False
    checkpoint_interval: int = 100
    batch_size: int = 10
    settle_seconds: float = 2.0
    max_pages: int = 10
    restart_interval: int = 1000

    model_config = ConfigDict(frozen=True)

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            msg = "timeout_seconds must be positive"
            raise ValueError(msg)
        return value

    @field_validator("limit", "checkpoint_interval", "batch_size", "max_pages", "restart_interval")
    @classmethod
    def _validate_positive(cls, value: int) -> int:
        if value <= 0:
            msg = "value must be positive"
            raise ValueError(msg)
        return value

    @field_validator("settle_seconds")
    @classmethod
    def _validate_settle(cls, value: float) -> float:
        if value < 0:
            msg = "settle_seconds must not be negative"
            raise ValueError(msg)
        return value


def parse_options(raw_options: dict[str, Any] | ConversionOptions) -> ConversionOptions:
    """Create validated conversion options from raw input."""

    if isinstance(raw_options, ConversionOptions):
        return raw_options
    try:
        return ConversionOptions(**raw_options)
    except ValidationError as exc:
        msg = ", ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ValueError(f"Invalid conversion options: {msg}") from exc
