"""Environment-backed defaults for the conversion CLI."""

from __future__ import annotations

from dataclasses import dataclass

from src.shared.utils.config_validator import (
    validate_bool_env,
    validate_float_env,
    validate_int_env,
)

ENV_PREFIX = "POCKET2ENEX_"


@dataclass(frozen=True)
class ConverterDefaults:
    """Defaults applied when a CLI flag is not given."""

    timeout_seconds: float = 7.0
    batch_size: int = 10
    checkpoint_interval: int = 100
    fallback_browser: bool = False


def load_defaults() -> ConverterDefaults:
    """Read converter defaults from ``POCKET2ENEX_*`` environment variables.

    Raises:
        ConfigurationError: If a variable is set to an invalid value
    """
    base = ConverterDefaults()
    return ConverterDefaults(
        timeout_seconds=validate_float_env(
            f"{ENV_PREFIX}TIMEOUT", base.timeout_seconds, min_value=0.1
        ),
        batch_size=validate_int_env(f"{ENV_PREFIX}BATCH_SIZE", base.batch_size, min_value=1),
        checkpoint_interval=validate_int_env(
            f"{ENV_PREFIX}CHECKPOINT_INTERVAL", base.checkpoint_interval, min_value=1
        ),
        fallback_browser=validate_bool_env(
            f"{ENV_PREFIX}FALLBACK_BROWSER", base.fallback_browser
        ),
    )
