"""
Typed readers for environment-provided settings.

Unset or empty variables fall back to the caller's default; anything set but
malformed raises :class:`ConfigurationError` naming the variable.
"""

import os
from typing import Callable, Optional, TypeVar

Number = TypeVar("Number", int, float)

_TRUE_VALUES = ("true", "yes", "1")
_FALSE_VALUES = ("false", "no", "0")


class ConfigurationError(Exception):
    """Raised when an environment setting cannot be used."""
    pass


def _read_number(
    name: str,
    default: Number,
    parse: Callable[[str], Number],
    kind: str,
    min_value: Optional[Number],
) -> Number:
    raw = os.getenv(name)
    if not raw:
        return default

    try:
        value = parse(raw.strip())
    except ValueError:
        raise ConfigurationError(f"Invalid {kind} value for {name}: '{raw}'")

    if min_value is not None and value < min_value:
        raise ConfigurationError(
            f"Value for {name} ({value}) is below minimum allowed value ({min_value})"
        )
    return value


def validate_int_env(name: str, default: int, min_value: Optional[int] = None) -> int:
    """
    Read an integer setting such as a batch size.

    Raises:
        ConfigurationError: If the value is not an integer or below ``min_value``
    """
    return _read_number(name, default, int, "integer", min_value)


def validate_float_env(name: str, default: float, min_value: Optional[float] = None) -> float:
    """
    Read a numeric setting such as a timeout in seconds.

    Raises:
        ConfigurationError: If the value is not a number or below ``min_value``
    """
    return _read_number(name, default, float, "numeric", min_value)


def validate_bool_env(name: str, default: bool = False) -> bool:
    """
    Read an on/off switch.

    Accepts: true, false, yes, no, 1, 0 (case-insensitive)

    Raises:
        ConfigurationError: If the value is none of the above
    """
    raw = os.getenv(name)
    if not raw:
        return default

    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Invalid boolean value for {name}: '{raw}'\n"
        f"Expected one of: {', '.join(_TRUE_VALUES + _FALSE_VALUES)}"
    )
