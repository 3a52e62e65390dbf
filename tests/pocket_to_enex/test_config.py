"""Tests for run options, environment defaults and CLI option merging."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pytest

from src.shared.utils.config_validator import ConfigurationError
from src.shared.utils.logging import resolve_level, setup_logging
from src.functions.pocket_to_enex.core.config import ConverterDefaults, load_defaults
from src.functions.pocket_to_enex.core.contracts import ConversionOptions, parse_options
from src.functions.pocket_to_enex.scripts.convert_cli import build_options, setup_cli_parser


def test_option_defaults() -> None:
    options = ConversionOptions(output_path=Path("out.enex"))

    assert options.limit == 999999
    assert options.scrape is False
    assert options.fallback_browser is False
    assert options.timeout_seconds == 7.0
    assert options.checkpoint_interval == 100
    assert options.batch_size == 10
    assert options.restart_interval == 1000


def test_parse_options_reports_invalid_values() -> None:
    with pytest.raises(ValueError, match="Invalid conversion options") as excinfo:
        parse_options({"output_path": "out.enex", "batch_size": 0, "timeout_seconds": -1})

    message = str(excinfo.value)
    assert "batch_size" in message
    assert "timeout_seconds" in message


def test_options_are_immutable() -> None:
    options = parse_options({"output_path": "out.enex"})

    with pytest.raises(Exception):
        options.scrape = True  # type: ignore[misc]


def test_load_defaults_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("POCKET2ENEX_TIMEOUT", "12.5")
    monkeypatch.setenv("POCKET2ENEX_BATCH_SIZE", "4")
    monkeypatch.setenv("POCKET2ENEX_CHECKPOINT_INTERVAL", "50")
    monkeypatch.setenv("POCKET2ENEX_FALLBACK_BROWSER", "yes")

    defaults = load_defaults()

    assert defaults == ConverterDefaults(
        timeout_seconds=12.5, batch_size=4, checkpoint_interval=50, fallback_browser=True
    )


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("POCKET2ENEX_TIMEOUT", "soon"),
        ("POCKET2ENEX_BATCH_SIZE", "0"),
        ("POCKET2ENEX_FALLBACK_BROWSER", "maybe"),
    ],
)
def test_load_defaults_rejects_bad_values(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        load_defaults()


def test_cli_flags_override_defaults() -> None:
    args = setup_cli_parser().parse_args(
        ["-i", "pocket.csv", "-o", "out.enex", "-s", "-t", "3", "--batch-size", "5"]
    )
    defaults = ConverterDefaults(timeout_seconds=9, batch_size=2, checkpoint_interval=25)

    options = build_options(args, defaults)

    assert options.input_path == Path("pocket.csv")
    assert options.scrape is True
    assert options.timeout_seconds == 3
    assert options.batch_size == 5
    assert options.checkpoint_interval == 25
    assert options.fallback_browser is False


def test_cli_rejects_invalid_batch_size() -> None:
    args = argparse.Namespace(
        input=Path("in.csv"),
        output=Path("out.enex"),
        limit=10,
        scrape=False,
        fallback_browser=None,
        timeout=None,
        resume=False,
        checkpoint_interval=None,
        batch_size=-1,
    )

    with pytest.raises(ValueError):
        build_options(args, ConverterDefaults())


def test_log_level_resolution(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")

    assert resolve_level() == logging.WARNING
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("chatty") == logging.INFO


def test_setup_logging_quiets_http_client_loggers() -> None:
    setup_logging(level="DEBUG")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
