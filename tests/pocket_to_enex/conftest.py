"""Fixtures for Pocket to ENEX tests."""

from __future__ import annotations

import pytest

from src.functions.pocket_to_enex.core.contracts import ConversionOptions


@pytest.fixture
def options_factory(tmp_path):
    def _factory(**overrides) -> ConversionOptions:
        values = {"output_path": tmp_path / "out.enex"}
        values.update(overrides)
        return ConversionOptions(**values)

    return _factory
