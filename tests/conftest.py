"""Shared fixtures for the whole test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from erased_cells import set_validation


@pytest.fixture(autouse=True)
def _reset_validation() -> Iterator[None]:
    """Clear any programmatic validation level after each test."""
    yield
    set_validation(None)
