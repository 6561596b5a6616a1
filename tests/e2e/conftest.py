"""Shared fixtures for end-to-end pipeline tests.

Provides synthetic reflectance bands (red and near-infrared) the way a raster
connector would hand them over: native ``uint16`` arrays sharing a no-data
sentinel, with the sentinel at the same scattered positions in both bands.
"""

from __future__ import annotations

import numpy as np
import pytest

# ---------------------------------------------------------------------------
# Data generation helpers
# ---------------------------------------------------------------------------

SENTINEL = 0
BAND_SIZE = 64 * 64


def _make_bands(n: int = BAND_SIZE) -> tuple[np.ndarray, np.ndarray]:
    """Generate red/nir bands with vegetation-like reflectance and ~10% no-data."""
    rng = np.random.default_rng(42)
    red = rng.integers(500, 3000, size=n, dtype=np.uint16)
    nir = rng.integers(2000, 6000, size=n, dtype=np.uint16)
    nodata = rng.random(n) < 0.1
    red[nodata] = SENTINEL
    nir[nodata] = SENTINEL
    return red, nir


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def bands() -> tuple[np.ndarray, np.ndarray]:
    """Return ``(red, nir)`` native arrays."""
    return _make_bands()


@pytest.fixture(scope="session")
def nodata_positions(bands: tuple[np.ndarray, np.ndarray]) -> np.ndarray:
    """Boolean array marking the sentinel cells shared by both bands."""
    red, _ = bands
    return red == SENTINEL


@pytest.fixture(scope="session")
def sentinel() -> float:
    """The shared no-data sentinel as the connector reports it (a float)."""
    return float(SENTINEL)
