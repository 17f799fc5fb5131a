"""
Shared fixtures: synthetic fine grids on the 1/336 deg lattice and a small
global grid family for exercising the full-extent path.
"""

import numpy as np
import pytest

from coarse_resample import Grid, GridFamily

FINE = 1.0 / 336.0


@pytest.fixture
def toy_family():
    """Global family with 1/3 deg fine cells, small enough to hold in memory."""
    return GridFamily(
        name="toy-global",
        fine_step=1.0 / 3.0,
        factor=3,
        full_extent=(-180.0, 179.6, -59.6, 80.0),
    )


@pytest.fixture
def toy_global_grid():
    """Full global fine grid of the toy family (420 x 1080 cells)."""
    rng = np.random.default_rng(42)
    x = -180.0 + np.arange(1080) / 3.0
    y = 80.0 - np.arange(420) / 3.0
    return Grid(rng.uniform(0.0, 1.0, (420, 1080)), x=x, y=y, name="toy")


@pytest.fixture
def fine_tile():
    """90 x 90 tile of the 333 m grid, top-left cell centre at (10E, 40N)."""
    rng = np.random.default_rng(7)
    x = 10.0 + np.arange(90) * FINE
    y = 40.0 - np.arange(90) * FINE
    values = rng.uniform(0.1, 0.9, (90, 90))
    return Grid(values, x=x, y=y, resolution=FINE, name="NDVI")
