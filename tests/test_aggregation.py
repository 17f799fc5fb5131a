"""
Tests for block aggregation and cutoff masking.
"""

import math

import numpy as np
import pytest
import xarray as xr

from coarse_resample import (
    Comparison,
    DimensionMismatch,
    Grid,
    GridExtent,
    Reducer,
    aggregate,
    aggregated_extent,
    apply_cutoff,
    block_view,
    reduce_blocks,
)


# ============================================================================
# Block aggregation
# ============================================================================

def test_aggregate_rejects_non_divisible_shape():
    with pytest.raises(DimensionMismatch) as excinfo:
        aggregate(np.zeros((10, 9)), factor=3)
    assert excinfo.value.shape == (10, 9)
    assert excinfo.value.factor == 3
    # also a ValueError for callers that catch the generic type
    with pytest.raises(ValueError):
        aggregate(np.zeros((9, 10)), factor=3)


def test_aggregate_nine_by_nine():
    out = aggregate(np.arange(81, dtype=float).reshape(9, 9), factor=3,
                    min_valid_count=9)

    assert out.shape == (3, 3)
    # top-left block holds rows 0-2, cols 0-2 of the input
    assert out.values[0, 0] == pytest.approx(np.mean([0, 1, 2, 9, 10, 11, 18, 19, 20]))


def test_aggregate_rejects_bad_factor():
    with pytest.raises(ValueError):
        aggregate(np.zeros((9, 9)), factor=0)
    with pytest.raises(TypeError):
        aggregate(np.zeros((9, 9)), factor=1.5)


def test_mask_then_aggregate_end_to_end():
    values = np.full((9, 9), 0.5)
    values[0, 0] = 0.95
    values[1, 2] = 0.95
    grid = Grid(values)

    masked = apply_cutoff(grid, 0.92)
    out = aggregate(masked, factor=3, reducer=Reducer.MEAN)

    assert masked.valid_count() == 79
    np.testing.assert_allclose(out.values, 0.5)
    # the source grid is untouched
    assert grid.values[0, 0] == 0.95


def test_block_view_is_row_major_within_block():
    values = np.arange(16).reshape(4, 4)
    blocks = block_view(values, 2)

    assert blocks.shape == (2, 2, 4)
    np.testing.assert_array_equal(blocks[1, 0], [8, 9, 12, 13])


def test_closest_tie_break_follows_row_major_scan():
    nan = np.nan
    first_row = np.array([[1.0, 3.0], [nan, nan]])
    first_col = np.array([[3.0, nan], [1.0, nan]])

    assert reduce_blocks(first_row, 2, Reducer.CLOSEST, min_valid_count=2)[0, 0] == 1.0
    assert reduce_blocks(first_col, 2, Reducer.CLOSEST, min_valid_count=2)[0, 0] == 3.0


def test_aggregate_coordinates_and_resolution(fine_tile):
    tile = fine_tile.crop(GridExtent(fine_tile.x[0], fine_tile.x[8],
                                     fine_tile.y[8], fine_tile.y[0]))
    out = aggregate(tile, factor=3)

    assert tile.shape == (9, 9)
    assert out.shape == (3, 3)
    assert out.x[0] == pytest.approx(tile.x[1])
    assert out.y[0] == pytest.approx(tile.y[1])
    assert out.resolution == pytest.approx(3 * tile.resolution)
    assert out.name == "NDVI"


def test_partial_blocks_become_no_data():
    values = np.full((6, 6), 0.4)
    values[:3, :3] = np.nan
    values[0, 0] = 0.4  # one valid cell left in the first block
    out = aggregate(values, factor=3, reducer="uncertainty")

    assert math.isnan(out.values[0, 0])
    assert out.values[1, 1] == pytest.approx(math.sqrt(9 * 0.16) / 9)


def test_aggregate_accepts_callable_reducer():
    def block_max(values, min_valid_count):
        return np.nanmax(values, axis=-1)

    values = np.arange(36, dtype=float).reshape(6, 6)
    out = aggregate(values, factor=3, reducer=block_max)
    np.testing.assert_array_equal(out.values, [[14, 17], [32, 35]])


def test_aggregated_extent_keeps_bounds():
    extent = GridExtent(10.0, 11.0, 40.0, 41.0, resolution=1 / 336)
    out = aggregated_extent(extent, 3)
    assert out.bounds == extent.bounds
    assert out.resolution == pytest.approx(1 / 112)


def test_grid_values_are_read_only():
    grid = Grid(np.zeros((3, 3)))
    with pytest.raises(ValueError):
        grid.values[0, 0] = 1.0


# ============================================================================
# Masking
# ============================================================================

def test_cutoff_greater_and_less():
    values = np.array([0.1, 0.5, 0.93, np.nan])

    above = apply_cutoff(values, 0.92, Comparison.GREATER)
    below = apply_cutoff(values, 0.2, "lt")

    np.testing.assert_array_equal(np.isnan(above), [False, False, True, True])
    np.testing.assert_array_equal(np.isnan(below), [True, False, False, True])
    # values at the cutoff pass
    assert apply_cutoff(np.array([0.92]), 0.92)[0] == 0.92


def test_cutoff_outside_range():
    values = np.array([-0.5, 0.0, 0.5, 1.0, 1.5])
    out = apply_cutoff(values, (0.0, 1.0), Comparison.OUTSIDE)
    np.testing.assert_array_equal(np.isnan(out), [True, False, False, False, True])

    with pytest.raises(ValueError):
        apply_cutoff(values, 1.0, Comparison.OUTSIDE)
    with pytest.raises(ValueError):
        apply_cutoff(values, (1.0, 0.0), Comparison.OUTSIDE)


def test_cutoff_keeps_dataarray_type():
    da = xr.DataArray(np.array([[0.1, 0.95], [0.3, 0.4]]), dims=("lat", "lon"),
                      coords={"lat": [1.0, 0.0], "lon": [0.0, 1.0]}, name="NDVI")
    out = apply_cutoff(da, 0.92)

    assert isinstance(out, xr.DataArray)
    assert out.name == "NDVI"
    assert np.isnan(out.values[0, 1])
    assert da.values[0, 1] == 0.95


def test_unknown_comparison():
    with pytest.raises(ValueError, match="Unknown comparison"):
        apply_cutoff(np.zeros(3), 1.0, "between")
