"""Block aggregation engine.

块聚合：将网格划分为互不重叠的 factor x factor 块，对每块调用归约函数。
The grid must already be aligned; a shape that does not tile exactly is a
caller error and is never silently truncated.
"""

import logging

import numpy as np
import xarray as xr

from .config import DEFAULT_FACTOR, DEFAULT_MIN_VALID
from .exceptions import DimensionMismatch
from .extent import GridExtent
from .grid import Grid
from .reducers import Reducer

logger = logging.getLogger(__name__)


def _check_factor(factor):
    if not isinstance(factor, (int, np.integer)) or isinstance(factor, bool):
        raise TypeError(f"factor must be an int, got {type(factor).__name__}")
    if factor < 1:
        raise ValueError(f"factor must be >= 1, got {factor}")


def check_divisible(shape, factor):
    """Raise ``DimensionMismatch`` unless both axes are multiples of ``factor``."""
    _check_factor(factor)
    rows, cols = shape
    if rows % factor or cols % factor:
        raise DimensionMismatch(shape, factor)


def resolve_reducer(reducer):
    """Accept a ``Reducer``, its name, or any ``fn(values, min_valid_count)``."""
    if isinstance(reducer, Reducer):
        return reducer
    if isinstance(reducer, str):
        return Reducer.from_name(reducer)
    if callable(reducer):
        return reducer
    raise TypeError(f"reducer must be a Reducer, name or callable, got {reducer!r}")


def block_view(values, factor) -> np.ndarray:
    """
    Rearrange a 2-D array into blocks.

    Returns an array of shape (rows/factor, cols/factor, factor*factor) where
    the last axis lists each block's cells in row-major order.

    Examples
    --------
    >>> block_view(np.arange(16).reshape(4, 4), 2)[0, 1]
    array([2., 3., 6., 7.])
    """
    values = np.asarray(values, dtype=float)
    if values.ndim != 2:
        raise ValueError(f"Expected a 2-D array, got shape {values.shape}")
    check_divisible(values.shape, factor)
    rows, cols = values.shape
    blocks = (
        xr.DataArray(values, dims=("y", "x"))
        .coarsen(y=factor, x=factor, boundary="exact")
        .construct(y=("y_block", "y_cell"), x=("x_block", "x_cell"))
        .transpose("y_block", "x_block", "y_cell", "x_cell")
    )
    return blocks.values.reshape(rows // factor, cols // factor, factor * factor)


def reduce_blocks(values, factor=DEFAULT_FACTOR, reducer=Reducer.MEAN,
                  min_valid_count=DEFAULT_MIN_VALID) -> np.ndarray:
    """Apply ``reducer`` to every block of a raw 2-D array."""
    fn = resolve_reducer(reducer)
    blocks = block_view(values, factor)
    return np.asarray(fn(blocks, min_valid_count), dtype=float).reshape(blocks.shape[:2])


def _block_centres(coords, factor):
    coords = xr.DataArray(np.asarray(coords, dtype=float), dims="cell")
    return coords.coarsen(cell=factor, boundary="exact").mean().values


def aggregate(grid, factor=DEFAULT_FACTOR, reducer=Reducer.MEAN,
              min_valid_count=DEFAULT_MIN_VALID) -> Grid:
    """
    Aggregate a fine grid into a coarse grid by block reduction.

    Parameters
    ----------
    grid : Grid or array-like
        Aligned input; rows and columns must be multiples of ``factor``
    factor : int, default=3
        Block edge length in fine cells
    reducer : Reducer, str or callable, default=Reducer.MEAN
        Block reduction strategy
    min_valid_count : int, default=5
        Fewer valid cells than this yields NO_DATA for the block

    Returns
    -------
    Grid
        Shape (rows/factor, cols/factor); coordinates are the block centres
        and the resolution is scaled by ``factor``

    Raises
    ------
    DimensionMismatch
        If the grid does not tile exactly into blocks

    Examples
    --------
    >>> out = aggregate(np.full((9, 9), 0.5), factor=3)
    >>> out.shape
    (3, 3)
    """
    if not isinstance(grid, Grid):
        grid = Grid(grid)
    check_divisible(grid.shape, factor)

    logger.debug(
        "Aggregating %s with %dx%d blocks (reducer=%s, min_valid=%d)",
        grid.shape, factor, factor, reducer, min_valid_count,
    )
    reduced = reduce_blocks(grid.values, factor, reducer, min_valid_count)
    return Grid(
        values=reduced,
        x=_block_centres(grid.x, factor),
        y=_block_centres(grid.y, factor),
        resolution=grid.resolution * factor,
        name=grid.name,
    )


def aggregated_extent(extent: GridExtent, factor=DEFAULT_FACTOR) -> GridExtent:
    """Extent reported for an aggregated grid: same bounds, coarser resolution."""
    _check_factor(factor)
    return extent.scaled(factor)
