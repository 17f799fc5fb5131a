"""Resampling pipeline.

完整流程：对齐 (裁剪/吸附) -> 阈值掩膜 -> 块聚合。
Alignment failures abort the run before any output is produced.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Optional

import xarray as xr

from .aggregation import aggregate, resolve_reducer
from .alignment import (
    crop_to_full_global_extent,
    crop_to_snapped_extent,
    failed_full_extent_checks,
    inner_snapped_extent,
    reference_extent,
)
from .config import DEFAULT_MIN_VALID
from .exceptions import FULL_EXTENT_CHECK, AmbiguousGlobalExtent
from .extent import GridExtent
from .grid import X_NAMES, Y_NAMES, Grid, find_dim
from .grid_family import GLOBAL_333M, GridFamily
from .masking import Comparison, apply_cutoff
from .reducers import Reducer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResampleResult:
    """Coarse grid plus the aligned extent it covers.

    ``extent`` holds the outer coarse cell edges of ``grid`` (bounds on the
    coarse lattice) at coarse resolution, whichever alignment path ran.
    """

    grid: Grid
    extent: GridExtent


def _as_extent(subset) -> Optional[GridExtent]:
    if subset is None or isinstance(subset, GridExtent):
        return subset
    if isinstance(subset, Grid):
        return reference_extent(subset)
    return GridExtent.from_bounds(subset)


def align_grid(grid: Grid, family: GridFamily = GLOBAL_333M, subset=None):
    """
    Pick and run the alignment path for ``grid``.

    1. ``subset`` given: snap it to the coarse lattice and crop. A ``Grid``
       subset is a coarse reference grid and contributes its outer cell edges.
    2. Full global grid: trim the rim.
    3. Otherwise warn ``AmbiguousGlobalExtent`` and crop to the largest
       lattice-aligned extent inside the grid.

    Returns
    -------
    (Grid, GridExtent)
        Aligned fine grid and its outer cell edges
    """
    subset = _as_extent(subset)
    if subset is not None:
        return crop_to_snapped_extent(grid, subset, family)

    failed = failed_full_extent_checks(grid.extent, family)
    if not failed:
        cropped, _ = crop_to_full_global_extent(grid, family)
        return cropped, cropped.extent.expanded(family.fine_step / 2)

    warnings.warn(
        f"[{FULL_EXTENT_CHECK}] grid extent {grid.extent} is not a full "
        f"{family.name} extent ({'; '.join(failed)}); aligning the grid's own "
        f"extent to the coarse lattice. Pass subset= to choose the area.",
        AmbiguousGlobalExtent,
        stacklevel=3,
    )
    return crop_to_snapped_extent(grid, inner_snapped_extent(grid, family), family)


def resample(
    grid: Grid,
    family: GridFamily = GLOBAL_333M,
    reducer=Reducer.MEAN,
    cutoff=None,
    comparison=Comparison.GREATER,
    min_valid_count: int = DEFAULT_MIN_VALID,
    subset=None,
) -> ResampleResult:
    """
    Resample a fine grid onto the family's coarse grid.

    Parameters
    ----------
    grid : Grid
        Fine-resolution input with native coordinates
    family : GridFamily, default=GLOBAL_333M
        Lattice and aggregation factor
    reducer : Reducer, str or callable, default=Reducer.MEAN
        Block reduction strategy
    cutoff : float or (float, float), optional
        Validity threshold; no masking when ``None``
    comparison : Comparison or str, default=Comparison.GREATER
        Side of ``cutoff`` that is invalid
    min_valid_count : int, default=5
        Minimum valid fine cells per coarse cell
    subset : GridExtent, 4-tuple or Grid, optional
        Area of interest ``(x_min, x_max, y_min, y_max)``, or a coarse
        reference grid whose footprint is reproduced

    Returns
    -------
    ResampleResult

    Raises
    ------
    AlignmentError
        When the requested area cannot be aligned
    DimensionMismatch
        When the aligned grid still does not tile into blocks, e.g. because
        the subset reaches past the data
    """
    reducer = resolve_reducer(reducer)
    aligned, extent = align_grid(grid, family, subset)

    if cutoff is not None:
        aligned = apply_cutoff(aligned, cutoff, comparison)

    coarse = aggregate(aligned, family.factor, reducer, min_valid_count)
    logger.info(
        "Resampled %s -> %s with %s (min_valid=%d)",
        grid.shape, coarse.shape, getattr(reducer, "value", reducer), min_valid_count,
    )
    return ResampleResult(grid=coarse, extent=extent.with_resolution(coarse.resolution))


def resample_dataarray(da: xr.DataArray, x_name=None, y_name=None, **kwargs) -> xr.DataArray:
    """
    ``resample`` for a 2-D ``xarray.DataArray``.

    Dimension names and attributes are carried over; the reducer, cutoff and
    coarse extent are recorded as attributes of the output.
    """
    if da.ndim > 2:
        da = da.squeeze(drop=True)
    x_name = x_name or find_dim(da, X_NAMES)
    y_name = y_name or find_dim(da, Y_NAMES)
    result = resample(Grid.from_dataarray(da, x_name, y_name), **kwargs)

    reducer = resolve_reducer(kwargs.get("reducer", Reducer.MEAN))
    attrs = dict(da.attrs)
    attrs.update(
        resampling_method=getattr(reducer, "value", getattr(reducer, "__name__", "custom")),
        min_valid_count=kwargs.get("min_valid_count", DEFAULT_MIN_VALID),
        extent=list(result.extent.bounds),
    )
    if kwargs.get("cutoff") is not None:
        attrs["cutoff"] = kwargs["cutoff"]
    return result.grid.to_dataarray(x_name=x_name, y_name=y_name, attrs=attrs)
