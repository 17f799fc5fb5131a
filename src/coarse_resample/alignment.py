"""Grid alignment.

网格对齐：
- 全球范围：裁掉精细网格与粗网格外边界不一致的边缘像元
- 子区域：将任意范围吸附到粗网格格点（像元边界）上

After alignment the fine grid covers a whole number of coarse cells, so
block aggregation is geometrically valid.
"""

import logging
import warnings
from functools import lru_cache
from typing import Tuple

import numpy as np

from .exceptions import (
    FULL_EXTENT_CHECK,
    LATTICE_SNAP_CHECK,
    AlignmentError,
    AmbiguousGlobalExtent,
    ExtentNotOnLattice,
)
from .extent import GridExtent
from .grid import Grid
from .grid_family import GLOBAL_333M, GridFamily

logger = logging.getLogger(__name__)

_BOUND_AXES = (("x_min", "x"), ("x_max", "x"), ("y_min", "y"), ("y_max", "y"))


# ============================================================================
# Full global grids
# ============================================================================

def failed_full_extent_checks(extent: GridExtent, family: GridFamily = GLOBAL_333M):
    """Names of the bounds that stop ``extent`` from counting as full global."""
    ext = extent.rounded(family.decimals)
    x_min, x_max, y_min, y_max = family.full_extent
    checks = (
        ("x_min", ext.x_min <= x_min, f"x_min {ext.x_min} > {x_min}"),
        ("x_max", ext.x_max >= x_max, f"x_max {ext.x_max} < {x_max}"),
        ("y_min", ext.y_min <= y_min, f"y_min {ext.y_min} > {y_min}"),
        ("y_max", ext.y_max >= y_max, f"y_max {ext.y_max} < {y_max}"),
    )
    return [reason for _, ok, reason in checks if not ok]


def is_full_global_extent(extent: GridExtent, family: GridFamily = GLOBAL_333M) -> bool:
    """
    Whether ``extent`` spans the family's whole global footprint.

    Bounds are rounded to ``family.decimals`` and compared inclusively, so a
    grid whose extent is exactly the documented footprint qualifies.
    """
    return not failed_full_extent_checks(extent, family)


def global_crop_extent(extent: GridExtent, family: GridFamily = GLOBAL_333M) -> GridExtent:
    """
    Extent left after trimming the family's rim from a full global grid.

    Examples
    --------
    >>> ext = global_crop_extent(GridExtent(-180, 180, -59.99554, 80))
    >>> round(ext.x_min - (-180 + 2 / 336), 12)
    0.0
    """
    left, right, bottom, top = family.rim_trim
    step = family.fine_step
    return extent.shrink(
        left=left * step, right=right * step, bottom=bottom * step, top=top * step
    ).with_resolution(step)


def crop_to_full_global_extent(
    grid: Grid, family: GridFamily = GLOBAL_333M
) -> Tuple[Grid, GridExtent]:
    """
    Trim the outer rim of a full global fine grid.

    The global fine and coarse grids do not share their outer cell
    boundaries; removing the rim leaves a grid that tiles exactly into
    coarse cells.

    Parameters
    ----------
    grid : Grid
        Fine grid with its native coordinates
    family : GridFamily, default=GLOBAL_333M
        Lattice description

    Returns
    -------
    (Grid, GridExtent)
        Cropped grid and target extent. When ``grid`` is not a full global
        grid both are returned unchanged and ``AmbiguousGlobalExtent`` is
        warned; the caller should take the subset path instead.
    """
    extent = grid.extent
    failed = failed_full_extent_checks(extent, family)
    if failed:
        warnings.warn(
            f"[{FULL_EXTENT_CHECK}] {family.name} grid extent {extent} is not a "
            f"full global extent ({'; '.join(failed)}); pass a subset extent "
            f"to align it to the coarse lattice",
            AmbiguousGlobalExtent,
            stacklevel=2,
        )
        return grid, extent

    target = global_crop_extent(extent, family)
    cropped = grid.crop(target)
    if cropped.values.size == 0:
        raise AlignmentError(
            FULL_EXTENT_CHECK, f"cropping to {target} left an empty grid"
        )
    logger.info("Full global grid %s cropped to %s %s", grid.shape, cropped.shape, target)
    return cropped, target


# ============================================================================
# Lattice snapping
# ============================================================================

@lru_cache(maxsize=None)
def _lattice(family: GridFamily, axis: str) -> np.ndarray:
    step = family.coarse_step
    if axis == "x":
        n_cells = int(round((family.end_x - family.origin_x) / step))
        values = family.origin_x - step / 2 + np.arange(n_cells + 1) * step
    elif axis == "y":
        n_cells = int(round((family.origin_y - family.end_y) / step))
        values = family.origin_y + step / 2 - np.arange(n_cells + 1) * step
    else:
        raise ValueError(f"axis must be 'x' or 'y', got {axis!r}")
    values = np.round(values, family.decimals)
    values.flags.writeable = False
    return values


def coarse_lattice(family: GridFamily = GLOBAL_333M, axis: str = "x") -> np.ndarray:
    """
    Coarse cell boundaries along one axis.

    x: ``origin_x - step/2 + k*step`` eastwards, y: ``origin_y + step/2 - k*step``
    southwards, both rounded to ``family.decimals``.
    """
    return _lattice(family, axis)


def require_on_lattice(bound: str, value: float, lattice: np.ndarray, decimals: int) -> float:
    """Return the rounded ``value`` or raise ``ExtentNotOnLattice``."""
    rounded = float(np.round(value, decimals))
    if not np.any(lattice == rounded):
        raise ExtentNotOnLattice(bound, value)
    return rounded


def snap_value(value: float, lattice: np.ndarray) -> float:
    """Lattice member closest to ``value``; ties go to the earlier member."""
    return float(lattice[np.argmin(np.abs(lattice - value))])


def is_on_lattice(extent: GridExtent, family: GridFamily = GLOBAL_333M) -> bool:
    for bound, axis in _BOUND_AXES:
        try:
            require_on_lattice(bound, getattr(extent, bound), _lattice(family, axis), family.decimals)
        except ExtentNotOnLattice:
            return False
    return True


def snap_extent_to_target_grid(
    extent: GridExtent, family: GridFamily = GLOBAL_333M
) -> GridExtent:
    """
    Move every bound of ``extent`` onto the coarse cell-boundary lattice.

    Bounds already on the lattice (after rounding) are kept, so the operation
    is idempotent. Other bounds are replaced with the nearest lattice value,
    which is at most half a coarse step away for bounds inside the footprint.

    Examples
    --------
    >>> snapped = snap_extent_to_target_grid(GridExtent(10.001, 11.0, 40.0, 41.002))
    >>> is_on_lattice(snapped)
    True
    """
    snapped = {}
    for bound, axis in _BOUND_AXES:
        value = getattr(extent, bound)
        lattice = _lattice(family, axis)
        try:
            snapped[bound] = require_on_lattice(bound, value, lattice, family.decimals)
        except ExtentNotOnLattice:
            snapped[bound] = snap_value(value, lattice)
            logger.debug("Snapped %s from %.9f to %.7f", bound, value, snapped[bound])
    return GridExtent(resolution=family.coarse_step, **snapped)


def reference_extent(reference: Grid) -> GridExtent:
    """Outer cell edges of a (coarse) reference grid, as snapping input."""
    return reference.extent.expanded(reference.resolution / 2)


def inner_snapped_extent(grid: Grid, family: GridFamily = GLOBAL_333M) -> GridExtent:
    """
    Largest lattice-aligned extent inside the grid's own cell edges.

    Bounds that snap outwards past the data are stepped one coarse cell
    inwards, so the crop never ends in a partial block.
    """
    edges = reference_extent(grid)
    snapped = snap_extent_to_target_grid(edges, family)
    # lattice values carry rounding error up to half the last decimal
    tol = 10.0 ** -(family.decimals - 1)
    # (bound, axis, inward index step, outside test)
    moves = (
        ("x_min", "x", 1, snapped.x_min < edges.x_min - tol),
        ("x_max", "x", -1, snapped.x_max > edges.x_max + tol),
        ("y_min", "y", -1, snapped.y_min < edges.y_min - tol),
        ("y_max", "y", 1, snapped.y_max > edges.y_max + tol),
    )
    bounds = {}
    for bound, axis, step, outside in moves:
        value = getattr(snapped, bound)
        if outside:
            lattice = _lattice(family, axis)
            index = int(np.flatnonzero(lattice == value)[0]) + step
            value = float(lattice[min(max(index, 0), lattice.size - 1)])
        bounds[bound] = value
    return GridExtent(resolution=family.coarse_step, **bounds)


def crop_to_snapped_extent(
    grid: Grid, extent: GridExtent, family: GridFamily = GLOBAL_333M
) -> Tuple[Grid, GridExtent]:
    """
    Snap ``extent`` to the coarse lattice and crop the fine grid to it.

    Keeps the fine cells whose centres lie inside the snapped bounds. The
    kept cells must start and end on the snapped coarse edges, otherwise the
    blocks would straddle coarse cells.

    Raises
    ------
    AlignmentError
        ``check == "lattice-snap"`` when the snapped extent is degenerate,
        does not overlap the grid, or reaches past the grid's data so that the
        crop does not end on coarse cell edges
    """
    snapped = snap_extent_to_target_grid(extent, family)
    if snapped.x_max <= snapped.x_min or snapped.y_max <= snapped.y_min:
        raise AlignmentError(
            LATTICE_SNAP_CHECK,
            f"extent {extent} collapses to {snapped} on the {family.name} lattice",
        )
    cropped = grid.crop(snapped)
    if cropped.values.size == 0:
        raise AlignmentError(
            LATTICE_SNAP_CHECK,
            f"snapped extent {snapped} does not overlap grid extent {grid.extent}",
        )
    _require_edges_covered(cropped, snapped, family)
    logger.info("Grid %s cropped to %s on snapped extent %s", grid.shape, cropped.shape, snapped)
    return cropped, snapped


def _require_edges_covered(cropped: Grid, snapped: GridExtent, family: GridFamily):
    """Raise unless the outer fine centres sit half a fine step inside ``snapped``."""
    half = family.fine_step / 2
    ext = cropped.extent
    gaps = (
        ("x_min", ext.x_min - (snapped.x_min + half)),
        ("x_max", (snapped.x_max - half) - ext.x_max),
        ("y_min", ext.y_min - (snapped.y_min + half)),
        ("y_max", (snapped.y_max - half) - ext.y_max),
    )
    uncovered = [f"{bound} short by {gap:.7f}" for bound, gap in gaps if abs(gap) >= half]
    if uncovered:
        raise AlignmentError(
            LATTICE_SNAP_CHECK,
            f"snapped extent {snapped} reaches past grid extent {cropped.extent} "
            f"({'; '.join(uncovered)}); choose an area inside the data",
        )
