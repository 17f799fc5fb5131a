"""Cutoff masking.

按产品给定的阈值将超出有效范围的像元置为 NO_DATA (NaN)。
"""

import logging
from enum import Enum

import numpy as np
import xarray as xr

from .grid import Grid

logger = logging.getLogger(__name__)


class Comparison(Enum):
    """Which side of the cutoff is invalid."""

    GREATER = "gt"  # mask values > cutoff
    LESS = "lt"  # mask values < cutoff
    OUTSIDE = "outside"  # cutoff is (low, high); mask values outside it

    @classmethod
    def from_name(cls, name) -> "Comparison":
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ValueError(
            f"Unknown comparison {name!r}; choose one of {[m.value for m in cls]}"
        )


def invalid_mask(values, cutoff, comparison=Comparison.GREATER) -> np.ndarray:
    """
    Boolean array marking the cells that fail the cutoff test.

    NaN cells are never flagged here; they are already NO_DATA.
    """
    comparison = Comparison.from_name(comparison)
    values = np.asarray(values, dtype=float)
    with np.errstate(invalid="ignore"):
        if comparison is Comparison.GREATER:
            return values > cutoff
        if comparison is Comparison.LESS:
            return values < cutoff
        try:
            low, high = cutoff
        except (TypeError, ValueError):
            raise ValueError(
                f"Comparison 'outside' needs a (low, high) cutoff, got {cutoff!r}"
            ) from None
        if low > high:
            raise ValueError(f"Cutoff range is inverted: ({low}, {high})")
        return (values < low) | (values > high)


def apply_cutoff(grid, cutoff, comparison=Comparison.GREATER):
    """
    Replace out-of-range samples with NO_DATA.

    Parameters
    ----------
    grid : Grid, xr.DataArray or array-like
        Input samples; the same kind is returned
    cutoff : float or (float, float)
        Threshold, or a ``(low, high)`` range for ``Comparison.OUTSIDE``
    comparison : Comparison or str, default=Comparison.GREATER
        Direction of the test

    Returns
    -------
    Grid, xr.DataArray or np.ndarray
        New object with failing cells set to NaN; the input is untouched

    Examples
    --------
    >>> apply_cutoff(np.array([0.5, 0.95, 0.2]), 0.92)
    array([0.5, nan, 0.2])
    """
    if isinstance(grid, Grid):
        mask = invalid_mask(grid.values, cutoff, comparison)
        logger.debug("Cutoff %s (%s) masked %d cells", cutoff, comparison, mask.sum())
        return grid.with_values(np.where(mask, np.nan, grid.values))
    if isinstance(grid, xr.DataArray):
        values = grid.values.astype(float)
        mask = invalid_mask(values, cutoff, comparison)
        return grid.copy(data=np.where(mask, np.nan, values))
    values = np.asarray(grid, dtype=float)
    return np.where(invalid_mask(values, cutoff, comparison), np.nan, values)
