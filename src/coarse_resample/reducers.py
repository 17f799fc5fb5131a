"""Block reduction strategies.

块归约函数：条件均值、最接近均值、平方和开方除以个数（不确定度传播）。

Every reducer takes ``values`` whose last axis holds the cells of one block
in row-major order (any leading axes are treated as independent blocks) and
returns NaN wherever fewer than ``min_valid_count`` cells are valid. A
shortfall is an outcome, never an exception.
"""

from enum import Enum

import numpy as np

from .config import DEFAULT_MIN_VALID


def _prepare(values, min_valid_count):
    if min_valid_count < 0:
        raise ValueError(f"min_valid_count must be >= 0, got {min_valid_count}")
    values = np.asarray(values, dtype=float)
    valid = ~np.isnan(values)
    n_valid = np.count_nonzero(valid, axis=-1)
    return values, valid, n_valid


def _finish(result, n_valid, min_valid_count):
    out = np.where(n_valid >= min_valid_count, result, np.nan)
    if out.ndim == 0:
        return float(out)
    return out


def _masked_mean(values, valid, n_valid):
    total = np.where(valid, values, 0.0).sum(axis=-1)
    with np.errstate(invalid="ignore", divide="ignore"):
        return total / n_valid


def conditional_mean(values, min_valid_count=DEFAULT_MIN_VALID):
    """
    Arithmetic mean of the valid cells of a block.

    Parameters
    ----------
    values : array-like
        Block cells along the last axis, NaN for NO_DATA
    min_valid_count : int, default=5
        Minimum number of valid cells for a defined result

    Returns
    -------
    float or np.ndarray
        Mean per block, NaN where the block has too few valid cells

    Examples
    --------
    >>> nan = float("nan")
    >>> conditional_mean([1, 2, 3, 4, 5, nan, nan, nan, nan])
    3.0
    """
    values, valid, n_valid = _prepare(values, min_valid_count)
    return _finish(_masked_mean(values, valid, n_valid), n_valid, min_valid_count)


def closest_to_mean(values, min_valid_count=DEFAULT_MIN_VALID):
    """
    Valid cell value closest to the block's conditional mean.

    Ties go to the first cell in row-major order, so the result is always an
    observed value rather than a synthetic average.

    Examples
    --------
    >>> nan = float("nan")
    >>> closest_to_mean([1, 2, 3, 4, 5, nan, nan, nan, nan])
    3.0
    """
    values, valid, n_valid = _prepare(values, min_valid_count)
    mean = _masked_mean(values, valid, n_valid)
    distance = np.abs(values - np.expand_dims(mean, -1))
    distance = np.where(valid, distance, np.inf)
    # argmin returns the first minimum, which fixes the tie-break order
    index = np.argmin(distance, axis=-1)
    picked = np.take_along_axis(values, np.expand_dims(index, -1), axis=-1)[..., 0]
    return _finish(picked, n_valid, min_valid_count)


def quadratic_mean_over_count(values, min_valid_count=DEFAULT_MIN_VALID):
    """
    Uncertainty propagation estimator ``sqrt(sum(v**2)) / n``.

    Used for RMSE / uncertainty layers. Note the division by ``n`` rather
    than ``sqrt(n)``: this is not a root mean square.

    Examples
    --------
    >>> nan = float("nan")
    >>> round(quadratic_mean_over_count([1, 2, 3, 4, 5, nan, nan, nan, nan]), 4)
    1.4832
    """
    values, valid, n_valid = _prepare(values, min_valid_count)
    squares = np.where(valid, values * values, 0.0).sum(axis=-1)
    with np.errstate(invalid="ignore", divide="ignore"):
        result = np.sqrt(squares) / n_valid
    return _finish(result, n_valid, min_valid_count)


class Reducer(Enum):
    """Closed set of block reducers, selectable by name at configuration time."""

    MEAN = "mean"
    CLOSEST = "closest"
    UNCERTAINTY = "uncertainty"

    @property
    def function(self):
        return _FUNCTIONS[self]

    def __call__(self, values, min_valid_count=DEFAULT_MIN_VALID):
        return self.function(values, min_valid_count)

    @classmethod
    def from_name(cls, name) -> "Reducer":
        """Resolve a reducer from its name or one of its long aliases."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("_", "-")
        try:
            return _ALIASES[key]
        except KeyError:
            raise ValueError(
                f"Unknown reducer {name!r}; choose one of {sorted(_ALIASES)}"
            ) from None


_FUNCTIONS = {
    Reducer.MEAN: conditional_mean,
    Reducer.CLOSEST: closest_to_mean,
    Reducer.UNCERTAINTY: quadratic_mean_over_count,
}

_ALIASES = {
    "mean": Reducer.MEAN,
    "conditional-mean": Reducer.MEAN,
    "closest": Reducer.CLOSEST,
    "closest-to-mean": Reducer.CLOSEST,
    "uncertainty": Reducer.UNCERTAINTY,
    "quadratic-mean-over-count": Reducer.UNCERTAINTY,
}
