"""In-memory raster grid.

Grid 是不可变的二维浮点数组（NaN 表示 NO_DATA）及其像元中心坐标。
每一步处理都返回新的 Grid，不在原地修改。
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np
import xarray as xr

from .config import COORD_ATOL
from .extent import GridExtent

NO_DATA = np.nan

X_NAMES = ("lon", "longitude", "x")
Y_NAMES = ("lat", "latitude", "y")


def _frozen(array, dtype=np.float64) -> np.ndarray:
    out = np.array(array, dtype=dtype, copy=True)
    out.flags.writeable = False
    return out


@dataclass(frozen=True, eq=False)
class Grid:
    """Immutable 2-D grid of float64 samples with cell-centre coordinates.

    Parameters
    ----------
    values : array-like
        2-D samples with shape (rows, cols); NaN marks NO_DATA
    x : array-like, optional
        Longitude of each column centre (ascending). Defaults to column index.
    y : array-like, optional
        Latitude of each row centre in storage order (north-up grids are
        descending). Defaults to descending row index.
    resolution : float, optional
        Cell size in degrees; inferred from ``x`` when omitted
    name : str, optional
        Variable name carried through to xarray output

    Examples
    --------
    >>> g = Grid(np.ones((3, 3)), x=[0.5, 1.5, 2.5], y=[2.5, 1.5, 0.5])
    >>> g.extent.bounds
    (0.5, 2.5, 0.5, 2.5)
    """

    values: np.ndarray
    x: Optional[np.ndarray] = None
    y: Optional[np.ndarray] = None
    resolution: Optional[float] = None
    name: Optional[str] = None

    def __post_init__(self):
        values = _frozen(self.values)
        if values.ndim != 2:
            raise ValueError(f"Grid values must be 2-D, got shape {values.shape}")
        rows, cols = values.shape
        x = np.arange(cols, dtype=float) if self.x is None else self.x
        y = np.arange(rows, dtype=float)[::-1] if self.y is None else self.y
        x = _frozen(x)
        y = _frozen(y)
        if x.shape != (cols,) or y.shape != (rows,):
            raise ValueError(
                f"Coordinate lengths (y={y.shape}, x={x.shape}) do not match "
                f"values shape {values.shape}"
            )
        resolution = self.resolution
        if resolution is None:
            resolution = float(abs(x[1] - x[0])) if cols > 1 else float("nan")
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "resolution", float(resolution))

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    @property
    def rows(self) -> int:
        return self.values.shape[0]

    @property
    def cols(self) -> int:
        return self.values.shape[1]

    @property
    def extent(self) -> GridExtent:
        """Bounds spanned by the cell centres."""
        if self.values.size == 0:
            raise ValueError("An empty grid has no extent")
        return GridExtent(
            float(self.x.min()),
            float(self.x.max()),
            float(self.y.min()),
            float(self.y.max()),
            self.resolution,
        )

    def valid_count(self) -> int:
        return int(np.count_nonzero(~np.isnan(self.values)))

    def with_values(self, values) -> "Grid":
        """New grid with the same coordinates and different samples."""
        return replace(self, values=values)

    def crop(self, extent: GridExtent, atol=COORD_ATOL) -> "Grid":
        """Keep the rows and columns whose centres fall inside ``extent``.

        Bounds are inclusive within ``atol``. No resampling takes place.
        """
        col_keep = (self.x >= extent.x_min - atol) & (self.x <= extent.x_max + atol)
        row_keep = (self.y >= extent.y_min - atol) & (self.y <= extent.y_max + atol)
        cols = np.flatnonzero(col_keep)
        rows = np.flatnonzero(row_keep)
        if cols.size == 0 or rows.size == 0:
            col_slice = slice(0, 0)
            row_slice = slice(0, 0)
        else:
            # Coordinates are monotonic, so the selection is one contiguous run
            col_slice = slice(cols[0], cols[-1] + 1)
            row_slice = slice(rows[0], rows[-1] + 1)
        return replace(
            self,
            values=self.values[row_slice, col_slice],
            x=self.x[col_slice],
            y=self.y[row_slice],
        )

    # ------------------------------------------------------------------
    # xarray conversion
    # ------------------------------------------------------------------

    @classmethod
    def from_dataarray(cls, da: xr.DataArray, x_name=None, y_name=None) -> "Grid":
        """Build a Grid from a 2-D (or singleton-padded) DataArray.

        Coordinate names are detected among lon/longitude/x and
        lat/latitude/y unless given explicitly.
        """
        if da.ndim > 2:
            da = da.squeeze(drop=True)
        if da.ndim != 2:
            raise ValueError(f"Expected a 2-D DataArray, got dims {da.dims}")
        x_name = x_name or find_dim(da, X_NAMES)
        y_name = y_name or find_dim(da, Y_NAMES)
        da = da.transpose(y_name, x_name)
        return cls(
            values=da.values,
            x=da[x_name].values,
            y=da[y_name].values,
            name=da.name,
        )

    def to_dataarray(self, x_name="lon", y_name="lat", attrs=None) -> xr.DataArray:
        return xr.DataArray(
            np.array(self.values),
            coords={y_name: np.array(self.y), x_name: np.array(self.x)},
            dims=(y_name, x_name),
            name=self.name,
            attrs=dict(attrs or {}),
        )

    def __repr__(self):
        return (
            f"Grid(name={self.name!r}, shape={self.shape}, "
            f"resolution={self.resolution:.7g}, valid={self.valid_count()})"
        )


def find_dim(da, candidates):
    for name in candidates:
        if name in da.dims:
            return name
    raise KeyError(f"None of {candidates} found in DataArray dims {da.dims}")
