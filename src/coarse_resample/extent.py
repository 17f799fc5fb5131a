"""Geographic extent value type.

GridExtent 表示矩形经纬度范围及分辨率，仅包含算术辅助方法。
"""

from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np

from .config import ROUND_DECIMALS


@dataclass(frozen=True)
class GridExtent:
    """Rectangular bounding box in decimal degrees plus cell size.

    Bounds are stored as given; use ``rounded`` before comparing them
    against a coordinate lattice.

    Parameters
    ----------
    x_min, x_max : float
        Western and eastern bound (longitude)
    y_min, y_max : float
        Southern and northern bound (latitude)
    resolution : float, optional
        Cell size in degrees, ``nan`` when unknown

    Examples
    --------
    >>> ext = GridExtent(-10.0, 10.0, -5.0, 5.0, resolution=1 / 112)
    >>> ext.width
    20.0
    """

    x_min: float
    x_max: float
    y_min: float
    y_max: float
    resolution: float = float("nan")

    def __post_init__(self):
        for name in ("x_min", "x_max", "y_min", "y_max"):
            value = float(getattr(self, name))
            if not np.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")
            object.__setattr__(self, name, value)
        object.__setattr__(self, "resolution", float(self.resolution))

    @classmethod
    def from_bounds(cls, bounds, resolution=float("nan")) -> "GridExtent":
        """Build from a ``(x_min, x_max, y_min, y_max)`` sequence."""
        x_min, x_max, y_min, y_max = bounds
        return cls(x_min, x_max, y_min, y_max, resolution)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return (self.x_min, self.x_max, self.y_min, self.y_max)

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    def shrink(self, left=0.0, right=0.0, bottom=0.0, top=0.0) -> "GridExtent":
        """Move each bound inwards by the given distance (degrees)."""
        return replace(
            self,
            x_min=self.x_min + left,
            x_max=self.x_max - right,
            y_min=self.y_min + bottom,
            y_max=self.y_max - top,
        )

    def rounded(self, decimals=ROUND_DECIMALS) -> "GridExtent":
        """Bounds rounded to ``decimals`` (lattice comparison precision)."""
        return replace(
            self,
            x_min=float(np.round(self.x_min, decimals)),
            x_max=float(np.round(self.x_max, decimals)),
            y_min=float(np.round(self.y_min, decimals)),
            y_max=float(np.round(self.y_max, decimals)),
        )

    def expanded(self, margin) -> "GridExtent":
        """Move each bound outwards by ``margin`` degrees."""
        return self.shrink(-margin, -margin, -margin, -margin)

    def with_resolution(self, resolution) -> "GridExtent":
        return replace(self, resolution=resolution)

    def scaled(self, factor) -> "GridExtent":
        """Same bounds, resolution multiplied by ``factor``."""
        return replace(self, resolution=self.resolution * factor)

    def __str__(self):
        return (
            f"[x: {self.x_min:.7f} .. {self.x_max:.7f}, "
            f"y: {self.y_min:.7f} .. {self.y_max:.7f}]"
        )
