"""Grid family descriptor.

GridFamily 描述一个产品族的全球栅格网格：原点、精细/粗网格步长、
全球范围容差以及对齐时需要裁掉的边缘像元数。
"""

from dataclasses import dataclass, fields
from typing import Mapping, Tuple

from . import config


@dataclass(frozen=True)
class GridFamily:
    """Fixed global lattice shared by the fine and coarse product of a family.

    Parameters
    ----------
    name : str
        Label used in log messages
    fine_step : float
        Fine grid cell size in degrees
    factor : int
        Integer aggregation factor, coarse step = ``fine_step * factor``
    origin_x, origin_y : float
        Top-left reference point of the global raster grid
    end_x, end_y : float
        Opposite (bottom-right) edge of the global footprint
    full_extent : tuple of float
        ``(x_min, x_max, y_min, y_max)`` a grid extent must reach to count as
        a full global grid
    rim_trim : tuple of int
        Fine cells removed from a full global grid (left, right, bottom, top)
    decimals : int
        Rounding precision for lattice comparisons
    """

    name: str = "global-333m"
    fine_step: float = config.FINE_STEP_DEG
    factor: int = config.DEFAULT_FACTOR
    origin_x: float = config.GRID_ORIGIN_X
    origin_y: float = config.GRID_ORIGIN_Y
    end_x: float = config.GRID_END_X
    end_y: float = config.GRID_END_Y
    full_extent: Tuple[float, float, float, float] = (
        config.FULL_EXTENT_X_MIN,
        config.FULL_EXTENT_X_MAX,
        config.FULL_EXTENT_Y_MIN,
        config.FULL_EXTENT_Y_MAX,
    )
    rim_trim: Tuple[int, int, int, int] = config.RIM_TRIM_CELLS
    decimals: int = config.ROUND_DECIMALS

    def __post_init__(self):
        if not isinstance(self.factor, int) or isinstance(self.factor, bool):
            raise TypeError(f"factor must be an int, got {type(self.factor).__name__}")
        if self.factor < 1:
            raise ValueError(f"factor must be >= 1, got {self.factor}")
        if self.fine_step <= 0:
            raise ValueError(f"fine_step must be positive, got {self.fine_step}")
        if self.end_x <= self.origin_x or self.end_y >= self.origin_y:
            raise ValueError(
                "end_x must lie east of origin_x and end_y south of origin_y"
            )
        object.__setattr__(self, "full_extent", tuple(float(v) for v in self.full_extent))
        object.__setattr__(self, "rim_trim", tuple(int(v) for v in self.rim_trim))
        if len(self.full_extent) != 4 or len(self.rim_trim) != 4:
            raise ValueError("full_extent and rim_trim need exactly four values")

    @property
    def coarse_step(self) -> float:
        return self.fine_step * self.factor

    @classmethod
    def from_mapping(cls, mapping: Mapping) -> "GridFamily":
        """Build a family from a plain dict, e.g. loaded from JSON or YAML.

        Unknown keys raise ``KeyError`` so that typos do not silently fall
        back to the 333 m defaults.

        Examples
        --------
        >>> fam = GridFamily.from_mapping({"name": "half", "fine_step": 0.5, "factor": 2})
        >>> fam.coarse_step
        1.0
        """
        known = {f.name for f in fields(cls)}
        unknown = set(mapping) - known
        if unknown:
            raise KeyError(
                f"Unknown GridFamily field(s): {sorted(unknown)}; "
                f"expected a subset of {sorted(known)}"
            )
        return cls(**dict(mapping))


# Copernicus Global Land 300 m -> 1 km products
GLOBAL_333M = GridFamily()
