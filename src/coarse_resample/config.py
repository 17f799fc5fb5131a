"""Global configuration & default constants.

全局配置：Copernicus Global Land 300 m (1/336°) -> 1 km (1/112°) 网格族的默认常量。
Other sensor grids should be described with ``GridFamily.from_mapping``
instead of editing these values.
"""

# Fine grid cell size (degrees) of the 333 m product family
FINE_STEP_DEG = 1.0 / 336.0

# Integer aggregation factor between fine and coarse grid
DEFAULT_FACTOR = 3

# Top-left reference point of the global raster grid
GRID_ORIGIN_X = -180.0
GRID_ORIGIN_Y = 80.0

# Far edges of the global footprint
GRID_END_X = 180.0
GRID_END_Y = -60.0

# Full global footprint tolerances: a grid counts as "full global" when
# x_min <= -180, x_max >= 179.997, y_min <= -59.99554 and y_max >= 80
FULL_EXTENT_X_MIN = -180.0
FULL_EXTENT_X_MAX = 179.997
FULL_EXTENT_Y_MIN = -59.99554
FULL_EXTENT_Y_MAX = 80.0

# Rim trimmed from a full global grid, in fine cells (left, right, bottom, top)
RIM_TRIM_CELLS = (2, 1, 1, 2)

# Coordinates are compared after rounding to this many decimals
ROUND_DECIMALS = 7

# A block needs at least this many valid cells (5 of 9 for 3x3 blocks)
DEFAULT_MIN_VALID = 5

# Absolute tolerance used when matching cell centres against bounds
COORD_ATOL = 1e-9

# Log line format used by the command line tool
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
