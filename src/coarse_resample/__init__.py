"""
coarse-resample: 粗网格块聚合重采样工具包
Block-aggregation resampling of fine-resolution EO rasters to a coarse lattice

将 300 m (1/336°) 植被产品聚合到 1 km (1/112°) 网格，以延续历史 1 km 时间序列。
Converts 300 m (1/336 deg) vegetation products to the 1 km (1/112 deg) grid so
that long 1 km time series can be continued.

主要功能 / Main Features:
--------------------------
1. 网格对齐 / Grid alignment
   - 全球网格边缘裁剪 / Rim trimming of full global grids
   - 子区域吸附到粗网格格点 / Snapping subsets to the coarse lattice
2. 阈值掩膜 / Cutoff masking
3. 块聚合 / Block aggregation
   - conditional mean / closest to mean / uncertainty propagation
   - 最少有效像元数 / Minimum valid-pixel policy

使用示例 / Usage Example:
-------------------------
>>> import numpy as np
>>> from coarse_resample import Grid, Reducer, aggregate, apply_cutoff
>>> fine = Grid(np.full((9, 9), 0.5))
>>> coarse = aggregate(apply_cutoff(fine, 0.92), factor=3, reducer=Reducer.MEAN)
>>> coarse.shape
(3, 3)
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config import DEFAULT_FACTOR, DEFAULT_MIN_VALID
from .exceptions import (
    AlignmentError,
    AmbiguousGlobalExtent,
    DimensionMismatch,
    ExtentNotOnLattice,
    ResampleError,
)
from .extent import GridExtent
from .grid import NO_DATA, Grid
from .grid_family import GLOBAL_333M, GridFamily

# 对齐 / Alignment
from .alignment import (
    coarse_lattice,
    crop_to_full_global_extent,
    crop_to_snapped_extent,
    global_crop_extent,
    inner_snapped_extent,
    is_full_global_extent,
    is_on_lattice,
    reference_extent,
    snap_extent_to_target_grid,
)

# 掩膜 / Masking
from .masking import Comparison, apply_cutoff

# 归约与聚合 / Reduction and aggregation
from .reducers import (
    Reducer,
    closest_to_mean,
    conditional_mean,
    quadratic_mean_over_count,
)
from .aggregation import aggregate, aggregated_extent, block_view, reduce_blocks

# 产品与流程 / Products and pipeline
from .products import ProductSettings, default_product_table, resolve_product
from .pipeline import ResampleResult, align_grid, resample, resample_dataarray

__all__ = [
    # 数据类型 / Data types
    "Grid",
    "GridExtent",
    "GridFamily",
    "GLOBAL_333M",
    "NO_DATA",
    "DEFAULT_FACTOR",
    "DEFAULT_MIN_VALID",

    # 异常 / Errors
    "ResampleError",
    "DimensionMismatch",
    "AlignmentError",
    "ExtentNotOnLattice",
    "AmbiguousGlobalExtent",

    # 对齐 / Alignment
    "coarse_lattice",
    "crop_to_full_global_extent",
    "crop_to_snapped_extent",
    "global_crop_extent",
    "inner_snapped_extent",
    "is_full_global_extent",
    "is_on_lattice",
    "reference_extent",
    "snap_extent_to_target_grid",

    # 掩膜 / Masking
    "Comparison",
    "apply_cutoff",

    # 归约与聚合 / Reduction and aggregation
    "Reducer",
    "conditional_mean",
    "closest_to_mean",
    "quadratic_mean_over_count",
    "aggregate",
    "aggregated_extent",
    "block_view",
    "reduce_blocks",

    # 产品与流程 / Products and pipeline
    "ProductSettings",
    "default_product_table",
    "resolve_product",
    "ResampleResult",
    "align_grid",
    "resample",
    "resample_dataarray",
]
