"""Synthetic 300 m -> 1 km NDVI resampling over a small subset.

合成数据示例：构造 1/336° NDVI 网格，植入云/旗标像元，
吸附到 1 km 格点后按产品默认设置进行块聚合。
"""

import warnings

import numpy as np

from coarse_resample import Grid, resample, resolve_product

FINE = 1.0 / 336.0


def make_fine_ndvi(n=180, seed=0):
    """NDVI-like field on the 333 m lattice, top-left cell centre at (5E, 45N)."""
    rng = np.random.default_rng(seed)
    x = 5.0 + np.arange(n) * FINE
    y = 45.0 - np.arange(n) * FINE
    gradient = np.linspace(0.2, 0.8, n)[None, :]
    values = gradient + rng.normal(0, 0.03, (n, n))
    # flag values (e.g. 254/255 scaled) and a cloud patch
    values[rng.random((n, n)) < 0.05] = 1.0
    values[40:70, 100:140] = np.nan
    return Grid(values, x=x, y=y, resolution=FINE, name="NDVI")


def main():
    fine = make_fine_ndvi()
    settings = resolve_product("NDVI")
    print(f"Product settings: cutoff={settings.cutoff}, reducer={settings.reducer.value}")

    subset = (5.1, 5.4, 44.6, 44.9)
    result = resample(
        fine,
        reducer=settings.reducer,
        cutoff=settings.cutoff,
        comparison=settings.comparison,
        subset=subset,
    )
    coarse = result.grid
    print(f"Fine grid:   {fine}")
    print(f"Coarse grid: {coarse}")
    print(f"Snapped extent: {result.extent}")
    print(f"No-data coarse cells: {np.isnan(coarse.values).sum()} / {coarse.values.size}")

    # Without a subset the grid's own extent is aligned, with an advisory
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        auto = resample(fine, cutoff=settings.cutoff)
    for w in caught:
        print("Advisory:", w.message)
    print(f"Auto-aligned coarse grid: {auto.grid}")


if __name__ == "__main__":
    main()
