"""Product metadata table.

产品元数据：各产品/图层的有效值上限、比较方向及推荐的归约方法。
The values are the physical maxima of the Copernicus Global Land 300 m
products after scaling; anything above is a flag or fill value.
"""

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .masking import Comparison
from .reducers import Reducer

PRODUCT_COLUMNS = ["product", "layer", "cutoff", "comparison", "reducer"]

_DEFAULT_ROWS = [
    # product, layer, cutoff, comparison, reducer
    ("NDVI", "NDVI", 0.92, "gt", "mean"),
    ("FAPAR", "FAPAR", 0.94, "gt", "mean"),
    ("FAPAR", "RMSE", 0.94, "gt", "uncertainty"),
    ("FCOVER", "FCOVER", 0.94, "gt", "mean"),
    ("FCOVER", "RMSE", 0.94, "gt", "uncertainty"),
    ("LAI", "LAI", 7.0, "gt", "mean"),
    ("LAI", "RMSE", 7.0, "gt", "uncertainty"),
    ("DMP", "DMP", 327.67, "gt", "mean"),
    ("GDMP", "GDMP", 655.34, "gt", "mean"),
]


def default_product_table() -> pd.DataFrame:
    """Fresh copy of the built-in product table."""
    return pd.DataFrame(_DEFAULT_ROWS, columns=PRODUCT_COLUMNS)


@dataclass(frozen=True)
class ProductSettings:
    """Resolved masking and reduction settings for one product layer."""

    product: str
    layer: str
    cutoff: float
    comparison: Comparison
    reducer: Reducer


def resolve_product(product: str, layer: Optional[str] = None,
                    table: Optional[pd.DataFrame] = None) -> ProductSettings:
    """
    Look up the settings of a product layer.

    Parameters
    ----------
    product : str
        Product name, e.g. ``"NDVI"`` or ``"c_gls_LAI300"`` (matched
        case-insensitively as a substring)
    layer : str, optional
        Layer name; defaults to the product's main layer
    table : pd.DataFrame, optional
        Table with ``PRODUCT_COLUMNS``; defaults to the built-in one

    Raises
    ------
    KeyError
        If no row matches

    Examples
    --------
    >>> resolve_product("c_gls_NDVI300").cutoff
    0.92
    """
    table = default_product_table() if table is None else table
    missing = set(PRODUCT_COLUMNS) - set(table.columns)
    if missing:
        raise ValueError(f"Product table is missing columns: {sorted(missing)}")

    key = str(product).upper()
    # Longest name first so that GDMP is not matched as DMP
    names = sorted(table["product"].str.upper().unique(), key=len, reverse=True)
    matched = next((name for name in names if name in key), None)
    if matched is None:
        raise KeyError(f"Unknown product {product!r}; known products: {sorted(names)}")

    rows = table[table["product"].str.upper() == matched]
    layer_key = (layer or matched).upper()
    rows = rows[rows["layer"].str.upper() == layer_key]
    if rows.empty:
        raise KeyError(f"Product {matched} has no layer {layer_key!r}")

    row = rows.iloc[0]
    return ProductSettings(
        product=matched,
        layer=layer_key,
        cutoff=float(row["cutoff"]),
        comparison=Comparison.from_name(row["comparison"]),
        reducer=Reducer.from_name(row["reducer"]),
    )
