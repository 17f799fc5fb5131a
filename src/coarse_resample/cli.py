"""Command line interface.

用法 / Usage::

    resample in_300m.nc out_1km.nc --product NDVI
    resample in.nc out.nc --variable LAI --reducer mean --cutoff 7 --bbox 10 20 40 50

Exit codes: 0 success, 2 usage error or unusable input variable, 3 grid
does not tile into blocks, 4 alignment failure, 5 missing input file or
unknown product or variable.
"""

import argparse
import logging
import sys
import warnings
from dataclasses import replace
from pathlib import Path

import xarray as xr

from .exceptions import EXIT_LOOKUP, EXIT_OK, EXIT_USAGE, ResampleError
from .grid_family import GLOBAL_333M
from .log import setup_logger
from .masking import Comparison
from .pipeline import resample_dataarray
from .products import resolve_product
from .reducers import Reducer

logger = logging.getLogger("coarse_resample.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resample",
        description="Aggregate a fine-resolution raster onto a coarser lattice",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("input", help="Input dataset readable by xarray (e.g. NetCDF)")
    parser.add_argument("output", help="Output NetCDF path")
    parser.add_argument("-v", "--variable", help="Variable to resample (default: the only one)")
    parser.add_argument("--factor", type=int, default=GLOBAL_333M.factor,
                        help="Aggregation factor between fine and coarse grid")
    parser.add_argument("--reducer", choices=[r.value for r in Reducer], default=None,
                        help="Block reducer (default: product's, else mean)")
    parser.add_argument("--cutoff", type=float, default=None,
                        help="Values beyond this are treated as NO_DATA")
    parser.add_argument("--comparison", choices=["gt", "lt"], default=None,
                        help="Mask values greater (gt) or lower (lt) than the cutoff")
    parser.add_argument("--min-valid", type=int, default=5, dest="min_valid",
                        help="Minimum valid fine cells per coarse cell")
    parser.add_argument("--bbox", type=float, nargs=4, default=None,
                        metavar=("XMIN", "XMAX", "YMIN", "YMAX"),
                        help="Area of interest, snapped to the coarse lattice")
    parser.add_argument("--product", help="Product name for cutoff/reducer defaults")
    parser.add_argument("--layer", help="Product layer, e.g. RMSE")
    parser.add_argument("--engine", default=None, help="xarray IO engine")
    parser.add_argument("--log-file", default=None, help="Also log to this file")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def _select_variable(ds: xr.Dataset, name):
    if name is None:
        names = list(ds.data_vars)
        if len(names) != 1:
            raise KeyError(f"Input has variables {names}; choose one with --variable")
        name = names[0]
    if name not in ds:
        raise KeyError(f"Variable '{name}' not found; available: {list(ds.data_vars)}")
    return ds[name]


def run(args) -> int:
    reducer = args.reducer
    cutoff = args.cutoff
    comparison = args.comparison
    if args.product:
        settings = resolve_product(args.product, args.layer)
        logger.info("Product %s/%s: cutoff=%s reducer=%s", settings.product,
                    settings.layer, settings.cutoff, settings.reducer.value)
        reducer = reducer or settings.reducer
        cutoff = settings.cutoff if cutoff is None else cutoff
        comparison = comparison or settings.comparison

    family = GLOBAL_333M
    if args.factor != family.factor:
        family = replace(family, name=f"{family.name}-x{args.factor}", factor=args.factor)

    if not Path(args.input).exists():
        raise FileNotFoundError(f"Input file not found: {args.input}")
    with xr.open_dataset(args.input, engine=args.engine) as ds:
        da = _select_variable(ds, args.variable).load()

    logger.info("Read %s %s from %s", da.name, dict(da.sizes), args.input)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        out = resample_dataarray(
            da,
            family=family,
            reducer=reducer or Reducer.MEAN,
            cutoff=cutoff,
            comparison=comparison or Comparison.GREATER,
            min_valid_count=args.min_valid,
            subset=args.bbox,
        )
    for item in caught:
        logger.warning("%s", item.message)

    out.to_dataset(name=out.name or "data").to_netcdf(args.output, engine=args.engine)
    logger.info("Wrote %s %s to %s", out.name, dict(out.sizes), args.output)
    return EXIT_OK


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(
        "coarse_resample",
        args.log_file,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )
    try:
        return run(args)
    except ResampleError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return exc.exit_code
    except (KeyError, OSError) as exc:
        logger.error("Lookup failed: %s", exc)
        return EXIT_LOOKUP
    except ValueError as exc:
        logger.error("Invalid input: %s", exc)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
