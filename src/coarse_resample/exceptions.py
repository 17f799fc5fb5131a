"""Error taxonomy.

对齐失败立即中止流程；块内有效像元不足只产生 NO_DATA，不抛出异常。
Alignment failures abort the pipeline, per-block shortfalls never raise.
"""

# Exit codes used by the command line tool
EXIT_OK = 0
EXIT_USAGE = 2
EXIT_DIMENSION_MISMATCH = 3
EXIT_ALIGNMENT = 4
EXIT_LOOKUP = 5

FULL_EXTENT_CHECK = "full-extent"
LATTICE_SNAP_CHECK = "lattice-snap"


class ResampleError(Exception):
    """Base class for errors raised by coarse_resample."""

    exit_code = 1


class DimensionMismatch(ResampleError, ValueError):
    """Grid shape is not an exact multiple of the aggregation factor."""

    exit_code = EXIT_DIMENSION_MISMATCH

    def __init__(self, shape, factor):
        self.shape = tuple(shape)
        self.factor = factor
        super().__init__(
            f"Grid of shape {self.shape} cannot be tiled by {factor}x{factor} "
            f"blocks; rows and columns must both be multiples of {factor}"
        )


class AlignmentError(ResampleError, ValueError):
    """An alignment precondition failed.

    ``check`` names the failing step: ``"full-extent"`` or ``"lattice-snap"``.
    """

    exit_code = EXIT_ALIGNMENT

    def __init__(self, check, message):
        self.check = check
        super().__init__(f"[{check}] {message}")


class ExtentNotOnLattice(AlignmentError):
    """A bound is off the coarse lattice. Only raised by ``require_on_lattice``."""

    def __init__(self, bound, value):
        self.bound = bound
        self.value = value
        super().__init__(
            LATTICE_SNAP_CHECK, f"{bound}={value!r} is not on the target lattice"
        )


class AmbiguousGlobalExtent(UserWarning):
    """Grid is not a full global grid and no subset extent was supplied.

    Advisory only: pass an explicit subset extent to pick the lattice-snap path.
    """
