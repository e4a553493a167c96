"""Image resizing, benchmarking and validation package.

This package contains:
- buffer: the immutable PixelBuffer
- processing: nearest/bilinear resize with sequential or parallel row execution
- benchmark: warmup + timed runs, statistics and CSV rows
- validate: cross-backend diff of resize outputs
- metrics: down/up round-trip distortion (MAE, RMSE, PSNR)
- io_utils: image decode/encode through OpenCV
- config: run settings passed to the CLI entry points
"""

from .errors import (
    ResizerError,
    InvalidArgumentError,
    IOFailureError,
    ValidationMismatchError,
)

from .buffer import PixelBuffer

from .config import ResizerConfig

from .io_utils import (
    ensure_dir,
    load_image,
    save_png,
    save_jpg,
    save_image,
)

from .processing import (
    ResizeMethod,
    Sequential,
    Parallel,
    parse_backend,
    partition_rows,
    map_coords,
    resize,
)

from .benchmark import (
    BENCH_HEADER,
    SWEEP_HEADER,
    BenchResult,
    ResultSink,
    summarize,
    measure,
    format_csv_row,
    append_csv_row,
    size_sweep,
)

from .validate import (
    DiffStats,
    compare_images,
    validate_backends,
    assert_equivalent,
)

from .metrics import (
    AttackMetrics,
    diff_metrics,
    down_up_metrics,
)

__all__ = [
    # errors
    "ResizerError",
    "InvalidArgumentError",
    "IOFailureError",
    "ValidationMismatchError",
    # buffer
    "PixelBuffer",
    # config
    "ResizerConfig",
    # io_utils
    "ensure_dir",
    "load_image",
    "save_png",
    "save_jpg",
    "save_image",
    # processing
    "ResizeMethod",
    "Sequential",
    "Parallel",
    "parse_backend",
    "partition_rows",
    "map_coords",
    "resize",
    # benchmark
    "BENCH_HEADER",
    "SWEEP_HEADER",
    "BenchResult",
    "ResultSink",
    "summarize",
    "measure",
    "format_csv_row",
    "append_csv_row",
    "size_sweep",
    # validate
    "DiffStats",
    "compare_images",
    "validate_backends",
    "assert_equivalent",
    # metrics
    "AttackMetrics",
    "diff_metrics",
    "down_up_metrics",
]
