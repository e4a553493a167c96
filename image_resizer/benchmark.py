"""Timing harness for the resize engine.

Warmup calls are executed and thrown away, then each measured run times
``inner_reps`` back-to-back resizes and records the per-call average.
Every produced buffer goes through a ``ResultSink`` so the work is both
observed and released before the next call.
"""
from __future__ import annotations

import csv
import io
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

from .buffer import PixelBuffer
from .errors import InvalidArgumentError, IOFailureError
from .processing import ResizeMethod, Strategy, resize, round_half_away

logger = logging.getLogger(__name__)

BENCH_HEADER = "backend,out_w,out_h,channels,inner_reps,mean_ms,stddev_ms,min_ms,max_ms"
SWEEP_HEADER = (
    "input,method,backend,threads,warmup,runs,"
    "out_w,out_h,channels,inner_reps,mean_ms,stddev_ms,min_ms,max_ms"
)


@dataclass(frozen=True)
class BenchResult:
    runs: int
    mean_ms: float
    stddev_ms: float
    min_ms: float
    max_ms: float

    def as_row(self) -> Tuple[str, ...]:
        return tuple(f"{v:.6f}" for v in (self.mean_ms, self.stddev_ms, self.min_ms, self.max_ms))


class ResultSink:
    """Consume-and-discard target for benchmarked buffers.

    ``consume`` reads the produced pixels (last byte and size) and drops the
    caller's reference, so every timed resize has an observed result.
    """

    def __init__(self) -> None:
        self.count = 0
        self.bytes_seen = 0
        self.checksum = 0

    def consume(self, image: PixelBuffer) -> None:
        self.count += 1
        self.bytes_seen += image.size_bytes
        self.checksum ^= int(image.array.reshape(-1)[-1])


def summarize(samples: Sequence[float]) -> BenchResult:
    if len(samples) == 0:
        raise InvalidArgumentError("summarize: no samples")
    arr = np.asarray(samples, dtype=np.float64)
    mean = float(arr.mean())
    lo = float(arr.min())
    hi = float(arr.max())
    if arr.size < 2 or lo == hi:
        stddev = 0.0
    else:
        stddev = float(arr.std(ddof=1))
    # float summation can land the mean a few ulps outside [min, max]
    mean = min(max(mean, lo), hi)
    return BenchResult(runs=int(arr.size), mean_ms=mean, stddev_ms=stddev, min_ms=lo, max_ms=hi)


def measure(
    image: PixelBuffer,
    out_w: int,
    out_h: int,
    method: Union[str, ResizeMethod],
    strategy: Strategy,
    warmup_runs: int = 2,
    measured_runs: int = 10,
    inner_reps: int = 1,
    sink: ResultSink | None = None,
) -> BenchResult:
    if not isinstance(image, PixelBuffer):
        raise InvalidArgumentError("measure: input must be a PixelBuffer")
    if out_w <= 0 or out_h <= 0:
        raise InvalidArgumentError("measure: output size must be > 0")
    if warmup_runs < 0:
        raise InvalidArgumentError("measure: warmup_runs must be >= 0")
    if measured_runs < 1:
        raise InvalidArgumentError("measure: measured_runs must be >= 1")
    if inner_reps < 1:
        raise InvalidArgumentError("measure: inner_reps must be >= 1")
    method = ResizeMethod.parse(method)
    if sink is None:
        sink = ResultSink()

    logger.debug(
        "bench %dx%d %s %r warmup=%d runs=%d inner_reps=%d",
        out_w, out_h, method.value, strategy, warmup_runs, measured_runs, inner_reps,
    )

    for _ in range(warmup_runs):
        sink.consume(resize(image, out_w, out_h, method, strategy))

    samples: List[float] = []
    for _ in range(measured_runs):
        t0 = time.perf_counter()
        for _ in range(inner_reps):
            sink.consume(resize(image, out_w, out_h, method, strategy))
        t1 = time.perf_counter()
        samples.append((t1 - t0) * 1000.0 / inner_reps)

    return summarize(samples)


def format_csv_row(values: Iterable[object]) -> str:
    buf = io.StringIO()
    csv.writer(buf, lineterminator="").writerow(list(values))
    return buf.getvalue()


def append_csv_row(path: str | Path, header_if_new: str, row: str) -> None:
    """Append ``row``; write ``header_if_new`` first if the file is missing or empty."""
    p = Path(path)
    try:
        write_header = (not p.exists()) or p.stat().st_size == 0
        with p.open("a", encoding="utf-8", newline="") as f:
            if write_header and header_if_new:
                f.write(header_if_new + "\n")
            f.write(row + "\n")
    except OSError as e:
        raise IOFailureError(f"append_csv_row: cannot open file: {p} ({e})") from e
    logger.debug("appended row to %s (header=%s)", p, write_header)


def size_sweep(base_w: int, base_h: int, steps: int, scale: float) -> List[Tuple[int, int]]:
    """Geometric output sizes: each step is ``round(previous * scale)``."""
    if base_w <= 0 or base_h <= 0:
        raise InvalidArgumentError("benchset: base_w/base_h must be > 0")
    if steps <= 0:
        raise InvalidArgumentError("benchset: steps must be > 0")
    if not scale > 1.0:
        raise InvalidArgumentError("benchset: scale must be > 1.0 (e.g., 1.25, 1.5, 2.0)")

    sizes = []
    w, h = base_w, base_h
    for _ in range(steps):
        sizes.append((w, h))
        w = int(round_half_away(np.float64(w * scale)))
        h = int(round_half_away(np.float64(h * scale)))
    return sizes
