from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, List, Tuple, Union

import numpy as np

from .buffer import PixelBuffer, validate_channels
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

# Rows handed to numpy in one vectorised step; bounds the float32 temporaries.
BLOCK_ROWS = 64

RowKernel = Callable[[int, int], None]


class ResizeMethod(str, Enum):
    NEAREST = "nearest"
    BILINEAR = "bilinear"

    @classmethod
    def parse(cls, value: Union[str, "ResizeMethod"]) -> "ResizeMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidArgumentError(f"Unknown method: {value}") from None


# ---------------------------------------------
# Row-iteration strategies
# ---------------------------------------------

def partition_rows(rows: int, parts: int) -> List[Tuple[int, int]]:
    """Split ``range(rows)`` into contiguous, disjoint ``(start, stop)`` chunks.

    Chunks are statically sized (ceil division); the last one may be shorter.
    """
    if rows <= 0:
        raise InvalidArgumentError(f"rows must be > 0, got {rows}")
    if parts <= 0:
        raise InvalidArgumentError(f"parts must be > 0, got {parts}")
    chunk = (rows + parts - 1) // parts
    return [(start, min(rows, start + chunk)) for start in range(0, rows, chunk)]


class Sequential:
    """Single thread, output rows in order."""

    name = "seq"
    threads = 1

    def run(self, kernel: RowKernel, rows: int) -> None:
        kernel(0, rows)

    def __repr__(self) -> str:
        return "Sequential()"


class Parallel:
    """Static row partition over a bounded thread pool.

    Each worker owns one contiguous slice of output rows and reads the
    shared, read-only input. numpy drops the GIL inside the kernels, so
    chunks progress concurrently. ``run`` returns once every worker is done.
    """

    name = "parallel"

    def __init__(self, threads: int = 0) -> None:
        if threads < 0:
            raise InvalidArgumentError(f"threads must be >= 0, got {threads}")
        self.threads = threads

    def workers(self, rows: int) -> int:
        n = self.threads if self.threads > 0 else (os.cpu_count() or 1)
        return max(1, min(n, rows))

    def run(self, kernel: RowKernel, rows: int) -> None:
        chunks = partition_rows(rows, self.workers(rows))
        with ThreadPoolExecutor(max_workers=len(chunks), thread_name_prefix="resize") as pool:
            futures = [pool.submit(kernel, start, stop) for start, stop in chunks]
            for fut in futures:
                fut.result()

    def __repr__(self) -> str:
        return f"Parallel(threads={self.threads})"


Strategy = Union[Sequential, Parallel]


def parse_backend(name: str, threads: int = 0) -> Strategy:
    key = str(name).strip().lower()
    if key in ("seq", "sequential"):
        return Sequential()
    if key in ("parallel", "par"):
        return Parallel(threads)
    raise InvalidArgumentError(f"Unknown backend: {name}")


# ---------------------------------------------
# Coordinate mapping
# ---------------------------------------------

def map_coords(out_size: int, in_size: int) -> np.ndarray:
    """Pixel-center mapping ``(o + 0.5) * (in / out) - 0.5`` in float32."""
    o = np.arange(out_size, dtype=np.float32)
    scale = np.float32(in_size) / np.float32(out_size)
    return (o + np.float32(0.5)) * scale - np.float32(0.5)


def round_half_away(x: np.ndarray) -> np.ndarray:
    t = np.trunc(x)
    return t + np.where(np.abs(x - t) >= 0.5, np.sign(x), 0).astype(x.dtype)


def nearest_indices(out_size: int, in_size: int) -> np.ndarray:
    s = map_coords(out_size, in_size)
    return np.clip(round_half_away(s).astype(np.intp), 0, in_size - 1)


def bilinear_axis(out_size: int, in_size: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(lo, hi, w)`` per output coordinate along one axis."""
    s = map_coords(out_size, in_size)
    lo = np.clip(np.floor(s).astype(np.intp), 0, in_size - 1)
    hi = np.minimum(lo + 1, in_size - 1)
    w = s - lo.astype(np.float32)
    return lo, hi, w


# ---------------------------------------------
# Row kernels
# ---------------------------------------------

def _blocked(block: RowKernel) -> RowKernel:
    def kernel(start: int, stop: int) -> None:
        for y in range(start, stop, BLOCK_ROWS):
            block(y, min(stop, y + BLOCK_ROWS))
    return kernel


def _nearest_kernel(src: np.ndarray, out: np.ndarray) -> RowKernel:
    out_h, out_w = out.shape[:2]
    iy = nearest_indices(out_h, src.shape[0])
    ix = nearest_indices(out_w, src.shape[1])

    def block(start: int, stop: int) -> None:
        out[start:stop] = src[iy[start:stop, np.newaxis], ix[np.newaxis, :]]

    return _blocked(block)


def _bilinear_kernel(src: np.ndarray, out: np.ndarray) -> RowKernel:
    out_h, out_w = out.shape[:2]
    y0, y1, wy = bilinear_axis(out_h, src.shape[0])
    x0, x1, wx = bilinear_axis(out_w, src.shape[1])
    wx = wx[np.newaxis, :, np.newaxis]

    def block(start: int, stop: int) -> None:
        row0 = src[y0[start:stop]]
        row1 = src[y1[start:stop]]
        v00 = row0[:, x0].astype(np.float32)
        v10 = row0[:, x1].astype(np.float32)
        v01 = row1[:, x0].astype(np.float32)
        v11 = row1[:, x1].astype(np.float32)

        v0 = v00 + wx * (v10 - v00)
        v1 = v01 + wx * (v11 - v01)
        w = wy[start:stop, np.newaxis, np.newaxis]
        v = v0 + w * (v1 - v0)

        out[start:stop] = np.clip(round_half_away(v), 0, 255).astype(np.uint8)

    return _blocked(block)


_KERNELS = {
    ResizeMethod.NEAREST: _nearest_kernel,
    ResizeMethod.BILINEAR: _bilinear_kernel,
}


def resize(
    image: PixelBuffer,
    out_w: int,
    out_h: int,
    method: Union[str, ResizeMethod] = ResizeMethod.NEAREST,
    strategy: Strategy | None = None,
) -> PixelBuffer:
    """Resize ``image`` to ``out_w x out_h`` keeping its channel count.

    The input is never modified; a new buffer is returned once every
    output row has been written.
    """
    if not isinstance(image, PixelBuffer):
        raise InvalidArgumentError("resize: input must be a PixelBuffer")
    for name, v in (("out_w", out_w), ("out_h", out_h)):
        if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
            raise InvalidArgumentError(f"resize: {name} must be an integer, got {v!r}")
    if out_w <= 0 or out_h <= 0:
        raise InvalidArgumentError("resize: output size must be > 0")
    validate_channels(image.channels)
    method = ResizeMethod.parse(method)
    if strategy is None:
        strategy = Sequential()

    logger.debug(
        "resize %dx%dx%d -> %dx%d method=%s strategy=%r",
        image.width, image.height, image.channels, out_w, out_h, method.value, strategy,
    )

    out = np.empty((int(out_h), int(out_w), image.channels), dtype=np.uint8)
    kernel = _KERNELS[method](image.array, out)
    strategy.run(kernel, int(out_h))
    return PixelBuffer.publish(out)
