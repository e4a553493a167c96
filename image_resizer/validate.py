from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

from .buffer import PixelBuffer
from .errors import InvalidArgumentError, ValidationMismatchError
from .processing import Parallel, ResizeMethod, Sequential, resize


@dataclass(frozen=True)
class DiffStats:
    different_values: int
    max_abs_diff: int

    @property
    def identical(self) -> bool:
        return self.different_values == 0


def _abs_diff(a: PixelBuffer, b: PixelBuffer, caller: str) -> np.ndarray:
    if a.shape != b.shape:
        raise InvalidArgumentError(
            f"{caller}: size/channels mismatch {a.width}x{a.height}x{a.channels} "
            f"vs {b.width}x{b.height}x{b.channels}"
        )
    return np.abs(a.array.astype(np.int16) - b.array.astype(np.int16))


def compare_images(a: PixelBuffer, b: PixelBuffer) -> DiffStats:
    d = _abs_diff(a, b, "compare_images")
    return DiffStats(
        different_values=int(np.count_nonzero(d)),
        max_abs_diff=int(d.max()),
    )


def validate_backends(
    image: PixelBuffer,
    out_w: int,
    out_h: int,
    method: Union[str, ResizeMethod],
    threads: int = 0,
) -> DiffStats:
    """Resize with Sequential and Parallel(threads) and diff the two outputs."""
    out_seq = resize(image, out_w, out_h, method, Sequential())
    out_par = resize(image, out_w, out_h, method, Parallel(threads))
    return compare_images(out_seq, out_par)


def assert_equivalent(
    image: PixelBuffer,
    out_w: int,
    out_h: int,
    method: Union[str, ResizeMethod],
    threads: int = 0,
) -> DiffStats:
    stats = validate_backends(image, out_w, out_h, method, threads)
    if not stats.identical:
        raise ValidationMismatchError(stats)
    return stats
