"""Down/up round-trip distortion (scaling-attack analysis).

An image is shrunk, enlarged back to its own size and compared with the
original: MAE, RMSE, PSNR and the largest per-value error.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from .buffer import PixelBuffer
from .errors import InvalidArgumentError
from .processing import ResizeMethod, Strategy, resize

PEAK = 255.0


@dataclass(frozen=True)
class AttackMetrics:
    mae: float
    rmse: float
    psnr: float  # dB, +inf when the images are identical
    max_abs_diff: int


def diff_metrics(a: PixelBuffer, b: PixelBuffer) -> AttackMetrics:
    if a.shape != b.shape:
        raise InvalidArgumentError("diff_metrics: image sizes/channels must match")

    d = a.array.astype(np.float64) - b.array.astype(np.float64)
    ad = np.abs(d)
    mae = float(ad.mean())
    mse = float(np.mean(d * d))
    rmse = math.sqrt(mse)
    if mse == 0.0:
        psnr = math.inf
    else:
        psnr = 20.0 * math.log10(PEAK) - 10.0 * math.log10(mse)
    return AttackMetrics(mae=mae, rmse=rmse, psnr=psnr, max_abs_diff=int(ad.max()))


def down_up_metrics(
    source: PixelBuffer,
    down_w: int,
    down_h: int,
    down_method: Union[str, ResizeMethod],
    up_method: Union[str, ResizeMethod],
    strategy: Strategy | None = None,
) -> AttackMetrics:
    if not isinstance(source, PixelBuffer):
        raise InvalidArgumentError("down_up_metrics: source must be a PixelBuffer")
    if down_w <= 0 or down_h <= 0:
        raise InvalidArgumentError("down_up_metrics: invalid downscale size")

    down = resize(source, down_w, down_h, down_method, strategy)
    up = resize(down, source.width, source.height, up_method, strategy)
    return diff_metrics(source, up)
