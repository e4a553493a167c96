from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import cv2

from .buffer import PixelBuffer, SUPPORTED_CHANNELS
from .errors import InvalidArgumentError, IOFailureError

if TYPE_CHECKING:
    from .config import ResizerConfig

logger = logging.getLogger(__name__)

JPEG_EXTS = {".jpg", ".jpeg"}

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
PNG_GRAY_ALPHA = 4


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def _to_rgb_order(img: np.ndarray) -> np.ndarray:
    if img.ndim == 2:
        return img
    if img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return img


def _from_rgb_order(img: np.ndarray) -> np.ndarray:
    if img.shape[2] == 1:
        return img[:, :, 0]
    if img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_RGB2BGR)
    return cv2.cvtColor(img, cv2.COLOR_RGBA2BGRA)


def _imread(path: str, flags: int) -> np.ndarray:
    img = cv2.imread(path, flags)
    if img is None:
        raise IOFailureError(f"Failed to load image: {path}")
    return img


def _is_gray_alpha_png(path: str) -> bool:
    # IMREAD_UNCHANGED expands gray+alpha to BGRA; the IHDR colour type still says 4
    with open(path, "rb") as fh:
        head = fh.read(26)
    return len(head) == 26 and head[:8] == PNG_SIGNATURE and head[25] == PNG_GRAY_ALPHA


def load_image(path: str | Path, requested_channels: int = 0) -> PixelBuffer:
    """Decode an image into an RGB(A)-ordered PixelBuffer.

    requested_channels: 0 keeps the native channel count, 1 forces grayscale,
    3 forces RGB, 4 forces RGBA. Native layouts the buffer cannot hold
    (2 channels, 16-bit depth) are decoded again as RGB.
    """
    if requested_channels not in (0,) + SUPPORTED_CHANNELS:
        raise InvalidArgumentError(
            f"requested_channels must be 0, 1, 3 or 4, got {requested_channels}"
        )
    path = str(path)
    if not Path(path).is_file():
        raise IOFailureError(f"Failed to load image: {path} (no such file)")

    if requested_channels == 1:
        img = _imread(path, cv2.IMREAD_GRAYSCALE)
    elif requested_channels == 3:
        img = _imread(path, cv2.IMREAD_COLOR)
    elif requested_channels == 4:
        img = _imread(path, cv2.IMREAD_UNCHANGED)
        if img.dtype != np.uint8:
            img = _imread(path, cv2.IMREAD_COLOR)
        if img.ndim == 2:
            img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGRA)
        elif img.shape[2] == 3:
            img = cv2.cvtColor(img, cv2.COLOR_BGR2BGRA)
        elif img.shape[2] != 4:
            img = cv2.cvtColor(_imread(path, cv2.IMREAD_COLOR), cv2.COLOR_BGR2BGRA)
    else:
        img = _imread(path, cv2.IMREAD_UNCHANGED)
        channels = 1 if img.ndim == 2 else img.shape[2]
        if channels == 4 and _is_gray_alpha_png(path):
            channels = 2
        if img.dtype != np.uint8 or channels not in SUPPORTED_CHANNELS:
            logger.debug("normalising %s (%s, %d channels) to RGB", path, img.dtype, channels)
            img = _imread(path, cv2.IMREAD_COLOR)

    return PixelBuffer(_to_rgb_order(img))


def _write(path: Path, img: np.ndarray, params: list) -> None:
    ensure_dir(path.parent)
    try:
        ok = cv2.imwrite(str(path), img, params)
    except cv2.error as e:
        raise IOFailureError(f"failed to write {path}: {e}") from e
    if not ok:
        raise IOFailureError(f"failed to write {path}")


def save_png(image: PixelBuffer, path: str | Path, compression_level: int = 3) -> None:
    level = min(max(int(compression_level), 0), 9)
    _write(Path(path), _from_rgb_order(image.array), [cv2.IMWRITE_PNG_COMPRESSION, level])


def save_jpg(image: PixelBuffer, path: str | Path, quality: int = 95) -> None:
    quality = min(max(int(quality), 1), 100)
    arr = image.array
    if image.channels == 4:
        # JPEG has no alpha
        arr = np.ascontiguousarray(arr[:, :, :3])
    _write(Path(path), _from_rgb_order(arr), [cv2.IMWRITE_JPEG_QUALITY, quality])


def save_image(image: PixelBuffer, path: str | Path, config: "ResizerConfig") -> None:
    """Write PNG, or JPEG when the suffix is .jpg/.jpeg."""
    p = Path(path)
    if p.suffix.lower() in JPEG_EXTS:
        save_jpg(image, p, config.jpg_quality)
    else:
        save_png(image, p, config.png_compression)
    logger.debug("wrote %s (%dx%dx%d)", p, image.width, image.height, image.channels)
