"""
Pytest configuration and fixtures for the image_resizer test suite.
"""
import os
import sys

import numpy as np
import pytest

from image_resizer import PixelBuffer


def pytest_configure(config):
    """Make the repository root importable (pipeline.py lives there)."""
    package_root = os.path.dirname(os.path.dirname(__file__))
    if package_root not in sys.path:
        sys.path.insert(0, package_root)


def random_buffer(width, height, channels, seed=0):
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(height, width, channels), dtype=np.uint8)
    return PixelBuffer(arr)


@pytest.fixture
def make_buffer():
    """Factory for seeded random buffers: make_buffer(width, height, channels, seed=0)."""
    return random_buffer


@pytest.fixture
def gray_4x4():
    """4x4 single channel, values 0..15 row-major."""
    return PixelBuffer(np.arange(16, dtype=np.uint8).reshape(4, 4))


@pytest.fixture
def rgb_image():
    return random_buffer(37, 23, 3, seed=42)


@pytest.fixture
def rgba_image():
    return random_buffer(16, 11, 4, seed=7)


@pytest.fixture
def png_path(tmp_path, rgb_image):
    """An RGB PNG on disk, written with plain OpenCV."""
    import cv2

    path = tmp_path / "input.png"
    bgr = np.ascontiguousarray(rgb_image.array[:, :, ::-1])
    assert cv2.imwrite(str(path), bgr)
    return path
