from __future__ import annotations

from typing import Tuple

import numpy as np

from .errors import InvalidArgumentError


SUPPORTED_CHANNELS = (1, 3, 4)


def validate_channels(channels: int) -> None:
    if channels not in SUPPORTED_CHANNELS:
        raise InvalidArgumentError(f"channels must be 1, 3 or 4, got {channels}")


class PixelBuffer:
    """Immutable 8-bit image, row-major and channel-interleaved.

    The pixels live in a read-only ``uint8`` array of shape
    ``(height, width, channels)``. A 2-D array is accepted as a
    single-channel image.
    """

    __slots__ = ("_data",)

    def __init__(self, array: np.ndarray) -> None:
        if not isinstance(array, np.ndarray):
            raise InvalidArgumentError("PixelBuffer expects a numpy array")
        if array.dtype != np.uint8:
            raise InvalidArgumentError(f"PixelBuffer expects uint8 pixels, got {array.dtype}")
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3:
            raise InvalidArgumentError(f"PixelBuffer expects a 2-D or 3-D array, got {array.ndim}-D")

        height, width, channels = array.shape
        if width <= 0 or height <= 0:
            raise InvalidArgumentError("PixelBuffer: width/height must be > 0")
        validate_channels(channels)

        data = np.ascontiguousarray(array)
        if data is array:
            data = array.copy()
        data.flags.writeable = False
        self._data = data

    @classmethod
    def publish(cls, array: np.ndarray) -> "PixelBuffer":
        """Wrap a fully written array without copying it, then freeze it."""
        if array.dtype != np.uint8 or array.ndim != 3 or not array.flags.c_contiguous:
            return cls(array)
        validate_channels(array.shape[2])
        if array.shape[0] <= 0 or array.shape[1] <= 0:
            raise InvalidArgumentError("PixelBuffer: width/height must be > 0")
        array.flags.writeable = False
        obj = cls.__new__(cls)
        obj._data = array
        return obj

    @classmethod
    def from_bytes(cls, width: int, height: int, channels: int, data: bytes) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise InvalidArgumentError("PixelBuffer: width/height must be > 0")
        validate_channels(channels)
        expected = width * height * channels
        if len(data) != expected:
            raise InvalidArgumentError(
                f"PixelBuffer: expected {expected} bytes for {width}x{height}x{channels}, got {len(data)}"
            )
        arr = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, channels)
        return cls(arr)

    @classmethod
    def filled(cls, width: int, height: int, channels: int, value: int = 0) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise InvalidArgumentError("PixelBuffer: width/height must be > 0")
        validate_channels(channels)
        return cls.publish(np.full((height, width, channels), value, dtype=np.uint8))

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def channels(self) -> int:
        return self._data.shape[2]

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.width, self.height, self.channels)

    @property
    def size_bytes(self) -> int:
        return self._data.size

    @property
    def array(self) -> np.ndarray:
        """Read-only ``(height, width, channels)`` view of the pixels."""
        return self._data

    def tobytes(self) -> bytes:
        return self._data.tobytes()

    def _check_xy(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise InvalidArgumentError(
                f"pixel ({x}, {y}) out of bounds for {self.width}x{self.height}"
            )

    def row(self, y: int) -> np.ndarray:
        if not 0 <= y < self.height:
            raise InvalidArgumentError(f"row {y} out of bounds for height {self.height}")
        return self._data[y]

    def pixel(self, x: int, y: int) -> Tuple[int, ...]:
        self._check_xy(x, y)
        return tuple(int(v) for v in self._data[y, x])

    def at(self, x: int, y: int, c: int) -> int:
        self._check_xy(x, y)
        if not 0 <= c < self.channels:
            raise InvalidArgumentError(f"channel {c} out of bounds for {self.channels} channels")
        return int(self._data[y, x, c])

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self._data, other._data)

    __hash__ = None

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}x{self.channels})"
