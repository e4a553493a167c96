from __future__ import annotations


class ResizerError(Exception):
    """Base class for every failure raised by image_resizer."""


class InvalidArgumentError(ResizerError, ValueError):
    """Malformed dimensions, unsupported channel count or bad CLI value."""


class IOFailureError(ResizerError, OSError):
    """Codec decode/encode failure or CSV append failure."""


class ValidationMismatchError(ResizerError):
    """Sequential and parallel outputs differ."""

    def __init__(self, stats) -> None:
        self.stats = stats
        super().__init__(
            f"backend outputs differ: {stats.different_values} values, "
            f"max_abs_diff={stats.max_abs_diff}"
        )
