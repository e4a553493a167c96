from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidArgumentError, IOFailureError


@dataclass(frozen=True)
class ResizerConfig:
    """Run settings threaded through the CLI entry points.

    threads=0 lets the parallel backend pick its own worker count.
    The ``protocol_*`` fields drive the fixed, reproducible experiment
    (validation followed by a size sweep of both backends).
    """

    threads: int = 0
    warmup_runs: int = 2
    measured_runs: int = 10
    inner_reps: int = 1

    png_compression: int = 3  # 0..9
    jpg_quality: int = 95  # 1..100

    csv_path: str = "benchmark_results.csv"

    protocol_input: str = "test_1.png"
    protocol_threads: int = 12
    protocol_inner_reps: int = 10
    protocol_validate_size: int = 896
    protocol_base_size: int = 512
    protocol_steps: int = 6
    protocol_scale: float = 1.5
    protocol_warmup: int = 2
    protocol_runs: int = 20

    def replace(self, **changes) -> "ResizerConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_json(cls, path: str | Path) -> "ResizerConfig":
        p = Path(path)
        try:
            with p.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise IOFailureError(f"cannot read config {p}: {e}") from e
        except json.JSONDecodeError as e:
            raise InvalidArgumentError(f"invalid JSON in config {p}: {e}") from e

        if not isinstance(data, dict):
            raise InvalidArgumentError(f"config {p} must contain a JSON object")

        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidArgumentError(f"unknown config keys: {', '.join(unknown)}")
        return cls(**data)
