"""
Command-line front end for image_resizer.

Subcommands:
- run       resize one image and write it (PNG, or JPEG for .jpg/.jpeg)
- bench     time one configuration and append a CSV row
- validate  check that the sequential and parallel backends agree
- benchset  time a geometric sweep of output sizes, one CSV row per size
- attack    down-sample then up-sample and report the distortion
- protocol  fixed, reproducible experiment (validation + sweep of both backends)

Examples:
  python pipeline.py run lena.png out.png 1920 1080 bilinear parallel 12
  python pipeline.py bench lena.png 3840 2160 bilinear parallel 12 2 10 results.csv
  python pipeline.py validate lena.png 1024 1024 bilinear 12
  python pipeline.py benchset lena.png 512 512 6 1.5 bilinear parallel 12 2 10 sweep.csv
  python pipeline.py attack lena.png 128 128 nearest bilinear seq
  python pipeline.py --config settings.json protocol

Exit codes: 0 ok, 1 usage or runtime error, 2 protocol input missing,
3 sequential/parallel mismatch.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from image_resizer import (
    BENCH_HEADER,
    SWEEP_HEADER,
    InvalidArgumentError,
    ResizeMethod,
    ResizerConfig,
    Sequential,
    Parallel,
    append_csv_row,
    down_up_metrics,
    format_csv_row,
    load_image,
    measure,
    parse_backend,
    resize,
    save_image,
    size_sweep,
    validate_backends,
)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MISSING_INPUT = 2
EXIT_MISMATCH = 3

logger = logging.getLogger("image_resizer.pipeline")


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        raise InvalidArgumentError(message)


def resize_method(text: str) -> ResizeMethod:
    return ResizeMethod.parse(text)


def _threads(args: argparse.Namespace, config: ResizerConfig) -> int:
    return config.threads if args.threads is None else args.threads


def _pick(value, default):
    return default if value is None else value


# ---------------------------------------------
# Subcommands
# ---------------------------------------------

def cmd_run(args: argparse.Namespace, config: ResizerConfig) -> int:
    img = load_image(args.input, 0)
    strategy = parse_backend(args.backend, _threads(args, config))
    out = resize(img, args.out_w, args.out_h, args.method, strategy)
    save_image(out, args.output, config)
    print(f"OK: wrote {args.output} ({out.width}x{out.height}x{out.channels})")
    return EXIT_OK


def cmd_bench(args: argparse.Namespace, config: ResizerConfig) -> int:
    img = load_image(args.input, 0)
    strategy = parse_backend(args.backend, _threads(args, config))
    warmup = _pick(args.warmup, config.warmup_runs)
    runs = _pick(args.runs, config.measured_runs)
    csv_path = _pick(args.csv, config.csv_path)

    r = measure(img, args.out_w, args.out_h, args.method, strategy,
                warmup, runs, config.inner_reps)

    print("Benchmark results:")
    print(f"  runs   = {r.runs}")
    print(f"  mean   = {r.mean_ms:.4f} ms")
    print(f"  stddev = {r.stddev_ms:.4f} ms")
    print(f"  min    = {r.min_ms:.4f} ms")
    print(f"  max    = {r.max_ms:.4f} ms")

    row = format_csv_row([strategy.name, args.out_w, args.out_h, img.channels,
                          config.inner_reps, *r.as_row()])
    append_csv_row(csv_path, BENCH_HEADER, row)
    return EXIT_OK


def cmd_validate(args: argparse.Namespace, config: ResizerConfig) -> int:
    img = load_image(args.input, 0)
    threads = _threads(args, config)
    d = validate_backends(img, args.out_w, args.out_h, args.method, threads)

    print("VALIDATE")
    print(f"  input             = {args.input}")
    print(f"  out_w,out_h       = {args.out_w},{args.out_h}")
    print(f"  method            = {args.method.value}")
    print(f"  parallel_threads  = {threads}")
    print(f"  different_values  = {d.different_values}")
    print(f"  max_abs_diff      = {d.max_abs_diff}")
    return EXIT_OK if d.identical else EXIT_MISMATCH


def cmd_benchset(args: argparse.Namespace, config: ResizerConfig) -> int:
    # validate the sweep before touching the image or the CSV
    sizes = size_sweep(args.base_w, args.base_h, args.steps, args.scale)
    img = load_image(args.input, 0)
    threads = _threads(args, config)
    strategy = parse_backend(args.backend, threads)
    warmup = _pick(args.warmup, config.warmup_runs)
    runs = _pick(args.runs, config.measured_runs)
    csv_path = _pick(args.csv, config.csv_path)

    for i, (w, h) in enumerate(sizes, start=1):
        r = measure(img, w, h, args.method, strategy, warmup, runs, config.inner_reps)
        print(f"[STEP {i}/{len(sizes)}] size = {w}x{h}  mean = {r.mean_ms:.4f} ms")
        row = format_csv_row([
            Path(args.input).name, args.method.value, strategy.name, threads,
            warmup, runs, w, h, img.channels, config.inner_reps, *r.as_row(),
        ])
        append_csv_row(csv_path, SWEEP_HEADER, row)
    print(f"Done. {len(sizes)} rows appended to {csv_path}")
    return EXIT_OK


def cmd_attack(args: argparse.Namespace, config: ResizerConfig) -> int:
    img = load_image(args.input, 0)
    strategy = parse_backend(args.backend, _threads(args, config))
    m = down_up_metrics(img, args.down_w, args.down_h,
                        args.down_method, args.up_method, strategy)

    print("DOWN/UP")
    print(f"  input        = {args.input} ({img.width}x{img.height}x{img.channels})")
    print(f"  down         = {args.down_w}x{args.down_h} {args.down_method.value}")
    print(f"  up           = {img.width}x{img.height} {args.up_method.value}")
    print(f"  mae          = {m.mae:.6f}")
    print(f"  rmse         = {m.rmse:.6f}")
    print(f"  psnr         = {m.psnr:.4f} dB")
    print(f"  max_abs_diff = {m.max_abs_diff}")
    return EXIT_OK


def cmd_protocol(args: argparse.Namespace, config: ResizerConfig) -> int:
    inp = Path(config.protocol_input)
    if not inp.is_file():
        print("ERROR: default test image not found.", file=sys.stderr)
        print(f"Expected: {inp.resolve()}", file=sys.stderr)
        return EXIT_MISSING_INPUT

    method = ResizeMethod.BILINEAR
    threads = config.protocol_threads
    inner_reps = config.protocol_inner_reps
    img = load_image(inp, 0)

    print("\n=== VALIDATION TEST ===")
    size = config.protocol_validate_size
    d = validate_backends(img, size, size, method, threads)
    print(f"different_values = {d.different_values}")
    print(f"max_abs_diff     = {d.max_abs_diff}")
    if not d.identical:
        print("VALIDATION FAILED", file=sys.stderr)
        return EXIT_MISMATCH
    print("VALIDATION PASSED")

    print("\n=== BENCHMARK SWEEP ===")
    sizes = size_sweep(config.protocol_base_size, config.protocol_base_size,
                       config.protocol_steps, config.protocol_scale)
    backends = [(Sequential(), "bench_seq.csv"), (Parallel(threads), "bench_par.csv")]

    for i, (w, h) in enumerate(sizes, start=1):
        print(f"\n[STEP {i}/{len(sizes)}] size = {w}x{h}")
        for strategy, csv_path in backends:
            r = measure(img, w, h, method, strategy,
                        config.protocol_warmup, config.protocol_runs, inner_reps)
            print(f"  {strategy.name:<8}: mean = {r.mean_ms:.4f} ms")
            row = format_csv_row([strategy.name, w, h, img.channels, inner_reps, *r.as_row()])
            append_csv_row(csv_path, BENCH_HEADER, row)

    print("\nEXPERIMENT COMPLETED")
    print("CSV files generated: " + ", ".join(p for _, p in backends))
    return EXIT_OK


# ---------------------------------------------
# CLI
# ---------------------------------------------

def build_arg_parser() -> argparse.ArgumentParser:
    p = _Parser(
        prog="pipeline.py",
        description="Nearest/bilinear image resizing with sequential and parallel backends",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--config", default=None, help="JSON file overriding the default settings")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command")

    method = dict(type=resize_method, help="nearest|bilinear")
    backend = dict(help="seq|parallel")
    threads = dict(type=int, nargs="?", default=None, help="Worker threads (0 = all cores)")
    warmup = dict(type=int, nargs="?", default=None, help="Warmup runs")
    runs = dict(type=int, nargs="?", default=None, help="Measured runs")
    csv = dict(nargs="?", default=None, help="CSV file to append to")

    s = sub.add_parser("run", help="Resize one image and write it")
    s.add_argument("input")
    s.add_argument("output")
    s.add_argument("out_w", type=int)
    s.add_argument("out_h", type=int)
    s.add_argument("method", **method)
    s.add_argument("backend", **backend)
    s.add_argument("threads", **threads)
    s.set_defaults(func=cmd_run)

    s = sub.add_parser("bench", help="Benchmark one configuration")
    s.add_argument("input")
    s.add_argument("out_w", type=int)
    s.add_argument("out_h", type=int)
    s.add_argument("method", **method)
    s.add_argument("backend", **backend)
    s.add_argument("threads", **threads)
    s.add_argument("warmup", **warmup)
    s.add_argument("runs", **runs)
    s.add_argument("csv", **csv)
    s.set_defaults(func=cmd_bench)

    s = sub.add_parser("validate", help="Compare sequential and parallel outputs")
    s.add_argument("input")
    s.add_argument("out_w", type=int)
    s.add_argument("out_h", type=int)
    s.add_argument("method", **method)
    s.add_argument("threads", **threads)
    s.set_defaults(func=cmd_validate)

    s = sub.add_parser("benchset", help="Benchmark a geometric sweep of output sizes")
    s.add_argument("input")
    s.add_argument("base_w", type=int)
    s.add_argument("base_h", type=int)
    s.add_argument("steps", type=int)
    s.add_argument("scale", type=float)
    s.add_argument("method", **method)
    s.add_argument("backend", **backend)
    s.add_argument("threads", **threads)
    s.add_argument("warmup", **warmup)
    s.add_argument("runs", **runs)
    s.add_argument("csv", **csv)
    s.set_defaults(func=cmd_benchset)

    s = sub.add_parser("attack", help="Down-sample, up-sample back and measure distortion")
    s.add_argument("input")
    s.add_argument("down_w", type=int)
    s.add_argument("down_h", type=int)
    s.add_argument("down_method", **method)
    s.add_argument("up_method", **method)
    s.add_argument("backend", **backend)
    s.add_argument("threads", **threads)
    s.set_defaults(func=cmd_attack)

    s = sub.add_parser("protocol", help="Fixed validation + benchmark sweep experiment")
    s.set_defaults(func=cmd_protocol)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    try:
        args = parser.parse_args(argv)
    except InvalidArgumentError as e:
        parser.print_usage(sys.stderr)
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.command is None:
        parser.print_help(sys.stderr)
        return EXIT_ERROR

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ResizerConfig.from_json(args.config) if args.config else ResizerConfig()
        logger.debug("command=%s config=%s", args.command, config)
        return args.func(args, config)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
