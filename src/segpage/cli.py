"""Command-line entry point: ``segpage``.

Parses options into a ``SimulatorConfig``, builds the engine, and hands
it to one of the drivers.  Failures are mirrored to the log file
(``results.txt`` by default) as they happen; metrics and the memory
map are printed when the run ends.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from segpage.config import SimulatorConfig, build_engine
from segpage.drivers import (
    generate_stress,
    parse_policy,
    run_batch,
    run_interactive,
    run_stress,
)
from segpage.logging import Logger, LogLevel
from segpage.report import format_memory_map, format_metrics

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import TextIO

    from segpage.memory.engine import SegmentTable


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``segpage`` command."""
    parser = argparse.ArgumentParser(
        prog="segpage",
        description="Segmented, two-level paged virtual memory simulator.",
    )
    parser.add_argument("--frames", type=int, default=16, help="physical frames")
    parser.add_argument("--page-size", type=int, default=1000, help="bytes per page")
    parser.add_argument("--segments", type=int, default=3, help="number of segments")
    parser.add_argument("--dir-size", type=int, default=4, help="directory fan-out")
    parser.add_argument("--policy", default="fifo", help="replacement policy: fifo or lru")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--stress", type=int, metavar="N", help="run N synthetic requests")
    parser.add_argument(
        "--valid",
        type=float,
        default=0.7,
        help="fraction of in-range stress requests",
    )
    parser.add_argument("--batch", metavar="FILE", help="replay requests from FILE")
    parser.add_argument("--log", default="results.txt", help="failure log file")
    return parser


def config_from_args(args: argparse.Namespace) -> SimulatorConfig:
    """Build a ``SimulatorConfig`` from parsed arguments."""
    return SimulatorConfig(
        frames=args.frames,
        page_size=args.page_size,
        segments=args.segments,
        dir_size=args.dir_size,
        policy=parse_policy(args.policy),
        seed=args.seed,
        stress=args.stress,
        valid_ratio=args.valid,
        batch_file=args.batch,
        log_path=args.log,
    )


def _banner(config: SimulatorConfig, seed: int) -> str:
    return (
        "=== Segmented, Paged Memory Simulator ===\n"
        f"Frames={config.frames} PageSize={config.page_size} Segments={config.segments}"
        f" DirSize={config.dir_size} Policy={config.policy.upper()} Seed={seed}\n"
    )


def _summary(engine: SegmentTable, out: TextIO) -> None:
    print(format_metrics(engine.metrics, engine.pool.utilization()), file=out)
    print(format_memory_map(engine), file=out)


def run(config: SimulatorConfig, *, stdin: TextIO, out: TextIO) -> int:
    """Run one simulation described by *config*.

    Returns:
        The process exit status.

    """
    if config.batch_file is not None and not Path(config.batch_file).is_file():
        print(f"Batch file not found: {config.batch_file}", file=sys.stderr)
        return 1

    try:
        sink = Path(config.log_path).open("w", encoding="utf-8")  # noqa: SIM115
    except OSError as exc:
        print(f"Cannot open log file: {config.log_path} ({exc.strerror})", file=sys.stderr)
        return 1

    seed = config.resolved_seed()
    with sink:
        logger = Logger(sink=sink, sink_level=LogLevel.WARNING)
        engine = build_engine(config, seed=seed, logger=logger)
        print(_banner(config, seed), file=out)
        print(format_memory_map(engine), file=out)

        if config.batch_file is not None:
            print(f"Batch: {config.batch_file}", file=out)
            with Path(config.batch_file).open(encoding="utf-8") as batch:
                run_batch(engine, batch, out)
        elif config.stress is not None:
            print(f"Stress: N={config.stress} valid={config.valid_ratio}", file=out)
            requests = generate_stress(
                config.stress,
                segments=engine.segments,
                page_size=engine.page_size,
                valid_ratio=config.valid_ratio,
                seed=seed,
            )
            run_stress(engine, requests)
        else:
            try:
                run_interactive(engine, stdin, out)
            except KeyboardInterrupt:
                print("\nInterrupted.", file=out)

        _summary(engine, out)
    print(f"\n(Logged to {config.log_path})", file=out)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Parse *argv* and run the simulator.

    This is the ``segpage`` console entry point.
    """
    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as exc:
        print(f"segpage: {exc}", file=sys.stderr)
        return 1
    return run(config, stdin=sys.stdin, out=sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
