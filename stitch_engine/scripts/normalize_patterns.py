#!/usr/bin/env python3
"""
Normalize Patterns Script.

Load pattern documents, run the configured rewrite passes and write the
normalized documents to an output directory.

Usage:
    python -m stitch_engine.scripts.normalize_patterns rose.yaml
    python -m stitch_engine.scripts.normalize_patterns designs/ -o out/ --workers 4
    python -m stitch_engine.scripts.normalize_patterns rose.yaml --passes interpolate_trim stable
    python -m stitch_engine.scripts.normalize_patterns rose.yaml --format json --jumps-to-trim 5

Available passes:
    interpolate_trim, merge_jumps, stable
"""

from __future__ import annotations

import argparse
import logging
import sys
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from src.utils.logging_config import (
    install_excepthook,
    pop_context,
    push_context,
    setup_logging,
)
from stitch_engine.configs.loader import (
    KNOWN_PASSES,
    OUTPUT_FORMATS,
    ConfigError,
    EngineConfig,
    LoggingConfig,
    load_config,
)
from stitch_engine.pattern.rewrite import normalize_pattern
from stitch_engine.records import pattern_from_file, write_pattern_file

logger = logging.getLogger(__name__)

PATTERN_SUFFIXES = (".yaml", ".yml", ".json")


@dataclass(frozen=True)
class FileResult:
    """Outcome of normalizing one input file."""

    source: Path
    output: Path | None
    stitches_in: int = 0
    stitches_out: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def collect_inputs(paths: Iterable[str | Path]) -> list[Path]:
    """Expand files and directories into a sorted, de-duplicated file list.

    Raises
    ------
    FileNotFoundError
        If an input path does not exist.
    """
    found: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found.extend(
                sorted(
                    child
                    for child in path.iterdir()
                    if child.is_file() and child.suffix.lower() in PATTERN_SUFFIXES
                )
            )
        elif path.is_file():
            found.append(path)
        else:
            raise FileNotFoundError(f"Input not found: {path}")

    unique: list[Path] = []
    for path in found:
        if path not in unique:
            unique.append(path)
    return unique


def normalize_file(source: Path, out_dir: Path, config: EngineConfig) -> FileResult:
    """Normalize one file; failures are logged and reported, not raised."""
    push_context(pattern=source.name)
    try:
        pattern = pattern_from_file(source)
        result = normalize_pattern(pattern, config.normalize, config.rewrite)
        target = out_dir / (source.stem + config.output.suffix)
        write_pattern_file(result, target, fmt=config.output.format)
        logger.info(
            "Wrote %s (%d -> %d stitches, %d threads)",
            target,
            len(pattern.stitches),
            len(result.stitches),
            len(result.threads),
        )
        return FileResult(
            source=source,
            output=target,
            stitches_in=len(pattern.stitches),
            stitches_out=len(result.stitches),
        )
    except Exception as e:
        logger.exception("Failed to normalize %s", source)
        return FileResult(source=source, output=None, error=str(e))
    finally:
        pop_context(["pattern"])


def _init_worker(log_cfg: LoggingConfig) -> None:
    setup_logging(
        log_cfg.level,
        log_cfg.file,
        json=log_cfg.json,
        color=log_cfg.color,
        context={"app": "normalize"},
    )


def run(
    inputs: Sequence[Path], out_dir: Path, config: EngineConfig, workers: int = 1
) -> list[FileResult]:
    """Normalize every input, in worker processes when ``workers > 1``."""
    if workers <= 1 or len(inputs) <= 1:
        return [normalize_file(source, out_dir, config) for source in inputs]

    with ProcessPoolExecutor(
        max_workers=workers,
        initializer=_init_worker,
        initargs=(config.logging,),
    ) as pool:
        futures = [
            pool.submit(normalize_file, source, out_dir, config) for source in inputs
        ]
        return [future.result() for future in futures]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Normalize embroidery pattern documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Available passes: {', '.join(KNOWN_PASSES)}",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Pattern files (.yaml/.yml/.json) or directories",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="normalized",
        help="Output directory (default: ./normalized)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path",
    )

    # Overrides
    parser.add_argument(
        "--passes",
        nargs="*",
        choices=list(KNOWN_PASSES),
        help="Rewrite passes to run, in order (empty for none)",
    )
    parser.add_argument(
        "--jumps-to-trim",
        type=int,
        help="Jump run length that earns a TRIM",
    )
    parser.add_argument(
        "--format",
        choices=list(OUTPUT_FORMATS),
        help="Output document format",
    )
    parser.add_argument(
        "--workers",
        "-j",
        type=int,
        default=1,
        help="Worker processes (default: 1)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Log level override (DEBUG, INFO, ...)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Load config
    try:
        config = load_config(args.config).with_overrides(
            passes=tuple(args.passes) if args.passes is not None else None,
            jumps_required_to_trim=args.jumps_to_trim,
            output_format=args.format,
            log_level=args.log_level,
        )
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 2

    _init_worker(config.logging)
    install_excepthook()

    try:
        inputs = collect_inputs(args.inputs)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 2

    if not inputs:
        logger.warning("No pattern files found in %s", args.inputs)
        return 0

    out_dir = Path(args.output)
    logger.info(
        "Normalizing %d file(s) -> %s (passes: %s)",
        len(inputs),
        out_dir,
        ", ".join(config.normalize.passes) or "none",
    )

    results = run(inputs, out_dir, config, workers=args.workers)

    failed = [result for result in results if not result.ok]
    logger.info(
        "Done: %d succeeded, %d failed", len(results) - len(failed), len(failed)
    )
    for result in failed:
        logger.error("  %s: %s", result.source, result.error)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
