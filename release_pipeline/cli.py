"""CLI to build a distributable installer archive."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from . import __version__
from .build import run_pipeline
from .build_config import BuildConfig, check_log_level
from .errors import PipelineError
from .logger import setup_logging
from .runner import CommandRunner


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the release installer archive")
    parser.add_argument(
        "--platform",
        help="Platform to release (windows, linux); defaults to RELEASE_PLATFORM or windows",
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Project root containing Cargo.toml, ext/ and target/",
    )
    parser.add_argument(
        "--auto-extract",
        action="store_true",
        help="Try extracting the dependency archive with 7-Zip when it is missing",
    )
    parser.add_argument(
        "--lenient-artifacts",
        action="store_true",
        help="Archive the first installer by name instead of failing when several exist",
    )
    parser.add_argument("--log-level", help="Console log level (default INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None, runner: Optional[CommandRunner] = None) -> int:
    args = parse_args(argv)
    root = Path(args.root).resolve()

    try:
        config = BuildConfig.from_env(root)
        console_level = check_log_level(args.log_level) if args.log_level else config.log_level
    except ValueError as exc:
        logger.error("Invalid configuration: {}", exc)
        return 1

    if args.auto_extract:
        config.auto_extract = True
    if args.lenient_artifacts:
        config.strict_artifact_match = False

    setup_logging(console_level=console_level, log_directory=str(root / "logs"))

    try:
        run_pipeline(config, args.platform, runner)
    except PipelineError as exc:
        logger.error("Release failed during {}: {}", exc.stage, exc)
        return exc.exit_code
    except ValueError as exc:
        logger.error("{}", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
