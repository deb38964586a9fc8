"""Centralized logging configuration using Loguru."""

from __future__ import annotations

import pathlib
import sys
from typing import Any, Optional

from loguru import logger


def setup_logging(
    *,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_directory: Optional[str] = "logs",
    log_filename: str = "release_pipeline.log",
) -> None:
    """Configure release logging sinks.

    Parameters
    ----------
    console_level:
        Minimum log level for console output.
    file_level:
        Minimum log level for file output.
    log_directory:
        Relative or absolute path where the log file should be stored. ``None``
        disables the file sink.
    log_filename:
        Name of the file that captures structured log output.

    Console output goes to stderr so that it interleaves with the diagnostics
    of the toolchains the pipeline runs. Existing handlers are removed to avoid
    duplicate entries when reconfiguring.
    """

    logger.remove()

    logger.add(
        sys.stderr,
        level=console_level.upper(),
        backtrace=False,
        diagnose=False,
        colorize=True,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )

    if log_directory is None:
        return

    log_path = pathlib.Path(log_directory).expanduser().resolve()
    log_path.mkdir(parents=True, exist_ok=True)
    file_path = log_path / log_filename

    logger.add(
        file_path,
        level=file_level.upper(),
        backtrace=False,
        diagnose=False,
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        serialize=True,
    )

    logger.bind(
        console_level=console_level,
        file_level=file_level,
        log_file=str(file_path),
    ).debug("Logging configured")


def log_stage_event(stage: str, event: str, **metadata: Any) -> None:
    """Emit a structured log entry for a pipeline stage transition.

    Parameters
    ----------
    stage:
        Stage name, e.g. ``"build"``.
    event:
        ``"started"``, ``"finished"`` or ``"failed"``.
    **metadata:
        Extra context such as ``platform`` or ``duration``.
    """

    logger.bind(stage=stage, event=event, **metadata).debug("stage_event")


__all__ = ["setup_logging", "log_stage_event"]
