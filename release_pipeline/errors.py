"""Failures that halt the release pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class PipelineError(RuntimeError):
    """Base class for stage failures; carries the process exit code."""

    exit_code = 1

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage


class MissingDependencyError(PipelineError):
    exit_code = 2

    def __init__(self, archive_path: Path, extracted_dir: Path, reason: str | None = None) -> None:
        message = (
            f"Dependency directory {extracted_dir} does not exist. "
            f"Extract {archive_path} into {extracted_dir.parent} so that {extracted_dir} "
            "is created, then re-run the release build."
        )
        if reason:
            message = f"{reason}. {message}"
        super().__init__("materialize", message)
        self.archive_path = archive_path
        self.extracted_dir = extracted_dir


class BuildFailureError(PipelineError):
    exit_code = 3

    def __init__(self, command: Sequence[str], returncode: int) -> None:
        super().__init__("build", f"Build command {' '.join(command)} exited with status {returncode}")
        self.command = list(command)
        self.returncode = returncode


class PackagingFailureError(PipelineError):
    exit_code = 4

    def __init__(self, command: Sequence[str], returncode: int) -> None:
        super().__init__("package", f"Installer command {' '.join(command)} exited with status {returncode}")
        self.command = list(command)
        self.returncode = returncode


class ArtifactNotFoundError(PipelineError):
    exit_code = 5

    def __init__(self, output_dir: Path, pattern: str, message: str | None = None) -> None:
        super().__init__(
            "archive",
            message or f"failed to find the generated installer file ({pattern}) in {output_dir}",
        )
        self.output_dir = output_dir
        self.pattern = pattern


class AmbiguousArtifactError(ArtifactNotFoundError):
    """Raised when more than one installer matches and strict matching is on."""

    def __init__(self, output_dir: Path, pattern: str, candidates: Sequence[Path]) -> None:
        names = ", ".join(path.name for path in candidates)
        super().__init__(
            output_dir,
            pattern,
            f"found {len(candidates)} installer files matching {pattern} in {output_dir}: {names}",
        )
        self.candidates = list(candidates)


__all__ = [
    "PipelineError",
    "MissingDependencyError",
    "BuildFailureError",
    "PackagingFailureError",
    "ArtifactNotFoundError",
    "AmbiguousArtifactError",
]
