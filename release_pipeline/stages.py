"""The five release stages: reset, materialize, build, package and archive."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional
from zipfile import ZIP_DEFLATED, ZipFile

from loguru import logger

from .build_config import BuildTarget, DependencyBundle, PlatformConfig
from .errors import (
    AmbiguousArtifactError,
    ArtifactNotFoundError,
    BuildFailureError,
    MissingDependencyError,
    PackagingFailureError,
)
from .runner import CommandResult, CommandRunner


SEVEN_ZIP_TOOLS = ("7z", "7za", "7zr")


def reset_workspace(output_dir: Path, root: Path) -> bool:
    """Delete ``output_dir`` if it exists. Returns ``True`` when something was removed."""

    resolved = output_dir.resolve()
    resolved_root = root.resolve()
    if resolved == resolved_root or not resolved.is_relative_to(resolved_root):
        msg = f"Refusing to reset {output_dir}: not inside project root {root}"
        raise ValueError(msg)

    if not output_dir.exists():
        logger.debug("Nothing to reset at {}", output_dir)
        return False

    logger.info("Removing stale build output {}", output_dir)
    shutil.rmtree(output_dir)
    return True


def materialize_dependency(
    bundle: Optional[DependencyBundle],
    runner: CommandRunner,
    auto_extract: bool = False,
) -> None:
    """Make sure the extracted dependency directory exists before the build.

    Without ``auto_extract`` a missing directory halts the pipeline with
    instructions for extracting the archive by hand. With it, a 7-Zip
    executable found on PATH is tried once; any failure removes what it left
    behind and halts the same way.
    """

    if bundle is None:
        logger.debug("Platform has no bundled dependency")
        return

    if bundle.extracted_dir.is_dir():
        logger.info("Dependency present at {}", bundle.extracted_dir)
        return

    if not auto_extract:
        raise MissingDependencyError(bundle.archive_path, bundle.extracted_dir)

    _extract_bundle(bundle, runner)


def _extract_bundle(bundle: DependencyBundle, runner: CommandRunner) -> None:
    tool = next((name for name in SEVEN_ZIP_TOOLS if shutil.which(name)), None)
    if tool is None:
        raise MissingDependencyError(
            bundle.archive_path,
            bundle.extracted_dir,
            reason=f"Automatic extraction needs one of {', '.join(SEVEN_ZIP_TOOLS)} on PATH",
        )
    if not bundle.archive_path.is_file():
        raise MissingDependencyError(
            bundle.archive_path,
            bundle.extracted_dir,
            reason=f"Archive {bundle.archive_path} not found",
        )
    if bundle.extracted_dir.exists():
        raise MissingDependencyError(
            bundle.archive_path,
            bundle.extracted_dir,
            reason=f"{bundle.extracted_dir} exists but is not a directory; remove it first",
        )

    logger.info("Extracting {} with {}", bundle.archive_path, tool)
    result = runner.run(
        tool,
        ["x", "-y", f"-o{bundle.archive_path.parent}", str(bundle.archive_path)],
    )
    if result.ok and bundle.extracted_dir.is_dir():
        logger.info("Extracted dependency into {}", bundle.extracted_dir)
        return

    if bundle.extracted_dir.is_dir():
        shutil.rmtree(bundle.extracted_dir)
    if result.ok:
        reason = f"{tool} finished but did not create {bundle.extracted_dir}"
    else:
        reason = f"{tool} exited with status {result.returncode}"
    raise MissingDependencyError(bundle.archive_path, bundle.extracted_dir, reason=reason)


def invoke_build(
    target: BuildTarget,
    runner: CommandRunner,
    cargo: str = "cargo",
    cwd: Optional[Path] = None,
) -> CommandResult:
    logger.info("Building release binary with feature {}", target.feature)
    result = runner.run(cargo, ["build", "--release", "--features", target.feature], cwd=cwd)
    if not result.ok:
        raise BuildFailureError(result.command, result.returncode)
    if not target.binary_path.exists():
        logger.warning("Build succeeded but {} was not found", target.binary_path)
    return result


def package_installer(
    platform: PlatformConfig,
    runner: CommandRunner,
    cargo: str = "cargo",
    cwd: Optional[Path] = None,
) -> CommandResult:
    logger.info("Packaging {} installer from {}", platform.name, platform.manifest.path)
    result = runner.run(cargo, platform.installer_command(), cwd=cwd)
    if not result.ok:
        raise PackagingFailureError(result.command, result.returncode)
    return result


def find_installer(output_dir: Path, extension: str, strict: bool = True) -> Path:
    """Locate the single installer produced in ``output_dir``.

    Candidates are considered in sorted file-name order. When ``strict`` is
    off and several match, the first one wins.
    """

    pattern = f"*.{extension}"
    candidates = sorted(path for path in output_dir.glob(pattern) if path.is_file()) if output_dir.is_dir() else []
    if not candidates:
        raise ArtifactNotFoundError(output_dir, pattern)
    if len(candidates) > 1:
        if strict:
            raise AmbiguousArtifactError(output_dir, pattern, candidates)
        logger.warning(
            "Found {} installers in {}; using {}",
            len(candidates),
            output_dir,
            candidates[0].name,
        )
    return candidates[0]


def archive_installer(installer: Path, archive_path: Path) -> Path:
    """Zip ``installer`` into ``archive_path``, replacing any previous archive."""

    archive_path.parent.mkdir(parents=True, exist_ok=True)
    partial = archive_path.with_name(f"{archive_path.name}.partial")
    try:
        with ZipFile(partial, "w", compression=ZIP_DEFLATED) as archive:
            archive.write(installer, arcname=installer.name)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    partial.replace(archive_path)
    logger.success("Created distributable archive {}", archive_path)
    return archive_path


__all__ = [
    "reset_workspace",
    "materialize_dependency",
    "invoke_build",
    "package_installer",
    "find_installer",
    "archive_installer",
]
