"""Release orchestration: reset, materialize, build, package, archive."""

from __future__ import annotations

import hashlib
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, TypeVar

from loguru import logger

from .build_config import BuildConfig, PlatformConfig
from .errors import PipelineError
from .logger import log_stage_event
from .runner import CommandRunner, SubprocessRunner, check_prerequisites
from .stages import (
    archive_installer,
    find_installer,
    invoke_build,
    materialize_dependency,
    package_installer,
    reset_workspace,
)


T = TypeVar("T")


@dataclass(slots=True)
class PipelineResult:
    platform: str
    installer: Path
    archive: Path
    manifest: Path
    durations: Dict[str, float] = field(default_factory=dict)


def run_pipeline(
    config: BuildConfig,
    platform_key: Optional[str] = None,
    runner: Optional[CommandRunner] = None,
) -> PipelineResult:
    """Run every stage for one platform, stopping at the first failure."""

    key = platform_key or config.default_platform
    platform = config.platform(key)
    runner = runner or SubprocessRunner()
    durations: Dict[str, float] = {}
    logger.info("Starting {} release of {}", platform.name, config.app_name)

    missing = check_prerequisites([config.cargo])
    if missing:
        logger.warning("Missing tools on PATH: {}", ", ".join(missing))

    def stage(name: str, action: Callable[[], T]) -> T:
        return _run_stage(key, name, action, durations)

    stage("reset", lambda: reset_workspace(platform.output_dir, config.base_dir))
    stage("materialize", lambda: materialize_dependency(platform.dependency, runner, config.auto_extract))
    stage("build", lambda: invoke_build(platform.target, runner, config.cargo, config.base_dir))
    stage("package", lambda: package_installer(platform, runner, config.cargo, config.base_dir))

    def archive_stage() -> tuple[Path, Path]:
        found = find_installer(platform.output_dir, platform.installer_extension, config.strict_artifact_match)
        return found, archive_installer(found, config.archive_path(key))

    installer, archive = stage("archive", archive_stage)
    manifest = _write_release_manifest(config, key, platform, installer, archive)

    result = PipelineResult(
        platform=key,
        installer=installer,
        archive=archive,
        manifest=manifest,
        durations=durations,
    )
    logger.success(
        "{} release ready: {} ({:.1f}s)",
        platform.name,
        archive,
        sum(durations.values()),
    )
    return result


def build_release(
    platform_key: Optional[str] = None,
    base_dir: Optional[Path] = None,
    runner: Optional[CommandRunner] = None,
) -> PipelineResult:
    root = base_dir or Path.cwd()
    config = BuildConfig.from_env(root)
    return run_pipeline(config, platform_key, runner)


def _run_stage(platform: str, name: str, action: Callable[[], T], durations: Dict[str, float]) -> T:
    log_stage_event(name, "started", platform=platform)
    started = time.perf_counter()
    try:
        outcome = action()
    except PipelineError as exc:
        log_stage_event(name, "failed", platform=platform, exit_code=exc.exit_code)
        raise
    durations[name] = time.perf_counter() - started
    log_stage_event(name, "finished", platform=platform, duration=durations[name])
    return outcome


def _write_release_manifest(
    config: BuildConfig,
    key: str,
    platform: PlatformConfig,
    installer: Path,
    archive: Path,
) -> Path:
    manifest_path = archive.with_suffix(".json")
    manifest = {
        "app": config.app_name,
        "platform": key,
        "installer": installer.name,
        "archive": archive.name,
        "size_bytes": archive.stat().st_size,
        "checksum": file_sha256(archive),
        "feature": platform.target.feature,
    }
    manifest_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    logger.debug("Wrote release manifest {}", manifest_path)
    return manifest_path


def file_sha256(file_path: Path) -> str:
    digest = hashlib.sha256()
    with open(file_path, "rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


__all__ = ["PipelineResult", "run_pipeline", "build_release", "file_sha256"]
