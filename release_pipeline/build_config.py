"""Release pipeline configuration dataclasses."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv


TRUTHY = {"1", "true", "yes"}
FALSY = {"0", "false", "no"}
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class BuildTarget:
    """Feature selection passed to the build toolchain."""

    feature: str
    binary_path: Path


@dataclass(frozen=True, slots=True)
class DependencyBundle:
    """Third-party archive that must be extracted next to the sources."""

    archive_path: Path
    extracted_dir: Path


@dataclass(frozen=True, slots=True)
class PackageManifest:
    """Installer definition owned by version control."""

    path: Path
    package: str


@dataclass(slots=True)
class PlatformConfig:
    """Platform-specific release settings.

    ``installer_args`` are formatted with ``package`` and ``manifest`` before
    being handed to the toolchain, so each installer tool keeps its own flag
    spelling for the package id, manifest and no-rebuild switch.
    """

    name: str
    target: BuildTarget
    manifest: PackageManifest
    output_dir: Path
    installer_extension: str
    archive_name: str
    installer_args: Tuple[str, ...]
    dependency: Optional[DependencyBundle] = None

    def installer_command(self) -> list[str]:
        return [
            arg.format(package=self.manifest.package, manifest=self.manifest.path)
            for arg in self.installer_args
        ]


@dataclass(slots=True)
class BuildConfig:
    """Top-level configuration describing release targets."""

    app_name: str
    base_dir: Path
    deploy_dir: Path
    cargo: str = "cargo"
    default_platform: str = "windows"
    auto_extract: bool = False
    strict_artifact_match: bool = True
    log_level: str = "INFO"
    platforms: Dict[str, PlatformConfig] = field(default_factory=dict)

    def platform(self, key: str) -> PlatformConfig:
        if key not in self.platforms:
            msg = f"Unknown platform {key}"
            raise ValueError(msg)
        return self.platforms[key]

    def archive_path(self, key: str) -> Path:
        return self.deploy_dir / self.platform(key).archive_name

    @classmethod
    def default(cls, base_dir: Path) -> "BuildConfig":
        app_name = "walksnail-osd-tool"
        target_dir = base_dir / "target"
        ffmpeg_dir = base_dir / "ext" / "ffmpeg" / "windows64"
        manifest = PackageManifest(path=base_dir / "Cargo.toml", package=app_name)
        platforms = {
            "windows": PlatformConfig(
                name="Windows",
                target=BuildTarget(
                    feature="windows-installer",
                    binary_path=target_dir / "release" / f"{app_name}.exe",
                ),
                manifest=manifest,
                output_dir=target_dir / "wix",
                installer_extension="msi",
                archive_name=f"{app_name}-windows.zip",
                installer_args=(
                    "wix",
                    "--package",
                    "{package}",
                    "--no-build",
                    "--nocapture",
                    "{manifest}",
                ),
                dependency=DependencyBundle(
                    archive_path=ffmpeg_dir / "ffmpeg.7z",
                    extracted_dir=ffmpeg_dir / "ffmpeg",
                ),
            ),
            "linux": PlatformConfig(
                name="Linux",
                target=BuildTarget(
                    feature="linux-installer",
                    binary_path=target_dir / "release" / app_name,
                ),
                manifest=manifest,
                output_dir=target_dir / "debian",
                installer_extension="deb",
                archive_name=f"{app_name}-linux.zip",
                installer_args=(
                    "deb",
                    "--package",
                    "{package}",
                    "--no-build",
                    "--manifest-path",
                    "{manifest}",
                ),
            ),
        }
        return cls(
            app_name=app_name,
            base_dir=base_dir,
            deploy_dir=base_dir / "_deploy",
            platforms=platforms,
        )

    @classmethod
    def from_env(cls, base_dir: Path) -> "BuildConfig":
        """Build the default configuration with ``RELEASE_*`` overrides applied.

        The project ``.env`` is loaded first without overriding variables that
        are already exported in the shell.
        """

        load_dotenv(base_dir / ".env", override=False)
        config = cls.default(base_dir)
        return replace(
            config,
            cargo=os.getenv("RELEASE_CARGO", config.cargo),
            default_platform=os.getenv("RELEASE_PLATFORM", config.default_platform),
            auto_extract=_env_flag("RELEASE_AUTO_EXTRACT", config.auto_extract),
            strict_artifact_match=_env_flag("RELEASE_STRICT_ARTIFACTS", config.strict_artifact_match),
            log_level=check_log_level(os.getenv("RELEASE_LOG_LEVEL") or config.log_level),
        )


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in TRUTHY:
        return True
    if value in FALSY:
        return False
    msg = f"{name} must be one of {sorted(TRUTHY | FALSY)}, got {raw!r}"
    raise ValueError(msg)


def check_log_level(level: str) -> str:
    """Return ``level`` upper-cased, rejecting names loguru does not define."""

    normalized = level.strip().upper()
    if normalized not in LOG_LEVELS:
        msg = f"Log level must be one of {', '.join(LOG_LEVELS)}, got {level!r}"
        raise ValueError(msg)
    return normalized
