"""Release pipeline that turns a Cargo build into a distributable installer archive."""

from importlib.metadata import PackageNotFoundError, version

from .build import PipelineResult, build_release, run_pipeline
from .build_config import BuildConfig, PlatformConfig

try:
    __version__ = version("installer-release-pipeline")
except PackageNotFoundError:  # pragma: no cover - package metadata absent in dev
    __version__ = "0.0.0"

__all__ = ["__version__", "build_release", "run_pipeline", "PipelineResult", "BuildConfig", "PlatformConfig"]
