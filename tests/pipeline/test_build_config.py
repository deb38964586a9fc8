"""Tests for release configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from release_pipeline.build_config import BuildConfig, check_log_level


def test_default_layout_is_relative_to_root(tmp_path: Path) -> None:
    config = BuildConfig.default(tmp_path)
    windows = config.platform("windows")

    assert windows.output_dir == tmp_path / "target" / "wix"
    assert windows.installer_extension == "msi"
    assert windows.dependency.archive_path == tmp_path / "ext" / "ffmpeg" / "windows64" / "ffmpeg.7z"
    assert windows.dependency.extracted_dir == tmp_path / "ext" / "ffmpeg" / "windows64" / "ffmpeg"
    assert config.archive_path("windows") == tmp_path / "_deploy" / "walksnail-osd-tool-windows.zip"
    assert config.platform("linux").dependency is None


def test_installer_command_formats_package_and_manifest(tmp_path: Path) -> None:
    linux = BuildConfig.default(tmp_path).platform("linux")
    assert linux.installer_command() == [
        "deb",
        "--package",
        "walksnail-osd-tool",
        "--no-build",
        "--manifest-path",
        str(tmp_path / "Cargo.toml"),
    ]


def test_defaults_are_conservative(tmp_path: Path) -> None:
    config = BuildConfig.from_env(tmp_path)
    assert config.default_platform == "windows"
    assert config.auto_extract is False
    assert config.strict_artifact_match is True


def test_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RELEASE_PLATFORM", "linux")
    monkeypatch.setenv("RELEASE_AUTO_EXTRACT", "yes")
    monkeypatch.setenv("RELEASE_STRICT_ARTIFACTS", "0")
    monkeypatch.setenv("RELEASE_CARGO", "cross")
    monkeypatch.setenv("RELEASE_LOG_LEVEL", "debug")

    config = BuildConfig.from_env(tmp_path)

    assert config.default_platform == "linux"
    assert config.auto_extract is True
    assert config.strict_artifact_match is False
    assert config.cargo == "cross"
    assert config.log_level == "DEBUG"


def test_shell_environment_wins_over_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("RELEASE_CARGO=from-dotenv\n", encoding="utf-8")
    monkeypatch.setenv("RELEASE_CARGO", "from-shell")
    assert BuildConfig.from_env(tmp_path).cargo == "from-shell"


def test_invalid_flag_value_is_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RELEASE_AUTO_EXTRACT", "maybe")
    with pytest.raises(ValueError, match="RELEASE_AUTO_EXTRACT"):
        BuildConfig.from_env(tmp_path)


def test_unknown_platform_raises(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        BuildConfig.default(tmp_path).platform("macos")


def test_log_level_is_normalized_and_checked(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assert check_log_level(" warning ") == "WARNING"
    monkeypatch.setenv("RELEASE_LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="Log level"):
        BuildConfig.from_env(tmp_path)
