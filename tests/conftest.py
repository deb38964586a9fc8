"""Pytest configuration for release pipeline tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence

import pytest
from loguru import logger

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from release_pipeline.build_config import BuildConfig  # noqa: E402  (import after sys.path setup)
from release_pipeline.runner import CommandResult  # noqa: E402

RELEASE_ENV_VARS = (
    "RELEASE_PLATFORM",
    "RELEASE_AUTO_EXTRACT",
    "RELEASE_STRICT_ARTIFACTS",
    "RELEASE_CARGO",
    "RELEASE_LOG_LEVEL",
)


class FakeRunner:
    """Records commands instead of running them.

    Commands are keyed by their first argument (``build``, ``wix``, ``deb``,
    ``x``); ``effects`` simulate the files a real tool would leave behind.
    """

    def __init__(
        self,
        returncodes: Optional[Dict[str, int]] = None,
        effects: Optional[Dict[str, Callable[[], None]]] = None,
    ) -> None:
        self.returncodes = returncodes or {}
        self.effects = effects or {}
        self.calls: List[tuple[str, ...]] = []

    def run(self, name: str, args: Sequence[str], cwd: Optional[Path] = None) -> CommandResult:
        command = (name, *[str(arg) for arg in args])
        self.calls.append(command)
        key = command[1] if len(command) > 1 else name
        effect = self.effects.get(key)
        if effect is not None:
            effect()
        return CommandResult(command, self.returncodes.get(key, 0))

    def subcommands(self) -> list[str]:
        return [call[1] for call in self.calls]


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in RELEASE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def config(tmp_path: Path) -> BuildConfig:
    return BuildConfig.default(tmp_path)


@pytest.fixture
def fake_runner() -> type[FakeRunner]:
    return FakeRunner


@pytest.fixture
def log_messages() -> List[str]:
    messages: List[str] = []
    logger.add(lambda message: messages.append(str(message)), level="DEBUG", format="{level} {message}")
    return messages
