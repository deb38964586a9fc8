"""External process execution used by the pipeline stages."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence

from loguru import logger


COMMAND_NOT_FOUND = 127


@dataclass(frozen=True, slots=True)
class CommandResult:
    command: tuple[str, ...]
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    """Runs an executable to completion and reports its exit status."""

    def run(self, name: str, args: Sequence[str], cwd: Optional[Path] = None) -> CommandResult:
        ...


class SubprocessRunner:
    """Blocking runner that lets tool output pass straight through to the terminal."""

    def run(self, name: str, args: Sequence[str], cwd: Optional[Path] = None) -> CommandResult:
        command = (name, *[str(arg) for arg in args])
        executable = shutil.which(name)
        if executable is None:
            logger.error("{} not found on PATH", name)
            return CommandResult(command, COMMAND_NOT_FOUND)

        logger.debug("Running: {}", " ".join(command))
        completed = subprocess.run([executable, *command[1:]], cwd=cwd, check=False)
        return CommandResult(command, completed.returncode)


def check_prerequisites(tools: Sequence[str]) -> list[str]:
    """Return the tools that are not available on PATH."""

    return [tool for tool in tools if shutil.which(tool) is None]


__all__ = ["CommandResult", "CommandRunner", "SubprocessRunner", "check_prerequisites", "COMMAND_NOT_FOUND"]
