"""
Out-of-process command execution behind a small, replaceable interface.

The subsetting tool and git both run through a CommandRunner so that the
upload, release and delete workflows can be exercised without either binary.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger("fontshelf.runner")


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandError(Exception):
    """The command could not be started or did not finish."""

    def __init__(self, args: list[str], reason: str, stdout: str = "", stderr: str = "") -> None:
        self.args_list = args
        self.reason = reason
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command failed to run: {' '.join(args)}: {reason}")


class CommandRunner(Protocol):
    def run(self, args: list[str], cwd: Path | None = None) -> CommandResult: ...


class SubprocessRunner:
    """Run commands with subprocess, capturing stdout and stderr as text."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(self, args: list[str], cwd: Path | None = None) -> CommandResult:
        logger.debug("Running: %s", " ".join(args))
        try:
            proc = subprocess.run(
                args,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                args,
                f"timed out after {self.timeout}s",
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr),
            ) from e
        except OSError as e:
            raise CommandError(args, str(e)) from e

        if proc.stdout:
            logger.debug(proc.stdout)
        if proc.returncode != 0 and proc.stderr:
            logger.debug(proc.stderr)
        return CommandResult(proc.returncode, proc.stdout, proc.stderr)


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
