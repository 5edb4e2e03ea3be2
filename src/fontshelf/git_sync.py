"""Best-effort commit and push of release tree changes.

The directory tree is the source of truth; git history follows it when it
can. Nothing in this module raises to its caller.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fontshelf.exceptions import VersionControlWarning
from fontshelf.runner import CommandError, CommandRunner
from fontshelf.schema import SyncReport

logger = logging.getLogger("fontshelf.git")


class GitSync:
    """Stage, commit and push paths inside one working tree."""

    def __init__(
        self,
        root: Path,
        runner: CommandRunner,
        name: str,
        email: str,
        enabled: bool = True,
    ) -> None:
        self.root = root
        self.runner = runner
        self.name = name
        self.email = email
        self.enabled = enabled

    def _git(self, *args: str) -> str:
        cmd = ["git", *args]
        try:
            result = self.runner.run(cmd, cwd=self.root)
        except CommandError as e:
            raise VersionControlWarning(f"git {args[0]} failed: {e.reason}") from e
        if not result.ok:
            detail = (result.stderr or result.stdout).strip()
            raise VersionControlWarning(f"git {args[0]} failed ({result.returncode}): {detail}")
        return result.stdout

    def _configure_identity(self) -> None:
        for key, value in (("user.name", self.name), ("user.email", self.email)):
            try:
                self._git("config", key, value)
            except VersionControlWarning as e:
                logger.debug("Ignoring git config failure: %s", e)

    def commit_and_push(self, paths: list[str], message: str) -> SyncReport:
        """Add ``paths`` (relative to the root), commit with ``message`` and push."""
        report = SyncReport()
        if not self.enabled:
            report.warnings.append("git sync disabled")
            return report

        self._configure_identity()
        try:
            for path in paths:
                self._git("add", "-A", "--", path)
            self._git("commit", "-m", message)
            report.committed = True
            self._git("push")
            report.pushed = True
            logger.info("Git push successful: %s", message)
        except VersionControlWarning as e:
            logger.error("Git operation failed: %s", e)
            report.warnings.append(str(e))
        return report
