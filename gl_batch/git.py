"""Thin wrapper around the git executable for a single working copy."""

from __future__ import annotations

import logging
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from gl_batch.errors import GitCommandError, GitError, GitSpawnError, GitTimeoutError
from gl_batch.models import DEFAULT_REMOTE, LOGGER_NAME

# Subcommands that change the working copy or the remote. Skipped in dry-run.
MUTATING_COMMANDS = {"checkout", "pull", "tag", "push"}


class GitRepository:
    """Run git subcommands with the repository root as working directory."""

    def __init__(self, path: str | Path, timeout: float | None = None, dry_run: bool = False):
        self.path = Path(path)
        self.timeout = timeout
        self.dry_run = dry_run
        self.logger = logging.getLogger(LOGGER_NAME)

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        """Run ``git <args>`` and raise a ``GitError`` subclass on any failure."""
        cmd = ["git", *args]
        display = " ".join(cmd)

        if self.dry_run and args[0] in MUTATING_COMMANDS:
            self.logger.info(f"[DRY-RUN] {self.path}: would run '{display}'")
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        self.logger.debug(f"{self.path}: {display}")
        try:
            result = subprocess.run(
                cmd,
                cwd=self.path,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise GitTimeoutError(f"'{display}' timed out after {self.timeout}s in {self.path}") from None
        except UnicodeDecodeError as e:
            raise GitError(f"'{display}' printed output that is not valid UTF-8 in {self.path}: {e}") from e
        except OSError as e:
            raise GitSpawnError(f"Could not run '{display}' in {self.path}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise GitCommandError(
                f"'{display}' failed in {self.path} (exit {result.returncode})" + (f": {stderr}" if stderr else ""),
                returncode=result.returncode,
                stderr=stderr,
            )
        return result

    # -- Queries --

    def get_remote_url(self, remote: str = DEFAULT_REMOTE) -> str:
        try:
            result = self._run("remote", "get-url", remote)
        except GitCommandError as e:
            raise GitCommandError(
                f"Failed to get remote URL for {self.path}: no '{remote}' remote or command failed",
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e
        return result.stdout.strip()

    def get_current_branch(self) -> str:
        """Return the checked-out branch name (``HEAD`` when detached)."""
        try:
            result = self._run("rev-parse", "--abbrev-ref", "HEAD")
        except GitCommandError as e:
            raise GitCommandError(
                f"Failed to get current branch for {self.path}", returncode=e.returncode, stderr=e.stderr
            ) from e
        return result.stdout.strip()

    # -- Mutations --

    def checkout(self, branch: str) -> None:
        """Check out ``branch`` and pull it from origin. A failed pull only warns."""
        try:
            self._run("checkout", branch)
        except GitCommandError as e:
            raise GitCommandError(
                f"Failed to checkout branch '{branch}' in {self.path}" + (f": {e.stderr}" if e.stderr else ""),
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

        try:
            self._run("pull", DEFAULT_REMOTE, branch)
        except GitError as e:
            self.logger.warning(f"Pull of '{branch}' failed in {self.path}, continuing: {e}")

    def create_tag(self, name: str, message: str | None = None) -> None:
        """Create an annotated tag when ``message`` is given, else a lightweight one."""
        args = ("tag", "-a", name, "-m", message) if message else ("tag", name)
        try:
            self._run(*args)
        except GitCommandError as e:
            raise GitCommandError(
                f"Failed to create tag '{name}' in {self.path}" + (f": {e.stderr}" if e.stderr else ""),
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

    def push_tag(self, name: str) -> None:
        try:
            self._run("push", DEFAULT_REMOTE, name)
        except GitCommandError as e:
            raise GitCommandError(
                f"Failed to push tag '{name}' from {self.path}" + (f": {e.stderr}" if e.stderr else ""),
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

    @contextmanager
    def on_branch(self, branch: str, restore_on_error: bool = False) -> Iterator[str]:
        """
        Check out ``branch`` for the duration of the block, yielding the original branch.

        The original branch is checked out again when the block exits normally. If the
        block raises, the original branch is only restored when ``restore_on_error`` is
        set; otherwise the repository is left on ``branch``.
        """
        original = self.get_current_branch()
        self.checkout(branch)
        try:
            yield original
        except BaseException:
            if restore_on_error:
                try:
                    self.checkout(original)
                except GitError as e:
                    self.logger.error(f"Could not restore branch '{original}' in {self.path}: {e}")
            raise
        self.checkout(original)
