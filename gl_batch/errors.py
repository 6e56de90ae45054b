"""Exception hierarchy for gl-batch.

``ConfigError`` is fatal for the whole run. Everything else is scoped to a
single repository and is turned into an error result by the operation.
"""

from __future__ import annotations


class GlBatchError(Exception):
    """Base exception for gl-batch."""


class ConfigError(GlBatchError):
    """Missing or invalid command-line / environment configuration."""


class GitError(GlBatchError):
    """A git subcommand could not be completed."""


class GitCommandError(GitError):
    """git exited with a non-zero status."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class GitTimeoutError(GitError):
    """git did not finish within the configured timeout."""


class GitSpawnError(GitError):
    """The git executable could not be started."""


class RemoteUrlError(GlBatchError):
    """A remote URL does not map to a GitLab project path."""


class GitLabApiError(GlBatchError):
    """Non-2xx response or transport failure talking to GitLab."""

    def __init__(self, message: str, status_code: int | None = None, response_text: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class GitLabDecodeError(GitLabApiError):
    """A 2xx response body did not have the expected shape."""
