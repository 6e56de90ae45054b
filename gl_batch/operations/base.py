"""Base class and registry for per-repository operations."""

from __future__ import annotations

import argparse
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from gl_batch.errors import GitError, GitLabApiError, RemoteUrlError
from gl_batch.git import GitRepository
from gl_batch.logging_utils import is_json_mode
from gl_batch.models import LOGGER_NAME, RepoResult

# Errors that fail a single repository but never the batch.
REPOSITORY_ERRORS = (GitError, RemoteUrlError, GitLabApiError)

# ---------------------------------------------------------------------------
# Operation Registry
# ---------------------------------------------------------------------------

_operation_registry: dict[str, type[Operation]] = {}


def register_operation(name: str):
    """Decorator to register an operation class under a ``--mode`` value."""

    def decorator(cls):
        _operation_registry[name] = cls
        cls.operation_name = name
        return cls

    return decorator


def get_operation_registry() -> dict[str, type[Operation]]:
    """Get the operation registry."""
    return _operation_registry


class SkipRepository(Exception):
    """Raised from ``Operation.run`` to leave a repository untouched."""


# ---------------------------------------------------------------------------
# Operation Base Class
# ---------------------------------------------------------------------------


class Operation(ABC):
    """Base class for all operations."""

    operation_name: str = ""

    def __init__(self, args: argparse.Namespace):
        self.args = args
        self.dry_run = getattr(args, "dry_run", False)
        self.git_timeout = getattr(args, "git_timeout", None)
        self.logger = logging.getLogger(LOGGER_NAME)

    @staticmethod
    @abstractmethod
    def add_arguments(group: argparse._ArgumentGroup) -> None:
        """Add operation-specific CLI arguments."""
        ...

    @classmethod
    @abstractmethod
    def from_args(cls, args: argparse.Namespace) -> Operation:
        """Validate mode-specific inputs and build the operation. Raises ``ConfigError``."""
        ...

    @abstractmethod
    def run(self, repo: GitRepository) -> str:
        """Apply the operation to one repository and return the success line."""
        ...

    def describe(self) -> list[str]:
        """Lines logged once before processing starts."""
        return []

    def apply_to_repository(self, repo_path: Path) -> RepoResult:
        """Run the operation on one repository, converting repository-scoped errors to a result."""
        repo = GitRepository(repo_path, timeout=self.git_timeout, dry_run=self.dry_run)
        self.logger.info(f"Processing repository: {repo_path}")
        try:
            detail = self.run(repo)
        except SkipRepository as e:
            return self._record(RepoResult(repo_path, self.operation_name, "skipped", str(e), self.dry_run))
        except REPOSITORY_ERRORS as e:
            return self._record(RepoResult(repo_path, self.operation_name, "error", str(e), self.dry_run))
        except Exception as e:
            self.logger.error(f"Unexpected error in {repo_path}", exc_info=True)
            return self._record(
                RepoResult(repo_path, self.operation_name, "error", f"{type(e).__name__}: {e}", self.dry_run)
            )
        return self._record(RepoResult(repo_path, self.operation_name, "success", detail, self.dry_run))

    def _record(self, result: RepoResult) -> RepoResult:
        icon = {
            "success": "\u2713",
            "skipped": "\u2192",
            "error": "\u2717",
        }.get(result.action, "?")

        # Structured record for --json
        level = logging.ERROR if result.action == "error" else logging.INFO
        if is_json_mode(self.logger):
            record = self.logger.makeRecord(LOGGER_NAME, level, "", 0, "", (), None)
            record.repo_result = result
            self.logger.handle(record)
            return result

        prefix = "[DRY-RUN] " if result.dry_run else ""
        self.logger.log(
            level,
            f"{prefix}{icon} {result.repo_path}: {result.operation} \u2192 {result.action}"
            f"{' (' + result.detail + ')' if result.detail else ''}",
        )
        return result
