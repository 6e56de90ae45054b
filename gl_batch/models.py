"""Data models and constants for gl-batch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

LOGGER_NAME = "gl-batch"

DEFAULT_GITLAB_HOST = "gitlab.com"
DEFAULT_MAX_DEPTH = 3
DEFAULT_WORKERS = 1
DEFAULT_REMOTE = "origin"

MR_DESCRIPTION_TEMPLATE = "Auto-created merge request from {source} to {target}"
MR_TITLE_TEMPLATE = "{source} to {target}"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RunMode(Enum):
    MERGE_REQUEST = "mr"
    TAG = "tag"


# ---------------------------------------------------------------------------
# Data Classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Project:
    """GitLab project as returned by ``GET /projects/:path``."""

    id: int
    name: str


@dataclass(frozen=True)
class MergeRequest:
    web_url: str


@dataclass
class RepoResult:
    """Outcome of one operation applied to one local repository."""

    repo_path: Path
    operation: str
    action: str  # "success", "skipped", "error"
    detail: str = ""
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.action == "success"

    def to_dict(self) -> dict:
        d = {
            "repo_path": str(self.repo_path),
            "operation": self.operation,
            "action": self.action,
            "detail": self.detail,
        }
        if self.dry_run:
            d["dry_run"] = True
        return d
