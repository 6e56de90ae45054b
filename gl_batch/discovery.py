"""Locate local git working copies below a root directory."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path

from gl_batch.models import DEFAULT_MAX_DEPTH, LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def find_repositories(root: str | os.PathLike, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Path]:
    """
    Return the parent of every ``.git`` directory at most ``max_depth`` levels below ``root``.

    ``root/.git`` sits at depth 1. Entries are visited in sorted name order so the
    result is stable for a given filesystem snapshot. Unreadable directories are
    skipped; symlinked directories are not followed.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        logger.warning(f"Search path is not a directory: {root_path}")
        return []

    repositories: list[Path] = []
    _walk(root_path, 1, max_depth, repositories)
    return repositories


def _walk(directory: Path, depth: int, max_depth: int, found: list[Path]) -> None:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug(f"Skipping unreadable directory {directory}: {e}")
        return

    for entry in entries:
        try:
            if not entry.is_dir(follow_symlinks=False):
                continue
        except OSError as e:
            logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
            continue

        if entry.name == ".git":
            found.append(directory)
            continue

        if depth < max_depth:
            _walk(Path(entry.path), depth + 1, max_depth, found)


def filter_repositories(repositories: list[Path], root: str | os.PathLike, pattern: str | None) -> list[Path]:
    """Keep repositories whose path relative to ``root`` matches the glob ``pattern``."""
    if not pattern:
        return list(repositories)

    root_path = Path(root)
    kept = []
    for repo in repositories:
        try:
            relative = repo.relative_to(root_path).as_posix()
        except ValueError:
            relative = repo.as_posix()
        if fnmatch.fnmatch(relative, pattern):
            kept.append(repo)
        else:
            logger.debug(f"Skipping repository (filter): {repo}")
    return kept
