"""Map git remote URLs to GitLab project paths (``group/subgroup/project``)."""

from __future__ import annotations

import urllib.parse
from typing import Iterable

from gl_batch.errors import RemoteUrlError
from gl_batch.models import DEFAULT_GITLAB_HOST


def _strip_git_suffix(path: str) -> str:
    path = path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return path.strip("/")


def parse_project_path(url: str, hosts: Iterable[str] = (DEFAULT_GITLAB_HOST,)) -> str:
    """
    Extract the project path from an SSH (``git@host:path.git``) or HTTPS remote URL.

    HTTPS URLs are only accepted when they contain one of ``hosts``. A host equal to
    the URL's own host is tried first. Raises ``RemoteUrlError`` rather than returning
    an empty or partial path.
    """
    url = url.strip()

    if url.startswith("git@"):
        _, sep, path = url.partition(":")
        if not sep:
            raise RemoteUrlError(f"Invalid SSH URL format: {url}")
        path = _strip_git_suffix(path)
        if not path:
            raise RemoteUrlError(f"Invalid SSH URL format: {url}")
        return path

    url_host = host_of(url)
    hosts = [host for host in hosts if host]
    candidates = [host for host in hosts if host == url_host]
    candidates += [host for host in hosts if host != url_host and host in url]
    if not candidates:
        raise RemoteUrlError(f"Unsupported git URL format: {url}")

    for host in candidates:
        _, sep, path = url.partition(f"{host}/")
        path = _strip_git_suffix(path)
        if sep and path:
            return path

    raise RemoteUrlError(f"Invalid HTTPS URL format: {url}")


def host_of(url: str) -> str | None:
    """Return the host (with port, if any) of a web URL, e.g. a GitLab API URL."""
    netloc = urllib.parse.urlparse(url).netloc
    if "@" in netloc:
        netloc = netloc.rsplit("@", 1)[1]
    return netloc or None
