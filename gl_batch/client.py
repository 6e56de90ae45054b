"""GitLab API client for project lookup and merge request creation."""

from __future__ import annotations

import logging
import threading
import urllib.parse
from typing import Any

import requests

from gl_batch.errors import GitLabApiError, GitLabDecodeError
from gl_batch.models import LOGGER_NAME, MR_DESCRIPTION_TEMPLATE, MergeRequest, Project


class GitLabClient:
    """
    Thin wrapper around GitLab REST API v4. Single-object calls only, no retries.

    Each thread gets its own ``requests.Session`` so the client can be shared by a
    worker pool.
    """

    def __init__(self, api_url: str, token: str, dry_run: bool = False, timeout: float | None = None):
        self.api_url = api_url.rstrip("/")
        self.headers = {
            "PRIVATE-TOKEN": token,
            "Content-Type": "application/json",
        }
        self._local = threading.local()
        self.dry_run = dry_run
        self.timeout = timeout
        self.logger = logging.getLogger(LOGGER_NAME)

    @property
    def session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            self._local.session = session
        return session

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Make one HTTP request; non-2xx and transport errors become ``GitLabApiError``."""
        url = f"{self.api_url}{endpoint}"
        self.logger.debug(f"{method.upper()} {url} {kwargs.get('json', '')}")
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GitLabApiError(f"{method.upper()} {url} failed: {e}") from e

        if not resp.ok:
            self.logger.debug(f"API error {resp.status_code}: {resp.text[:500]}")
        return resp

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise GitLabDecodeError(
                f"Could not decode response from {resp.url}: {e}",
                status_code=resp.status_code,
                response_text=resp.text,
            ) from e

    def resolve_project(self, path: str) -> Project:
        """Look up a project by its ``namespace/project`` path."""
        encoded_path = urllib.parse.quote(path, safe="")
        resp = self._request("GET", f"/projects/{encoded_path}")
        if not resp.ok:
            raise GitLabApiError(
                f"Failed to get project '{path}': HTTP {resp.status_code}",
                status_code=resp.status_code,
                response_text=resp.text,
            )

        data = self._json(resp)
        if not isinstance(data, dict) or not isinstance(data.get("id"), int) or not isinstance(data.get("name"), str):
            raise GitLabDecodeError(
                f"Unexpected project payload for '{path}'", status_code=resp.status_code, response_text=resp.text
            )
        return Project(id=data["id"], name=data["name"])

    def create_merge_request(
        self,
        project_id: int,
        source_branch: str,
        target_branch: str,
        title: str,
        description: str | None = None,
    ) -> MergeRequest:
        if description is None:
            description = MR_DESCRIPTION_TEMPLATE.format(source=source_branch, target=target_branch)

        if self.dry_run:
            self.logger.info(f"[DRY-RUN] would POST merge request '{title}' to project {project_id}")
            return MergeRequest(web_url=f"(dry-run) {source_branch} -> {target_branch}")

        resp = self._request(
            "POST",
            f"/projects/{project_id}/merge_requests",
            json={
                "source_branch": source_branch,
                "target_branch": target_branch,
                "title": title,
                "description": description,
            },
        )
        if not resp.ok:
            raise GitLabApiError(
                f"Failed to create merge request: {resp.text}",
                status_code=resp.status_code,
                response_text=resp.text,
            )

        data = self._json(resp)
        if not isinstance(data, dict) or not isinstance(data.get("web_url"), str):
            raise GitLabDecodeError(
                "Unexpected merge request payload", status_code=resp.status_code, response_text=resp.text
            )
        return MergeRequest(web_url=data["web_url"])
