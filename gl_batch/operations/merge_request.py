"""Merge request operation: open an MR for every discovered repository."""

from __future__ import annotations

import argparse
import os
import threading

from gl_batch.client import GitLabClient
from gl_batch.errors import ConfigError
from gl_batch.git import GitRepository
from gl_batch.models import DEFAULT_GITLAB_HOST, MR_TITLE_TEMPLATE
from gl_batch.operations.base import Operation, SkipRepository, register_operation
from gl_batch.remote import host_of, parse_project_path


@register_operation("mr")
class MergeRequestOperation(Operation):
    """Create a merge request from a source to a target branch in each repository's GitLab project."""

    def __init__(
        self,
        args: argparse.Namespace,
        client: GitLabClient,
        hosts: tuple[str, ...] = (DEFAULT_GITLAB_HOST,),
    ):
        super().__init__(args)
        self.client = client
        self.source_branch = args.source_branch
        self.target_branch = args.target_branch
        self.hosts = hosts
        self.skip_duplicates = getattr(args, "skip_duplicate_projects", False)
        self._seen_projects: set[int] = set()
        self._seen_lock = threading.Lock()

    @staticmethod
    def add_arguments(group: argparse._ArgumentGroup) -> None:
        group.add_argument("--source-branch", help="Branch to merge from")
        group.add_argument("--target-branch", help="Branch to merge into")
        group.add_argument(
            "--gitlab-url",
            default=None,
            help="GitLab API URL, e.g. https://gitlab.com/api/v4 (default: from GITLAB_URL env)",
        )
        group.add_argument(
            "--gitlab-token", default=None, help="GitLab Personal Access Token (default: from GITLAB_TOKEN env)"
        )
        group.add_argument(
            "--gitlab-host",
            action="append",
            default=[],
            dest="gitlab_hosts",
            help="Extra host accepted in HTTPS remote URLs (repeatable)",
        )
        group.add_argument("--force", action="store_true", help="Accepted for compatibility; has no effect")
        group.add_argument(
            "--skip-duplicate-projects",
            action="store_true",
            help="Only open one MR per GitLab project when several local clones map to it",
        )

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> MergeRequestOperation:
        missing = [
            flag
            for flag, value in (("--source-branch", args.source_branch), ("--target-branch", args.target_branch))
            if not value
        ]
        if missing:
            raise ConfigError(f"Mode 'mr' requires {', '.join(missing)}")

        gitlab_url = args.gitlab_url or os.environ.get("GITLAB_URL")
        if not gitlab_url:
            raise ConfigError("GitLab URL not provided. Use --gitlab-url or set GITLAB_URL environment variable")

        token = args.gitlab_token or os.environ.get("GITLAB_TOKEN")
        if not token:
            raise ConfigError(
                "GitLab token not provided. Please set GITLAB_TOKEN environment variable or use --gitlab-token"
            )

        hosts = [DEFAULT_GITLAB_HOST]
        for host in [host_of(gitlab_url), *getattr(args, "gitlab_hosts", [])]:
            if host and host not in hosts:
                hosts.append(host)

        client = GitLabClient(
            gitlab_url,
            token,
            dry_run=getattr(args, "dry_run", False),
            timeout=getattr(args, "http_timeout", None),
        )
        return cls(args, client, tuple(hosts))

    def describe(self) -> list[str]:
        return [
            f"Source branch: {self.source_branch}",
            f"Target branch: {self.target_branch}",
            f"GitLab API: {self.client.api_url}",
        ]

    def run(self, repo: GitRepository) -> str:
        remote_url = repo.get_remote_url()
        project_path = parse_project_path(remote_url, self.hosts)
        project = self.client.resolve_project(project_path)

        if self.skip_duplicates:
            with self._seen_lock:
                if project.id in self._seen_projects:
                    raise SkipRepository(f"project {project_path} (id={project.id}) already handled")
                self._seen_projects.add(project.id)

        title = MR_TITLE_TEMPLATE.format(source=self.source_branch, target=self.target_branch)
        merge_request = self.client.create_merge_request(project.id, self.source_branch, self.target_branch, title)
        return f"{project.name}: {merge_request.web_url}"
