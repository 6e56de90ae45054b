"""Shared test fixtures for gl-batch tests."""

import argparse
import logging
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from gl_batch.client import GitLabClient
from gl_batch.models import LOGGER_NAME

# Constants for use in tests - pytest makes conftest.py fixtures available,
# but these constants need to be imported directly from tests
MOCK_API_URL = "https://gitlab.example.com/api/v4"

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


@pytest.fixture(autouse=True)
def reset_logger():
    """main() installs its own handler; undo that so caplog keeps working."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def mock_client():
    """GitLabClient pointing at mock server."""
    return GitLabClient(MOCK_API_URL, "test-token")


@pytest.fixture
def dry_run_client():
    """GitLabClient in dry-run mode."""
    return GitLabClient(MOCK_API_URL, "test-token", dry_run=True)


class FakeGit:
    """Stand-in for ``subprocess.run`` that records git invocations."""

    def __init__(self):
        self.calls: list[list[str]] = []
        self.cwds: list[Path] = []
        self.outputs: dict[str, str] = {}
        self.failures: dict[str, int] = {}
        self.timeouts: set[str] = set()

    def fail(self, command: str, returncode: int = 1) -> None:
        self.failures[command] = returncode

    def output(self, command: str, stdout: str) -> None:
        self.outputs[command] = stdout

    def __call__(self, cmd, cwd=None, timeout=None, **kwargs):
        args = list(cmd[1:])
        key = " ".join(args)
        self.calls.append(args)
        self.cwds.append(Path(cwd))
        if key in self.timeouts:
            raise subprocess.TimeoutExpired(cmd, timeout)
        if key in self.failures:
            return subprocess.CompletedProcess(cmd, self.failures[key], stdout="", stderr=f"error: {key}")
        return subprocess.CompletedProcess(cmd, 0, stdout=self.outputs.get(key, ""), stderr="")


@pytest.fixture
def fake_git(monkeypatch):
    """Patch git subprocess calls with a recording fake."""
    fake = FakeGit()
    monkeypatch.setattr("gl_batch.git.subprocess.run", fake)
    return fake


@pytest.fixture
def repo_tree(tmp_path):
    """Three repositories in reach of the default depth and one below it."""
    for repo in ("alpha", "group/beta", "group/gamma", "group/sub/too-deep"):
        (tmp_path / repo / ".git").mkdir(parents=True)
    (tmp_path / "notes").mkdir()
    return tmp_path


def make_args(**kwargs) -> argparse.Namespace:
    """Helper to create argparse.Namespace with default values."""
    defaults = {
        "path": ".",
        "mode": "mr",
        "max_depth": 3,
        "filter_pattern": None,
        "workers": 1,
        "git_timeout": None,
        "http_timeout": None,
        "dry_run": False,
        "json_output": False,
        "verbose": False,
        "source_branch": None,
        "target_branch": None,
        "gitlab_url": None,
        "gitlab_token": None,
        "gitlab_hosts": [],
        "force": False,
        "skip_duplicate_projects": False,
        "checkout_branch": None,
        "tag_name": None,
        "tag_message": None,
        "restore_on_failure": False,
    }
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


def run_git(cwd, *args) -> str:
    """Run a setup git command for a test repository and return its stdout."""
    result = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout.strip()


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolate git from the user's configuration and give it an identity."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    for var in ("GIT_AUTHOR_NAME", "GIT_COMMITTER_NAME"):
        monkeypatch.setenv(var, "gl-batch tests")
    for var in ("GIT_AUTHOR_EMAIL", "GIT_COMMITTER_EMAIL"):
        monkeypatch.setenv(var, "tests@example.com")
    return home


@pytest.fixture
def cloned_repo(tmp_path, git_env):
    """Working copy on ``main`` with a ``release`` branch, both pushed to a local bare origin."""
    origin = tmp_path / "origin.git"
    run_git(tmp_path, "init", "--bare", str(origin))

    work = tmp_path / "repos" / "proj"
    work.mkdir(parents=True)
    run_git(work, "init")
    run_git(work, "symbolic-ref", "HEAD", "refs/heads/main")
    (work / "README").write_text("hello\n")
    run_git(work, "add", "README")
    run_git(work, "commit", "-m", "Initial commit")
    run_git(work, "branch", "release")
    run_git(work, "remote", "add", "origin", str(origin))
    run_git(work, "push", "origin", "main", "release")
    return work


def add_raw_origin(repo, url: bytes) -> None:
    """Set an origin URL given as raw bytes, e.g. one that is not valid UTF-8."""
    subprocess.run([b"git", b"remote", b"add", b"origin", url], cwd=repo, check=True, capture_output=True)
