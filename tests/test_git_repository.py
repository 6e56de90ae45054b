"""Tag mode against real git repositories with a local bare origin."""

import logging
import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from conftest import add_raw_origin, make_args, requires_git, run_git

from gl_batch.errors import GitError
from gl_batch.git import GitRepository
from gl_batch.operations import TagOperation

pytestmark = requires_git


def tag_args(**kwargs):
    defaults = {"mode": "tag", "checkout_branch": "release", "tag_name": "v1.2.3"}
    defaults.update(kwargs)
    return make_args(**defaults)


def current_branch(repo: Path) -> str:
    return run_git(repo, "rev-parse", "--abbrev-ref", "HEAD")


def break_origin(repo: Path) -> None:
    run_git(repo, "remote", "set-url", "origin", str(repo.parent / "missing-origin.git"))


class TestRealQueries:
    def test_remote_url_and_branch(self, cloned_repo, tmp_path):
        repo = GitRepository(cloned_repo)
        assert repo.get_remote_url() == str(tmp_path / "origin.git")
        assert repo.get_current_branch() == "main"


class TestRealTagOperation:
    """TagOperation.apply_to_repository() end to end."""

    def test_annotated_tag_is_pushed_and_branch_restored(self, cloned_repo, tmp_path):
        op = TagOperation.from_args(tag_args(tag_message="Release 1.2.3"))

        result = op.apply_to_repository(cloned_repo)

        assert result.action == "success"
        assert current_branch(cloned_repo) == "main"
        origin = tmp_path / "origin.git"
        assert run_git(origin, "cat-file", "-t", "v1.2.3") == "tag"
        assert run_git(origin, "rev-parse", "v1.2.3^{commit}") == run_git(origin, "rev-parse", "release")

    def test_lightweight_tag(self, cloned_repo, tmp_path):
        result = TagOperation.from_args(tag_args()).apply_to_repository(cloned_repo)

        assert result.action == "success"
        assert run_git(tmp_path / "origin.git", "cat-file", "-t", "v1.2.3") == "commit"

    def test_push_failure_leaves_release_checked_out(self, cloned_repo, caplog):
        break_origin(cloned_repo)

        with caplog.at_level(logging.WARNING, logger="gl-batch"):
            result = TagOperation.from_args(tag_args()).apply_to_repository(cloned_repo)

        assert result.action == "error"
        assert "v1.2.3" in result.detail
        assert current_branch(cloned_repo) == "release"
        # The unreachable origin also makes the pull fail, which only warns
        assert any("Pull of 'release' failed" in r.message for r in caplog.records)

    def test_push_failure_restores_when_requested(self, cloned_repo):
        break_origin(cloned_repo)

        result = TagOperation.from_args(tag_args(restore_on_failure=True)).apply_to_repository(cloned_repo)

        assert result.action == "error"
        assert current_branch(cloned_repo) == "main"

    def test_unknown_branch_is_an_error(self, cloned_repo):
        result = TagOperation.from_args(tag_args(checkout_branch="no-such-branch")).apply_to_repository(cloned_repo)

        assert result.action == "error"
        assert "no-such-branch" in result.detail
        assert current_branch(cloned_repo) == "main"


@pytest.mark.skipif(sys.platform == "win32", reason="bytes argv is POSIX only")
class TestNonUtf8Output:
    """git output that does not decode as UTF-8 fails only that repository."""

    def test_remote_url_with_invalid_bytes_raises_git_error(self, tmp_path, git_env):
        repo = tmp_path / "bad"
        repo.mkdir()
        run_git(repo, "init")
        add_raw_origin(repo, b"https://gitlab.com/t/\xff.git")

        with pytest.raises(GitError, match="UTF-8"):
            GitRepository(repo).get_remote_url()
