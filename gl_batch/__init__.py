"""
gl-batch: Batch git/GitLab automation across a tree of local clones.

Finds every git repository below a directory and, per repository, either opens a
merge request through the GitLab API (``--mode mr``) or checks out a branch, tags
it and pushes the tag (``--mode tag``). Each repository succeeds or fails on its own.

Environment:
    GITLAB_TOKEN - GitLab Personal Access Token (mr mode)
    GITLAB_URL   - GitLab API URL (mr mode, default for --gitlab-url)
"""

from gl_batch.cli import main

__version__ = "0.1.0"
__all__ = ["main", "__version__"]
