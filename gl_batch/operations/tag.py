"""Tag operation: tag a branch in every discovered repository and push the tag."""

from __future__ import annotations

import argparse

from gl_batch.errors import ConfigError
from gl_batch.git import GitRepository
from gl_batch.operations.base import Operation, register_operation


@register_operation("tag")
class TagOperation(Operation):
    """Check out a branch, tag it, push the tag and return to the previous branch."""

    def __init__(self, args: argparse.Namespace):
        super().__init__(args)
        self.checkout_branch = args.checkout_branch
        self.tag_name = args.tag_name
        self.tag_message = args.tag_message or None
        self.restore_on_failure = getattr(args, "restore_on_failure", False)

    @staticmethod
    def add_arguments(group: argparse._ArgumentGroup) -> None:
        group.add_argument("--checkout-branch", help="Branch to check out and tag")
        group.add_argument("--tag-name", help="Name of the tag to create")
        group.add_argument("--tag-message", default=None, help="Create an annotated tag with this message")
        group.add_argument(
            "--restore-on-failure",
            action="store_true",
            help="Return to the original branch even when tagging or pushing fails",
        )

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> TagOperation:
        missing = [
            flag
            for flag, value in (("--checkout-branch", args.checkout_branch), ("--tag-name", args.tag_name))
            if not value
        ]
        if missing:
            raise ConfigError(f"Mode 'tag' requires {', '.join(missing)}")
        return cls(args)

    def describe(self) -> list[str]:
        kind = "annotated" if self.tag_message else "lightweight"
        return [f"Checkout branch: {self.checkout_branch}", f"Tag: {self.tag_name} ({kind})"]

    def run(self, repo: GitRepository) -> str:
        with repo.on_branch(self.checkout_branch, restore_on_error=self.restore_on_failure) as original:
            self.logger.debug(f"{repo.path}: switched from '{original}' to '{self.checkout_branch}'")
            repo.create_tag(self.tag_name, self.tag_message)
            repo.push_tag(self.tag_name)
        return f"{repo.path}: tagged {self.checkout_branch} as {self.tag_name}"
