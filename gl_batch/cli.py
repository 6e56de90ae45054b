"""CLI entry point for gl-batch."""

from __future__ import annotations

import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

# Ensure all operations are registered by importing the operations package
import gl_batch.operations  # noqa: F401
from gl_batch.discovery import filter_repositories, find_repositories
from gl_batch.errors import ConfigError
from gl_batch.logging_utils import setup_logging
from gl_batch.models import DEFAULT_MAX_DEPTH, DEFAULT_WORKERS, LOGGER_NAME, RepoResult, RunMode
from gl_batch.operations import Operation, get_operation_registry


def run_batch(operation: Operation, repositories: list[Path], workers: int = DEFAULT_WORKERS) -> list[RepoResult]:
    """Apply the operation to every repository; results keep the order of ``repositories``."""
    if workers <= 1 or len(repositories) <= 1:
        return [operation.apply_to_repository(repo) for repo in repositories]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(operation.apply_to_repository, repositories))


def resolve_operation(args: argparse.Namespace) -> Operation:
    """Pick the operation for ``--mode`` and validate its inputs. Raises ``ConfigError``."""
    registry = get_operation_registry()
    op_cls = registry.get(args.mode)
    if op_cls is None:
        raise ConfigError(f"Unsupported mode: '{args.mode}' (expected one of: {', '.join(sorted(registry))})")
    if args.workers < 1:
        raise ConfigError("--workers must be at least 1")
    if args.max_depth < 1:
        raise ConfigError("--max-depth must be at least 1")
    return op_cls.from_args(args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gl-batch",
        description="Open merge requests or push tags across every git repository below a directory.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
    GITLAB_TOKEN - GitLab Personal Access Token (mr mode, if --gitlab-token is not given)
    GITLAB_URL   - GitLab API URL (mr mode, if --gitlab-url is not given)

Examples:
    # Open develop -> main merge requests for every clone under ~/src/team
    gl-batch --path ~/src/team --source-branch develop --target-branch main \\
        --gitlab-url https://gitlab.com/api/v4

    # Tag release as v1.2.3 everywhere and push the tag
    gl-batch --mode tag --path ~/src/team --checkout-branch release \\
        --tag-name v1.2.3 --tag-message "Release 1.2.3"

    # Dry-run to see what would happen
    gl-batch --mode tag --path ~/src/team --checkout-branch release --tag-name v1.2.3 --dry-run
""",
    )
    parser.add_argument("--path", required=True, help="Root directory to search for git repositories")
    parser.add_argument(
        "--mode",
        default=RunMode.MERGE_REQUEST.value,
        help=f"Operation to run: {', '.join(m.value for m in RunMode)} (default: {RunMode.MERGE_REQUEST.value})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"How many directory levels below --path to search (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--filter",
        dest="filter_pattern",
        default=None,
        help="Glob pattern on the repository path relative to --path (e.g., 'backend/*')",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"Repositories processed in parallel (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--git-timeout", type=float, default=None, help="Seconds before a git command is abandoned (default: none)"
    )
    parser.add_argument(
        "--http-timeout", type=float, default=None, help="Seconds before a GitLab request is abandoned (default: none)"
    )
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")
    parser.add_argument(
        "--json", action="store_true", dest="json_output", help="Output results as JSON lines (to stderr)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    registry = get_operation_registry()
    for name, op_cls in sorted(registry.items()):
        group = parser.add_argument_group(f"{name} mode", op_cls.__doc__)
        op_cls.add_arguments(group)

    return parser


def report(results: list[RepoResult], operation_name: str, dry_run: bool = False) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    succeeded = [r for r in results if r.ok]
    skipped = sum(1 for r in results if r.action == "skipped")
    errors = sum(1 for r in results if r.action == "error")

    logger.info(
        f"Done: {len(results)} repositories, {len(succeeded)} {'would succeed' if dry_run else 'succeeded'}, "
        f"{skipped} skipped, {errors} errors"
    )
    if succeeded:
        logger.info(f"Successful {operation_name} results:")
        for result in succeeded:
            logger.info(f"  - {result.detail}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    logger = setup_logging(json_mode=args.json_output, verbose=args.verbose)

    try:
        operation = resolve_operation(args)
    except ConfigError as e:
        logger.error(f"ERROR: {e}")
        return 1

    logger.info(f"Mode: {operation.operation_name}")
    logger.info(f"Search path: {args.path}")
    for line in operation.describe():
        logger.info(line)
    if args.dry_run:
        logger.info("DRY-RUN MODE - no changes will be made")

    repositories = find_repositories(args.path, max_depth=args.max_depth)
    repositories = filter_repositories(repositories, args.path, args.filter_pattern)
    logger.info(f"Found {len(repositories)} git repositories")

    try:
        results = run_batch(operation, repositories, workers=args.workers)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    report(results, operation.operation_name, dry_run=args.dry_run)
    return 0


if __name__ == "__main__":
    sys.exit(main())
