"""Operations for gl-batch."""

from gl_batch.operations.base import (
    REPOSITORY_ERRORS,
    Operation,
    SkipRepository,
    get_operation_registry,
    register_operation,
)

# Import all operations to register them
from gl_batch.operations.merge_request import MergeRequestOperation
from gl_batch.operations.tag import TagOperation

__all__ = [
    "Operation",
    "REPOSITORY_ERRORS",
    "SkipRepository",
    "register_operation",
    "get_operation_registry",
    "MergeRequestOperation",
    "TagOperation",
]
