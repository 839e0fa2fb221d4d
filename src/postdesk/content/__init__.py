"""Content module: the sandboxed post tree."""

from postdesk.content.entries import EntryOperations
from postdesk.content.errors import (
    ContentError,
    EntryExistsError,
    EntryNotFoundError,
    ExternalProcessError,
    InvalidNameError,
    PathTraversalError,
    PayloadTooLargeError,
    TreeTooDeepError,
)
from postdesk.content.locks import KeyedLocks, NullLocks, PostLocks, build_locks
from postdesk.content.paths import (
    assert_simple_name,
    is_excluded,
    resolve_within,
    sanitize_file_name,
)
from postdesk.content.posts import PostRegistry
from postdesk.content.schemas import FileSystemNode, PostSummary
from postdesk.content.uploads import UploadIngest
from postdesk.content.walker import build_tree

__all__ = [
    "ContentError",
    "EntryExistsError",
    "EntryNotFoundError",
    "EntryOperations",
    "ExternalProcessError",
    "FileSystemNode",
    "InvalidNameError",
    "KeyedLocks",
    "NullLocks",
    "PathTraversalError",
    "PayloadTooLargeError",
    "PostLocks",
    "PostRegistry",
    "PostSummary",
    "TreeTooDeepError",
    "UploadIngest",
    "assert_simple_name",
    "build_locks",
    "build_tree",
    "is_excluded",
    "resolve_within",
    "sanitize_file_name",
]
