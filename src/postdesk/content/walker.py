"""Directory tree traversal for post file listings."""

import os
import stat as stat_module
from datetime import datetime, timezone
from pathlib import Path

import structlog

from postdesk.content.errors import EntryNotFoundError, TreeTooDeepError
from postdesk.content.paths import is_excluded, is_within
from postdesk.content.schemas import FileSystemNode

logger = structlog.get_logger()

MAX_DEPTH = 64


def sort_key(node: FileSystemNode) -> tuple[bool, str, str]:
    """Order directories first, then names case-insensitively.

    The raw name breaks ties so names differing only in case keep a
    deterministic order.
    """
    return (node.type != "directory", node.name.casefold(), node.name)


def _inside(root: Path, target: Path) -> bool:
    return is_within(str(root), os.path.realpath(target))


def walk_directory(
    absolute_path: Path,
    relative_path: str,
    depth: int,
    root: Path,
    max_depth: int = MAX_DEPTH,
) -> list[FileSystemNode]:
    """Recursively list a directory into sorted tree nodes.

    Entries that vanish or become unreadable mid-walk are skipped; the
    result is a point-in-time view, not a transactional snapshot.

    Args:
        absolute_path: Directory to list.
        relative_path: Its path relative to the post root.
        depth: Current recursion depth.
        root: Real path of the post root, used to contain symlinks.
        max_depth: Maximum recursion depth allowed.

    Returns:
        Sorted child nodes of the directory.

    Raises:
        TreeTooDeepError: If nesting exceeds ``max_depth``.
    """
    if depth > max_depth:
        raise TreeTooDeepError(
            f"Directory nesting exceeds {max_depth} levels",
            relative_path,
        )

    try:
        entries = list(os.scandir(absolute_path))
    except OSError as e:
        logger.debug("tree_directory_skipped", path=relative_path, error=str(e))
        return []

    nodes: list[FileSystemNode] = []

    for entry in entries:
        if is_excluded(entry.name):
            continue

        child_rel = f"{relative_path}/{entry.name}" if relative_path else entry.name
        child_path = Path(entry.path)

        try:
            if entry.is_symlink() and not _inside(root, child_path):
                logger.debug("tree_symlink_skipped", path=child_rel)
                continue
            stat = child_path.stat()
        except OSError as e:
            logger.debug("tree_entry_skipped", path=child_rel, error=str(e))
            continue

        if stat_module.S_ISDIR(stat.st_mode):
            nodes.append(
                FileSystemNode(
                    type="directory",
                    name=entry.name,
                    path=child_rel,
                    children=walk_directory(
                        child_path, child_rel, depth + 1, root, max_depth
                    ),
                )
            )
        elif stat_module.S_ISREG(stat.st_mode):
            nodes.append(
                FileSystemNode(
                    type="file",
                    name=entry.name,
                    path=child_rel,
                    size=stat.st_size,
                    modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )

    nodes.sort(key=sort_key)
    return nodes


def build_tree(post_root: Path, max_depth: int = MAX_DEPTH) -> list[FileSystemNode]:
    """Build the file tree of a post.

    Args:
        post_root: Absolute path of the post directory.
        max_depth: Maximum nesting to traverse.

    Returns:
        Top-level nodes of the post, sorted directories first.

    Raises:
        EntryNotFoundError: If the post directory is missing or unreadable.
        TreeTooDeepError: If nesting exceeds ``max_depth``.
    """
    if not post_root.is_dir() or not os.access(post_root, os.R_OK | os.X_OK):
        raise EntryNotFoundError("Post not found", post_root.name)

    root = Path(os.path.realpath(post_root))
    return walk_directory(post_root, "", 0, root, max_depth)
