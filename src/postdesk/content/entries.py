"""Create, rename and delete primitives confined to a post directory."""

import errno
import os
import shutil
from pathlib import Path

import structlog

from postdesk.content.errors import (
    EntryExistsError,
    EntryNotFoundError,
    InvalidNameError,
)
from postdesk.content.locks import NullLocks, PostLocks
from postdesk.content.paths import (
    assert_real_within,
    assert_simple_name,
    resolve_within,
)

logger = structlog.get_logger()


def move_entry(source: Path, target: Path) -> None:
    """Move a file or directory tree in a single rename where possible.

    Falls back to a copy-and-delete move only when source and target live on
    different devices.
    """
    try:
        os.rename(source, target)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        shutil.move(str(source), str(target))


def delete_entry(target: Path) -> None:
    """Delete a file, symlink or directory tree."""
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
    else:
        target.unlink()


class EntryOperations:
    """Mutating operations on entries inside post directories.

    Every path argument is resolved against the post root before any I/O,
    and every mutation runs under the lock for its post.

    Attributes:
        posts_root: Absolute directory holding one directory per post.
    """

    def __init__(self, posts_root: Path, locks: PostLocks | None = None) -> None:
        """Initialize entry operations.

        Args:
            posts_root: Absolute directory holding one directory per post.
            locks: Serialization strategy for writers. Defaults to none.
        """
        self.posts_root = Path(os.path.abspath(posts_root))
        self.locks = locks if locks is not None else NullLocks()

    def post_root(self, slug: str) -> Path:
        """Resolve a post slug to its directory without checking existence.

        Raises:
            InvalidNameError: If the slug is not a bare name.
        """
        return resolve_within(self.posts_root, assert_simple_name(slug))

    def ensure_post_directory(self, slug: str) -> Path:
        """Resolve a post slug and require its directory to exist.

        Raises:
            InvalidNameError: If the slug is not a bare name.
            EntryNotFoundError: If the post directory is absent.
        """
        post_dir = self.post_root(slug)
        if not post_dir.is_dir():
            raise EntryNotFoundError("Post not found", slug)
        return post_dir

    def create_directory(self, slug: str, parent: str, name: str) -> Path:
        """Create a folder inside a post.

        The post directory itself is created if missing, since a folder can
        be the first write into a freshly scaffolded post.

        Args:
            slug: Post identifier.
            parent: Parent directory relative to the post root.
            name: Bare name of the new folder.

        Returns:
            Absolute path of the created folder.

        Raises:
            InvalidNameError: If ``name`` is not a bare name.
            PathTraversalError: If ``parent`` escapes the post, directly or
                through a symlink.
            EntryExistsError: If the folder already exists.
        """
        assert_simple_name(name)
        post_dir = self.post_root(slug)

        with self.locks.hold(slug):
            post_dir.mkdir(parents=True, exist_ok=True)
            parent_dir = assert_real_within(post_dir, resolve_within(post_dir, parent))
            folder = parent_dir / name

            if folder.exists() or folder.is_symlink():
                raise EntryExistsError("Folder already exists", name)

            folder.mkdir(parents=True)

        logger.info("folder_created", slug=slug, parent=parent, name=name)
        return folder

    def rename(self, slug: str, source: str, target: str) -> Path:
        """Rename or move an entry within a post.

        Never overwrites: an existing target is reported, and the source is
        left untouched.

        Args:
            slug: Post identifier.
            source: Current path relative to the post root.
            target: New path relative to the post root.

        Returns:
            Absolute path of the entry at its new location.

        Raises:
            EntryNotFoundError: If the post or source is absent.
            EntryExistsError: If the target already exists.
            InvalidNameError: If either side is the post root, or a directory
                would move into its own subtree.
            PathTraversalError: If either path escapes the post, directly or
                through a symlinked directory.
        """
        post_dir = self.ensure_post_directory(slug)
        source_path = resolve_within(post_dir, source)
        target_path = resolve_within(post_dir, target)

        if source_path == post_dir:
            raise InvalidNameError("Cannot rename the post root", source)
        if target_path == post_dir:
            raise InvalidNameError("Cannot rename onto the post root", target)

        if source_path in target_path.parents:
            raise InvalidNameError("Cannot move a directory into itself", target)

        with self.locks.hold(slug):
            assert_real_within(post_dir, source_path.parent)
            assert_real_within(post_dir, target_path.parent)

            if not source_path.exists() and not source_path.is_symlink():
                raise EntryNotFoundError("Source not found", source)

            if target_path.exists() or target_path.is_symlink():
                raise EntryExistsError("Target already exists", target)

            target_path.parent.mkdir(parents=True, exist_ok=True)
            move_entry(source_path, target_path)

        logger.info("entry_renamed", slug=slug, source=source, target=target)
        return target_path

    def remove(self, slug: str, target: str) -> None:
        """Delete a file or directory tree inside a post.

        Args:
            slug: Post identifier.
            target: Path relative to the post root.

        Raises:
            EntryNotFoundError: If the post or target is absent.
            InvalidNameError: If the target is the post root itself.
            PathTraversalError: If the target escapes the post, directly or
                through a symlinked directory.
        """
        post_dir = self.ensure_post_directory(slug)
        target_path = resolve_within(post_dir, target)

        if target_path == post_dir:
            raise InvalidNameError("Cannot delete the post root", target)

        with self.locks.hold(slug):
            assert_real_within(post_dir, target_path.parent)

            if not target_path.exists() and not target_path.is_symlink():
                raise EntryNotFoundError("Target not found", target)

            delete_entry(target_path)

        logger.info("entry_deleted", slug=slug, target=target)
