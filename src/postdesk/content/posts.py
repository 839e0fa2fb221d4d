"""Post registry: top-level post directories and their index documents."""

from __future__ import annotations

import contextlib
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from postdesk.content.entries import EntryOperations, delete_entry, move_entry
from postdesk.content.errors import (
    EntryExistsError,
    EntryNotFoundError,
    ExternalProcessError,
)
from postdesk.content.loader import read_title
from postdesk.content.paths import assert_simple_name, is_excluded
from postdesk.content.schemas import PostSummary

if TYPE_CHECKING:
    from postdesk.services.collaborators import Scaffolder

logger = structlog.get_logger()

INDEX_FILENAME = "index.md"


def write_text_atomic(path: Path, content: str) -> None:
    """Replace a text file in one step via a sibling temp file."""
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


class PostRegistry:
    """Enumerates and manages the posts under the posts root.

    Attributes:
        entries: Entry operations scoped to the same posts root.
        scaffolder: Collaborator that lays down a new post.
        index_filename: Name of the canonical document inside a post.
    """

    def __init__(
        self,
        entries: EntryOperations,
        scaffolder: Scaffolder,
        index_filename: str = INDEX_FILENAME,
    ) -> None:
        self.entries = entries
        self.scaffolder = scaffolder
        self.index_filename = assert_simple_name(index_filename)

    @property
    def posts_root(self) -> Path:
        return self.entries.posts_root

    def summarize(self, post_dir: Path) -> PostSummary:
        """Build the summary of one post directory.

        A missing index document is not an error; the directory's own
        modification time is used instead.
        """
        dir_stat = post_dir.stat()
        index_path = post_dir / self.index_filename

        try:
            index_stat = index_path.stat()
        except OSError:
            index_stat = None

        has_index = index_stat is not None and index_path.is_file()
        mtime = index_stat.st_mtime if has_index else dir_stat.st_mtime

        return PostSummary(
            name=post_dir.name,
            slug=post_dir.name,
            has_index=has_index,
            modified_at=datetime.fromtimestamp(mtime, tz=timezone.utc),
            title=read_title(index_path) if has_index else None,
        )

    def list_posts(self) -> list[PostSummary]:
        """List every post, most recently modified first.

        Returns:
            One summary per first-level directory; files at that level are
            ignored.

        Raises:
            EntryNotFoundError: If the posts root does not exist.
        """
        try:
            entries = list(os.scandir(self.posts_root))
        except FileNotFoundError as e:
            raise EntryNotFoundError(
                f"Posts directory not found. Expected at {self.posts_root}",
            ) from e

        posts: list[PostSummary] = []
        for entry in entries:
            if is_excluded(entry.name):
                continue
            try:
                if not entry.is_dir():
                    continue
                posts.append(self.summarize(Path(entry.path)))
            except OSError as e:
                logger.debug("post_skipped", slug=entry.name, error=str(e))

        posts.sort(key=lambda p: p.modified_at, reverse=True)
        return posts

    async def create_post(self, name: str) -> str:
        """Create a post by delegating to the scaffolder.

        Args:
            name: Bare name of the new post.

        Returns:
            The post name.

        Raises:
            InvalidNameError: If the name is not a bare name.
            EntryExistsError: If a post with the name exists.
            ExternalProcessError: If the scaffolder fails; its diagnostic
                output is the error message.
        """
        post_dir = self.entries.post_root(name)
        if post_dir.exists():
            raise EntryExistsError("A post with this name already exists", name)

        result = await self.scaffolder(name)
        if not result.ok:
            raise ExternalProcessError(
                result.diagnostic or "Failed to create post",
                output=result.diagnostic,
            )

        logger.info("post_created", slug=name)
        return name

    def rename_post(self, slug: str, new_name: str) -> str:
        """Rename a post directory.

        Raises:
            InvalidNameError: If either name is not a bare name.
            EntryNotFoundError: If the post does not exist.
            EntryExistsError: If a post already uses ``new_name``.
        """
        assert_simple_name(new_name)
        current = self.entries.ensure_post_directory(slug)
        target = self.entries.post_root(new_name)

        with self.entries.locks.hold(slug, new_name):
            if target.exists() or target.is_symlink():
                raise EntryExistsError(
                    "A post with the new name already exists", new_name
                )
            move_entry(current, target)

        logger.info("post_renamed", slug=slug, new_slug=new_name)
        return new_name

    def delete_post(self, slug: str) -> None:
        """Delete a post directory and everything in it.

        A post that is a symlink to a directory elsewhere is unlinked; the
        directory it points to is left alone.

        Raises:
            EntryNotFoundError: If the post does not exist.
        """
        post_dir = self.entries.ensure_post_directory(slug)

        with self.entries.locks.hold(slug):
            delete_entry(post_dir)

        logger.info("post_deleted", slug=slug)

    def read_index(self, slug: str) -> str:
        """Return the index document of a post.

        Bytes that are not valid UTF-8 are replaced with U+FFFD rather than
        failing the read.

        Raises:
            EntryNotFoundError: If the post or its index document is absent.
        """
        index_path = self.entries.ensure_post_directory(slug) / self.index_filename

        try:
            return index_path.read_text(encoding="utf-8", errors="replace")
        except (FileNotFoundError, IsADirectoryError) as e:
            raise EntryNotFoundError(f"{self.index_filename} not found", slug) from e

    def write_index(self, slug: str, content: str) -> str:
        """Store the index document of a post, replacing it atomically.

        Returns:
            The stored content.

        Raises:
            EntryNotFoundError: If the post does not exist.
        """
        index_path = self.entries.ensure_post_directory(slug) / self.index_filename

        with self.entries.locks.hold(slug):
            write_text_atomic(index_path, content)

        logger.info("index_written", slug=slug, size=len(content))
        return content
