"""Upload ingest: write client files into a post directory."""

import contextlib
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

import structlog

from postdesk.content.entries import EntryOperations
from postdesk.content.errors import EntryExistsError, PayloadTooLargeError
from postdesk.content.paths import (
    assert_real_within,
    resolve_within,
    sanitize_file_name,
)

logger = structlog.get_logger()

MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50MB


class UploadIngest:
    """Stores uploaded files inside posts.

    Uploads may establish structure: the post directory and the target
    directory are created when missing. A file already at the destination
    is replaced, unlike folder creation and rename which never overwrite.

    Attributes:
        entries: Entry operations providing the posts root and locks.
        max_bytes: Largest accepted payload, inclusive.
    """

    def __init__(
        self,
        entries: EntryOperations,
        max_bytes: int = MAX_UPLOAD_BYTES,
    ) -> None:
        self.entries = entries
        self.max_bytes = max_bytes

    def _too_large(self, file_name: str) -> PayloadTooLargeError:
        return PayloadTooLargeError(
            f"File too large (max {self.max_bytes} bytes)",
            file_name,
        )

    def _prepare(self, post_dir: Path, destination_dir: Path, name: str) -> Path:
        post_dir.mkdir(parents=True, exist_ok=True)
        assert_real_within(post_dir, destination_dir)

        if destination_dir.exists() and not destination_dir.is_dir():
            raise EntryExistsError("Target is not a directory", destination_dir.name)
        destination_dir.mkdir(parents=True, exist_ok=True)

        destination = destination_dir / name
        if destination.is_dir():
            raise EntryExistsError("A folder with this name already exists", name)
        return destination

    def ingest(self, slug: str, target_dir: str, file_name: str, data: bytes) -> Path:
        """Write a complete payload to ``target_dir/file_name``.

        Args:
            slug: Post identifier.
            target_dir: Directory relative to the post root.
            file_name: Client-supplied file name; any directory part is dropped.
            data: File contents.

        Returns:
            Absolute path of the stored file.

        Raises:
            PayloadTooLargeError: If ``data`` exceeds the cap. Nothing is
                written in that case.
            InvalidNameError: If the file name is unusable.
            PathTraversalError: If ``target_dir`` escapes the post, directly
                or through a symlinked directory.
        """
        if len(data) > self.max_bytes:
            raise self._too_large(file_name)

        return self.ingest_stream(slug, target_dir, file_name, [data])

    def ingest_stream(
        self,
        slug: str,
        target_dir: str,
        file_name: str,
        chunks: Iterable[bytes],
    ) -> Path:
        """Write a payload arriving in chunks, enforcing the cap as it streams.

        The file is assembled in a temp file beside the destination and moved
        into place only once complete, so an oversized or failed upload
        leaves nothing behind.

        Raises:
            PayloadTooLargeError: If the chunks add up to more than the cap.
        """
        name = sanitize_file_name(file_name)
        post_dir = self.entries.post_root(slug)
        destination_dir = resolve_within(post_dir, target_dir or "")

        with self.entries.locks.hold(slug):
            destination = self._prepare(post_dir, destination_dir, name)
            fd, tmp_name = tempfile.mkstemp(
                dir=destination.parent,
                prefix=f".{destination.name}.",
                suffix=".part",
            )
            written = 0
            try:
                with os.fdopen(fd, "wb") as f:
                    for chunk in chunks:
                        written += len(chunk)
                        if written > self.max_bytes:
                            raise self._too_large(file_name)
                        f.write(chunk)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, destination)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_name)
                raise

        logger.info(
            "upload_stored",
            slug=slug,
            target=target_dir,
            name=destination.name,
            size=written,
        )
        return destination

