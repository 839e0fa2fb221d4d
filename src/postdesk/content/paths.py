"""Security-first path resolution for post content."""
import os
from pathlib import Path

from postdesk.content.errors import InvalidNameError, PathTraversalError

EXCLUDED_PATTERNS: frozenset[str] = frozenset({
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    ".git",
    "__pycache__",
})


def is_within(base: str, candidate: str) -> bool:
    """Check that ``candidate`` equals ``base`` or sits below it segment-wise."""
    return candidate == base or candidate.startswith(base.rstrip(os.sep) + os.sep)


def resolve_within(root: Path, relative: str = "") -> Path:
    """Resolve a root-relative path to an absolute path inside ``root``.

    The join is normalized lexically, then checked segment-wise against the
    root so that a sibling sharing the root as a string prefix (``/posts/foo``
    vs ``/posts/foobar``) is never accepted.

    Args:
        root: Absolute sandbox root.
        relative: Slash-delimited path relative to the root. Empty means the
            root itself.

    Returns:
        Normalized absolute path equal to or below the root.

    Raises:
        InvalidNameError: If the path is not a string.
        PathTraversalError: If the path contains a null byte or resolves
            outside the root.
    """
    if not isinstance(relative, str):
        raise InvalidNameError("Path must be a string", repr(relative))

    if "\0" in relative:
        raise PathTraversalError("Path contains null byte", relative)

    base = os.path.normpath(os.path.abspath(root))
    cleaned = relative.replace("\\", "/").lstrip("/")
    candidate = os.path.normpath(os.path.join(base, cleaned))

    if not is_within(base, candidate):
        raise PathTraversalError("Path traversal is not allowed", relative)

    return Path(candidate)


def assert_real_within(root: Path, path: Path) -> Path:
    """Require ``path`` to stay inside ``root`` once symlinks are followed.

    Components that do not exist yet are kept as written, so in effect the
    deepest existing ancestor of ``path`` is canonicalized and compared
    against the canonical root. Pass the parent when the operation acts on
    a link itself rather than on what it points to.

    Args:
        root: Sandbox root; may itself be reached through a symlink.
        path: Lexically resolved path from :func:`resolve_within`.

    Returns:
        The path unchanged.

    Raises:
        PathTraversalError: If a symlink along the path leads outside the root.
    """
    if not is_within(os.path.realpath(root), os.path.realpath(path)):
        raise PathTraversalError("Path leads outside the post through a link", path.name)

    return path


def assert_simple_name(name: object) -> str:
    """Validate a bare entry name such as a post or folder name.

    Args:
        name: Candidate name.

    Returns:
        The name unchanged.

    Raises:
        InvalidNameError: If the name is empty or could be used as a path.
    """
    if not name or not isinstance(name, str):
        raise InvalidNameError("Name is required")

    if "/" in name or "\\" in name or ".." in name or "\0" in name or name == ".":
        raise InvalidNameError("Invalid name", name)

    return name


def sanitize_file_name(name: str) -> str:
    """Reduce a client-supplied upload file name to its final component.

    Args:
        name: Original file name, possibly carrying a directory part.

    Returns:
        Base name safe to join onto a target directory.

    Raises:
        InvalidNameError: If nothing usable remains.
    """
    if not isinstance(name, str):
        raise InvalidNameError("File name is required")

    base = name.replace("\\", "/").rsplit("/", 1)[-1].replace("\0", "").strip()
    if base in ("", ".", ".."):
        raise InvalidNameError("Invalid file name", name)

    return base


def is_excluded(name: str) -> bool:
    """Check if an entry should be hidden from listings.

    Args:
        name: Entry base name.

    Returns:
        True for OS metadata artifacts and dot-files.
    """
    if name in EXCLUDED_PATTERNS:
        return True

    return name.startswith(".")
