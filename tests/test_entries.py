"""Entry operation tests: create folder, rename, delete."""

import os
from pathlib import Path

import pytest

from postdesk.content.entries import EntryOperations
from postdesk.content.errors import (
    EntryExistsError,
    EntryNotFoundError,
    InvalidNameError,
    PathTraversalError,
)
from postdesk.content.walker import build_tree


def _all_paths(nodes: list) -> set[str]:
    paths: set[str] = set()
    for node in nodes:
        paths.add(node.path)
        if node.children:
            paths |= _all_paths(node.children)
    return paths


def test_create_directory_twice_reports_collision(
    entries: EntryOperations, post_dir: Path
) -> None:
    """Folder creation is not idempotent."""
    entries.create_directory("my-post", "", "assets")
    assert (post_dir / "assets").is_dir()

    with pytest.raises(EntryExistsError):
        entries.create_directory("my-post", "", "assets")


def test_create_directory_creates_missing_post(
    entries: EntryOperations, posts_root: Path
) -> None:
    """Folder creation can be the first write into a new post."""
    folder = entries.create_directory("fresh", "", "images")
    assert folder == posts_root / "fresh" / "images"
    assert folder.is_dir()


def test_create_directory_under_nested_parent(
    entries: EntryOperations, post_dir: Path
) -> None:
    """Missing parent segments are created."""
    entries.create_directory("my-post", "media/2024", "raw")
    assert (post_dir / "media" / "2024" / "raw").is_dir()


@pytest.mark.parametrize("name", ["../evil", "a/b", ".."])
def test_create_directory_rejects_path_names(
    entries: EntryOperations, post_dir: Path, name: str
) -> None:
    """A folder name cannot smuggle a path."""
    with pytest.raises(InvalidNameError):
        entries.create_directory("my-post", "", name)


def test_create_directory_rejects_escaping_parent(
    entries: EntryOperations, post_dir: Path
) -> None:
    """The parent path is confined to the post."""
    with pytest.raises(PathTraversalError):
        entries.create_directory("my-post", "../other", "assets")


def test_rename_then_tree_round_trip(entries: EntryOperations, post_dir: Path) -> None:
    """Create, rename and list shows only the new name."""
    entries.create_directory("my-post", "", "assets")
    entries.rename("my-post", "assets", "media")

    names = [node.name for node in build_tree(post_dir)]
    assert names == ["media", "index.md"]


def test_rename_collision_leaves_source_untouched(
    entries: EntryOperations, post_dir: Path
) -> None:
    """Renaming onto an existing entry fails without moving anything."""
    (post_dir / "a.md").write_text("source")
    (post_dir / "b.md").write_text("target")

    with pytest.raises(EntryExistsError):
        entries.rename("my-post", "a.md", "b.md")

    assert (post_dir / "a.md").read_text() == "source"
    assert (post_dir / "b.md").read_text() == "target"


def test_rename_moves_across_directories(
    entries: EntryOperations, post_dir: Path
) -> None:
    """Moves into another directory of the same post are allowed."""
    (post_dir / "photo.jpg").write_bytes(b"jpg")

    entries.rename("my-post", "photo.jpg", "images/photo.jpg")

    assert not (post_dir / "photo.jpg").exists()
    assert (post_dir / "images" / "photo.jpg").read_bytes() == b"jpg"


def test_rename_moves_directory_trees(entries: EntryOperations, post_dir: Path) -> None:
    """Directories move with their contents."""
    (post_dir / "old" / "deep").mkdir(parents=True)
    (post_dir / "old" / "deep" / "file.txt").write_text("x")

    entries.rename("my-post", "old", "new")

    assert (post_dir / "new" / "deep" / "file.txt").read_text() == "x"
    assert not (post_dir / "old").exists()


def test_rename_missing_source(entries: EntryOperations, post_dir: Path) -> None:
    """A missing source is reported as NotFound."""
    with pytest.raises(EntryNotFoundError):
        entries.rename("my-post", "nope.md", "yes.md")


def test_rename_into_own_subtree_is_rejected(
    entries: EntryOperations, post_dir: Path
) -> None:
    """A directory cannot be moved inside itself."""
    (post_dir / "dir").mkdir()
    with pytest.raises(InvalidNameError):
        entries.rename("my-post", "dir", "dir/inner")


def test_rename_outside_post_is_rejected(
    entries: EntryOperations, post_dir: Path, posts_root: Path
) -> None:
    """Neither side of a rename may leave the post."""
    (posts_root / "my-postbar").mkdir()
    with pytest.raises(PathTraversalError):
        entries.rename("my-post", "index.md", "../my-postbar/index.md")
    assert (post_dir / "index.md").exists()


def test_rename_requires_existing_post(entries: EntryOperations) -> None:
    """Renames never create the post directory."""
    with pytest.raises(EntryNotFoundError):
        entries.rename("ghost", "a", "b")


def test_remove_deletes_tree_and_listing_forgets_it(
    entries: EntryOperations, post_dir: Path
) -> None:
    """After deletion neither the entry nor its descendants are listed."""
    (post_dir / "gallery" / "2024").mkdir(parents=True)
    (post_dir / "gallery" / "2024" / "a.png").write_bytes(b"png")

    entries.remove("my-post", "gallery")

    paths = _all_paths(build_tree(post_dir))
    assert not any(p == "gallery" or p.startswith("gallery/") for p in paths)
    assert paths == {"index.md"}


def test_remove_single_file(entries: EntryOperations, post_dir: Path) -> None:
    """Files are unlinked."""
    entries.remove("my-post", "index.md")
    assert not (post_dir / "index.md").exists()


def test_remove_missing_target(entries: EntryOperations, post_dir: Path) -> None:
    """Deleting an absent entry reports NotFound."""
    with pytest.raises(EntryNotFoundError):
        entries.remove("my-post", "nothing-here")


def test_remove_post_root_is_rejected(entries: EntryOperations, post_dir: Path) -> None:
    """The post root is not an entry of itself."""
    with pytest.raises(InvalidNameError):
        entries.remove("my-post", "")
    with pytest.raises(InvalidNameError):
        entries.remove("my-post", "images/..")
    assert post_dir.is_dir()


def test_slug_cannot_escape_posts_root(entries: EntryOperations) -> None:
    """A post identifier is a bare name."""
    with pytest.raises(InvalidNameError):
        entries.ensure_post_directory("../etc")


def test_rename_onto_post_root_names_the_target(
    entries: EntryOperations, post_dir: Path
) -> None:
    """The error names the side that resolved to the post root."""
    with pytest.raises(InvalidNameError) as exc:
        entries.rename("my-post", "index.md", "images/..")
    assert exc.value.path == "images/.."

    with pytest.raises(InvalidNameError) as exc:
        entries.rename("my-post", "", "moved")
    assert exc.value.path == ""


def test_create_directory_through_outward_link_is_rejected(
    entries: EntryOperations, post_dir: Path, tmp_path: Path
) -> None:
    """A symlinked folder pointing outside the post is not a way out."""
    outside = tmp_path / "outside"
    outside.mkdir()
    os.symlink(outside, post_dir / "link")

    with pytest.raises(PathTraversalError):
        entries.create_directory("my-post", "link", "pwn")
    assert list(outside.iterdir()) == []


def test_rename_through_outward_link_is_rejected(
    entries: EntryOperations, post_dir: Path, tmp_path: Path
) -> None:
    """Neither moving into nor out of an outward link is allowed."""
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("secret")
    os.symlink(outside, post_dir / "link")

    with pytest.raises(PathTraversalError):
        entries.rename("my-post", "index.md", "link/index.md")
    with pytest.raises(PathTraversalError):
        entries.rename("my-post", "link/secret.txt", "secret.txt")

    assert (post_dir / "index.md").exists()
    assert sorted(p.name for p in outside.iterdir()) == ["secret.txt"]


def test_remove_through_outward_link_is_rejected(
    entries: EntryOperations, post_dir: Path, tmp_path: Path
) -> None:
    """Files reached through an outward link cannot be deleted."""
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("secret")
    os.symlink(outside, post_dir / "link")

    with pytest.raises(PathTraversalError):
        entries.remove("my-post", "link/secret.txt")
    assert (outside / "secret.txt").exists()


def test_outward_link_itself_can_be_removed(
    entries: EntryOperations, post_dir: Path, tmp_path: Path
) -> None:
    """Removing the link unlinks it and leaves its target alone."""
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "keep.txt").write_text("keep")
    os.symlink(outside, post_dir / "link")

    entries.remove("my-post", "link")

    assert not (post_dir / "link").is_symlink()
    assert (outside / "keep.txt").exists()


def test_inward_link_is_usable(entries: EntryOperations, post_dir: Path) -> None:
    """Links that stay inside the post behave like ordinary folders."""
    (post_dir / "images").mkdir()
    os.symlink(post_dir / "images", post_dir / "pics")

    entries.create_directory("my-post", "pics", "2024")

    assert (post_dir / "images" / "2024").is_dir()
