"""Post file tree endpoint tests."""

import os
from pathlib import Path

from fastapi.testclient import TestClient

from postdesk.app import create_app
from postdesk.config import Settings
from postdesk.middleware.limits import MULTIPART_OVERHEAD


def test_tree_lists_post_files(client: TestClient, post_dir: Path) -> None:
    """The tree is sorted with directories first."""
    (post_dir / "images").mkdir()
    (post_dir / "images" / "a.png").write_bytes(b"png")
    (post_dir / "B.md").write_text("b")

    response = client.get("/api/posts/my-post/files")

    assert response.status_code == 200
    tree = response.json()["tree"]
    assert [node["name"] for node in tree] == ["images", "B.md", "index.md"]
    assert tree[0]["children"][0]["path"] == "images/a.png"
    assert tree[1]["size"] == 1
    assert "modifiedAt" in tree[1]


def test_tree_for_missing_post(client: TestClient) -> None:
    """Listing an unknown post returns 404."""
    response = client.get("/api/posts/ghost/files")
    assert response.status_code == 404


def test_upload_file(client: TestClient, post_dir: Path) -> None:
    """Multipart uploads land in the target directory."""
    response = client.post(
        "/api/posts/my-post/files/upload",
        files={"file": ("cover.png", b"image-bytes", "image/png")},
        data={"target": "images"},
    )
    assert response.status_code == 201
    assert response.json() == {"message": "File uploaded"}
    assert (post_dir / "images" / "cover.png").read_bytes() == b"image-bytes"


def test_upload_too_large(client: TestClient, post_dir: Path) -> None:
    """Payloads over the cap return 413 and leave no file."""
    response = client.post(
        "/api/posts/my-post/files/upload",
        files={"file": ("big.bin", b"x" * 65, "application/octet-stream")},
    )
    assert response.status_code == 413
    assert response.json()["kind"] == "PayloadTooLarge"
    assert sorted(p.name for p in post_dir.iterdir()) == ["index.md"]


def test_upload_requires_file(client: TestClient, post_dir: Path) -> None:
    """A request without a file part fails validation."""
    response = client.post("/api/posts/my-post/files/upload", data={"target": ""})
    assert response.status_code == 422


def test_upload_traversal_target(client: TestClient, post_dir: Path) -> None:
    """Targets outside the post return 400."""
    response = client.post(
        "/api/posts/my-post/files/upload",
        files={"file": ("a.txt", b"hi", "text/plain")},
        data={"target": "../../"},
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "PathTraversal"


def test_create_folder_then_conflict(client: TestClient, post_dir: Path) -> None:
    """Creating the same folder twice returns 201 then 409."""
    url = "/api/posts/my-post/files/create-folder"
    assert client.post(url, json={"parent": "", "name": "assets"}).status_code == 201
    assert client.post(url, json={"name": "assets"}).status_code == 409


def test_rename_round_trip(client: TestClient, post_dir: Path) -> None:
    """Create, rename and list shows only the new folder."""
    client.post("/api/posts/my-post/files/create-folder", json={"name": "assets"})

    response = client.put(
        "/api/posts/my-post/files/rename",
        json={"source": "assets", "target": "media"},
    )

    assert response.status_code == 200
    names = [node["name"] for node in client.get("/api/posts/my-post/files").json()["tree"]]
    assert names == ["media", "index.md"]


def test_rename_requires_both_paths(client: TestClient, post_dir: Path) -> None:
    """Missing source or target fails validation."""
    response = client.put("/api/posts/my-post/files/rename", json={"source": "a"})
    assert response.status_code == 422


def test_rename_conflict(client: TestClient, post_dir: Path) -> None:
    """Renaming onto an existing entry returns 409."""
    (post_dir / "other.md").write_text("x")
    response = client.put(
        "/api/posts/my-post/files/rename",
        json={"source": "index.md", "target": "other.md"},
    )
    assert response.status_code == 409


def test_delete_entry(client: TestClient, post_dir: Path) -> None:
    """Deleting takes the target from the JSON body."""
    (post_dir / "old.md").write_text("x")
    response = client.request(
        "DELETE",
        "/api/posts/my-post/files",
        json={"target": "old.md"},
    )
    assert response.status_code == 200
    assert not (post_dir / "old.md").exists()


def test_delete_traversal(client: TestClient, post_dir: Path) -> None:
    """Deleting outside the post is rejected before any I/O."""
    response = client.request(
        "DELETE",
        "/api/posts/my-post/files",
        json={"target": "../../website.fish"},
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "PathTraversal"


def test_media_serves_post_files(client: TestClient, post_dir: Path) -> None:
    """Post files are readable under /media/posts for previews."""
    response = client.get("/media/posts/my-post/index.md")
    assert response.status_code == 200
    assert response.text == "# Hello\n"


def test_upload_declared_too_large_is_refused_before_parsing(
    settings: Settings, post_dir: Path
) -> None:
    """A body whose length cannot fit is rejected before the route runs."""
    app = create_app(settings)
    app.state.uploads = None
    client = TestClient(app)

    response = client.post(
        "/api/posts/my-post/files/upload",
        files={"file": ("big.bin", b"x" * (MULTIPART_OVERHEAD + 1024))},
    )

    assert response.status_code == 413
    assert response.json() == {
        "error": f"File too large (max {settings.max_upload_bytes} bytes)",
        "kind": "PayloadTooLarge",
    }
    assert sorted(p.name for p in post_dir.iterdir()) == ["index.md"]


def test_upload_through_outward_link(client: TestClient, post_dir: Path, tmp_path: Path) -> None:
    """A symlinked target directory pointing outside returns 400."""
    outside = tmp_path / "outside"
    outside.mkdir()
    os.symlink(outside, post_dir / "link")

    response = client.post(
        "/api/posts/my-post/files/upload",
        files={"file": ("pwn.txt", b"hi", "text/plain")},
        data={"target": "link"},
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "PathTraversal"
    assert list(outside.iterdir()) == []
