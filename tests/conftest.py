"""Pytest configuration and fixtures."""

import sys
from collections.abc import Sequence
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from postdesk.app import create_app
from postdesk.config import Settings
from postdesk.content.entries import EntryOperations
from postdesk.content.posts import PostRegistry
from postdesk.content.uploads import UploadIngest
from postdesk.services.collaborators import ProcessResult


class FakeRunner:
    """Process runner that records calls and replays canned results."""

    def __init__(self, results: list[ProcessResult] | None = None) -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self.results = list(results or [])

    async def __call__(self, argv: Sequence[str], cwd: Path) -> ProcessResult:
        self.calls.append((list(argv), cwd))
        if self.results:
            return self.results.pop(0)
        return ProcessResult(returncode=0)


class FakeScaffolder:
    """Scaffolder that lays down a post with an index document."""

    def __init__(self, posts_root: Path, result: ProcessResult | None = None) -> None:
        self.posts_root = posts_root
        self.result = result or ProcessResult(returncode=0)
        self.names: list[str] = []

    async def __call__(self, name: str) -> ProcessResult:
        self.names.append(name)
        if self.result.ok:
            post_dir = self.posts_root / name
            post_dir.mkdir(parents=True)
            (post_dir / "index.md").write_text(f"---\ntitle: {name}\n---\n", encoding="utf-8")
        return self.result


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Create a content root with an empty posts directory."""
    root = tmp_path / "content"
    (root / "posts").mkdir(parents=True)
    (root / "website.fish").write_text("# scaffold\n", encoding="utf-8")
    return root


@pytest.fixture
def posts_root(content_root: Path) -> Path:
    """Absolute posts directory."""
    return (content_root / "posts").resolve()


@pytest.fixture
def post_dir(posts_root: Path) -> Path:
    """A post named ``my-post`` with an index document."""
    path = posts_root / "my-post"
    path.mkdir()
    (path / "index.md").write_text("# Hello\n", encoding="utf-8")
    return path


@pytest.fixture
def entries(posts_root: Path) -> EntryOperations:
    """Entry operations over the test posts root."""
    return EntryOperations(posts_root)


@pytest.fixture
def scaffolder(posts_root: Path) -> FakeScaffolder:
    """Scaffolder that creates posts directly on disk."""
    return FakeScaffolder(posts_root)


@pytest.fixture
def registry(entries: EntryOperations, scaffolder: FakeScaffolder) -> PostRegistry:
    """Post registry over the test posts root."""
    return PostRegistry(entries, scaffolder)


@pytest.fixture
def uploads(entries: EntryOperations) -> UploadIngest:
    """Upload ingest with a small cap."""
    return UploadIngest(entries, max_bytes=16)


@pytest.fixture
def runner() -> FakeRunner:
    """Process runner that succeeds without spawning anything."""
    return FakeRunner()


@pytest.fixture
def settings(content_root: Path, tmp_path: Path) -> Settings:
    """Create test settings."""
    site = tmp_path / "site"
    site.mkdir()
    return Settings(
        host="127.0.0.1",
        port=4000,
        debug=True,
        content_root=content_root,
        site_repo=site,
        max_upload_bytes=64,
    )


@pytest.fixture
def client(settings: Settings, scaffolder: FakeScaffolder, runner: FakeRunner) -> TestClient:
    """Create test client with configured app."""
    app = create_app(settings, scaffolder=scaffolder, runner=runner)
    return TestClient(app)
