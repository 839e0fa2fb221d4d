"""Service configuration loaded from environment variables."""
from pathlib import Path
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration loaded from environment variables.

    Attributes:
        host: Bind address for the API server.
        port: Port number for the API server.
        debug: Enable debug logging, API documentation and error details.
        cors_origins_raw: Raw comma-separated CORS origins string.
        shutdown_timeout: Seconds to wait for graceful shutdown.
        key: API key for authenticating requests. Empty disables auth.
        content_root: Directory holding ``posts/`` and the scaffold script.
        index_filename: Canonical markdown document inside each post.
        scaffold_script: Post scaffolding script, relative to content_root.
        scaffold_shell: Interpreter used to run the scaffold script.
        site_repo: Git checkout published by the deploy endpoint.
        max_upload_bytes: Largest accepted upload, inclusive.
        max_tree_depth: Nesting limit for file tree listings.
        lock_strategy: Writer serialization per post (keyed or none).
    """

    model_config = SettingsConfigDict(
        env_prefix="POSTDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 4000
    debug: bool = False
    cors_origins_raw: str = "*"
    shutdown_timeout: float = 30.0
    key: str = ""

    content_root: Path = Path("content")
    index_filename: str = "index.md"
    scaffold_script: str = "website.fish"
    scaffold_shell: str = "fish"
    site_repo: Path = Path("~/Code/hugoSite")

    max_upload_bytes: int = 50 * 1024 * 1024
    max_tree_depth: int = 64
    lock_strategy: Literal["keyed", "none"] = "keyed"

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string.

        Returns:
            List of allowed origin URLs.
        """
        return [
            origin.strip()
            for origin in self.cors_origins_raw.split(",")
            if origin.strip()
        ]

    @computed_field
    @property
    def posts_root(self) -> Path:
        """Absolute directory holding one directory per post."""
        return self.content_root.expanduser().resolve() / "posts"

    @computed_field
    @property
    def scaffold_script_path(self) -> Path:
        """Absolute path of the post scaffolding script."""
        return self.content_root.expanduser().resolve() / self.scaffold_script

    @computed_field
    @property
    def site_repo_path(self) -> Path:
        """Absolute path of the published site checkout."""
        return self.site_repo.expanduser().resolve()
