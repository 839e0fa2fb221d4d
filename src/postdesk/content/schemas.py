"""Pydantic schemas for content API requests and responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FileSystemNode(BaseModel):
    """Directory tree node."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["file", "directory"]
    name: str
    path: str = Field(description="Relative path from the post root")
    size: int | None = Field(default=None, description="File size in bytes")
    modified_at: datetime | None = Field(
        default=None,
        alias="modifiedAt",
        description="File modification time",
    )
    children: list["FileSystemNode"] | None = None


class PostSummary(BaseModel):
    """Post entry for list responses."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    slug: str
    has_index: bool = Field(alias="hasIndex")
    modified_at: datetime = Field(alias="modifiedAt")
    title: str | None = Field(default=None, description="Frontmatter title")


class PostFrontmatter(BaseModel):
    """Frontmatter keys read from an index document."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = None


class PostListResponse(BaseModel):
    """Posts listing, most recently modified first."""

    posts: list[PostSummary]


class FileTreeResponse(BaseModel):
    """Files listing for a single post."""

    tree: list[FileSystemNode]


class CreatePostRequest(BaseModel):
    """Request body for creating a post."""

    name: str = Field(min_length=1, max_length=200)


class RenamePostRequest(BaseModel):
    """Request body for renaming a post."""

    name: str = Field(min_length=1, max_length=200)


class IndexDocument(BaseModel):
    """Index document content, in both directions."""

    content: str


class CreateFolderRequest(BaseModel):
    """Request body for creating a folder inside a post."""

    parent: str = ""
    name: str = Field(min_length=1, max_length=255)


class RenameEntryRequest(BaseModel):
    """Request body for renaming or moving an entry inside a post."""

    source: str = Field(min_length=1)
    target: str = Field(min_length=1)


class DeleteEntryRequest(BaseModel):
    """Request body for deleting an entry inside a post."""

    target: str = Field(min_length=1)


class DeployRequest(BaseModel):
    """Request body for publishing the site."""

    message: str = Field(min_length=1, max_length=2000)


class MessageResponse(BaseModel):
    """Acknowledgement for a mutating request."""

    message: str
    name: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    kind: str
    detail: str | None = None
