"""File tree REST API endpoints for a single post."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, File, Form, Request, UploadFile, status

from postdesk.content.schemas import (
    CreateFolderRequest,
    DeleteEntryRequest,
    ErrorResponse,
    FileTreeResponse,
    MessageResponse,
    RenameEntryRequest,
)
from postdesk.content.walker import build_tree

if TYPE_CHECKING:
    from postdesk.config import Settings
    from postdesk.content.entries import EntryOperations
    from postdesk.content.uploads import UploadIngest

router = APIRouter(prefix="/posts/{slug}/files", tags=["files"])

CHUNK_SIZE = 1024 * 1024  # 1MB


@router.get(
    "",
    response_model=FileTreeResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Get the post file tree",
    description="Returns every file and folder in the post, directories first.",
)
def get_tree(request: Request, slug: str) -> FileTreeResponse:
    """Get the file tree of a post.

    Args:
        request: FastAPI request (provides access to app state).
        slug: Post identifier.

    Returns:
        Sorted tree of nodes relative to the post root.
    """
    entries: EntryOperations = request.app.state.entries
    settings: Settings = request.app.state.settings
    post_dir = entries.ensure_post_directory(slug)
    return FileTreeResponse(tree=build_tree(post_dir, max_depth=settings.max_tree_depth))


@router.post(
    "/upload",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
    },
    summary="Upload a file",
    description="Stores a file in the post, replacing one with the same name.",
)
def upload_file(
    request: Request,
    slug: str,
    file: UploadFile = File(...),
    target: str = Form(default=""),
) -> MessageResponse:
    """Upload a file into a post directory.

    Args:
        request: FastAPI request (provides access to app state).
        slug: Post identifier.
        file: Multipart file part.
        target: Destination directory relative to the post root.

    Returns:
        Confirmation message.
    """
    uploads: UploadIngest = request.app.state.uploads
    chunks = iter(lambda: file.file.read(CHUNK_SIZE), b"")
    uploads.ingest_stream(slug, target, file.filename or "", chunks)
    return MessageResponse(message="File uploaded")


@router.post(
    "/create-folder",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create a folder",
)
def create_folder(request: Request, slug: str, payload: CreateFolderRequest) -> MessageResponse:
    """Create a folder under ``payload.parent``."""
    entries: EntryOperations = request.app.state.entries
    entries.create_directory(slug, payload.parent, payload.name)
    return MessageResponse(message="Folder created")


@router.put(
    "/rename",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Rename or move an entry",
)
def rename_entry(request: Request, slug: str, payload: RenameEntryRequest) -> MessageResponse:
    """Rename or move a file or folder inside the post."""
    entries: EntryOperations = request.app.state.entries
    entries.rename(slug, payload.source, payload.target)
    return MessageResponse(message="Renamed successfully")


@router.delete(
    "",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Delete an entry",
)
def delete_entry(request: Request, slug: str, payload: DeleteEntryRequest) -> MessageResponse:
    """Delete a file or folder tree inside the post."""
    entries: EntryOperations = request.app.state.entries
    entries.remove(slug, payload.target)
    return MessageResponse(message="Deleted successfully")
