"""Post REST API endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status

from postdesk.content.schemas import (
    CreatePostRequest,
    ErrorResponse,
    IndexDocument,
    MessageResponse,
    PostListResponse,
    RenamePostRequest,
)

if TYPE_CHECKING:
    from postdesk.content.posts import PostRegistry

router = APIRouter(prefix="/posts", tags=["posts"])


def _registry(request: Request) -> PostRegistry:
    return request.app.state.registry


@router.get(
    "",
    response_model=PostListResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List all posts",
    description="Returns every post directory, most recently modified first.",
)
def list_posts(request: Request) -> PostListResponse:
    """List all posts.

    Args:
        request: FastAPI request (provides access to app state).

    Returns:
        Post summaries with name, slug, index flag and modification time.
    """
    return PostListResponse(posts=_registry(request).list_posts())


@router.post(
    "",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Create a post",
    description="Runs the scaffolding script to lay down a new post.",
)
async def create_post(request: Request, payload: CreatePostRequest) -> MessageResponse:
    """Create a post through the scaffolder.

    Args:
        request: FastAPI request (provides access to app state).
        payload: Name of the new post.

    Returns:
        Confirmation with the post name.
    """
    name = await _registry(request).create_post(payload.name)
    return MessageResponse(message="Post created", name=name)


@router.put(
    "/{slug}",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Rename a post",
)
def rename_post(request: Request, slug: str, payload: RenamePostRequest) -> MessageResponse:
    """Rename a post directory.

    Args:
        request: FastAPI request (provides access to app state).
        slug: Current post identifier.
        payload: New post name.

    Returns:
        Confirmation with the new name.
    """
    name = _registry(request).rename_post(slug, payload.name)
    return MessageResponse(message="Post renamed", name=name)


@router.delete(
    "/{slug}",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a post",
)
def delete_post(request: Request, slug: str) -> MessageResponse:
    """Delete a post and all of its files."""
    _registry(request).delete_post(slug)
    return MessageResponse(message="Post deleted")


@router.get(
    "/{slug}/index",
    response_model=IndexDocument,
    responses={404: {"model": ErrorResponse}},
    summary="Get the index document",
)
def get_index(request: Request, slug: str) -> IndexDocument:
    """Return the raw markdown of a post's index document."""
    return IndexDocument(content=_registry(request).read_index(slug))


@router.put(
    "/{slug}/index",
    response_model=IndexDocument,
    responses={404: {"model": ErrorResponse}},
    summary="Save the index document",
)
def put_index(request: Request, slug: str, payload: IndexDocument) -> IndexDocument:
    """Replace a post's index document.

    Args:
        request: FastAPI request (provides access to app state).
        slug: Post identifier.
        payload: New markdown content.

    Returns:
        The stored content.
    """
    return IndexDocument(content=_registry(request).write_index(slug, payload.content))
