"""Site deploy endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi import APIRouter, Request

from postdesk.content.schemas import DeployRequest, ErrorResponse, MessageResponse

if TYPE_CHECKING:
    from postdesk.services.collaborators import Deployer

logger = structlog.get_logger()

router = APIRouter(tags=["deploy"])


@router.post(
    "/deploy",
    response_model=MessageResponse,
    response_model_exclude_none=True,
    responses={
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Publish the site",
    description="Commits and pushes the site repository with the given message.",
)
async def deploy(request: Request, payload: DeployRequest) -> MessageResponse:
    """Run the deploy sequence.

    Args:
        request: FastAPI request (provides access to app state).
        payload: Commit message.

    Returns:
        Confirmation message.
    """
    deployer: Deployer = request.app.state.deployer
    await deployer(payload.message)
    logger.info("site_deployed")
    return MessageResponse(message="Deployed successfully")
