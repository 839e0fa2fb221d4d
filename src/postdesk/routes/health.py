"""Health check endpoints for liveness and readiness probes."""
from pathlib import Path
from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter(prefix="/health", tags=["health"])


class LivenessResponse(BaseModel):
    """Response model for liveness probe.

    Attributes:
        status: Always 'alive' when process is running.
    """

    status: Literal["alive"]


class ReadinessCheck(BaseModel):
    """Individual dependency check result.

    Attributes:
        name: Identifier for the dependency being checked.
        status: Result of the check ('ok' or 'failed').
        message: Error details when status is 'failed'.
    """

    name: str
    status: Literal["ok", "failed"]
    message: str | None = None


class ReadinessResponse(BaseModel):
    """Response model for readiness probe.

    Attributes:
        status: Overall readiness ('ready' or 'not_ready').
        checks: List of individual dependency check results.
    """

    status: Literal["ready", "not_ready"]
    checks: list[ReadinessCheck]


def _check_directory(name: str, path: Path) -> ReadinessCheck:
    """Verify directory exists and is listable.

    Args:
        name: Check identifier.
        path: Absolute path to directory.

    Returns:
        Check result with status and optional error message.
    """
    try:
        if path.is_dir():
            list(path.iterdir())
            return ReadinessCheck(name=name, status="ok")
        return ReadinessCheck(name=name, status="failed", message="Directory not found")
    except PermissionError as e:
        return ReadinessCheck(
            name=name,
            status="failed",
            message=f"Permission denied: {e}",
        )
    except OSError as e:
        return ReadinessCheck(name=name, status="failed", message=str(e))


def _check_file(name: str, path: Path) -> ReadinessCheck:
    """Verify a regular file exists."""
    if path.is_file():
        return ReadinessCheck(name=name, status="ok")
    return ReadinessCheck(name=name, status="failed", message="File not found")


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe endpoint.

    Returns:
        Liveness status response.
    """
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
def readiness(request: Request) -> JSONResponse:
    """Readiness probe endpoint.

    Validates that the posts directory is readable and the scaffold script
    is present. Returns 200 if all checks pass, 503 if any fail.

    Returns:
        Readiness status with individual check results.
    """
    settings = request.app.state.settings
    checks = [
        _check_directory("posts_root", settings.posts_root),
        _check_file("scaffold_script", settings.scaffold_script_path),
    ]
    all_ok = all(c.status == "ok" for c in checks)
    response = ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        checks=checks,
    )
    code = status.HTTP_200_OK if all_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=code)
