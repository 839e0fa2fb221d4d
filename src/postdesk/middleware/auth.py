"""API key authentication middleware."""

import secrets
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

PUBLIC_PATHS = frozenset(
    {
        "/api/health/live",
        "/api/health/ready",
    }
)


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Require a shared API key on every ``/api`` request.

    Health probes stay open, and media files under ``/media`` are not
    guarded so the editor preview can load them directly.
    """

    def __init__(self, app: Callable[..., Awaitable[Response]], api_key: str) -> None:
        """Initialize middleware with API key.

        Args:
            app: ASGI application.
            api_key: Expected API key value.
        """
        super().__init__(app)  # type: ignore[arg-type]
        self._api_key = api_key

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Validate the X-API-Key header on protected paths.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response, or 401 if authentication fails.
        """
        path = request.url.path
        if path in PUBLIC_PATHS or not path.startswith("/api"):
            return await call_next(request)

        if request.method == "OPTIONS":
            return await call_next(request)

        provided_key = request.headers.get("X-API-Key", "")

        if not provided_key:
            return JSONResponse(
                status_code=401,
                content={"error": "Missing X-API-Key header", "kind": "Unauthorized"},
            )

        if not secrets.compare_digest(provided_key, self._api_key):
            return JSONResponse(
                status_code=401,
                content={"error": "Invalid API key", "kind": "Unauthorized"},
            )

        return await call_next(request)
