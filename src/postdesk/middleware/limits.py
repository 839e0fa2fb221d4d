"""Upload size limit applied before the request body is parsed."""

from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from postdesk.content.errors import PayloadTooLargeError

logger = structlog.get_logger()

UPLOAD_PATH_SUFFIX = "/files/upload"
MULTIPART_OVERHEAD = 64 * 1024  # boundaries, part headers, form fields


class UploadLimitMiddleware(BaseHTTPMiddleware):
    """Refuse uploads whose declared length cannot fit under the cap.

    The multipart parser spools a whole file part to temporary storage before
    the route runs, so the ``Content-Length`` header is checked first. Bodies
    sent without a length still hit the cap while the route copies them into
    the post.
    """

    def __init__(
        self,
        app: Callable[..., Awaitable[Response]],
        max_bytes: int,
        overhead: int = MULTIPART_OVERHEAD,
    ) -> None:
        """Initialize middleware with the upload cap.

        Args:
            app: ASGI application.
            max_bytes: Largest accepted file payload, inclusive.
            overhead: Allowance for multipart framing around the payload.
        """
        super().__init__(app)  # type: ignore[arg-type]
        self._max_bytes = max_bytes
        self._limit = max_bytes + overhead

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Reject oversized upload requests with 413.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response, or 413 if the declared body is too large.
        """
        if request.method != "POST" or not request.url.path.endswith(UPLOAD_PATH_SUFFIX):
            return await call_next(request)

        declared = request.headers.get("content-length")
        if declared is None:
            return await call_next(request)

        try:
            length = int(declared)
        except ValueError:
            logger.warning("invalid_content_length", value=declared)
            return await call_next(request)

        if length > self._limit:
            logger.warning(
                "upload_rejected",
                path=request.url.path,
                content_length=length,
                limit=self._limit,
            )
            return JSONResponse(
                status_code=PayloadTooLargeError.status_code,
                content={
                    "error": f"File too large (max {self._max_bytes} bytes)",
                    "kind": PayloadTooLargeError.kind,
                },
            )

        return await call_next(request)
