"""Entry point for the API server."""

import contextlib
import sys

import structlog
import uvicorn

from postdesk.app import create_app
from postdesk.config import Settings
from postdesk.logging import configure_logging

logger = structlog.get_logger()


def main() -> None:
    """Entry point for python -m postdesk."""
    settings = Settings()
    configure_logging(debug=settings.debug)

    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level="warning",
        access_log=False,
        timeout_graceful_shutdown=int(settings.shutdown_timeout),
    )

    with contextlib.suppress(KeyboardInterrupt):
        uvicorn.Server(config).run()

    logger.info("server_stopped")
    sys.exit(0)


if __name__ == "__main__":
    main()
