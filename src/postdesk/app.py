"""FastAPI application factory and lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from postdesk.config import Settings
from postdesk.content.entries import EntryOperations
from postdesk.content.errors import ContentError
from postdesk.content.locks import build_locks
from postdesk.content.posts import PostRegistry
from postdesk.content.uploads import UploadIngest
from postdesk.middleware.auth import APIKeyMiddleware
from postdesk.middleware.cors import configure_cors
from postdesk.middleware.limits import UploadLimitMiddleware
from postdesk.middleware.logging import RequestLoggingMiddleware
from postdesk.routes import deploy, files, health, posts
from postdesk.services.collaborators import (
    Deployer,
    GitDeployer,
    ProcessRunner,
    Scaffolder,
    ScriptScaffolder,
    run_process,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Missing content structure is reported but does not stop the server;
    requests touching it fail with NotFound until it appears.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info(
        "api_startup",
        host=settings.host,
        port=settings.port,
        posts_root=str(settings.posts_root),
    )

    if not settings.posts_root.is_dir():
        logger.warning("posts_root_missing", path=str(settings.posts_root))
    if not settings.scaffold_script_path.is_file():
        logger.warning(
            "scaffold_script_missing",
            path=str(settings.scaffold_script_path),
        )

    try:
        yield
    finally:
        logger.info("api_shutdown")


async def content_error_handler(request: Request, exc: ContentError) -> JSONResponse:
    """Map a content error to its HTTP status and stable kind."""
    logger.warning(
        "content_error",
        kind=exc.kind,
        error=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "kind": exc.kind},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report unexpected failures without leaking filesystem details."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    content: dict[str, str] = {"error": "Internal Server Error", "kind": "Internal"}
    if request.app.state.settings.debug:
        content["detail"] = str(exc)
    return JSONResponse(status_code=500, content=content)


def create_app(
    settings: Settings | None = None,
    scaffolder: Scaffolder | None = None,
    deployer: Deployer | None = None,
    runner: ProcessRunner = run_process,
) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Args:
        settings: Configuration instance. Creates default if None.
        scaffolder: Post scaffolding collaborator. Defaults to the script
            named in settings.
        deployer: Site deploy collaborator. Defaults to git in the site repo.
        runner: Process runner used by the default collaborators.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Postdesk API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )

    entries = EntryOperations(settings.posts_root, build_locks(settings.lock_strategy))
    if scaffolder is None:
        scaffolder = ScriptScaffolder(
            script=settings.scaffold_script_path,
            cwd=settings.posts_root.parent,
            shell=settings.scaffold_shell,
            runner=runner,
        )
    if deployer is None:
        deployer = GitDeployer(settings.site_repo_path, runner=runner)

    app.state.settings = settings
    app.state.entries = entries
    app.state.registry = PostRegistry(entries, scaffolder, settings.index_filename)
    app.state.uploads = UploadIngest(entries, max_bytes=settings.max_upload_bytes)
    app.state.deployer = deployer

    app.add_exception_handler(ContentError, content_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)

    configure_cors(app, settings.cors_origins)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(UploadLimitMiddleware, max_bytes=settings.max_upload_bytes)
    if settings.key:
        app.add_middleware(APIKeyMiddleware, api_key=settings.key)

    app.include_router(health.router, prefix="/api")
    app.include_router(posts.router, prefix="/api")
    app.include_router(files.router, prefix="/api")
    app.include_router(deploy.router, prefix="/api")

    if settings.posts_root.is_dir():
        app.mount(
            "/media/posts",
            StaticFiles(directory=settings.posts_root),
            name="media",
        )

    return app
