"""CORS middleware configuration."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def configure_cors(app: FastAPI, allowed_origins: list[str]) -> None:
    """Add CORS middleware for the editor front end.

    A wildcard origin disables credentialed requests, as browsers reject
    the combination.

    Args:
        app: FastAPI application instance.
        allowed_origins: List of allowed origin URLs, or ``["*"]``.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
