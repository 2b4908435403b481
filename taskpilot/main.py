"""FastAPI application for taskpilot."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskpilot.api.v1.api import api_router
from taskpilot.core.config import settings
from taskpilot.core.logging import logger


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(title=settings.PROJECT_NAME)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "x-asana-token",
            "x-workspace-gid",
            "x-project-gid",
            "x-user-gid",
        ],
    )
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    logger.debug(f"Application created ({settings.ENVIRONMENT})")
    return app


app = create_app()
