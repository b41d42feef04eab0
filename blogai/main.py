"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blogai.api.router import api_router
from blogai.config import settings
from blogai.core.database import close_db, init_db
from blogai.core.logging import setup_logging
from blogai.services.container import ServiceContainer, build_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging(debug=settings.debug)

    logger.info(
        "Starting BlogAI",
        extra={
            "environment": settings.environment,
            "version": settings.app_version,
            "model": settings.llm_model,
        },
    )

    if getattr(app.state, "services", None) is None:
        app.state.services = build_services()

    if settings.environment == "development":
        await init_db()
        logger.info("Development database initialized")

    yield

    logger.info("Shutting down BlogAI")
    await close_db()


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Passing `services` skips building the default container at startup.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "AI content-intelligence service for a personal blog: category "
            "recommendation and auto-tagging, SEO metadata generation and SEO validation"
        ),
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        cast(Any, CORSMiddleware),
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get(
        "/health",
        summary="Health check",
        description="Return service health status and backend version information.",
    )
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()
