"""DocForge API application: catalog, recommendation, preset and export routes."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docforge.api.config import get_settings
from docforge.api.dependencies import get_registry
from docforge.api.middleware import LoggingMiddleware
from docforge.api.routes import api_router

settings = get_settings()
logger = logging.getLogger("docforge.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Warm the pattern registry before serving requests."""
    logger.info("Starting %s v%s (debug=%s)", settings.app_name, settings.app_version, settings.debug)
    registry = get_registry()
    logger.info("Pattern catalog loaded: %d patterns", len(registry.library.get_all_patterns()))

    yield

    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Template composition and HTML/PDF export",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        LoggingMiddleware,
        exclude_paths=["/health"],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Liveness probe outside the versioned prefix."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.app_version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "docforge.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
