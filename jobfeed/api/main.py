"""
FastAPI Application - Main API for the Tiered Job Feed
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from config import settings
from jobfeed import __version__
from jobfeed.core.cache import snapshot_cache
from jobfeed.core.database import close_db, init_db
from jobfeed.core.exceptions import FeedException
from jobfeed.core.logging import configure_logging
from jobfeed.discovery.tiers import get_registry
from jobfeed.orchestration.scheduler import feed_scheduler

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown events"""
    configure_logging()
    logger.info("Starting Tiered Job Feed", env=settings.app_env)

    # Fail fast on a broken tier file
    get_registry()

    await init_db()

    if settings.redis.enabled:
        await snapshot_cache.initialize()

    if settings.scrape.schedule_enabled:
        await feed_scheduler.start()

    logger.info("Tiered Job Feed started")

    yield

    logger.info("Shutting down Tiered Job Feed")

    await feed_scheduler.stop()
    await snapshot_cache.close()
    await close_db()

    logger.info("Tiered Job Feed stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Tiered Job Feed",
        description="Tier-weighted engineering job aggregation and feed",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["Content-Type", "X-Owner-Id", "If-None-Match", "If-Modified-Since"],
        expose_headers=["ETag", "Last-Modified", "X-Total-Count"],
    )

    # Exception handlers
    @app.exception_handler(FeedException)
    async def feed_exception_handler(
        request: Request,
        exc: FeedException,
    ) -> JSONResponse:
        if not exc.recoverable:
            logger.error("Request failed", code=exc.code, error=exc.message, path=request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.error("Unhandled exception", error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            },
        )

    # Include routers
    from .routes import jobs, system
    app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
    app.include_router(system.router, prefix="/api/system", tags=["system"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "version": __version__,
            "scheduler_running": feed_scheduler.is_running,
        }

    return app


# Create app instance
app = create_app()
