"""
ThreadKeep FastAPI Application.

API for the browser extension (sync) and the dashboard (owner-scoped reads).
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from threadkeep import __version__
from threadkeep.api.routes import conversations, files, sync
from threadkeep.config import settings
from threadkeep.logging_config import setup_logging
from threadkeep.startup import run_all_startup_checks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Runs startup checks before the application starts serving requests.
    """
    setup_logging(context="api")

    logger.info("Running startup checks...")
    run_all_startup_checks()
    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown complete")


app = FastAPI(
    lifespan=lifespan,
    title="ThreadKeep API",
    description="Sync and storage API for captured AI chat conversations",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# The extension calls from its own origin, so CORS is open by default
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - API health check."""
    return {
        "status": "ok",
        "message": "ThreadKeep API is running",
        "version": __version__,
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    from threadkeep.db.connection import check_connection

    db_status = "healthy" if check_connection() else "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "database": db_status,
    }


@app.get("/ready")
async def ready():
    """Readiness probe: 200 when ready to serve, 503 otherwise."""
    from threadkeep.startup import check_readiness

    is_ready, details = check_readiness()
    if not is_ready:
        return JSONResponse(
            content=details,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return details


app.include_router(sync.router)
app.include_router(conversations.router)
app.include_router(files.router)
