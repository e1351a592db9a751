"""
FastAPI application entry point for the Renew Admin API.

Configures logging and CORS, creates the shared TTL cache, prepares the
database, and mounts the routers under /api.

Run with:
    uvicorn renew_admin.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from renew_admin.api import api_router
from renew_admin.core.cache import TTLCache
from renew_admin.core.config import get_settings
from renew_admin.core.database import close_db, ensure_schema, init_db
from renew_admin.models.schemas import HealthResponse
from renew_admin.services.auth import AuthService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Create the shared TTLCache on app.state
        - Initialize the database pool and schema
        - Seed the admin account

    On shutdown:
        - Drop cached aggregates
        - Close the database connection pool
    """
    settings = get_settings()

    logger.info("Renew Admin API starting")
    app.state.cache = TTLCache(default_ttl=settings.default_cache_ttl_seconds)

    try:
        await init_db()
        await ensure_schema()
        await AuthService(settings).seed_admin()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        # Continue startup; requests needing the database will fail with 500

    yield

    logger.info("Renew Admin API shutting down")
    app.state.cache.clear()
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


def create_app() -> FastAPI:
    settings = get_settings()

    application = FastAPI(
        title="Renew Admin API",
        version="1.0.0",
        description=(
            "Admin backend for hierarchy imports, B1/B2/B3 distributions with "
            "configured percentages, grouped details, and phone brands."
        ),
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint for monitoring and load balancer probes."""
        return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc))

    return application


app = create_app()


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "renew_admin.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
