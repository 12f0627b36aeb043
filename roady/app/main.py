"""
FastAPI Application Entry Point.

Roady records vehicle trips: start a session, stream GPS batches, stop it
and get back the trip with its ordered route.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from roady.app.core.config import settings
from roady.app.api.v1.router import router as api_v1_router
from roady.app.core.observability import ObservabilityMiddleware
from roady.app.db.session import engine, Base
from roady.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from roady.app.models.user import User  # noqa: F401
from roady.app.models.trip import Trip  # noqa: F401
from roady.app.models.gps_point import GPSPoint  # noqa: F401
from roady.app.models.point_batch import PointBatch  # noqa: F401

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("roady")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    Creates missing tables on startup and disposes the engine pool on shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready")
    yield
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Trip session tracking and GPS telemetry ingestion",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Any origin may call the API; preflight requests are answered here
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["POST", "GET", "OPTIONS", "PUT", "DELETE"],
    allow_headers=["*"],
)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "appName": settings.app_name,
        "version": settings.api_version,
    }


app.include_router(api_v1_router, prefix=settings.api_prefix)
