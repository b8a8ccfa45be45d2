"""
Main FastAPI application for the Dream Relay backend.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .logger import configure_logging
from .middleware import RequestLoggingMiddleware
from .routers.config import router as config_router
from .routers.health import router as health_router
from .routers.predictions import router as predictions_router
from .services.replicate import ReplicateService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if not settings.REPLICATE_API_KEY:
        logger.error("REPLICATE_API_KEY environment variable is not set")
        raise RuntimeError("REPLICATE_API_KEY environment variable is not set")
    logger.info("Server running on port %s", settings.PORT)
    logger.info("Using Replicate API key: set (%d chars)", len(settings.REPLICATE_API_KEY))
    yield


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for errors that escape the routers."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "userMessage": "An unexpected error occurred. Please try again later.",
            "details": str(exc),
        },
    )


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the relay app from explicit settings.

    ``transport`` is forwarded to the Replicate client (tests pass an
    ``httpx.MockTransport``).
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.replicate = ReplicateService(settings, transport=transport)

    app.add_middleware(RequestLoggingMiddleware, log_bodies=settings.LOG_REQUEST_BODIES)

    # CORS configuration (added last so it wraps the logger)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(health_router)
    app.include_router(config_router, prefix=settings.API_PREFIX)
    app.include_router(predictions_router, prefix=settings.API_PREFIX)
    return app


app = create_app()
