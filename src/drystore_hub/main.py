# src/drystore_hub/main.py
"""Main entry point for the DryStore Hub application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from drystore_hub.api.v1 import API_ROUTERS, realtime_router
from drystore_hub.core.logging import configure_logging
from drystore_hub.core.settings import settings
from drystore_hub.services.change_feed import get_change_feed
from drystore_hub.services.storage import get_storage

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Corporate intranet: channels, documents, announcements and people",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
for api_router in API_ROUTERS:
    app.include_router(api_router, prefix="/api/v1")
app.include_router(realtime_router)


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings.log_level)
    storage = get_storage()
    feed = get_change_feed()
    logger.info(
        "%s %s started (storage=%s, redis mirror=%s)",
        settings.app_name,
        settings.app_version,
        storage.root,
        settings.change_feed_redis_enabled,
    )
    app.state.change_feed = feed


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": f"{settings.app_name} API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("drystore_hub.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
