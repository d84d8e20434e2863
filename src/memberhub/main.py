# src/memberhub/main.py
"""Main entry point for the Member Hub application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from memberhub.api.v1 import forum_router, network_router, resources_router
from memberhub.core.settings import settings
from memberhub.services.errors import MemberHubError

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Member Hub API",
    description="Membership network backend: connections, forum and resources",
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
app.include_router(network_router, prefix="/api/v1")
app.include_router(forum_router, prefix="/api/v1")
app.include_router(resources_router, prefix="/api/v1")


@app.exception_handler(MemberHubError)
async def member_hub_error_handler(request: Request, exc: MemberHubError) -> JSONResponse:
    """Answer domain errors with their status code and message."""
    logger.debug("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Membership network backend: connections, forum and resources",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("memberhub.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
