"""Main entry point for the Agora application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from agora.api.v1 import (
    comments_router,
    communities_router,
    posts_router,
    users_router,
    votes_router,
)
from agora.core.settings import settings
from agora.services.summarizer import get_summarizer_client

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Community discussion API with AI post summaries",
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
app.include_router(communities_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await get_summarizer_client().close()


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
        "description": "Community discussion API with AI post summaries",
        "docs": "/docs",
        "redoc": "/redoc"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("agora.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
