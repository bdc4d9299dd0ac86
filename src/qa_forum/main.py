# src/qa_forum/main.py
"""Main entry point for the Q&A forum application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from qa_forum import __version__
from qa_forum.api.v1 import (
    answers_router,
    follows_router,
    notifications_router,
    questions_router,
    uploads_router,
    votes_router,
)
from qa_forum.core.errors import ForumError
from qa_forum.core.settings import settings
from qa_forum.services.realtime import get_realtime_publisher

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Community Q&A API with votes, accepted answers and reputation",
    version=__version__,
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


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    """Render domain errors as ``{"error": message}`` with their status code."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Include API routers
app.include_router(questions_router, prefix="/api/v1")
app.include_router(answers_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(follows_router, prefix="/api/v1")
app.include_router(uploads_router, prefix="/api/v1")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    get_realtime_publisher().close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "description": "Community Q&A API with votes, accepted answers and reputation",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("qa_forum.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
