# src/agora_stage/main.py
"""Main entry point for the Agora Stage application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from agora_stage import __version__
from agora_stage.api.errors import register_error_handlers
from agora_stage.core.logging import configure_logging
from agora_stage.core.settings import settings
from agora_stage.services.dispatch import NotificationWorker, set_dispatcher
from agora_stage.services.email import HttpEmailSender, get_email_sender

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.log_level)
    worker = NotificationWorker()
    await worker.start()
    set_dispatcher(worker)
    app.state.notification_worker = worker
    logger.info("%s %s started", settings.app_name, settings.app_version)
    try:
        yield
    finally:
        await worker.stop()
        set_dispatcher(None)
        app.state.notification_worker = None
        sender = get_email_sender()
        if isinstance(sender, HttpEmailSender):
            sender.close()


# Initialize FastAPI app
app = FastAPI(
    title="Agora Stage API",
    description="Community posts, comments and notifications",
    version=__version__,
    lifespan=lifespan,
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

register_error_handlers(app)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Agora Stage API",
        "version": __version__,
        "description": "Community posts, comments and notifications",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("agora_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
