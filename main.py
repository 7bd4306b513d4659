#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main FastAPI application setup for youtubelink.

Builds the FastAPI application from a frozen Config: creates the services,
registers middleware and the error handler, and includes the API routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from starlette.responses import Response

from api import routes
from config import Config, config as default_config
from exceptions import AppBaseError
from logging_config import StructuredLogger
from middleware import RequestGateMiddleware
from services.downloader import Downloader
from services.remote_api import RemoteApiClient
from services.resolver import VideoResolver
from version import __version__

logger = StructuredLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Probes the downloader once on startup. A missing executable is fatal when
    the configured features need it.
    """
    settings: Config = app.state.config
    downloader: Downloader = app.state.downloader
    logger.info("Starting youtubelink application lifespan...",
                strategy=settings.RESOLVER_STRATEGY.value,
                stream_enabled=settings.stream_enabled,
                client_ip_mode=settings.USE_CLIENT_IP)

    if settings.downloader_required:
        # Raises DownloaderUnavailableError, aborting startup
        downloader.ensure_available()
    elif not downloader.is_available():
        logger.info("Downloader executable not found; only the remote API backend is usable.")

    yield

    logger.info("Shutting down youtubelink application lifespan...")


async def app_error_handler(request: Request, exc: AppBaseError) -> Response:
    """Render application errors as plain text; backend failures are logged."""
    if exc.is_server_error:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
                     error_code=exc.error_code, exc_info=exc)
    else:
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}",
                       error_code=exc.error_code)
    return exc.to_response()


def create_app(settings: Optional[Config] = None) -> FastAPI:
    """Build the application around one frozen configuration.

    Args:
        settings: Configuration to use, defaults to the one loaded from the environment.
    """
    settings = settings or default_config

    app = FastAPI(
        lifespan=lifespan,
        title="youtubelink",
        description="Redirects to, or streams, the direct mp4 link of a YouTube video.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,  # every other path is a video reference
    )

    downloader = Downloader(settings.DOWNLOADER_PATH, chunk_size=settings.STREAM_CHUNK_SIZE)
    remote_api = RemoteApiClient(settings.REMOTE_API_URL, timeout=settings.REMOTE_API_TIMEOUT_SECONDS)

    app.state.config = settings
    app.state.downloader = downloader
    app.state.resolver = VideoResolver(downloader, remote_api, default_strategy=settings.RESOLVER_STRATEGY)

    app.add_middleware(RequestGateMiddleware)
    app.add_exception_handler(AppBaseError, app_error_handler)
    app.include_router(routes.router)

    logger.debug("FastAPI application setup complete.")
    return app


app = create_app()
