#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI dependency injection functions for youtubelink services.

The application factory stores the frozen configuration and the service
instances on app.state; these functions hand them to the route handlers.
"""

from fastapi import HTTPException, Request, status

from config import Config
from logging_config import StructuredLogger
from services.downloader import Downloader
from services.resolver import VideoResolver

logger = StructuredLogger(__name__)


def _get_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        logger.critical(f"Dependency Error: '{name}' not initialized.", exc_info=False)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Service Initialization Error: {name} is not available.",
            headers={"X-Error-Code": f"SERVICE_UNAVAILABLE_{name.upper()}"}
        )
    return value


def get_config(request: Request) -> Config:
    """Dependency function to get the application's frozen Config.

    Raises:
        HTTPException: 503 Service Unavailable if the app was built without one.
    """
    return _get_state(request, "config")


def get_resolver(request: Request) -> VideoResolver:
    """Dependency function to get the VideoResolver instance."""
    return _get_state(request, "resolver")


def get_downloader(request: Request) -> Downloader:
    """Dependency function to get the Downloader used for streaming."""
    return _get_state(request, "downloader")
