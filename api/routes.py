#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
API Routes for the youtubelink application using FastAPI.

Defines the health check, the guarded streaming endpoints and the redirect
endpoints. The redirect catch-all route must stay the last one registered.
"""

import asyncio
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse, StreamingResponse

from api.auth import require_stream_key
from api.dependencies import get_config, get_downloader, get_resolver
from api.gate import attach_client_ip, read_reference
from config import Config
from exceptions import AppBaseError, DownloaderError, handle_exception
from logging_config import StructuredLogger
from models import HealthResponse
from services.downloader import Downloader
from services.resolver import VideoResolver
from version import __version__ as app_version

logger = StructuredLogger(__name__)

router = APIRouter()

ROUTE_METHODS = ["GET", "POST"]
VIDEO_MEDIA_TYPE = "video/mp4"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Reports the service version, the active resolution backend and whether streaming is usable."
)
async def health_check(
    config: Config = Depends(get_config),
    downloader: Downloader = Depends(get_downloader)
):
    """Endpoint to check system health."""
    logger.debug("Health check endpoint requested.")
    downloader_available = downloader.is_available()
    healthy = downloader_available or not config.downloader_required

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service_version=app_version,
        resolver_strategy=config.RESOLVER_STRATEGY,
        downloader_available=downloader_available,
        stream_enabled=config.stream_enabled and downloader_available,
        client_ip_mode=config.USE_CLIENT_IP,
    )


# --- Streaming ---

async def _stream_body(downloader: Downloader, process: asyncio.subprocess.Process,
                       video_id: str, encoding: str) -> AsyncIterator[bytes]:
    """Relay downloader output; a late failure is appended as text since the
    status line has already been sent."""
    chunks = downloader.iter_stream(process)
    try:
        async for chunk in chunks:
            yield chunk
    except DownloaderError as e:
        logger.error(f"Stream for {video_id} ended with a downloader failure: {e.message}",
                     video_id=video_id, returncode=e.returncode, exc_info=False)
        yield e.message.encode(encoding, errors="replace")
    finally:
        await chunks.aclose()


@router.api_route("/stream", methods=ROUTE_METHODS, dependencies=[Depends(require_stream_key)])
@router.api_route("/stream/{video:path}", methods=ROUTE_METHODS, dependencies=[Depends(require_stream_key)])
@router.api_route("/direct", methods=ROUTE_METHODS, dependencies=[Depends(require_stream_key)])
@router.api_route("/direct/{video:path}", methods=ROUTE_METHODS, dependencies=[Depends(require_stream_key)])
async def stream_video(
    request: Request,
    config: Config = Depends(get_config),
    downloader: Downloader = Depends(get_downloader)
):
    """Pipe the video bytes to the client.

    The downloader is started before the response begins, so a start failure
    is still reported with a proper error status.
    """
    reference = await read_reference(request, config.MAX_BODY_SIZE, config.DEFAULT_ENCODING)
    try:
        process = await downloader.open_stream(reference)
    except AppBaseError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error starting stream for {reference.video_id}: {e}")
        raise handle_exception(e) from e

    return StreamingResponse(
        _stream_body(downloader, process, reference.video_id, config.DEFAULT_ENCODING),
        status_code=status.HTTP_200_OK,
        media_type=VIDEO_MEDIA_TYPE,
        headers={"Cache-Control": "no-store"},
    )


# --- Redirect ---

# "/{video:path}" matches every path, so it is applied last (top decorator).
@router.api_route("/{video:path}", methods=ROUTE_METHODS)
@router.api_route("/link", methods=ROUTE_METHODS)
@router.api_route("/link/{video:path}", methods=ROUTE_METHODS)
@router.api_route("/redirect", methods=ROUTE_METHODS)
@router.api_route("/redirect/{video:path}", methods=ROUTE_METHODS)
async def redirect_video(
    request: Request,
    config: Config = Depends(get_config),
    resolver: VideoResolver = Depends(get_resolver)
):
    """Redirect the client to the direct link of the requested video."""
    reference = await read_reference(request, config.MAX_BODY_SIZE, config.DEFAULT_ENCODING)

    if config.USE_CLIENT_IP:
        attach_client_ip(request, reference)

    try:
        direct_link = await resolver.resolve(reference)
    except AppBaseError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error resolving {reference.video_id}: {e}")
        raise handle_exception(e) from e
    return RedirectResponse(direct_link, status_code=status.HTTP_302_FOUND)
