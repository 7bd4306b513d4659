#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Remote HTTP clients for youtubelink.

RemoteApiClient resolves direct links through a third-party JSON API.
OEmbedClient checks whether a video exists using YouTube's oEmbed endpoint.
"""

from typing import Optional

import httpx
from pydantic import ValidationError

from config import config
from exceptions import (EmptyVideoError, RemoteApiBadResponseError,
                        RemoteApiUnreachableError)
from logging_config import StructuredLogger
from models import RemoteApiResponse, VideoReference

logger = StructuredLogger(__name__)


class RemoteApiClient:
    """Client for the remote resolution API.

    Each call opens its own connection; no state survives between requests.
    """

    def __init__(self, api_url: str = config.REMOTE_API_URL,
                 timeout: float = config.REMOTE_API_TIMEOUT_SECONDS,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the client.

        Args:
            api_url: Endpoint queried with the watch URL as 'stream' parameter.
            timeout: Timeout in seconds for the whole request.
            transport: Optional httpx transport, mainly for tests.
        """
        self.api_url = api_url
        self.timeout = timeout
        self.transport = transport

    async def get_link(self, reference: VideoReference) -> str:
        """Resolve the direct link of a video through the remote API.

        The 'recorded' field of the reply is returned as is.

        Raises:
            EmptyVideoError: If the reference was never populated.
            RemoteApiUnreachableError: If the request fails or the body cannot be read.
            RemoteApiBadResponseError: If the body is not the expected JSON object.
        """
        if not reference.video_id:
            raise EmptyVideoError()

        params = {"stream": reference.watch_url}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.api_url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Remote API request failed: {e}", video_id=reference.video_id,
                         api_url=self.api_url, exc_info=False)
            raise RemoteApiUnreachableError() from e

        try:
            payload = RemoteApiResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(
                "Remote API returned an unexpected body",
                video_id=reference.video_id, status_code=response.status_code,
                body=response.text[:200], errors=e.error_count()
            )
            raise RemoteApiBadResponseError() from e

        return payload.recorded


class OEmbedClient:
    """Checks video existence through YouTube's oEmbed endpoint."""

    def __init__(self, oembed_url: str = config.OEMBED_URL,
                 timeout: float = config.REMOTE_API_TIMEOUT_SECONDS,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.oembed_url = oembed_url
        self.timeout = timeout
        self.transport = transport

    async def exists(self, reference: VideoReference) -> bool:
        """Return True if YouTube knows the video.

        An unpopulated reference is reported as missing rather than raising.

        Raises:
            RemoteApiUnreachableError: If oEmbed cannot be reached.
        """
        if not reference.video_id:
            return False

        params = {"url": reference.watch_url, "format": "json"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.oembed_url, params=params)
        except httpx.HTTPError as e:
            logger.error(f"oEmbed request failed: {e}", video_id=reference.video_id, exc_info=False)
            raise RemoteApiUnreachableError("cannot reach youtube oembed") from e

        return response.status_code == httpx.codes.OK
