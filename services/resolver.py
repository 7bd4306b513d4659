#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Direct link resolution for youtubelink.

Selects one of the two resolution backends, the downloader executable or the
remote API, and runs a single attempt with it.
"""

from typing import Optional

from exceptions import EmptyVideoError
from logging_config import StructuredLogger
from models import ResolverStrategy, VideoReference
from services.downloader import Downloader
from services.remote_api import RemoteApiClient
from utils import performance_timer

logger = StructuredLogger(__name__)


class VideoResolver:
    """Resolves video references to direct links with the configured backend."""

    def __init__(self, downloader: Downloader, remote_api: RemoteApiClient,
                 default_strategy: ResolverStrategy = ResolverStrategy.REMOTE_API):
        self.downloader = downloader
        self.remote_api = remote_api
        self.default_strategy = default_strategy

    async def resolve(self, reference: VideoReference,
                      strategy: Optional[ResolverStrategy] = None) -> str:
        """Return the direct link of a video.

        Args:
            reference: Parsed video reference.
            strategy: Backend to use, defaults to the configured one.

        Raises:
            EmptyVideoError: If the reference was never populated.
            AppBaseError: Whatever the selected backend raises; not retried.
        """
        if not reference.video_id:
            raise EmptyVideoError()

        strategy = strategy or self.default_strategy
        log = logger.bind(video_id=reference.video_id, strategy=strategy.value)
        log.debug("Resolving direct link")

        with performance_timer(f"resolve:{strategy.value}"):
            if strategy == ResolverStrategy.DOWNLOADER:
                link = await self.downloader.get_link(reference)
            elif strategy == ResolverStrategy.REMOTE_API:
                link = await self.remote_api.get_link(reference)
            else:
                raise ValueError(f"Unknown resolver strategy: {strategy}")

        log.info("Direct link resolved")
        return link
