#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Pydantic models and Dataclasses for youtubelink API responses, remote API
payloads, and internal data structures.
"""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from exceptions import InvalidSourceIpError
from services.reference import parse_video_reference, watch_url


class ResolverStrategy(str, Enum):
    """Backends able to turn a video id into a direct link."""

    REMOTE_API = "remote_api"
    DOWNLOADER = "downloader"


class OutputMode(str, Enum):
    """Invocation modes of the downloader executable."""

    LINK = "link"  # print the direct URL, don't download
    STREAM = "stream"  # write the raw media bytes to stdout


@dataclass
class VideoReference:
    """A YouTube video to resolve, built fresh for every request.

    Use add_video_link and add_source_ip to populate it: both validate their
    input, so video_id is either empty or a canonical 11-character id and
    source_ip is either None or a valid IP literal.
    """

    video_id: str = field(default="", init=False)
    source_ip: Optional[str] = field(default=None, init=False)

    def add_video_link(self, raw: str) -> None:
        """Parse a bare id or a YouTube link and store the canonical id.

        Raises:
            InvalidSourceError: If raw is neither an id nor a recognized link
        """
        self.video_id = parse_video_reference(raw)

    def add_source_ip(self, ip: str) -> None:
        """Store the address downloader calls should originate from.

        Raises:
            InvalidSourceIpError: If ip is not an IPv4 or IPv6 literal
        """
        try:
            ipaddress.ip_address(ip)
        except ValueError:
            raise InvalidSourceIpError() from None
        self.source_ip = ip

    @property
    def watch_url(self) -> str:
        """Get the canonical watch URL."""
        return watch_url(self.video_id)


class RemoteApiResponse(BaseModel):
    """Decoded reply of the remote resolution API."""

    recorded: str = Field(..., description="Direct link to the media file.")
    filename: Optional[str] = Field(None, description="Suggested file name.")


class HealthResponse(BaseModel):
    """Data model for the /health endpoint."""

    status: str = Field(..., description="Overall service status.")
    timestamp: str = Field(..., description="UTC time of the check (ISO 8601).")
    service_version: str
    resolver_strategy: ResolverStrategy
    downloader_available: bool = Field(..., description="Whether the downloader executable was found.")
    stream_enabled: bool = Field(..., description="Whether the guarded stream routes are usable.")
    client_ip_mode: bool
