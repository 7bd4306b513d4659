#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Video reference parsing for youtubelink.

Normalizes caller input, either a bare video id or one of the usual YouTube
link shapes, into the canonical 11-character id.
"""

import re

from exceptions import InvalidSourceError

YOUTUBE_WATCH_BASE_URL = "https://www.youtube.com/watch?v="

VIDEO_ID_PATTERN = re.compile(r"[\w\-]{11}", re.ASCII)

# Optional scheme (or protocol-relative //), optional www./m. subdomain, then one of
# watch?v= / embed/ / v/ / shorts/ or a bare segment, the id, and any trailing noise.
VIDEO_LINK_PATTERN = re.compile(
    r"((?:https?:)?//)?"
    r"((?:www|m)\.)?"
    r"(youtube\.com|youtu\.be)"
    r"(/(?:[\w\-]+\?v=|embed/|v/|shorts/)?)"
    r"(?P<video_id>[\w\-]{11})"
    r"(?![\w\-])"
    r"(\S+)?",
    re.ASCII,
)


def parse_video_reference(raw: str) -> str:
    """Extract the canonical video id from a bare id or a YouTube link.

    Args:
        raw: Caller input, e.g. "dQw4w9WgXcQ" or "https://youtu.be/dQw4w9WgXcQ?t=4"

    Returns:
        str: The 11-character video id

    Raises:
        InvalidSourceError: If raw matches neither shape
    """
    if VIDEO_ID_PATTERN.fullmatch(raw):
        return raw

    match = VIDEO_LINK_PATTERN.fullmatch(raw)
    if match:
        return match.group("video_id")

    raise InvalidSourceError()


def watch_url(video_id: str) -> str:
    """Build the canonical watch URL for a video id."""
    return f"{YOUTUBE_WATCH_BASE_URL}{video_id}"
