#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Request gate: turns an inbound HTTP request into a VideoReference.

The reference comes from the path for GET. For POST, a path candidate that
parses is preferred, otherwise the size-capped body is used.
"""

from starlette.requests import ClientDisconnect, Request

from exceptions import (BodyReadError, BodyTooLargeError, InvalidSourceError,
                        MethodNotAllowedError)
from logging_config import StructuredLogger
from models import VideoReference
from utils import get_client_ip

logger = StructuredLogger(__name__)

ALLOWED_METHODS = ("GET", "POST")


async def read_capped_body(request: Request, max_size: int) -> bytes:
    """Read the request body, refusing anything larger than max_size bytes.

    The declared Content-Length is checked first, then the size actually read,
    which also covers chunked uploads.

    Raises:
        BodyTooLargeError: If the body is larger than max_size.
        BodyReadError: If the body cannot be read.
    """
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            declared = int(content_length)
        except ValueError:
            raise BodyReadError() from None
        if declared > max_size:
            raise BodyTooLargeError()

    body = bytearray()
    try:
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > max_size:
                raise BodyTooLargeError()
    except ClientDisconnect as e:
        raise BodyReadError() from e

    return bytes(body)


async def read_reference(request: Request, max_body_size: int, encoding: str = "utf-8") -> VideoReference:
    """Build the video reference for a request.

    Args:
        request: The incoming request; the 'video' path parameter, when the
                 route has one, is the path candidate.
        max_body_size: Cap for POST bodies in bytes.
        encoding: Encoding used to decode POST bodies.

    Raises:
        MethodNotAllowedError: For methods other than GET and POST.
        BodyTooLargeError, BodyReadError: If a needed POST body is unusable.
        InvalidSourceError: If no usable reference was found.
    """
    if request.method not in ALLOWED_METHODS:
        raise MethodNotAllowedError()

    reference = VideoReference()
    candidate = request.path_params.get("video", "")

    if request.method == "GET":
        reference.add_video_link(candidate)
        return reference

    if candidate:
        try:
            reference.add_video_link(candidate)
        except InvalidSourceError:
            logger.debug("Path candidate rejected, falling back to body", candidate=candidate[:100])
        else:
            return reference

    body = await read_capped_body(request, max_body_size)
    reference.add_video_link(body.decode(encoding, errors="replace").strip())
    return reference


def attach_client_ip(request: Request, reference: VideoReference) -> None:
    """Attach the caller's real address to a reference.

    Raises:
        InvalidSourceIpError: If the resolved address is not an IP literal.
    """
    reference.add_source_ip(get_client_ip(request))
