#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Shared-secret access guard for the streaming routes.

Callers authenticate either by sending the stream key verbatim in the
Authorization header, or with HTTP Basic credentials whose password is the
key (an empty user name is allowed, so a browser prompt works).
"""

import base64
import binascii

from fastapi import Depends, Request

from api.dependencies import get_config
from config import Config
from exceptions import ForbiddenError, GuardMisconfiguredError, UnauthorizedError
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)

BASIC_SCHEME = "Basic"


def authorize(header_value: str, secret: str) -> bool:
    """Check an Authorization header value against the stream key.

    Plain string comparison, timing side channels are not addressed.
    """
    if not secret or not header_value:
        return False

    if header_value == secret:
        return True

    if not header_value.startswith(BASIC_SCHEME):
        return False

    parts = header_value.split(" ")
    if len(parts) != 2:
        return False

    try:
        credential = base64.b64decode(parts[1], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return False

    if credential.startswith(":"):
        credential = credential[1:]

    return credential == secret


def check_access(header_value: str, secret: str) -> None:
    """Apply the guard rules, in order, to one request.

    Raises:
        GuardMisconfiguredError: If no stream key is configured at all.
        UnauthorizedError: If no credential was sent (asks for Basic credentials).
        ForbiddenError: If the credential does not match.
    """
    if not secret:
        logger.error("Stream route requested but no stream key is configured", exc_info=False)
        raise GuardMisconfiguredError()

    if not header_value:
        raise UnauthorizedError()

    if not authorize(header_value, secret):
        raise ForbiddenError()


async def require_stream_key(request: Request, config: Config = Depends(get_config)) -> None:
    """Dependency guarding the streaming routes."""
    check_access(request.headers.get("authorization", ""), config.STREAM_KEY)
