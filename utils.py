#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
General utilities for youtubelink.

Includes the performance timer, client address resolution and small
value parsing helpers.
"""

import time
from contextlib import contextmanager
from typing import Optional

from starlette.requests import Request

from logging_config import StructuredLogger

logger = StructuredLogger(__name__)


def is_true(value: Optional[str]) -> bool:
    """Check if a string value represents a boolean True."""
    if not value:
        return False
    return value.strip().lower() in ("true", "1", "yes", "y", "on")


def get_client_ip(request: Request) -> str:
    """Extract the real client IP address from the request.

    Considers proxy headers like 'X-Forwarded-For' and 'X-Real-IP' before the
    socket peer. The result is not validated here.

    Args:
        request: The incoming request.

    Returns:
        str: The determined client address, or "" when none is known.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        # The first hop is the original client
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return ""


# --- Performance Timer ---

@contextmanager
def performance_timer(operation_name: str, threshold_ms: float = 1000.0):
    """Context manager for timing operations with threshold-based logging.

    Logs at INFO level if the duration exceeds threshold_ms, WARNING if it
    exceeds it tenfold, otherwise DEBUG.

    Args:
        operation_name: A descriptive name for the operation being timed.
        threshold_ms: Threshold in milliseconds. Defaults to 1s, resolution
                      calls routinely take several hundred milliseconds.
    """
    start_time = time.monotonic()
    try:
        yield
    finally:
        duration_ms = (time.monotonic() - start_time) * 1000

        log_data = {
            "operation": operation_name,
            "duration_ms": round(duration_ms, 2),
            "threshold_ms": threshold_ms
        }

        if duration_ms > threshold_ms * 10:
            logger.warning(f"SLOW OPERATION: '{operation_name}' took {duration_ms:.2f}ms", **log_data)
        elif duration_ms > threshold_ms:
            logger.info(f"Performance watch: '{operation_name}' took {duration_ms:.2f}ms", **log_data)
        else:
            logger.debug(f"Performance: '{operation_name}' completed in {duration_ms:.2f}ms", **log_data)
