#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
ASGI middleware for youtubelink.

Rejects unsupported HTTP methods, adds security headers and logs every
request with its outcome. Written against the raw ASGI interface so that
streamed responses pass through untouched: a client disconnect reaches the
stream route directly and stops its downloader.
"""

import time

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from api.gate import ALLOWED_METHODS
from exceptions import MethodNotAllowedError
from logging_config import StructuredLogger

logger = StructuredLogger(__name__)

# Resolution involves a subprocess or a remote call, allow it some time
SLOW_REQUEST_MS = 5000

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
}


class RequestGateMiddleware:
    """Front door for every request.

    Handles:
    1. Method filtering (only GET and POST reach the routes)
    2. Security headers for responses
    3. Request completion logging
    """

    def __init__(self, app: ASGIApp, allowed_methods=ALLOWED_METHODS):
        self.app = app
        self.allowed_methods = tuple(allowed_methods)
        logger.info(f"RequestGateMiddleware initialized. Allowed methods: {', '.join(self.allowed_methods)}")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.monotonic()
        method = scope["method"]
        path = scope["path"]
        client = scope.get("client")
        client_ip = client[0] if client else "unknown"

        if method not in self.allowed_methods:
            response = MethodNotAllowedError().to_response()
            response.headers["Allow"] = ", ".join(self.allowed_methods)
            await response(scope, receive, send)
            self._log_completion(method, path, response.status_code, start_time, client_ip)
            return

        status_code = 500  # Default if an exception escapes before the response starts

        async def send_with_headers(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = MutableHeaders(scope=message)
                for name, value in SECURITY_HEADERS.items():
                    headers[name] = value
            await send(message)

        try:
            await self.app(scope, receive, send_with_headers)
        except Exception as exc:
            logger.error(
                "Exception during request processing",
                path=path, method=method, client_ip=client_ip, error=str(exc),
                exc_info=True
            )
            raise
        finally:
            # For streamed responses this runs once the body has ended
            self._log_completion(method, path, status_code, start_time, client_ip)

    @staticmethod
    def _log_completion(method: str, path: str, status_code: int, start_time: float, client_ip: str) -> None:
        process_time_ms = (time.monotonic() - start_time) * 1000
        log_fields = {
            "path": path,
            "method": method,
            "status_code": status_code,
            "duration_ms": round(process_time_ms, 2),
            "client_ip": client_ip
        }

        if status_code >= 500:
            logger.error("Request completed", exc_info=False, **log_fields)
        elif status_code >= 400:
            logger.warning("Request completed", **log_fields)
        else:
            logger.info("Request completed", **log_fields)

        if process_time_ms > SLOW_REQUEST_MS and path.split("/")[1:2] not in (["stream"], ["direct"]):
            logger.warning(f"Slow response: {method} {path}", **log_fields)
