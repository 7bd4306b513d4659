#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Custom exception classes and error handling utilities for youtubelink.

Provides a centralized error handling system with custom exceptions,
error mapping, and helper functions for consistent plain-text error responses.
"""

from typing import Dict, Optional

from fastapi import status
from starlette.responses import PlainTextResponse


# --- Base Exception Classes ---

class AppBaseError(Exception):
    """Base class for all application-specific exceptions.

    Attributes:
        message: Human-readable error message, sent as the response body
        error_code: Machine-readable error code
        http_status_code: HTTP status code to use in API responses
        headers: Extra response headers (e.g. an authentication challenge)
    """

    def __init__(self, message: str, error_code: Optional[str] = None,
                 http_status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
                 headers: Optional[Dict[str, str]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.http_status_code = http_status_code
        self.headers = headers or {}
        super().__init__(message)

    @property
    def is_server_error(self) -> bool:
        return self.http_status_code >= 500

    def to_response(self) -> PlainTextResponse:
        """Convert this exception to a plain-text response.

        Returns:
            PlainTextResponse: Response carrying the message, status and headers
        """
        headers = {"X-Error-Code": self.error_code, **self.headers}
        return PlainTextResponse(self.message, status_code=self.http_status_code, headers=headers)


class InputError(AppBaseError):
    """Base class for errors caused by what the caller sent."""
    pass


class AccessError(AppBaseError):
    """Base class for errors raised by the stream access guard."""
    pass


class BackendError(AppBaseError):
    """Base class for resolution backend and server-side failures."""
    pass


# --- Request Exceptions ---

class InvalidSourceError(InputError):
    """Raised when a reference is neither a video id nor a YouTube link."""

    def __init__(self, message: str = "invalid YouTube video link or id"):
        super().__init__(
            message=message,
            error_code="INVALID_SOURCE",
            http_status_code=status.HTTP_406_NOT_ACCEPTABLE
        )


class MethodNotAllowedError(InputError):
    """Raised for HTTP methods other than GET and POST."""

    def __init__(self, message: str = "invalid http method"):
        super().__init__(
            message=message,
            error_code="METHOD_NOT_ALLOWED",
            http_status_code=status.HTTP_405_METHOD_NOT_ALLOWED
        )


class BodyTooLargeError(InputError):
    """Raised when a POST body exceeds the configured size cap."""

    def __init__(self, message: str = "request body too large"):
        super().__init__(
            message=message,
            error_code="BODY_TOO_LARGE",
            http_status_code=status.HTTP_406_NOT_ACCEPTABLE
        )


class BodyReadError(InputError):
    """Raised when the request body cannot be read."""

    def __init__(self, message: str = "cannot read request body"):
        super().__init__(
            message=message,
            error_code="BODY_READ_FAILURE",
            http_status_code=status.HTTP_406_NOT_ACCEPTABLE
        )


# --- Access Guard Exceptions ---

class UnauthorizedError(AccessError):
    """Raised when a guarded route is called without credentials."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            http_status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Basic"}
        )


class ForbiddenError(AccessError):
    """Raised when the supplied credential does not match the stream key."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            message=message,
            error_code="FORBIDDEN",
            http_status_code=status.HTTP_403_FORBIDDEN
        )


class GuardMisconfiguredError(AccessError):
    """Raised when a guarded route is hit but no stream key is configured."""

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(
            message=message,
            error_code="GUARD_MISCONFIGURED",
            http_status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


# --- Resolution Exceptions ---

class EmptyVideoError(BackendError):
    """Raised when a resolver receives a reference that was never populated."""

    def __init__(self, message: str = "no video specified"):
        super().__init__(message=message, error_code="EMPTY_VIDEO")


class InvalidSourceIpError(BackendError):
    """Raised when the caller address resolved by the server is not an IP."""

    def __init__(self, message: str = "invalid source ip"):
        super().__init__(message=message, error_code="INVALID_SOURCE_IP")


class DownloaderUnavailableError(BackendError):
    """Raised when the downloader executable cannot be found or started."""

    def __init__(self, message: str = "downloader executable is not installed or cannot be found"):
        super().__init__(message=message, error_code="DOWNLOADER_UNAVAILABLE")


class DownloaderError(BackendError):
    """Raised when the downloader exits with a non-zero status.

    Attributes:
        output: The text captured on the downloader's standard error
        returncode: The process exit status
    """

    def __init__(self, output: str, returncode: Optional[int] = None):
        self.output = output
        self.returncode = returncode
        message = output.strip() or f"downloader exited with status {returncode}"
        super().__init__(message=message, error_code="DOWNLOADER_FAILURE")


class RemoteApiUnreachableError(BackendError):
    """Raised when the remote resolution API cannot be reached or read."""

    def __init__(self, message: str = "cannot reach remote api"):
        super().__init__(message=message, error_code="REMOTE_API_UNREACHABLE")


class RemoteApiBadResponseError(BackendError):
    """Raised when the remote resolution API replies with an unexpected body."""

    def __init__(self, message: str = "invalid remote api response"):
        super().__init__(message=message, error_code="REMOTE_API_BAD_RESPONSE")


# --- Error Handling Utilities ---

def handle_exception(exception: Exception) -> AppBaseError:
    """Convert any exception to an AppBaseError.

    Args:
        exception: The exception to handle

    Returns:
        AppBaseError: The exception itself, or an equivalent application error
    """
    if isinstance(exception, AppBaseError):
        return exception

    elif isinstance(exception, ValueError):
        return InvalidSourceError(str(exception) or "invalid YouTube video link or id")

    else:
        # Unknown exception, treat as internal server error
        return BackendError(
            f"Internal server error: {type(exception).__name__}",
            error_code="INTERNAL_SERVER_ERROR"
        )
