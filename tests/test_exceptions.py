"""
Tests for the exceptions module.
"""
import unittest
import sys
import os

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from exceptions import (
    AppBaseError, BackendError, BodyReadError, BodyTooLargeError, DownloaderError,
    DownloaderUnavailableError, EmptyVideoError, ForbiddenError, GuardMisconfiguredError,
    InputError, InvalidSourceError, InvalidSourceIpError, MethodNotAllowedError,
    RemoteApiBadResponseError, RemoteApiUnreachableError, UnauthorizedError, handle_exception
)


class TestAppBaseError(unittest.TestCase):
    """Test cases for the AppBaseError class."""

    def test_app_base_error_defaults(self):
        error = AppBaseError("Test error")
        self.assertEqual(str(error), "Test error")
        self.assertEqual(error.error_code, "APPBASEERROR")
        self.assertEqual(error.http_status_code, 500)
        self.assertEqual(error.headers, {})
        self.assertTrue(error.is_server_error)

    def test_to_response(self):
        error = AppBaseError("Custom error", error_code="CUSTOM", http_status_code=418,
                             headers={"X-Extra": "1"})
        response = error.to_response()
        self.assertEqual(response.status_code, 418)
        self.assertEqual(response.body, b"Custom error")
        self.assertEqual(response.headers["X-Error-Code"], "CUSTOM")
        self.assertEqual(response.headers["X-Extra"], "1")
        self.assertTrue(response.headers["content-type"].startswith("text/plain"))


class TestSpecificErrors(unittest.TestCase):
    """Status codes and messages of the error taxonomy."""

    def test_status_codes_and_messages(self):
        cases = [
            (InvalidSourceError(), 406, "invalid YouTube video link or id", InputError),
            (MethodNotAllowedError(), 405, "invalid http method", InputError),
            (BodyTooLargeError(), 406, "request body too large", InputError),
            (BodyReadError(), 406, "cannot read request body", InputError),
            (EmptyVideoError(), 500, "no video specified", BackendError),
            (InvalidSourceIpError(), 500, "invalid source ip", BackendError),
            (RemoteApiUnreachableError(), 500, "cannot reach remote api", BackendError),
            (RemoteApiBadResponseError(), 500, "invalid remote api response", BackendError),
            (DownloaderUnavailableError(), 500,
             "downloader executable is not installed or cannot be found", BackendError),
            (ForbiddenError(), 403, "Forbidden", AppBaseError),
            (GuardMisconfiguredError(), 500, "Internal Server Error", AppBaseError),
        ]
        for error, status_code, message, base in cases:
            with self.subTest(error=type(error).__name__):
                self.assertEqual(error.http_status_code, status_code)
                self.assertEqual(error.message, message)
                self.assertIsInstance(error, base)

    def test_unauthorized_error_carries_challenge(self):
        error = UnauthorizedError()
        self.assertEqual(error.http_status_code, 401)
        self.assertEqual(error.headers, {"WWW-Authenticate": "Basic"})
        self.assertEqual(error.to_response().headers["WWW-Authenticate"], "Basic")

    def test_downloader_error_uses_stderr(self):
        error = DownloaderError("ERROR: Video unavailable\n", returncode=1)
        self.assertEqual(error.output, "ERROR: Video unavailable\n")
        self.assertEqual(error.message, "ERROR: Video unavailable")
        self.assertEqual(error.returncode, 1)
        self.assertEqual(error.http_status_code, 500)

    def test_downloader_error_without_stderr(self):
        error = DownloaderError("", returncode=2)
        self.assertEqual(error.message, "downloader exited with status 2")


class TestHandleException(unittest.TestCase):
    """Test cases for the handle_exception function."""

    def test_handle_app_base_error(self):
        error = ForbiddenError()
        self.assertIs(handle_exception(error), error)

    def test_handle_value_error(self):
        result = handle_exception(ValueError("Invalid value"))
        self.assertIsInstance(result, InvalidSourceError)
        self.assertEqual(result.message, "Invalid value")
        self.assertEqual(result.http_status_code, 406)

    def test_handle_generic_exception(self):
        result = handle_exception(Exception("Generic error"))
        self.assertIsInstance(result, BackendError)
        self.assertEqual(result.http_status_code, 500)
        self.assertEqual(result.message, "Internal server error: Exception")
        self.assertEqual(result.error_code, "INTERNAL_SERVER_ERROR")


if __name__ == '__main__':
    unittest.main()
