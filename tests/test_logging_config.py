"""
Tests for structured logging.
"""
import json
import logging
import os
import sys
import unittest

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from logging_config import JSONFormatter, StructuredLogger, TextFormatter


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestStructuredLogger(unittest.TestCase):

    def setUp(self):
        self.handler = _ListHandler()
        self.stdlib_logger = logging.getLogger("tests.structured")
        self.stdlib_logger.addHandler(self.handler)
        self.stdlib_logger.setLevel(logging.DEBUG)
        self.stdlib_logger.propagate = False

    def tearDown(self):
        self.stdlib_logger.removeHandler(self.handler)
        self.stdlib_logger.propagate = True

    def test_fields_and_bind(self):
        logger = StructuredLogger("tests.structured").bind(video_id="dQw4w9WgXcQ")
        logger.info("Direct link resolved", strategy="remote_api")
        record = self.handler.records[0]
        self.assertEqual(record.fields, {"video_id": "dQw4w9WgXcQ", "strategy": "remote_api"})

    def test_json_output(self):
        StructuredLogger("tests.structured").warning("Downloader failed", returncode=1, message="clash")
        entry = json.loads(JSONFormatter().format(self.handler.records[0]))
        self.assertEqual(entry["level"], "WARNING")
        self.assertEqual(entry["message"], "Downloader failed")
        self.assertEqual(entry["returncode"], 1)
        self.assertEqual(entry["field_message"], "clash")
        self.assertTrue(entry["logger"].startswith("tests.structured:"))

    def test_parameter_names_as_fields(self):
        StructuredLogger("tests.structured").info("Stream finished", level="custom", fields=2)
        self.assertEqual(self.handler.records[0].levelno, logging.INFO)
        self.assertEqual(self.handler.records[0].fields, {"level": "custom", "fields": 2})

    def test_error_includes_traceback(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            StructuredLogger("tests.structured").error("Failure")
        entry = json.loads(JSONFormatter().format(self.handler.records[0]))
        self.assertEqual(entry["exception"]["type"], "RuntimeError")

    def test_text_output(self):
        StructuredLogger("tests.structured").info("Starting video stream", video_id="dQw4w9WgXcQ")
        line = TextFormatter().format(self.handler.records[0])
        self.assertIn("Starting video stream | video_id=dQw4w9WgXcQ", line)


if __name__ == '__main__':
    unittest.main()
