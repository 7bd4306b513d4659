#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging configuration for youtubelink.

Records carry structured fields (video id, strategy, return code...) which the
JSON formatter writes as top-level keys and the text formatter appends as
key=value pairs. Console output always goes to stderr: the CLI writes links
and media bytes to stdout.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

DEFAULT_LOG_FILE = "youtubelink.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Third-party loggers that are too chatty at DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "multipart")

# Keys of the JSON record that structured fields may not overwrite
_RESERVED_KEYS = frozenset({"timestamp", "level", "logger", "message", "exception"})


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = getattr(record, "fields", None)
    return fields if isinstance(fields, dict) else {}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, structured fields merged at the top level."""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": f"{record.name}:{record.lineno}",
            "message": record.getMessage(),
        }

        for key, value in _record_fields(record).items():
            entry[f"field_{key}" if key in _RESERVED_KEYS else key] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human readable lines with the structured fields appended."""

    def __init__(self):
        super().__init__("%(asctime)s [%(levelname)s] %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record):
        line = super().format(record)
        fields = _record_fields(record)
        if fields:
            line += " | " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


class StructuredLogger:
    """Thin wrapper over a stdlib logger; keyword arguments become fields.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info("Direct link resolved", video_id="dQw4w9WgXcQ")
        log = logger.bind(video_id="dQw4w9WgXcQ")  # fields added to every record
    """

    def __init__(self, name: str, fields: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self.fields = fields or {}

    def bind(self, **fields) -> "StructuredLogger":
        return StructuredLogger(self.logger.name, {**self.fields, **fields})

    def _log(self, level: int, message: str, /, exc_info=None, **fields):
        if not self.logger.isEnabledFor(level):
            return
        # stacklevel points the line number at the caller, not this wrapper
        self.logger.log(level, message, exc_info=exc_info, stacklevel=3,
                        extra={"fields": {**self.fields, **fields}})

    def debug(self, message: str, /, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, /, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, /, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, /, exc_info=True, **fields):
        """Log an error, with the active traceback unless exc_info=False."""
        self._log(logging.ERROR, message, exc_info=exc_info, **fields)

    def critical(self, message: str, /, exc_info=True, **fields):
        self._log(logging.CRITICAL, message, exc_info=exc_info, **fields)


def setup_logging(log_level_console=logging.INFO, log_level_file=logging.DEBUG,
                  structured=True, log_file: Optional[str] = DEFAULT_LOG_FILE):
    """Install the console handler and, unless log_file is None, a rotating file handler.

    Existing root handlers are replaced, so calling this twice is harmless.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = JSONFormatter() if structured else TextFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level_console)
    root_logger.addHandler(console_handler)
    root_level = log_level_console

    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
            )
        except OSError as e:
            root_logger.warning(f"Could not open log file '{log_file}', logging to console only: {e}")
        else:
            file_handler.setFormatter(formatter)
            file_handler.setLevel(log_level_file)
            root_logger.addHandler(file_handler)
            root_level = min(root_level, log_level_file)

    root_logger.setLevel(root_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, log_level_console))

    logging.getLogger(__name__).debug("Logging configured", extra={"fields": {
        "structured": structured, "log_file": log_file,
    }})
