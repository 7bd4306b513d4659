#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Uvicorn server entry point for the youtubelink application.

Handles environment loading (.env), command line flags, logging configuration
and the downloader availability check, then starts the Uvicorn server.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn
from dotenv import load_dotenv

from config import Config
from exceptions import DownloaderUnavailableError
from logging_config import setup_logging
from main import create_app
from models import ResolverStrategy
from services.downloader import Downloader
from utils import is_true


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="youtubelink",
        description="Redirect to (or stream) the direct mp4 link of YouTube videos."
    )
    parser.add_argument("-p", "--port", type=int, default=None, help="HTTP listening port (env PORT, default 8080)")
    parser.add_argument("--host", default=None, help="HTTP listening address (env HOST, default 0.0.0.0)")
    parser.add_argument("-i", "--client-ip", action="store_true", default=None,
                        help="use the real client ip while using downloader redirection")
    parser.add_argument("-P", "--downloader-path", default=None,
                        help="path to the downloader command (looked up in $PATH if not specified)")
    parser.add_argument("-y", "--use-downloader", action="store_true", default=None,
                        help="use the downloader instead of the remote API for redirection")
    parser.add_argument("-k", "--stream-key", default=None,
                        help="authorization key for video streaming (streaming disabled if empty)")
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    """Build the frozen configuration: defaults, then environment, then flags."""
    return Config(
        load_from_env=True,
        PORT=args.port,
        HOST=args.host,
        USE_CLIENT_IP=args.client_ip,
        DOWNLOADER_PATH=args.downloader_path,
        RESOLVER_STRATEGY=ResolverStrategy.DOWNLOADER if args.use_downloader else None,
        STREAM_KEY=args.stream_key,
    )


def main(argv: Optional[List[str]] = None) -> int:
    # 1. Load Environment Variables from .env file (if it exists)
    env_path = Path(".") / ".env"
    if env_path.is_file():
        load_dotenv(dotenv_path=env_path, override=True)

    # 2. Setup Logging
    log_level_console = getattr(logging, os.environ.get("LOG_LEVEL_CONSOLE", "INFO").upper(), logging.INFO)
    log_level_file = getattr(logging, os.environ.get("LOG_LEVEL_FILE", "DEBUG").upper(), logging.DEBUG)
    log_structured = is_true(os.environ.get("LOG_STRUCTURED", "true"))
    log_file = os.environ.get("LOG_FILE", "youtubelink.log") or None

    setup_logging(
        log_level_console=log_level_console,
        log_level_file=log_level_file,
        structured=log_structured,
        log_file=log_file,
    )

    # 3. Build the configuration once; it is read-only from here on
    args = build_parser().parse_args(argv)
    try:
        settings = config_from_args(args)
    except ValueError as e:
        logging.critical(f"Invalid configuration: {e}")
        return 2

    # 4. Check the downloader when an enabled feature needs it
    if settings.downloader_required:
        try:
            Downloader(settings.DOWNLOADER_PATH).ensure_available()
        except DownloaderUnavailableError as e:
            logging.critical(e.message)
            return 1

    logging.info(f"Starting Uvicorn server on http://{settings.HOST}:{settings.PORT}")
    logging.info(f"Strategy: {settings.RESOLVER_STRATEGY.value}, Streaming: {settings.stream_enabled}, "
                 f"Client IP mode: {settings.USE_CLIENT_IP}")

    uvicorn_log_level = os.environ.get("UVICORN_LOG_LEVEL", "info").lower()
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=uvicorn_log_level,
        log_config=None,  # keep the handlers installed by setup_logging
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
