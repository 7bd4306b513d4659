#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Configuration module for youtubelink.

Defines configuration parameters and loads values from environment variables.
A Config instance is frozen once built: the server constructs it a single time
at startup and every component only ever reads from it.
"""

import os
import logging
from typing import Any, Dict

from models import ResolverStrategy
from utils import is_true

# Initialize a basic logger for config loading issues
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Default configuration values
_CONFIG_DEFAULTS: Dict[str, Any] = {
    # Resolution
    "DOWNLOADER_PATH": "yt-dlp",  # Looked up on $PATH unless absolute
    "RESOLVER_STRATEGY": ResolverStrategy.REMOTE_API,
    "USE_CLIENT_IP": False,  # Bind downloader calls to the caller's address

    # Remote resolution API
    "REMOTE_API_URL": "http://streampocket.net/json2",
    "REMOTE_API_TIMEOUT_SECONDS": 20.0,
    "OEMBED_URL": "https://www.youtube.com/oembed",

    # Streaming
    "STREAM_KEY": "",  # Shared secret; streaming is unavailable while empty
    "STREAM_CHUNK_SIZE": 64 * 1024,

    # Web Server
    "HOST": "0.0.0.0",
    "PORT": 8080,
    "MAX_BODY_SIZE": 512,  # Max POST body size in bytes
    "DEFAULT_ENCODING": "utf-8",
}


class Config:
    """Read-only configuration built from defaults, environment and overrides."""

    def __init__(self, load_from_env: bool = True, **overrides: Any):
        """Initialize configuration.

        Args:
            load_from_env: Whether to load values from environment variables
            **overrides: Explicit values (e.g. from command line flags) applied last

        Raises:
            ValueError: If an override names an unknown key or holds an invalid value
        """
        object.__setattr__(self, "_frozen", False)

        for key, value in _CONFIG_DEFAULTS.items():
            setattr(self, key, value)

        if load_from_env:
            self._load_from_env()

        for key, value in overrides.items():
            if key not in _CONFIG_DEFAULTS:
                raise ValueError(f"Unknown configuration key: {key}")
            if value is not None:
                setattr(self, key, value)

        # Normalize the strategy whatever its origin
        self.RESOLVER_STRATEGY = ResolverStrategy(self.RESOLVER_STRATEGY)

        object.__setattr__(self, "_frozen", True)

    def __setattr__(self, key: str, value: Any) -> None:
        if self._frozen:
            raise AttributeError(f"Config is read-only, cannot set {key}")
        object.__setattr__(self, key, value)

    @property
    def stream_enabled(self) -> bool:
        """Whether the guarded streaming routes have a secret to check against."""
        return bool(self.STREAM_KEY)

    @property
    def downloader_required(self) -> bool:
        """Whether an enabled feature needs the downloader executable."""
        return self.RESOLVER_STRATEGY == ResolverStrategy.DOWNLOADER or self.stream_enabled

    def _load_from_env(self) -> None:
        """Load configuration values from environment variables."""
        self.DOWNLOADER_PATH = os.environ.get("DOWNLOADER_PATH", self.DOWNLOADER_PATH)
        self.STREAM_KEY = os.environ.get("STREAM_KEY", self.STREAM_KEY)
        self.REMOTE_API_URL = os.environ.get("REMOTE_API_URL", self.REMOTE_API_URL)
        self.HOST = os.environ.get("HOST", self.HOST)

        env_strategy = os.environ.get("RESOLVER_STRATEGY")
        if env_strategy:
            try:
                self.RESOLVER_STRATEGY = ResolverStrategy(env_strategy.strip().lower())
            except ValueError:
                logger.warning(f"Invalid RESOLVER_STRATEGY value: {env_strategy}. "
                               f"Expected one of {[s.value for s in ResolverStrategy]}")

        env_client_ip = os.environ.get("USE_CLIENT_IP")
        if env_client_ip is not None:
            self.USE_CLIENT_IP = is_true(env_client_ip)

        self._load_int_from_env("PORT")
        self._load_int_from_env("STREAM_CHUNK_SIZE")
        self._load_float_from_env("REMOTE_API_TIMEOUT_SECONDS")

    def _load_int_from_env(self, key):
        """Load an integer value from environment variable.

        Returns:
            bool: True if the value was loaded, False otherwise
        """
        env_value = os.environ.get(key)
        if env_value is not None:
            try:
                setattr(self, key, int(env_value))
                return True
            except ValueError:
                logger.warning(f"Invalid integer value for {key}: {env_value}")
        return False

    def _load_float_from_env(self, key):
        """Load a float value from environment variable.

        Returns:
            bool: True if the value was loaded, False otherwise
        """
        env_value = os.environ.get(key)
        if env_value is not None:
            try:
                setattr(self, key, float(env_value))
                return True
            except ValueError:
                logger.warning(f"Invalid float value for {key}: {env_value}")
        return False


# Create a single instance of Config to be imported by other modules
config = Config(load_from_env=True)
