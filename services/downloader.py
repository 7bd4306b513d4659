#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Downloader executable integration for youtubelink.

Wraps a yt-dlp (or youtube-dl compatible) executable in its two invocation
modes: printing the direct link of the best progressive mp4 format, and
writing that format's raw bytes to stdout so they can be piped to a client.
"""

import asyncio
import contextlib
import shutil
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from config import config
from exceptions import (DownloaderError, DownloaderUnavailableError,
                        EmptyVideoError)
from logging_config import StructuredLogger
from models import OutputMode, VideoReference

logger = StructuredLogger(__name__)

BEST_MP4_FORMAT = "best[ext=mp4]"

ByteSink = Callable[[bytes], Awaitable[None]]


class Downloader:
    """Runs the downloader executable for one video at a time.

    Instances hold no per-request state and can be shared between requests.
    """

    def __init__(self, command: str = config.DOWNLOADER_PATH,
                 chunk_size: int = config.STREAM_CHUNK_SIZE):
        """Initialize the downloader wrapper.

        Args:
            command: Executable name (looked up on $PATH) or path.
            chunk_size: Max number of bytes forwarded per read in stream mode.
        """
        self.command = command
        self.chunk_size = chunk_size

    # --- Availability ---

    def resolve_executable(self) -> Optional[str]:
        """Return the full path of the executable, or None if it cannot be found."""
        return shutil.which(self.command)

    def is_available(self) -> bool:
        return self.resolve_executable() is not None

    def ensure_available(self) -> str:
        """Probe the executable, as done once at startup.

        Raises:
            DownloaderUnavailableError: If the executable cannot be found
        """
        path = self.resolve_executable()
        if path is None:
            raise DownloaderUnavailableError(
                f"downloader executable '{self.command}' is not installed or cannot be found"
            )
        logger.info(f"Using downloader executable: {path}", downloader=path)
        return path

    # --- Invocation ---

    @staticmethod
    def build_args(video_id: str, mode: OutputMode, source_ip: Optional[str] = None) -> List[str]:
        """Build the command line arguments for one invocation.

        Args:
            video_id: Canonical video id.
            mode: LINK prints the direct URL, STREAM writes media bytes to stdout.
            source_ip: Address to bind outbound connections to (LINK mode only).
        """
        args = ["-q", "-f", BEST_MP4_FORMAT]

        if mode == OutputMode.LINK:
            args.append("-g")
            if source_ip:
                args.extend(["--source-address", source_ip])
        else:
            args.extend(["-o", "-"])

        # The id goes after "--" since ids may start with a dash
        args.extend(["--", video_id])
        return args

    async def _spawn(self, args: List[str], stdout: int) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                self.command, *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=stdout,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Cannot start downloader '{self.command}': {e}", downloader=self.command)
            raise DownloaderUnavailableError(f"cannot start downloader: {e}") from e

    async def get_link(self, reference: VideoReference) -> str:
        """Resolve the direct link of the best mp4 format.

        Args:
            reference: Parsed video reference. If it carries a source IP, the
                       downloader binds its outbound connections to it.

        Returns:
            str: The direct link printed by the downloader, stripped.

        Raises:
            EmptyVideoError: If the reference was never populated.
            DownloaderError: If the downloader exits non-zero; its message and
                             output hold the captured stderr text.
            DownloaderUnavailableError: If the executable cannot be started.
        """
        if not reference.video_id:
            raise EmptyVideoError()

        args = self.build_args(reference.video_id, OutputMode.LINK, reference.source_ip)
        logger.debug("Resolving link with downloader", video_id=reference.video_id,
                     source_ip=reference.source_ip)

        process = await self._spawn(args, stdout=asyncio.subprocess.PIPE)
        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            error_text = stderr.decode(config.DEFAULT_ENCODING, errors="replace")
            logger.warning(
                f"Downloader exited with status {process.returncode}",
                video_id=reference.video_id, returncode=process.returncode, stderr=error_text
            )
            raise DownloaderError(error_text, process.returncode)

        return stdout.decode(config.DEFAULT_ENCODING, errors="replace").strip()

    async def open_stream(self, reference: VideoReference) -> asyncio.subprocess.Process:
        """Start the downloader in stream mode without reading from it yet.

        Raises:
            EmptyVideoError: If the reference was never populated.
            DownloaderUnavailableError: If the executable cannot be started.
        """
        if not reference.video_id:
            raise EmptyVideoError()

        # Streams always originate from the server's own address
        args = self.build_args(reference.video_id, OutputMode.STREAM)
        logger.info("Starting video stream", video_id=reference.video_id)
        return await self._spawn(args, stdout=asyncio.subprocess.PIPE)

    async def iter_stream(self, process: asyncio.subprocess.Process) -> AsyncIterator[bytes]:
        """Yield the stdout of a process started by open_stream, chunk by chunk.

        The process is killed if the consumer stops early, e.g. when the client
        disconnects and the response task is cancelled.

        Raises:
            DownloaderError: If the process exits non-zero. Chunks may already
                             have been yielded, so the payload is incomplete.
        """
        stderr_task = asyncio.ensure_future(process.stderr.read())
        try:
            while True:
                chunk = await process.stdout.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk

            returncode = await process.wait()
            if returncode != 0:
                error_text = (await stderr_task).decode(config.DEFAULT_ENCODING, errors="replace")
                logger.warning(f"Downloader stream exited with status {returncode}",
                               returncode=returncode, stderr=error_text)
                raise DownloaderError(error_text, returncode)
        finally:
            if process.returncode is None:
                logger.info("Stream consumer went away, killing downloader", pid=process.pid)
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
            if not stderr_task.done():
                stderr_task.cancel()

    async def stream(self, reference: VideoReference, sink: ByteSink) -> None:
        """Pipe the raw bytes of the best mp4 format into sink.

        Args:
            reference: Parsed video reference. Its source IP, if any, is ignored.
            sink: Coroutine function called with each chunk, in order.

        Raises:
            EmptyVideoError: If the reference was never populated.
            DownloaderUnavailableError: If the executable cannot be started.
            DownloaderError: If the downloader exits non-zero; sink may then
                             have received a truncated payload.
        """
        process = await self.open_stream(reference)
        chunks = self.iter_stream(process)
        try:
            async for chunk in chunks:
                await sink(chunk)
        finally:
            await chunks.aclose()
