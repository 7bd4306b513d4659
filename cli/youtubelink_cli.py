#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
youtubelink_cli.py
Prints the direct link of YouTube videos, one per line.

Videos are taken from the command line arguments, or read from stdin (one per
line) when none are given. Links come from the remote API unless -y selects
the downloader. --check reports whether videos exist, --stream writes one
video's bytes to stdout.
"""

import argparse
import asyncio
import sys
from typing import BinaryIO, Iterable, List, Optional, TextIO

from rich.console import Console

from config import Config
from exceptions import AppBaseError, DownloaderUnavailableError
from models import ResolverStrategy, VideoReference
from services.downloader import Downloader
from services.remote_api import OEmbedClient, RemoteApiClient
from services.resolver import VideoResolver

# Links and media go to stdout, everything else to stderr
console = Console(stderr=True, highlight=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="youtubelink-cli", description="Print the direct link of YouTube videos.")
    parser.add_argument("videos", nargs="*", help="video ids or links (read from stdin if omitted)")
    parser.add_argument("-y", "--use-downloader", action="store_true",
                        help="use the downloader executable instead of the remote API")
    parser.add_argument("-P", "--downloader-path", default=None,
                        help="path to the downloader command (looked up in $PATH if not specified)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--check", action="store_true", help="only report whether each video exists")
    mode.add_argument("--stream", action="store_true", help="write the video bytes of a single video to stdout")
    return parser


def get_videos(args: List[str], stdin: TextIO) -> List[str]:
    """Return the videos from the arguments, or the non-empty lines of stdin."""
    if args:
        return list(args)
    return [line.strip() for line in stdin if line.strip()]


async def fetch_links(videos: Iterable[str], resolver: VideoResolver, out: TextIO) -> bool:
    """Resolve and print every video. Returns True if any of them failed."""
    had_error = False
    for video in videos:
        reference = VideoReference()
        try:
            reference.add_video_link(video)
            link = await resolver.resolve(reference)
        except AppBaseError as e:
            had_error = True
            console.print(f"[red]{video}[/]: {e.message}")
            continue
        print(link.strip(), file=out)
    return had_error


async def check_videos(videos: Iterable[str], oembed: OEmbedClient, out: TextIO) -> bool:
    """Print '<id> exists' or '<id> missing' per video. Returns True on any failure."""
    had_error = False
    for video in videos:
        reference = VideoReference()
        try:
            reference.add_video_link(video)
            exists = await oembed.exists(reference)
        except AppBaseError as e:
            had_error = True
            console.print(f"[red]{video}[/]: {e.message}")
            continue
        print(f"{reference.video_id} {'exists' if exists else 'missing'}", file=out)
        if not exists:
            had_error = True
    return had_error


async def stream_video(video: str, downloader: Downloader, out: BinaryIO) -> bool:
    """Stream one video to out. Returns True on failure."""
    reference = VideoReference()

    async def write(chunk: bytes) -> None:
        out.write(chunk)

    try:
        reference.add_video_link(video)
        await downloader.stream(reference, write)
    except AppBaseError as e:
        console.print(f"[red]{video}[/]: {e.message}")
        return True
    finally:
        out.flush()
    return False


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Config(
        DOWNLOADER_PATH=args.downloader_path,
        RESOLVER_STRATEGY=ResolverStrategy.DOWNLOADER if args.use_downloader else None,
    )
    downloader = Downloader(settings.DOWNLOADER_PATH, chunk_size=settings.STREAM_CHUNK_SIZE)

    if settings.RESOLVER_STRATEGY == ResolverStrategy.DOWNLOADER or args.stream:
        try:
            downloader.ensure_available()
        except DownloaderUnavailableError as e:
            console.print(f"[bold red]ERROR:[/] {e.message}")
            return 1

    try:
        videos = get_videos(args.videos, sys.stdin)
    except OSError as e:
        console.print(f"[bold red]ERROR:[/] cannot read videos from stdin: {e}")
        return 1

    if args.stream:
        if len(videos) != 1:
            console.print("[bold red]ERROR:[/] --stream takes exactly one video")
            return 2
        had_error = asyncio.run(stream_video(videos[0], downloader, sys.stdout.buffer))
    elif args.check:
        oembed = OEmbedClient(settings.OEMBED_URL, timeout=settings.REMOTE_API_TIMEOUT_SECONDS)
        had_error = asyncio.run(check_videos(videos, oembed, sys.stdout))
    else:
        remote_api = RemoteApiClient(settings.REMOTE_API_URL, timeout=settings.REMOTE_API_TIMEOUT_SECONDS)
        resolver = VideoResolver(downloader, remote_api, default_strategy=settings.RESOLVER_STRATEGY)
        had_error = asyncio.run(fetch_links(videos, resolver, sys.stdout))

    return 1 if had_error else 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        sys.exit(130)
