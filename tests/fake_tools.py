"""
Stand-in downloader executables for the tests.

Each helper writes a small POSIX shell script that behaves like the real
downloader would in one situation.
"""
import os

FAKE_LINK = "https://rr3---sn.googlevideo.example/videoplayback?expire=1700000000&itag=18&sig=AB12"


def make_tool(directory: str, body: str, name: str = "fake-dl") -> str:
    """Write an executable shell script and return its path."""
    path = os.path.join(directory, name)
    with open(path, "w", encoding="utf-8") as f:
        f.write("#!/bin/sh\n" + body + "\n")
    os.chmod(path, 0o755)
    return path


def make_link_tool(directory: str, args_file: str, link: str = FAKE_LINK) -> str:
    """A downloader that records its arguments and prints a direct link."""
    return make_tool(directory, f"printf '%s\\n' \"$@\" > '{args_file}'\necho '{link}'")


def make_failing_tool(directory: str, message: str = "ERROR: [youtube] dQw4w9WgXcQ: Video unavailable") -> str:
    """A downloader that reports an error on stderr and exits with status 1."""
    return make_tool(directory, f"echo '{message}' >&2\nexit 1")


def make_stream_tool(directory: str, repeat: int = 100) -> str:
    """A downloader that writes repeat * 10 bytes of '0123456789' to stdout."""
    return make_tool(
        directory,
        f"i=0\nwhile [ $i -lt {repeat} ]; do printf '0123456789'; i=$((i+1)); done"
    )


def make_truncated_stream_tool(directory: str, message: str = "ERROR: unable to download video data") -> str:
    """A downloader that writes some bytes, then fails."""
    return make_tool(directory, f"printf 'partial'\necho '{message}' >&2\nexit 1")


def make_slow_stream_tool(directory: str) -> str:
    """A downloader that writes a few bytes and then hangs."""
    return make_tool(directory, "printf 'first'\nexec sleep 30")


def make_endless_stream_tool(directory: str, pid_file: str) -> str:
    """A downloader that records its pid and writes to stdout until killed."""
    return make_tool(directory, f"echo $$ > '{pid_file}'\nexec yes 0123456789")
