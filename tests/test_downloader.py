"""
Tests for the downloader executable integration.

The real downloader is replaced by small shell scripts from fake_tools.
"""
import asyncio
import os
import sys
import tempfile
import unittest

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from exceptions import DownloaderError, DownloaderUnavailableError, EmptyVideoError
from models import OutputMode, VideoReference
from services.downloader import BEST_MP4_FORMAT, Downloader
from fake_tools import (FAKE_LINK, make_failing_tool, make_link_tool, make_slow_stream_tool,
                         make_stream_tool, make_truncated_stream_tool)

VIDEO_ID = "dQw4w9WgXcQ"
MISSING_TOOL = "/nonexistent/dir/fake-dl"


def reference_for(video: str = VIDEO_ID, source_ip: str = None) -> VideoReference:
    reference = VideoReference()
    reference.add_video_link(video)
    if source_ip:
        reference.add_source_ip(source_ip)
    return reference


class TestBuildArgs(unittest.TestCase):
    """Command lines passed to the downloader."""

    def test_link_mode(self):
        self.assertEqual(
            Downloader.build_args(VIDEO_ID, OutputMode.LINK),
            ["-q", "-f", BEST_MP4_FORMAT, "-g", "--", VIDEO_ID]
        )

    def test_link_mode_with_source_ip(self):
        self.assertEqual(
            Downloader.build_args(VIDEO_ID, OutputMode.LINK, "203.0.113.7"),
            ["-q", "-f", BEST_MP4_FORMAT, "-g", "--source-address", "203.0.113.7", "--", VIDEO_ID]
        )

    def test_stream_mode_ignores_source_ip(self):
        self.assertEqual(
            Downloader.build_args(VIDEO_ID, OutputMode.STREAM, "203.0.113.7"),
            ["-q", "-f", BEST_MP4_FORMAT, "-o", "-", "--", VIDEO_ID]
        )


class TestAvailability(unittest.TestCase):

    def test_missing_executable(self):
        downloader = Downloader(MISSING_TOOL)
        self.assertFalse(downloader.is_available())
        with self.assertRaises(DownloaderUnavailableError) as ctx:
            downloader.ensure_available()
        self.assertIn(MISSING_TOOL, ctx.exception.message)

    @unittest.skipUnless(os.name == "posix", "fake downloaders are shell scripts")
    def test_present_executable(self):
        with tempfile.TemporaryDirectory() as tmp:
            tool = make_stream_tool(tmp)
            downloader = Downloader(tool)
            self.assertTrue(downloader.is_available())
            self.assertEqual(downloader.ensure_available(), tool)


class TestEmptyReference(unittest.IsolatedAsyncioTestCase):
    """An unpopulated reference fails before any process is started."""

    async def test_get_link(self):
        with self.assertRaises(EmptyVideoError):
            await Downloader(MISSING_TOOL).get_link(VideoReference())

    async def test_open_stream(self):
        with self.assertRaises(EmptyVideoError):
            await Downloader(MISSING_TOOL).open_stream(VideoReference())

    async def test_missing_executable_at_call_time(self):
        with self.assertRaises(DownloaderUnavailableError):
            await Downloader(MISSING_TOOL).get_link(reference_for())


@unittest.skipUnless(os.name == "posix", "fake downloaders are shell scripts")
class TestGetLink(unittest.IsolatedAsyncioTestCase):
    """Link resolution through a fake downloader."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.args_file = os.path.join(self.tmp, "args.txt")

    def tearDown(self):
        self._tmp.cleanup()

    def recorded_args(self):
        with open(self.args_file, encoding="utf-8") as f:
            return f.read().splitlines()

    async def test_returns_stripped_link(self):
        downloader = Downloader(make_link_tool(self.tmp, self.args_file))
        link = await downloader.get_link(reference_for())
        self.assertEqual(link, FAKE_LINK)
        self.assertEqual(self.recorded_args(), ["-q", "-f", BEST_MP4_FORMAT, "-g", "--", VIDEO_ID])

    async def test_source_ip_is_forwarded(self):
        downloader = Downloader(make_link_tool(self.tmp, self.args_file))
        await downloader.get_link(reference_for(source_ip="203.0.113.7"))
        self.assertEqual(
            self.recorded_args(),
            ["-q", "-f", BEST_MP4_FORMAT, "-g", "--source-address", "203.0.113.7", "--", VIDEO_ID]
        )

    async def test_id_starting_with_dash(self):
        downloader = Downloader(make_link_tool(self.tmp, self.args_file))
        await downloader.get_link(reference_for("-abcdefghij"))
        self.assertEqual(self.recorded_args()[-2:], ["--", "-abcdefghij"])

    async def test_failure_carries_stderr(self):
        downloader = Downloader(make_failing_tool(self.tmp))
        with self.assertRaises(DownloaderError) as ctx:
            await downloader.get_link(reference_for())
        self.assertEqual(ctx.exception.message, "ERROR: [youtube] dQw4w9WgXcQ: Video unavailable")
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertEqual(ctx.exception.http_status_code, 500)


@unittest.skipUnless(os.name == "posix", "fake downloaders are shell scripts")
class TestStream(unittest.IsolatedAsyncioTestCase):
    """Streaming through a fake downloader."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.received = []

    def tearDown(self):
        self._tmp.cleanup()

    async def sink(self, chunk: bytes) -> None:
        self.received.append(chunk)

    async def test_stream_to_sink(self):
        downloader = Downloader(make_stream_tool(self.tmp, repeat=1000), chunk_size=1024)
        await downloader.stream(reference_for(), self.sink)
        payload = b"".join(self.received)
        self.assertEqual(payload, b"0123456789" * 1000)
        self.assertTrue(all(len(chunk) <= 1024 for chunk in self.received))

    async def test_truncated_stream(self):
        downloader = Downloader(make_truncated_stream_tool(self.tmp))
        with self.assertRaises(DownloaderError) as ctx:
            await downloader.stream(reference_for(), self.sink)
        self.assertEqual(b"".join(self.received), b"partial")
        self.assertEqual(ctx.exception.message, "ERROR: unable to download video data")

    async def test_consumer_stop_kills_process(self):
        downloader = Downloader(make_slow_stream_tool(self.tmp))
        process = await downloader.open_stream(reference_for())
        chunks = downloader.iter_stream(process)
        first = await chunks.__anext__()
        self.assertEqual(first, b"first")

        await chunks.aclose()
        returncode = await asyncio.wait_for(process.wait(), timeout=5)
        self.assertNotEqual(returncode, 0)

    async def test_sink_failure_kills_process(self):
        downloader = Downloader(make_slow_stream_tool(self.tmp))

        async def broken_sink(chunk: bytes) -> None:
            raise ConnectionResetError("client went away")

        with self.assertRaises(ConnectionResetError):
            await asyncio.wait_for(downloader.stream(reference_for(), broken_sink), timeout=5)


if __name__ == '__main__':
    unittest.main()
