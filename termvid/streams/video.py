"""ffmpeg-backed frame source.

ffmpeg decodes and scales the video and writes raw RGB24 frames to a pipe.
It cannot be told to seek once running, so seeking and looping restart it
with a new ``-ss`` start offset.
"""

from __future__ import annotations

import logging
import subprocess

from ..errors import EndOfStream, SourceUnavailable, StreamTruncated
from .base import FrameSource
from .tools import require_tool

logger = logging.getLogger(__name__)


class FfmpegFrameSource(FrameSource):
    """Raw frames from an ``ffmpeg`` child process.

    Example:
        source = FfmpegFrameSource("movie.mp4", 96, 54, fps=25.0)
        source.open()
        buffer = bytearray(source.frame_size)
        source.pull_frame(buffer)
        source.reopen_at(30.0)  # seek
        source.close()
    """

    def __init__(
        self,
        path: str,
        width: int,
        height: int,
        fps: float,
        *,
        ffmpeg: str | None = None,
        close_timeout: float = 1.0,
    ) -> None:
        """
        :param path: Input file (anything ffmpeg can read)
        :param width: Output width in pixels
        :param height: Output height in pixels
        :param fps: Output frame rate
        :param ffmpeg: Path to the ffmpeg executable (None = look it up)
        :param close_timeout: Seconds to wait for ffmpeg to exit before killing it
        """
        super().__init__(width, height)
        self.path = path
        self.fps = fps
        self._ffmpeg = ffmpeg
        self._close_timeout = close_timeout
        self._process: subprocess.Popen | None = None

    @property
    def is_open(self) -> bool:
        return self._process is not None

    def build_command(self, at: float = 0.0) -> list[str]:
        """Command line for a decoder starting at ``at`` seconds."""
        ffmpeg = self._ffmpeg or require_tool("ffmpeg")
        command = [ffmpeg, "-nostdin", "-loglevel", "quiet"]
        if at > 0:
            # Input seeking: fast, lands on the nearest keyframe and decodes forward
            command += ["-ss", f"{at:.3f}"]
        command += [
            "-i", self.path,
            "-an",
            "-vf", f"scale={self.width}:{self.height}",
            "-r", f"{self.fps}",
            "-f", "rawvideo",
            "-pix_fmt", "rgb24",
            "pipe:1",
        ]
        return command

    def open(self, at: float = 0.0) -> None:
        if self._process is not None:
            self.close()
        command = self.build_command(at)
        logger.debug(f"Starting decoder at {at:.3f}s: {' '.join(command)}")
        try:
            self._process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise SourceUnavailable(f"Failed to start ffmpeg: {exc}") from exc
        self._position = at

    def pull_frame(self, buffer: bytearray) -> None:
        size = self.frame_size
        if len(buffer) != size:
            raise ValueError(f"Frame buffer has {len(buffer)} bytes, expected {size}")
        if self._process is None or self._process.stdout is None:
            raise EndOfStream("Frame source is not open")

        stdout = self._process.stdout
        view = memoryview(buffer)
        received = 0
        while received < size:
            count = stdout.readinto(view[received:])
            if not count:
                break
            received += count

        if received == 0:
            logger.debug("Decoder reached end of stream")
            raise EndOfStream("No more frames")
        if received < size:
            logger.debug(f"Decoder stopped mid-frame ({received}/{size} bytes)")
            raise StreamTruncated(received, size)

    def close(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        if process.stdout is not None:
            process.stdout.close()
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=self._close_timeout)
            except subprocess.TimeoutExpired:
                logger.debug("Decoder did not exit, killing it")
                process.kill()
                process.wait()


__all__ = ["FfmpegFrameSource"]
