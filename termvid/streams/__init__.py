"""termvid streams package.

This package wraps the external ffmpeg tools:

- FrameSource: Abstract base class for restartable raw frame producers
- FfmpegFrameSource: Raw RGB24 frames from an ffmpeg child process
- probe_source / SourceInfo: Duration, frame rate and size via ffprobe
- AudioPlayer: Fire-and-forget audio through ffplay

Example:
    from termvid.streams import FfmpegFrameSource, probe_source

    info = probe_source("movie.mp4")
    source = FfmpegFrameSource("movie.mp4", 96, 54, fps=info.fps)
    source.open()
"""

from .audio import AudioPlayer
from .base import FrameSource
from .probe import SourceInfo, parse_frame_rate, probe_source
from .tools import find_tool, require_tool
from .video import FfmpegFrameSource

__all__ = [
    "FrameSource",
    "FfmpegFrameSource",
    "SourceInfo",
    "parse_frame_rate",
    "probe_source",
    "AudioPlayer",
    "find_tool",
    "require_tool",
]
