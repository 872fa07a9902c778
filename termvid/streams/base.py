"""Base frame source class for termvid.

A frame source is a pull-based producer of fixed-size raw frames. It can be
torn down and restarted at any timestamp, which is how seeking and looping
work for decoders that cannot seek in place.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class FrameSource(ABC):
    """Base class for restartable raw frame producers.

    Frames are packed RGB24, row-major, top to bottom, exactly
    ``width * height * 3`` bytes each with no framing in between.

    Example:
        with FfmpegFrameSource("movie.mp4", 80, 48, fps=25.0) as source:
            source.open()
            buffer = bytearray(source.frame_size)
            try:
                while True:
                    source.pull_frame(buffer)
                    show(buffer)
            except EndOfStream:
                pass
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._position: float = 0.0

    @property
    def frame_size(self) -> int:
        """Bytes per frame."""
        return self.width * self.height * 3

    @property
    def position(self) -> float:
        """Timestamp the source was last opened at."""
        return self._position

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether frames can currently be pulled."""
        ...

    @abstractmethod
    def open(self, at: float = 0.0) -> None:
        """Start producing frames beginning at ``at`` seconds.

        :raises SourceUnavailable: if the producer cannot be started
        """
        ...

    @abstractmethod
    def pull_frame(self, buffer: bytearray) -> None:
        """Fill ``buffer`` with exactly one frame.

        :raises EndOfStream: when no further complete frame is available
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the producer. Safe to call more than once."""
        ...

    def reopen_at(self, at: float) -> None:
        """Restart the producer at a new timestamp (seek or loop).

        The caller's frame buffer is stale until the next successful pull.
        """
        self.close()
        self.open(at)

    def __enter__(self) -> "FrameSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["FrameSource"]
