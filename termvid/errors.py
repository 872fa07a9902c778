"""Exception types raised by termvid.

Seek requests outside the stream are clamped silently and have no exception.
"""

from __future__ import annotations


class TermvidError(Exception):
    """Base class for all termvid errors."""


class SourceUnavailable(TermvidError):
    """An external tool (ffmpeg, ffprobe, ffplay) is missing or failed to start."""


class EndOfStream(TermvidError):
    """The frame source has no further complete frame."""


class StreamTruncated(EndOfStream):
    """The frame source ended in the middle of a frame.

    Handled exactly like :class:`EndOfStream`; the partial frame is discarded.
    """

    def __init__(self, received: int, expected: int):
        super().__init__(f"Short read: got {received} of {expected} bytes")
        self.received = received
        self.expected = expected


class InvalidUserInput(TermvidError, ValueError):
    """A geometry or aspect string given by the user could not be parsed."""


__all__ = [
    "TermvidError",
    "SourceUnavailable",
    "EndOfStream",
    "StreamTruncated",
    "InvalidUserInput",
]
