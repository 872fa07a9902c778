"""
Pytest fixtures for termvid tests
"""

from unittest.mock import MagicMock

import pytest
from blessed.keyboard import Keystroke

from termvid.errors import EndOfStream
from termvid.streams import FrameSource


def make_frame(width: int, height: int, rgb=(0, 0, 0)) -> bytes:
    """A solid-color RGB24 frame."""
    return bytes(rgb) * (width * height)


def key(text: str) -> Keystroke:
    """Keystroke for a character or a blessed key name such as 'KEY_LEFT'."""
    sequences = {
        "KEY_LEFT": ("\x1b[D", 260),
        "KEY_RIGHT": ("\x1b[C", 261),
        "KEY_ESCAPE": ("\x1b", 361),
    }
    if text in sequences:
        ucs, code = sequences[text]
        return Keystroke(ucs=ucs, code=code, name=text)
    return Keystroke(ucs=text)


class MemoryFrameSource(FrameSource):
    """Frame source backed by a list of frames; records opens and pulls."""

    def __init__(self, frames, width, height, fps=10.0, on_pull=None):
        super().__init__(width, height)
        self.frames = list(frames)
        self.fps = fps
        self.on_pull = on_pull
        self.opens = []
        self.pulls = 0
        self.close_count = 0
        self._index = None

    @property
    def is_open(self) -> bool:
        return self._index is not None

    def open(self, at: float = 0.0) -> None:
        self.opens.append(at)
        self._index = int(round(at * self.fps))
        self._position = at

    def pull_frame(self, buffer: bytearray) -> None:
        if self._index is None or self._index >= len(self.frames):
            raise EndOfStream("No more frames")
        buffer[:] = self.frames[self._index]
        self._index += 1
        self.pulls += 1
        if self.on_pull is not None:
            self.on_pull(self)

    def close(self) -> None:
        if self._index is not None:
            self.close_count += 1
        self._index = None


class FakeClock:
    """Clock that only advances when slept on."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_terminal(keys=()):
    """Mock blessed Terminal that replays ``keys`` then returns no input."""
    pending = [key(k) if k else Keystroke("") for k in keys]

    def inkey(timeout=None):
        if pending:
            return pending.pop(0)
        return Keystroke("")

    terminal = MagicMock()
    terminal.inkey.side_effect = inkey
    return terminal


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def frames_4x4():
    """Ten 4x4 frames of increasing brightness."""
    return [make_frame(4, 4, (v, v, v)) for v in range(0, 250, 25)]
