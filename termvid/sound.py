"""Terminal bell sound effects."""

from __future__ import annotations

import sys
import time
from enum import Enum
from typing import Callable, TextIO

BELL = "\x07"


class SoundEffect(Enum):
    """Named bell patterns."""

    START = "start"
    END = "end"
    ERROR = "error"
    SEEK = "seek"


# (bell count, pause between bells in seconds)
_PATTERNS = {
    SoundEffect.START: (2, 0.1),
    SoundEffect.END: (2, 0.0),
    SoundEffect.ERROR: (3, 0.05),
    SoundEffect.SEEK: (1, 0.0),
}


class SoundEffects:
    """Play bell patterns on the terminal when enabled.

    Disabled instances accept every call and do nothing, so callers never need
    to check the flag themselves.
    """

    def __init__(
        self,
        enabled: bool = False,
        stream: TextIO | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.enabled = enabled
        self._stream = stream
        self._sleep = sleep

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def beep(self) -> None:
        """Single bell."""
        if not self.enabled:
            return
        self.stream.write(BELL)
        self.stream.flush()

    def play(self, effect: SoundEffect) -> None:
        """Play a named pattern."""
        if not self.enabled:
            return
        count, pause = _PATTERNS[effect]
        if pause <= 0:
            self.stream.write(BELL * count)
            self.stream.flush()
            return
        for _ in range(count):
            self.stream.write(BELL)
            self.stream.flush()
            self._sleep(pause)


__all__ = ["BELL", "SoundEffect", "SoundEffects"]
