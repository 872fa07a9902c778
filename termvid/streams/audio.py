"""Fire-and-forget audio playback through ``ffplay``.

The audio process is started once and never told about pauses, seeks or
speed changes, so it drifts out of sync as soon as the user does any of them.
"""

from __future__ import annotations

import logging
import subprocess

from ..errors import SourceUnavailable
from .tools import require_tool

logger = logging.getLogger(__name__)


class AudioPlayer:
    """Play the audio track of a file in a separate ffplay process."""

    def __init__(self, path: str, *, ffplay: str | None = None):
        self.path = path
        self._ffplay = ffplay
        self._process: subprocess.Popen | None = None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def start(self) -> None:
        """Start playback.

        :raises SourceUnavailable: if ffplay is missing or fails to start
        """
        if self._process is not None:
            return
        ffplay = self._ffplay or require_tool("ffplay")
        command = [ffplay, "-nodisp", "-autoexit", "-loglevel", "quiet", self.path]
        logger.debug(f"Starting audio: {' '.join(command)}")
        try:
            self._process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise SourceUnavailable(f"Failed to start ffplay: {exc}") from exc

    def stop(self) -> None:
        """Terminate playback if it is still running."""
        process, self._process = self._process, None
        if process is None or process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=1.0)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()


__all__ = ["AudioPlayer"]
