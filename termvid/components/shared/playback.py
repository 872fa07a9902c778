"""Playback clock: session state, commands and frame pacing.

The controller is pure state. It never touches the frame source or the
terminal; the player asks it what to do (e.g. the clamped target of a seek)
and performs the I/O itself.

Example:
    from termvid.components.shared import PlaybackController

    controller = PlaybackController(fps=25.0, duration=120.0)
    controller.advance()            # one frame pulled
    target = controller.seek_forward()
    source.reopen_at(target)
    time.sleep(controller.pacing_delay(elapsed))
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

MIN_SPEED = 0.01
MAX_SPEED = 100.0
SPEED_UP_FACTOR = 1.1
SPEED_DOWN_FACTOR = 0.9

# (maximum duration in seconds, seek step in seconds)
SEEK_STEPS: tuple[tuple[float, float], ...] = (
    (60.0, 1.0),
    (300.0, 5.0),
    (1800.0, 15.0),
    (3600.0, 30.0),
    (7200.0, 60.0),
    (14400.0, 120.0),
    (43200.0, 300.0),
)
LONGEST_SEEK_STEP = 600.0


class PlaybackState(Enum):
    """Playback state machine."""

    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass
class PlaybackSession:
    """Mutable state of one playback run."""

    timestamp: float = 0.0
    paused: bool = False
    speed: float = 1.0
    loop_enabled: bool = False
    frame_index: int = 0


@dataclass
class ProgressState:
    """Snapshot used to draw the status bar."""

    current_time: float = 0.0
    total_time: float = 0.0
    playback_speed: float = 1.0
    loop_enabled: bool = False
    playback_state: PlaybackState = PlaybackState.PLAYING


def clamp_speed(speed: float) -> float:
    return max(MIN_SPEED, min(MAX_SPEED, speed))


def seek_step_for(duration: float) -> float:
    """Seek step for a stream length: longer videos seek further."""
    if duration <= 0:
        return 1.0
    for limit, step in SEEK_STEPS:
        if duration <= limit:
            return step
    return LONGEST_SEEK_STEP


class PlaybackController:
    """Control playback position, pause state, speed and looping.

    The session starts PLAYING at timestamp 0. STOPPED is terminal: it is
    entered at end of stream without looping, or on quit.
    """

    def __init__(
        self,
        fps: float,
        duration: float = 0.0,
        *,
        speed: float = 1.0,
        loop: bool = False,
    ):
        """
        :param fps: Rate at which frames are pulled (frames per second)
        :param duration: Stream length in seconds (0 = unknown)
        :param speed: Initial speed multiplier
        :param loop: Whether to restart at the end of the stream
        """
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self.fps = fps
        self.duration = max(0.0, duration)
        self.session = PlaybackSession(speed=clamp_speed(speed), loop_enabled=loop)
        self._stopped = False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        if self._stopped:
            return PlaybackState.STOPPED
        if self.session.paused:
            return PlaybackState.PAUSED
        return PlaybackState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self.state == PlaybackState.PAUSED

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def speed(self) -> float:
        return self.session.speed

    @property
    def loop_enabled(self) -> bool:
        return self.session.loop_enabled

    @property
    def current_time(self) -> float:
        return self.session.timestamp

    @property
    def frame_index(self) -> int:
        return self.session.frame_index

    @property
    def progress(self) -> float:
        """Current progress as 0.0-1.0."""
        if self.duration > 0:
            return max(0.0, min(1.0, self.session.timestamp / self.duration))
        return 0.0

    @property
    def seek_step(self) -> float:
        return seek_step_for(self.duration)

    @property
    def frame_interval(self) -> float:
        """Seconds between frames at the current speed."""
        return (1.0 / self.fps) / self.session.speed

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def toggle_pause(self) -> None:
        """Toggle between PLAYING and PAUSED."""
        if self._stopped:
            return
        self.session.paused = not self.session.paused

    def toggle_loop(self) -> None:
        self.session.loop_enabled = not self.session.loop_enabled

    def set_speed(self, multiplier: float) -> None:
        self.session.speed = clamp_speed(multiplier)

    def speed_up(self) -> None:
        self.set_speed(self.session.speed * SPEED_UP_FACTOR)

    def speed_down(self) -> None:
        self.set_speed(self.session.speed * SPEED_DOWN_FACTOR)

    def seek_to(self, position: float) -> float:
        """Move to an absolute position and resume playing.

        Out-of-range positions are clamped to ``[0, duration]``.

        :return: The clamped position; the frame source must be reopened there
        """
        position = max(0.0, position)
        if self.duration > 0:
            position = min(position, self.duration)
        self.session.timestamp = position
        self.session.frame_index = math.floor(position * self.fps)
        self.session.paused = False
        return position

    def seek_relative(self, delta: float) -> float:
        return self.seek_to(self.session.timestamp + delta)

    def seek_forward(self) -> float:
        return self.seek_relative(self.seek_step)

    def seek_backward(self) -> float:
        return self.seek_relative(-self.seek_step)

    def stop(self) -> None:
        self._stopped = True

    # -------------------------------------------------------------------------
    # Stream events
    # -------------------------------------------------------------------------

    def advance(self) -> None:
        """Account for one successfully pulled frame."""
        self.session.frame_index += 1
        self.session.timestamp = self.session.frame_index / self.fps

    def end_of_stream(self) -> bool:
        """Handle the natural end of the stream.

        :return: True if playback restarts at 0 (source must be reopened),
            False if the session is over
        """
        if self.session.loop_enabled:
            self.session.frame_index = 0
            self.session.timestamp = 0.0
            self.session.paused = False
            return True
        self.stop()
        return False

    # -------------------------------------------------------------------------
    # Pacing
    # -------------------------------------------------------------------------

    def pacing_delay(self, elapsed: float) -> float:
        """Time left to sleep after ``elapsed`` seconds spent on a frame.

        Frames are never skipped: when rendering is slower than the frame
        interval the result is 0 and the lag accumulates.
        """
        return max(0.0, self.frame_interval - elapsed)

    def get_progress_state(self) -> ProgressState:
        return ProgressState(
            current_time=self.session.timestamp,
            total_time=self.duration,
            playback_speed=self.session.speed,
            loop_enabled=self.session.loop_enabled,
            playback_state=self.state,
        )


def format_time(seconds: float, force_hours: bool = False) -> str:
    """Format seconds as MM:SS or HH:MM:SS."""
    if seconds < 0:
        seconds = 0
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0 or force_hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
