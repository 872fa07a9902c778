"""
Terminal Video Player - play a video as colored text with keyboard controls.

The player pulls raw frames from ffmpeg, paints them with the ASCII renderer,
polls the keyboard once per frame and sleeps to hold the target frame rate.
Seeking and looping restart the decoder at the new position.

Example:
    from termvid.components.ascii import TerminalPlayer, TerminalPlayerConfig

    # Simple usage
    player = TerminalPlayer("video.mp4")
    player.play()

    # With custom configuration
    config = TerminalPlayerConfig(color_mode=ColorMode.TRUECOLOR, loop=True)
    player = TerminalPlayer("video.mp4", config=config)
    player.play()

Controls:
    Space       - Play/Pause toggle
    Q / Escape  - Quit
    Left/Right  - Seek backward/forward (step depends on video length)
    W / S       - Speed up / slow down (x1.1 / x0.9)
    L           - Toggle loop mode
    B           - Beep (when sound effects are enabled)
"""

from __future__ import annotations

import logging
import signal
import sys
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, TextIO

from blessed import Terminal

from .renderer import ColorMode, FrameRenderer, LuminanceMapper, RESET
from ..shared import PlaybackController, ProgressBarRenderer
from ...errors import EndOfStream
from ...geometry import (
    AspectPolicy,
    OutputGeometry,
    TerminalSize,
    compute_offsets,
    resolve_geometry,
)
from ...presets import CHARS_DEFAULT
from ...sound import SoundEffect, SoundEffects
from ...streams import AudioPlayer, FfmpegFrameSource, FrameSource, SourceInfo, probe_source

logger = logging.getLogger(__name__)

# ANSI escape codes
ESC = "\033"
CLEAR_SCREEN = f"{ESC}[2J"

DEFAULT_FPS = 25.0


class Command(Enum):
    """Playback commands produced by the keyboard."""

    QUIT = "quit"
    TOGGLE_PAUSE = "toggle_pause"
    TOGGLE_LOOP = "toggle_loop"
    SPEED_UP = "speed_up"
    SPEED_DOWN = "speed_down"
    BEEP = "beep"
    SEEK_BACKWARD = "seek_backward"
    SEEK_FORWARD = "seek_forward"


DEFAULT_BINDINGS: dict[str, Command] = {
    "q": Command.QUIT,
    "Q": Command.QUIT,
    "KEY_ESCAPE": Command.QUIT,
    " ": Command.TOGGLE_PAUSE,
    "l": Command.TOGGLE_LOOP,
    "L": Command.TOGGLE_LOOP,
    "w": Command.SPEED_UP,
    "W": Command.SPEED_UP,
    "s": Command.SPEED_DOWN,
    "S": Command.SPEED_DOWN,
    "b": Command.BEEP,
    "KEY_LEFT": Command.SEEK_BACKWARD,
    "KEY_RIGHT": Command.SEEK_FORWARD,
}


@dataclass
class TerminalPlayerConfig:
    """Configuration for TerminalPlayer output and controls."""

    # Rendering
    color_mode: ColorMode = ColorMode.NONE
    glyph_ramp: str = CHARS_DEFAULT
    aspect_policy: AspectPolicy = field(default_factory=AspectPolicy)
    show_status_bar: bool = True

    # Timing (fps None = source frame rate)
    fps: float | None = None
    speed: float = 1.0
    loop: bool = False
    pause_quantum: float = 0.01

    # Sound
    play_audio: bool = False
    sound_effects: bool = False


class KeyboardHandler:
    """Map key presses to playback commands using the blessed library.

    Escape sequences (arrow keys) are assembled by blessed, which waits a
    short moment for the rest of a sequence after an escape byte.
    """

    def __init__(self, terminal: Terminal, bindings: dict[str, Command] | None = None):
        self.terminal = terminal
        self._bindings: dict[str, Command] = {}
        self._char_bindings: dict[str, Command] = {}
        for key, command in (bindings or DEFAULT_BINDINGS).items():
            self.bind(key, command)

    def bind(self, key: str, command: Command) -> None:
        """Bind a command to a key.

        Key can be a key name (e.g., 'KEY_LEFT', 'KEY_ESCAPE') or a character.
        """
        if key.startswith("KEY_"):
            self._bindings[key] = command
        else:
            self._char_bindings[key] = command

    def unbind(self, key: str) -> None:
        """Remove a key binding."""
        if key.startswith("KEY_"):
            self._bindings.pop(key, None)
        else:
            self._char_bindings.pop(key, None)

    def lookup(self, key) -> Command | None:
        """Command bound to a blessed Keystroke, None if unbound."""
        if key.name and key.name in self._bindings:
            return self._bindings[key.name]
        return self._char_bindings.get(str(key))

    def poll(self, timeout: float = 0.0) -> Command | None:
        """Read at most one key without blocking (by default).

        Unbound keys are discarded.
        """
        key = self.terminal.inkey(timeout=timeout)
        if not key:
            return None
        command = self.lookup(key)
        if command is None:
            logger.debug(f"Ignoring key {key!r}")
        return command


class TerminalPlayer:
    """
    Terminal video player with keyboard controls.

    Accepts either a video file path (decoded by ffmpeg) or any FrameSource.
    Geometry is fixed once before playback starts; resizing the terminal
    during playback is not handled.
    """

    def __init__(
        self,
        source: str | Path | FrameSource,
        *,
        config: TerminalPlayerConfig | None = None,
        info: SourceInfo | None = None,
        terminal: Terminal | None = None,
        terminal_size: TerminalSize | None = None,
        output: TextIO | None = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        :param source: Video file path OR an already sized FrameSource
        :param config: Player configuration (uses defaults if None)
        :param info: Source metadata (None = probe the file with ffprobe)
        :param terminal: blessed Terminal for keyboard and terminal modes
        :param terminal_size: Terminal size (None = detect)
        :param output: Stream to paint on (None = sys.stdout)
        :param clock: Monotonic clock used for pacing
        :param sleep: Sleep function used for pacing
        """
        if isinstance(source, FrameSource):
            self._source: FrameSource | None = source
            self.video_path = None
        else:
            self._source = None
            self.video_path = Path(source)

        self.config = config or TerminalPlayerConfig()
        self._info = info
        self._terminal = terminal
        self._terminal_size = terminal_size
        self._output = output
        self._clock = clock
        self._sleep = sleep

        self._stop_event = threading.Event()
        self._geometry: OutputGeometry | None = None
        self._fps: float = DEFAULT_FPS
        self._controller: PlaybackController | None = None
        self._frames_since_open = 0
        self._audio: AudioPlayer | None = None
        self.sound = SoundEffects(self.config.sound_effects, stream=output, sleep=sleep)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def output(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    @property
    def info(self) -> SourceInfo | None:
        return self._info

    @property
    def geometry(self) -> OutputGeometry | None:
        return self._geometry

    @property
    def terminal_size(self) -> TerminalSize | None:
        return self._terminal_size

    @property
    def fps(self) -> float:
        return self._fps

    @property
    def controller(self) -> PlaybackController | None:
        return self._controller

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def prepare(self) -> OutputGeometry:
        """Probe the source and fix the output geometry.

        Called by play() if needed; call it earlier to inspect the geometry.

        :raises SourceUnavailable: if ffprobe is missing
        """
        if self._geometry is not None:
            return self._geometry

        if self._terminal_size is None:
            self._terminal_size = TerminalSize.detect()
        terminal_size = self._terminal_size
        policy = self.config.aspect_policy

        if self._info is None:
            if self._source is not None:
                self._info = SourceInfo()
            else:
                self._info = probe_source(str(self.video_path))
        info = self._info

        self._fps = self.config.fps or info.fps or DEFAULT_FPS

        if self._source is None:
            self._geometry = resolve_geometry(info.width, info.height, terminal_size, policy)
            self._source = FfmpegFrameSource(
                str(self.video_path),
                self._geometry.width,
                self._geometry.height,
                self._fps,
            )
        else:
            width, height = self._source.width, self._source.height
            x_offset, y_offset = compute_offsets(width, height, terminal_size, policy)
            self._geometry = OutputGeometry(width, height, x_offset, y_offset)

        logger.debug(
            f"Geometry {self._geometry} in terminal {terminal_size}, "
            f"{self._fps:.3f} fps, duration {info.duration:.1f}s"
        )
        return self._geometry

    def request_stop(self) -> None:
        """Ask the frame loop to finish after the current iteration."""
        self._stop_event.set()

    def _handle_stop_signal(self, _signum, _frame) -> None:
        self._stop_event.set()

    def _install_signal_handlers(self) -> dict[int, object]:
        """Route SIGINT/SIGTERM to the stop flag (main thread only)."""
        previous: dict[int, object] = {}
        if threading.current_thread() is not threading.main_thread():
            return previous
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, self._handle_stop_signal)
        return previous

    @staticmethod
    def _restore_signal_handlers(previous: dict[int, object]) -> None:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    # -------------------------------------------------------------------------
    # Playback
    # -------------------------------------------------------------------------

    def play(self) -> int:
        """Run the player until the stream ends or the user quits.

        The terminal is restored on every exit path.

        :raises SourceUnavailable: if the decoder (or audio player) cannot be
            started, including when a seek or loop restart fails
        :return: Exit code (0)
        """
        geometry = self.prepare()
        source = self._source
        info = self._info
        terminal_size = self._terminal_size
        cfg = self.config

        self._controller = PlaybackController(
            self._fps, info.duration, speed=cfg.speed, loop=cfg.loop
        )
        mapper = LuminanceMapper(cfg.glyph_ramp, cfg.color_mode)
        renderer = FrameRenderer(
            geometry,
            terminal_size,
            mapper,
            fill_terminal=cfg.aspect_policy.force_full_terminal,
        )
        progress_bar = ProgressBarRenderer(terminal_size.columns, terminal_size.rows)
        terminal = self._terminal or Terminal()
        keyboard = KeyboardHandler(terminal)

        self._stop_event.clear()
        previous_handlers = self._install_signal_handlers()
        try:
            source.open(0.0)
            if cfg.play_audio and self.video_path is not None:
                self._audio = AudioPlayer(str(self.video_path))
                self._audio.start()
            self.sound.play(SoundEffect.START)

            with terminal.cbreak(), terminal.hidden_cursor():
                self.output.write(CLEAR_SCREEN)
                self.output.flush()
                try:
                    self._run(source, renderer, progress_bar, keyboard)
                except KeyboardInterrupt:
                    pass
                finally:
                    self.output.write(f"{RESET}{ESC}[{terminal_size.rows};1H\n")
                    self.output.flush()
        finally:
            source.close()
            if self._audio is not None:
                self._audio.stop()
                self._audio = None
            self._restore_signal_handlers(previous_handlers)

        self.sound.play(SoundEffect.END)
        return 0

    def _run(
        self,
        source: FrameSource,
        renderer: FrameRenderer,
        progress_bar: ProgressBarRenderer,
        keyboard: KeyboardHandler,
    ) -> None:
        """The frame loop: pull, render, poll input, apply, pace."""
        controller = self._controller
        buffer = bytearray(renderer.geometry.frame_size)
        has_frame = False
        self._frames_since_open = 0
        last_frame = self._clock()

        while not self._stop_event.is_set():
            if not controller.is_paused:
                try:
                    source.pull_frame(buffer)
                except EndOfStream as exc:
                    logger.debug(f"End of stream at {controller.current_time:.2f}s: {exc}")
                    if self._frames_since_open == 0 and source.position <= 0:
                        # Nothing to restart into
                        logger.warning("Source produced no frames, stopping")
                        controller.stop()
                        break
                    if controller.end_of_stream():
                        logger.debug("Loop enabled, restarting at 0")
                        source.reopen_at(0.0)
                        self._frames_since_open = 0
                        continue
                    break
                controller.advance()
                self._frames_since_open += 1
                has_frame = True

            if has_frame:
                # Paused: the last frame is painted again from the same buffer
                output = [renderer.render(buffer)]
                if self.config.show_status_bar:
                    output.append(progress_bar.render(controller.get_progress_state()))
                self.output.write("".join(output))
                self.output.flush()

            command = keyboard.poll()
            if command is not None:
                self._apply(command, source)
                if controller.is_stopped:
                    break

            if controller.is_paused:
                self._sleep(self.config.pause_quantum)
                last_frame = self._clock()
                continue

            delay = controller.pacing_delay(self._clock() - last_frame)
            if delay > 0:
                self._sleep(delay)
            last_frame = self._clock()

    def _apply(self, command: Command, source: FrameSource) -> None:
        """Apply one keyboard command to the session."""
        controller = self._controller
        logger.debug(f"Command {command.value} at {controller.current_time:.2f}s")

        if command == Command.QUIT:
            controller.stop()
        elif command == Command.TOGGLE_PAUSE:
            controller.toggle_pause()
            self.sound.beep()
        elif command == Command.TOGGLE_LOOP:
            controller.toggle_loop()
            self.sound.beep()
        elif command == Command.SPEED_UP:
            controller.speed_up()
            self.sound.beep()
        elif command == Command.SPEED_DOWN:
            controller.speed_down()
            self.sound.beep()
        elif command == Command.BEEP:
            self.sound.beep()
        elif command in (Command.SEEK_BACKWARD, Command.SEEK_FORWARD):
            before = controller.current_time
            if command == Command.SEEK_FORWARD:
                target = controller.seek_forward()
            else:
                target = controller.seek_backward()
            self.sound.play(SoundEffect.SEEK)
            if target != before:
                logger.debug(f"Seeking from {before:.2f}s to {target:.2f}s")
                source.reopen_at(target)
                self._frames_since_open = 0


__all__ = [
    "Command",
    "DEFAULT_BINDINGS",
    "KeyboardHandler",
    "TerminalPlayer",
    "TerminalPlayerConfig",
]
