"""Tests for the terminal player frame loop."""

import io
import signal
from unittest.mock import patch

import pytest

from conftest import FakeClock, MemoryFrameSource, make_frame, make_terminal
from termvid.components.ascii import TerminalPlayer, TerminalPlayerConfig
from termvid.components.ascii.terminal_player import CLEAR_SCREEN
from termvid.components.shared import PlaybackState
from termvid.errors import SourceUnavailable
from termvid.geometry import OutputGeometry, TerminalSize
from termvid.sound import BELL
from termvid.streams import SourceInfo


def make_player(source, keys=(), clock=None, duration=20.0, **config_kwargs):
    """Player on an in-memory source with a scripted keyboard."""
    clock = clock or FakeClock()
    output = io.StringIO()
    player = TerminalPlayer(
        source,
        config=TerminalPlayerConfig(**config_kwargs),
        info=SourceInfo(duration=duration, fps=10.0, width=4, height=4),
        terminal=make_terminal(keys),
        terminal_size=TerminalSize(8, 6),
        output=output,
        clock=clock.time,
        sleep=clock.sleep,
    )
    return player, output


def solid_frames(count):
    return [make_frame(4, 4, (i % 256, 0, 0)) for i in range(count)]


class TestTerminalPlayerSetup:
    """Tests for geometry and timing setup."""

    def test_prepare_frame_source(self):
        """Geometry follows the source size, centered in the terminal."""
        player, _ = make_player(MemoryFrameSource(solid_frames(1), 4, 4))
        assert player.prepare() == OutputGeometry(4, 4, x_offset=2, y_offset=2)
        assert player.fps == 10.0

    def test_prepare_path(self):
        info = SourceInfo(duration=10.0, fps=25.0, width=1920, height=1080)
        player = TerminalPlayer("movie.mp4", info=info, terminal_size=TerminalSize(80, 24))

        assert player.prepare() == OutputGeometry(80, 44, 0, 1)
        assert player.fps == 25.0

    def test_prepare_probes(self):
        info = SourceInfo(duration=10.0, fps=0.0, width=640, height=480)
        with patch("termvid.components.ascii.terminal_player.probe_source", return_value=info) as probe:
            player = TerminalPlayer("movie.mp4", terminal_size=TerminalSize(80, 24))
            player.prepare()

        probe.assert_called_once_with("movie.mp4")
        assert player.info == info
        assert player.fps == 25.0  # unknown source rate

    def test_fps_override(self):
        info = SourceInfo(duration=10.0, fps=30.0, width=640, height=480)
        config = TerminalPlayerConfig(fps=12.0)
        player = TerminalPlayer("movie.mp4", config=config, info=info, terminal_size=TerminalSize(80, 24))
        player.prepare()
        assert player.fps == 12.0


class TestTerminalPlayerLoop:
    """Tests for the frame loop."""

    def test_plays_to_end(self):
        """End of stream without loop finishes with exit code 0."""
        source = MemoryFrameSource(solid_frames(10), 4, 4)
        player, _ = make_player(source)

        assert player.play() == 0
        assert source.pulls == 10
        assert source.opens == [0.0]
        assert source.close_count == 1
        assert player.controller.state == PlaybackState.STOPPED
        assert player.controller.current_time == pytest.approx(1.0)

    def test_loop_restarts(self):
        """With loop enabled the source is reopened at 0 after the last frame."""
        source = MemoryFrameSource(solid_frames(3), 4, 4)
        player, _ = make_player(source, keys=["", "", "", "q"], loop=True)

        assert player.play() == 0
        assert source.opens == [0.0, 0.0]
        assert source.pulls == 4
        assert player.controller.frame_index == 1

    def test_quit(self):
        source = MemoryFrameSource(solid_frames(10), 4, 4)
        player, _ = make_player(source, keys=["", "q"])

        assert player.play() == 0
        assert source.pulls == 2

    def test_seek_forward_reopens(self):
        source = MemoryFrameSource(solid_frames(200), 4, 4)
        player, _ = make_player(source, keys=["KEY_RIGHT", "q"])

        player.play()

        assert source.opens[0] == 0.0
        assert source.opens[1] == pytest.approx(1.1)
        assert player.controller.current_time == pytest.approx(1.2)

    def test_seek_backward_clamped(self):
        source = MemoryFrameSource(solid_frames(200), 4, 4)
        player, _ = make_player(source, keys=["KEY_LEFT", "q"])

        player.play()

        assert source.opens == [0.0, 0.0]

    def test_seek_past_end_clamped(self):
        """Seeking beyond the duration lands on the end and finishes."""
        source = MemoryFrameSource(solid_frames(10), 4, 4)
        player, _ = make_player(source, keys=["KEY_RIGHT"], duration=1.0)

        assert player.play() == 0
        assert source.opens == [0.0, 1.0]
        assert source.pulls == 1

    def test_pause(self):
        """While paused nothing is pulled and the loop idles briefly."""
        clock = FakeClock()
        source = MemoryFrameSource(solid_frames(10), 4, 4)
        player, _ = make_player(source, keys=[" ", "", "", " ", "q"], clock=clock)

        player.play()

        assert source.pulls == 2
        assert clock.sleeps == pytest.approx([0.01, 0.01, 0.01, 0.1])

    def test_seek_while_paused_resumes(self):
        source = MemoryFrameSource(solid_frames(200), 4, 4)
        player, _ = make_player(source, keys=[" ", "KEY_RIGHT", "q"])

        player.play()

        assert source.pulls == 2
        assert len(source.opens) == 2

    def test_pacing_follows_speed(self):
        clock = FakeClock()
        source = MemoryFrameSource(solid_frames(5), 4, 4)
        player, _ = make_player(source, clock=clock, speed=2.0)

        player.play()

        assert clock.sleeps == pytest.approx([0.05] * 5)

    def test_speed_keys(self):
        source = MemoryFrameSource(solid_frames(10), 4, 4)
        player, _ = make_player(source, keys=["w", "w", "s", "q"])

        player.play()

        assert player.controller.speed == pytest.approx(1.1 * 1.1 * 0.9)

    def test_loop_toggle_key(self):
        source = MemoryFrameSource(solid_frames(10), 4, 4)
        player, _ = make_player(source, keys=["l", "q"])

        player.play()

        assert player.controller.loop_enabled

    def test_request_stop(self):
        source = MemoryFrameSource(solid_frames(10), 4, 4)
        player, _ = make_player(source)
        source.on_pull = lambda s: player.request_stop() if s.pulls == 3 else None

        assert player.play() == 0
        assert source.pulls == 3

    def test_sigint_stops(self):
        """Ctrl+C ends playback cleanly and the old handler comes back."""
        previous = signal.getsignal(signal.SIGINT)
        source = MemoryFrameSource(solid_frames(10), 4, 4)
        player, _ = make_player(source)

        def interrupt(s):
            if s.pulls == 2:
                handler = signal.getsignal(signal.SIGINT)
                handler(signal.SIGINT, None)

        source.on_pull = interrupt

        assert player.play() == 0
        assert source.pulls == 2
        assert signal.getsignal(signal.SIGINT) == previous


class TestTerminalPlayerOutput:
    """Tests for what the player writes to the terminal."""

    def test_output(self):
        source = MemoryFrameSource(solid_frames(3), 4, 4)
        player, output = make_player(source)

        player.play()

        text = output.getvalue()
        assert text.startswith(CLEAR_SCREEN)
        assert "speed: 1.00x" in text
        assert text.endswith("\033[0m\033[6;1H\n")

    def test_status_bar_hidden(self):
        source = MemoryFrameSource(solid_frames(3), 4, 4)
        player, output = make_player(source, show_status_bar=False)

        player.play()

        assert "speed:" not in output.getvalue()

    def test_terminal_modes(self):
        """Keyboard mode and hidden cursor are entered for the session."""
        source = MemoryFrameSource(solid_frames(1), 4, 4)
        player, _ = make_player(source)
        terminal = player._terminal

        player.play()

        terminal.cbreak.assert_called_once()
        terminal.hidden_cursor.assert_called_once()

    def test_sound_effects(self):
        source = MemoryFrameSource(solid_frames(3), 4, 4)
        player, output = make_player(source, keys=["b"], sound_effects=True)

        player.play()

        # start (2) + beep (1) + end (2)
        assert output.getvalue().count(BELL) == 5

    def test_no_sound_by_default(self):
        source = MemoryFrameSource(solid_frames(3), 4, 4)
        player, output = make_player(source, keys=["b"])

        player.play()

        assert BELL not in output.getvalue()


class TestTerminalPlayerErrors:
    """Tests for failure handling."""

    def test_empty_source_with_loop(self):
        """A source without frames ends playback instead of restarting forever."""

        class LimitedSource(MemoryFrameSource):
            def open(self, at=0.0):
                if len(self.opens) >= 5:
                    raise AssertionError("source reopened too often")
                super().open(at)

        source = LimitedSource([], 4, 4)
        player, _ = make_player(source, keys=["q"], loop=True)

        assert player.play() == 0
        assert source.opens == [0.0]
        assert player.controller.state == PlaybackState.STOPPED

    def test_seek_to_end_with_loop_restarts(self):
        """Landing on the end after a seek still loops back to the start."""
        source = MemoryFrameSource(solid_frames(10), 4, 4)
        player, _ = make_player(source, keys=["KEY_RIGHT", "", "q"], duration=1.0, loop=True)

        assert player.play() == 0
        assert source.opens == [0.0, 1.0, 0.0]
        assert source.pulls == 3

    def test_open_failure_propagates(self):
        class FailingSource(MemoryFrameSource):
            def open(self, at=0.0):
                raise SourceUnavailable("ffmpeg not found")

        previous = signal.getsignal(signal.SIGTERM)
        player, _ = make_player(FailingSource(solid_frames(3), 4, 4))

        with pytest.raises(SourceUnavailable):
            player.play()
        assert signal.getsignal(signal.SIGTERM) == previous

    def test_reopen_failure_restores_terminal(self):
        """A failed loop restart ends the session with the terminal restored."""

        class OneShotSource(MemoryFrameSource):
            def open(self, at=0.0):
                if self.opens:
                    raise SourceUnavailable("ffmpeg died")
                super().open(at)

        source = OneShotSource(solid_frames(2), 4, 4)
        player, output = make_player(source, loop=True)

        with pytest.raises(SourceUnavailable):
            player.play()
        assert output.getvalue().endswith("\033[0m\033[6;1H\n")
        assert not source.is_open

    def test_audio_lifecycle(self):
        """Audio starts with playback and is stopped at the end."""
        info = SourceInfo(duration=1.0, fps=10.0, width=1920, height=1080)
        clock = FakeClock()
        config = TerminalPlayerConfig(play_audio=True)

        def fake_source(path, width, height, fps):
            return MemoryFrameSource([make_frame(width, height)] * 3, width, height, fps)

        with patch("termvid.components.ascii.terminal_player.FfmpegFrameSource", side_effect=fake_source), \
                patch("termvid.components.ascii.terminal_player.AudioPlayer") as audio_cls:
            player = TerminalPlayer(
                "movie.mp4",
                config=config,
                info=info,
                terminal=make_terminal(),
                terminal_size=TerminalSize(20, 10),
                output=io.StringIO(),
                clock=clock.time,
                sleep=clock.sleep,
            )
            assert player.play() == 0

        audio_cls.assert_called_once_with("movie.mp4")
        audio_cls.return_value.start.assert_called_once()
        audio_cls.return_value.stop.assert_called_once()
