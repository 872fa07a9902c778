"""Playback state and status bar shared by the terminal player."""

from .playback import (
    MAX_SPEED,
    MIN_SPEED,
    PlaybackController,
    PlaybackSession,
    PlaybackState,
    ProgressState,
    format_time,
    seek_step_for,
)
from .progress_bar import ProgressBarRenderer

__all__ = [
    # Playback
    'PlaybackController',
    'PlaybackSession',
    'PlaybackState',
    'ProgressState',
    'format_time',
    'seek_step_for',
    'MIN_SPEED',
    'MAX_SPEED',
    # Status bar
    'ProgressBarRenderer',
]
