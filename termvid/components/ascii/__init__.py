"""ASCII rendering and playback components.

This module provides terminal-based video playback as colored text:
- LuminanceMapper / FrameRenderer: Convert raw RGB frames to glyphs and colors
- TerminalPlayer: Interactive terminal video player with keyboard controls
"""

from .renderer import ColorMode, FrameRenderer, LuminanceMapper
from .terminal_player import (
    Command,
    KeyboardHandler,
    TerminalPlayer,
    TerminalPlayerConfig,
)

__all__ = [
    # Renderer
    "ColorMode",
    "FrameRenderer",
    "LuminanceMapper",
    # Player
    "TerminalPlayer",
    "TerminalPlayerConfig",
    # Internals (for advanced use)
    "Command",
    "KeyboardHandler",
]
