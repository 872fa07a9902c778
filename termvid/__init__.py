"""
termvid - Play videos in the terminal as colored text
"""

from .components.ascii import ColorMode, TerminalPlayer, TerminalPlayerConfig
from .errors import EndOfStream, InvalidUserInput, SourceUnavailable, StreamTruncated, TermvidError
from .geometry import AspectPolicy, OutputGeometry, TerminalSize, resolve_geometry
from .presets import PRESETS, Preset, get_preset

__version__ = "0.1.0"

__all__ = [
    # Player
    "TerminalPlayer",
    "TerminalPlayerConfig",
    "ColorMode",
    # Geometry
    "AspectPolicy",
    "OutputGeometry",
    "TerminalSize",
    "resolve_geometry",
    # Presets
    "PRESETS",
    "Preset",
    "get_preset",
    # Errors
    "TermvidError",
    "SourceUnavailable",
    "EndOfStream",
    "StreamTruncated",
    "InvalidUserInput",
]
