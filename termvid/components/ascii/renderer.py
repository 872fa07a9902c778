"""
ASCII frame renderer - turn raw RGB frames into colored text.

Each pixel is mapped to a glyph from a ramp (dark to bright) by its relative
luminance, optionally prefixed with a color escape:

- NONE: glyph only
- PALETTE: xterm 256-color cube (6 levels per channel)
- TRUECOLOR: 24-bit RGB

Two pixel rows share one terminal row; the top row of each pair is sampled.

Example:
    from termvid.components.ascii import ColorMode, FrameRenderer, LuminanceMapper
    from termvid.geometry import OutputGeometry, TerminalSize

    mapper = LuminanceMapper(" .:-=+*#%@", ColorMode.TRUECOLOR)
    renderer = FrameRenderer(OutputGeometry(80, 48), TerminalSize(80, 24), mapper)
    sys.stdout.write(renderer.render(frame_buffer))
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from ...geometry import OutputGeometry, TerminalSize

# ANSI escape codes
ESC = "\033"
RESET = f"{ESC}[0m"
CURSOR_HOME = f"{ESC}[H"

# Relative luminance weights (Rec. 709), applied without gamma correction
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722


class ColorMode(Enum):
    """Color escape emitted in front of every glyph."""

    NONE = "none"
    PALETTE = "palette"
    TRUECOLOR = "truecolor"


def luminance(r: int, g: int, b: int) -> int:
    """Perceived brightness of an RGB triple, 0-255."""
    value = round(LUMA_R * r + LUMA_G * g + LUMA_B * b)
    return max(0, min(255, value))


def glyph_index(lum: int, ramp_length: int) -> int:
    """Ramp position for a luminance; ties fall to the darker glyph."""
    return max(0, min(ramp_length - 1, lum * (ramp_length - 1) // 255))


def palette_index(r: int, g: int, b: int) -> int:
    """Index into the 6x6x6 color cube of the 256-color palette."""
    return 16 + 36 * (r // 51) + 6 * (g // 51) + b // 51


def color_prefix(r: int, g: int, b: int, mode: ColorMode) -> str:
    """Escape sequence that sets the foreground color for a pixel."""
    if mode == ColorMode.TRUECOLOR:
        return f"{ESC}[38;2;{r};{g};{b}m"
    if mode == ColorMode.PALETTE:
        return f"{ESC}[38;5;{palette_index(r, g, b)}m"
    return ""


# Foreground escapes for the whole palette, indexed by palette number
_PALETTE_PREFIXES = [f"{ESC}[38;5;{code}m" for code in range(256)]


class LuminanceMapper:
    """Map pixels to glyphs and color prefixes for one session."""

    def __init__(self, ramp: str, color_mode: ColorMode = ColorMode.NONE):
        """
        :param ramp: Glyphs ordered from darkest to brightest (at least 2)
        :param color_mode: Color escape to emit per pixel
        """
        if len(ramp) < 2:
            raise ValueError(f"Glyph ramp needs at least 2 characters, got {ramp!r}")
        self.ramp = ramp
        self.color_mode = color_mode
        self._ramp_array = np.array(list(ramp))

    def luminance(self, pixels: np.ndarray) -> np.ndarray:
        """Luminance of an (..., 3) uint8 array as int32."""
        channels = pixels.astype(np.float64)
        value = (
            LUMA_R * channels[..., 0]
            + LUMA_G * channels[..., 1]
            + LUMA_B * channels[..., 2]
        )
        return np.clip(np.rint(value), 0, 255).astype(np.int32)

    def glyph_indices(self, pixels: np.ndarray) -> np.ndarray:
        """Ramp index per pixel."""
        n = len(self.ramp)
        indices = self.luminance(pixels) * (n - 1) // 255
        return np.clip(indices, 0, n - 1)

    def map_pixel(self, r: int, g: int, b: int) -> str:
        """Color prefix plus glyph for a single pixel."""
        glyph = self.ramp[glyph_index(luminance(r, g, b), len(self.ramp))]
        return color_prefix(r, g, b, self.color_mode) + glyph

    def render_row(self, row: np.ndarray) -> str:
        """Render one (width, 3) pixel row without padding or reset."""
        glyphs = self._ramp_array[self.glyph_indices(row)].tolist()

        if self.color_mode == ColorMode.NONE:
            return "".join(glyphs)

        if self.color_mode == ColorMode.PALETTE:
            levels = row.astype(np.int32) // 51
            codes = (16 + 36 * levels[:, 0] + 6 * levels[:, 1] + levels[:, 2]).tolist()
            return "".join(_PALETTE_PREFIXES[code] + glyph for code, glyph in zip(codes, glyphs))

        return "".join(
            f"{ESC}[38;2;{r};{g};{b}m{glyph}"
            for (r, g, b), glyph in zip(row.tolist(), glyphs)
        )


class FrameRenderer:
    """Paint a whole frame buffer as terminal text."""

    def __init__(
        self,
        geometry: OutputGeometry,
        terminal: TerminalSize,
        mapper: LuminanceMapper,
        fill_terminal: bool = False,
    ):
        """
        :param geometry: Output size and centering offsets
        :param terminal: Terminal size in cells
        :param mapper: Glyph and color mapping
        :param fill_terminal: Pad with blank lines down to the last row
        """
        self.geometry = geometry
        self.terminal = terminal
        self.mapper = mapper
        self.fill_terminal = fill_terminal

    def frame_view(self, buffer: bytes | bytearray) -> np.ndarray:
        """View a raw RGB24 buffer as a (height, width, 3) array without copying."""
        g = self.geometry
        if len(buffer) != g.frame_size:
            raise ValueError(f"Frame buffer has {len(buffer)} bytes, expected {g.frame_size}")
        return np.frombuffer(buffer, dtype=np.uint8).reshape(g.height, g.width, 3)

    def render(self, buffer: bytes | bytearray) -> str:
        """Render a frame, starting from the top-left corner.

        Lines are separated (not terminated) by newlines so that a frame that
        fills the terminal does not scroll it.
        """
        g = self.geometry
        pixels = self.frame_view(buffer)
        pad_left = " " * g.x_offset

        lines = [""] * g.y_offset
        for row in pixels[0::2]:
            lines.append(pad_left + self.mapper.render_row(row) + RESET)

        if self.fill_terminal or g.y_offset > 0:
            remaining = self.terminal.rows - g.text_rows - g.y_offset
            lines.extend([""] * max(0, remaining))

        return CURSOR_HOME + "\n".join(lines)


__all__ = [
    "ColorMode",
    "FrameRenderer",
    "LuminanceMapper",
    "color_prefix",
    "glyph_index",
    "luminance",
    "palette_index",
]
