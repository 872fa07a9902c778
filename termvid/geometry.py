"""Output geometry: fit the video into the terminal or a bounding box.

Every terminal row shows two vertical pixel samples (glyph cells are about
twice as tall as they are wide), so a terminal of ``columns x rows`` cells
offers a pixel grid of ``columns x rows * 2``.

Example:
    from termvid.geometry import AspectPolicy, TerminalSize, resolve_geometry

    terminal = TerminalSize(columns=120, rows=40)
    geometry = resolve_geometry(1920, 1080, terminal, AspectPolicy(box=(640, 480)))
    # OutputGeometry(width=640, height=360, x_offset=0, y_offset=0)
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from fractions import Fraction

from .errors import InvalidUserInput

VERTICAL_ASPECT = Fraction(9, 16)
MIN_AUTO_SIZE = 10


@dataclass(frozen=True)
class TerminalSize:
    """Terminal size in character cells."""

    columns: int
    rows: int

    @property
    def pixel_height(self) -> int:
        """Number of pixel rows the terminal can show (two per text row)."""
        return self.rows * 2

    @classmethod
    def detect(cls) -> "TerminalSize":
        """Get terminal size with fallback to 80x24."""
        try:
            size = os.get_terminal_size()
        except OSError:
            return cls(80, 24)
        # Some ptys report 0x0 instead of failing
        if size.columns <= 0 or size.lines <= 0:
            return cls(80, 24)
        return cls(size.columns, size.lines)


@dataclass(frozen=True)
class OutputGeometry:
    """Final output size in pixels plus centering offsets in cells."""

    width: int
    height: int
    x_offset: int = 0
    y_offset: int = 0

    @property
    def frame_size(self) -> int:
        """Bytes per RGB24 frame."""
        return self.width * self.height * 3

    @property
    def text_rows(self) -> int:
        """Terminal rows covered by the picture."""
        return self.height // 2


@dataclass
class AspectPolicy:
    """How the output size is chosen."""

    # Ignore the source and cover the whole terminal
    force_full_terminal: bool = False
    # False = stretch to the box (or terminal) instead of keeping aspect
    maintain_aspect: bool = True
    # 9:16 target aspect unless an explicit aspect is given
    vertical: bool = False
    # Explicit aspect as (w, h), e.g. (16.0, 9.0)
    aspect: tuple[float, float] | None = None
    # Bounding box (preset or custom resolution) as (w, h) in pixels
    box: tuple[int, int] | None = None

    def target_aspect(self, native_w: int, native_h: int) -> Fraction | None:
        """Aspect to fit: explicit override > vertical default > native.

        :return: Width/height ratio, or None when nothing is known
        """
        if self.aspect is not None:
            return Fraction(self.aspect[0]) / Fraction(self.aspect[1])
        if self.vertical:
            return VERTICAL_ASPECT
        if native_w > 0 and native_h > 0:
            return Fraction(native_w, native_h)
        return None


def _even(value: int) -> int:
    return value - (value % 2)


def _fit(aspect: Fraction, box_w: int, box_h: int) -> tuple[int, int]:
    """Fit ``aspect`` inside ``box_w x box_h`` with an even height.

    The result is at least 1x2: ffmpeg reads a zero dimension in ``scale=W:H``
    as "derive from the aspect ratio".
    """
    box_w = max(1, box_w)
    box_h = max(2, _even(box_h))
    if aspect > Fraction(box_w, box_h):
        # Relatively wider than the box: width is the constraint
        out_w = box_w
        out_h = _even(math.floor(out_w / aspect))
        if out_h > box_h:
            out_h = box_h
            out_w = math.floor(out_h * aspect)
    else:
        out_h = box_h
        out_w = math.floor(out_h * aspect)
        if out_w > box_w:
            out_w = box_w
            out_h = _even(math.floor(out_w / aspect))
    return max(1, out_w), max(2, out_h)


def resolve_dimensions(
    native_w: int,
    native_h: int,
    terminal: TerminalSize,
    policy: AspectPolicy,
) -> tuple[int, int]:
    """Compute the output size in pixels.

    :param native_w: Source width (0 if unknown)
    :param native_h: Source height (0 if unknown)
    :param terminal: Terminal size in cells
    :param policy: Sizing policy
    :return: (width, height); height is always even
    """
    full = (max(1, terminal.columns), max(2, _even(terminal.pixel_height)))
    if policy.force_full_terminal:
        return full

    if not policy.maintain_aspect:
        if policy.box is not None:
            return policy.box[0], _even(policy.box[1])
        return full

    aspect = policy.target_aspect(native_w, native_h)

    if policy.box is not None:
        box_w, box_h = policy.box
        if aspect is None:
            return box_w, _even(box_h)
        return _fit(aspect, box_w, box_h)

    if aspect is None:
        return full

    out_w, out_h = _fit(aspect, terminal.columns, terminal.pixel_height)
    out_w = max(MIN_AUTO_SIZE, out_w)
    out_h = max(MIN_AUTO_SIZE, _even(out_h))
    return out_w, out_h


def compute_offsets(
    width: int,
    height: int,
    terminal: TerminalSize,
    policy: AspectPolicy,
) -> tuple[int, int]:
    """Centering offsets as (columns, text rows)."""
    if policy.force_full_terminal or not policy.maintain_aspect:
        return 0, 0
    x_offset = max(0, (terminal.columns - width) // 2)
    y_offset = max(0, (terminal.pixel_height - height) // 2) // 2
    return x_offset, y_offset


def resolve_geometry(
    native_w: int,
    native_h: int,
    terminal: TerminalSize,
    policy: AspectPolicy,
) -> OutputGeometry:
    """Resolve output size and centering in one step."""
    width, height = resolve_dimensions(native_w, native_h, terminal, policy)
    x_offset, y_offset = compute_offsets(width, height, terminal, policy)
    return OutputGeometry(width, height, x_offset, y_offset)


def parse_aspect_ratio(text: str) -> tuple[float, float]:
    """Parse an aspect ratio such as ``16:9`` or ``1.85:1``.

    :raises InvalidUserInput: if the string is not ``W:H`` with positive parts
    """
    w_text, sep, h_text = text.partition(":")
    if not sep:
        raise InvalidUserInput(f"Invalid aspect ratio {text!r}, use W:H (e.g. 16:9)")
    try:
        w, h = float(w_text), float(h_text)
    except ValueError as exc:
        raise InvalidUserInput(f"Invalid aspect ratio {text!r}, use W:H (e.g. 16:9)") from exc
    if not (w > 0 and h > 0) or math.isinf(w) or math.isinf(h):
        raise InvalidUserInput(f"Aspect ratio {text!r} must have positive parts")
    return w, h


def parse_resolution(text: str) -> tuple[int, int]:
    """Parse a resolution such as ``800:600`` or ``1920x1080``.

    Odd heights are rounded down so that rows pair up.

    :raises InvalidUserInput: if the string is malformed or not positive
    """
    sep = ":" if ":" in text else "x"
    w_text, found, h_text = text.partition(sep)
    if not found:
        raise InvalidUserInput(f"Invalid resolution {text!r}, use W:H or WxH (e.g. 800:600)")
    try:
        w, h = int(w_text), int(h_text)
    except ValueError as exc:
        raise InvalidUserInput(f"Invalid resolution {text!r}, use W:H or WxH (e.g. 800:600)") from exc
    h = _even(h)
    if w <= 0 or h <= 0:
        raise InvalidUserInput(f"Resolution {text!r} must be positive")
    return w, h


__all__ = [
    "AspectPolicy",
    "OutputGeometry",
    "TerminalSize",
    "compute_offsets",
    "parse_aspect_ratio",
    "parse_resolution",
    "resolve_dimensions",
    "resolve_geometry",
]
