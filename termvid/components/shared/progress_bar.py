"""Status bar overlay drawn on the last terminal row.

The bar is written with cursor save/restore around it, so it never moves the
cursor the raster is painted from.

Example:
    renderer = ProgressBarRenderer(columns=80, rows=24)
    sys.stdout.write(renderer.render(controller.get_progress_state()))
"""

from __future__ import annotations

from .playback import PlaybackState, ProgressState, format_time

ESC = "\033"
SAVE_CURSOR = f"{ESC}[s"
RESTORE_CURSOR = f"{ESC}[u"
CLEAR_LINE = f"{ESC}[2K"
RESET = f"{ESC}[0m"
WHITE = f"{ESC}[37m"

# Columns kept free for time and status text
RESERVED_COLUMNS = 30


class ProgressBarRenderer:
    """Render the progress bar, time and status flags."""

    def __init__(self, columns: int, rows: int):
        """
        :param columns: Terminal width in cells
        :param rows: Terminal height in cells; the bar goes on the last row
        """
        self.columns = columns
        self.rows = rows

    @property
    def bar_width(self) -> int:
        return max(0, self.columns - RESERVED_COLUMNS)

    def format_times(self, state: ProgressState) -> str:
        """``current/total``, with hours on both sides for long streams."""
        long_form = state.total_time >= 3600
        current = format_time(state.current_time, force_hours=long_form)
        total = format_time(state.total_time, force_hours=long_form)
        return f"{current}/{total}"

    def render_bar(self, progress: float) -> str:
        """``[====>-----]`` for a progress of 0.0-1.0."""
        progress = max(0.0, min(1.0, progress))
        width = self.bar_width
        pos = int(width * progress)
        cells = []
        for i in range(width):
            if i < pos:
                cells.append("=")
            elif i == pos:
                cells.append(">")
            else:
                cells.append("-")
        return "[" + "".join(cells) + "]"

    def render(self, state: ProgressState) -> str:
        """Render the overlay; empty when the duration is unknown."""
        if state.total_time <= 0:
            return ""

        parts = [SAVE_CURSOR, f"{ESC}[{self.rows};1H", CLEAR_LINE, WHITE]
        parts.append(self.render_bar(state.current_time / state.total_time))
        parts.append(f" {self.format_times(state)} ")
        if state.playback_state == PlaybackState.PAUSED:
            parts.append("PAUSED ")
        if state.loop_enabled:
            parts.append("LOOP ")
        parts.append(f"speed: {state.playback_speed:.2f}x")
        parts.append(RESET)
        parts.append(RESTORE_CURSOR)
        return "".join(parts)


__all__ = ["ProgressBarRenderer"]
