"""Source metadata via ``ffprobe``."""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass

from ..errors import SourceUnavailable
from .tools import require_tool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceInfo:
    """Read-only facts about the input, fixed for the session."""

    duration: float = 0.0
    fps: float = 0.0
    width: int = 0
    height: int = 0

    @property
    def has_size(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def total_frames(self) -> int:
        if self.duration > 0 and self.fps > 0:
            return int(self.duration * self.fps)
        return 0


def parse_frame_rate(text: str) -> float:
    """Parse an ffprobe frame rate: ``"30000/1001"``, ``"25/1"`` or ``"25"``.

    :return: Frames per second, 0.0 if unknown
    """
    num, sep, den = text.strip().partition("/")
    try:
        if sep:
            denominator = float(den)
            return float(num) / denominator if denominator > 0 else 0.0
        return float(num)
    except ValueError:
        return 0.0


def parse_probe_output(data: dict) -> SourceInfo:
    """Build a SourceInfo from ffprobe's JSON output."""
    streams = data.get("streams") or [{}]
    stream = streams[0]
    fmt = data.get("format") or {}

    fps = parse_frame_rate(stream.get("r_frame_rate", ""))
    if fps <= 0:
        fps = parse_frame_rate(stream.get("avg_frame_rate", ""))

    try:
        duration = float(fmt.get("duration", 0.0))
    except (TypeError, ValueError):
        duration = 0.0

    return SourceInfo(
        duration=max(0.0, duration),
        fps=fps,
        width=int(stream.get("width") or 0),
        height=int(stream.get("height") or 0),
    )


def probe_source(path: str, *, ffprobe: str | None = None, timeout: float = 30.0) -> SourceInfo:
    """Read duration, frame rate and size of the first video stream.

    :raises SourceUnavailable: if ffprobe is missing or cannot be started
    :return: SourceInfo; fields are 0 when ffprobe could not tell
    """
    ffprobe = ffprobe or require_tool("ffprobe")
    command = [
        ffprobe, "-v", "error",
        "-select_streams", "v:0",
        "-show_entries", "stream=width,height,r_frame_rate,avg_frame_rate:format=duration",
        "-of", "json",
        path,
    ]
    try:
        result = subprocess.run(
            command,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except OSError as exc:
        raise SourceUnavailable(f"Failed to start ffprobe: {exc}") from exc
    except subprocess.TimeoutExpired as exc:
        raise SourceUnavailable(f"ffprobe timed out after {timeout:.0f}s") from exc

    if result.returncode != 0:
        logger.warning(f"ffprobe failed for {path}: {result.stderr.strip()}")
        return SourceInfo()
    try:
        info = parse_probe_output(json.loads(result.stdout or "{}"))
    except (ValueError, TypeError, AttributeError) as exc:
        logger.warning(f"Could not parse ffprobe output for {path}: {exc}")
        return SourceInfo()
    logger.debug(f"Probed {path}: {info}")
    return info


__all__ = ["SourceInfo", "parse_frame_rate", "parse_probe_output", "probe_source"]
