"""
termvid - Watch videos in the terminal as colored text.

Usage:
    termvid [options] video_path
    python -m termvid [options] video_path

Examples:
    # Play with 24-bit color, looping
    termvid --truecolor --loop movie.mp4

    # Fit into a preset box with its glyph ramp
    termvid --preset medium -C movie.mp4

    # Vertical clip, custom bounding box, with audio
    termvid --vertical --resolution 360x640 --audio clip.mp4

Controls:
    Space       - Play/Pause toggle
    Q / Escape  - Quit
    Left/Right  - Seek backward/forward
    W / S       - Speed up / slow down
    L           - Toggle loop mode
    B           - Beep (with --sound)
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TextIO

from . import __version__
from .components.ascii import ColorMode, TerminalPlayer, TerminalPlayerConfig
from .errors import InvalidUserInput, TermvidError
from .geometry import AspectPolicy, parse_aspect_ratio, parse_resolution
from .presets import CHARS_DEFAULT, DEFAULT_TARGET_PPI, PRESETS, Preset, font_size_suggestion, get_preset
from .sound import SoundEffect

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

CONTROLS = "Controls: Space=pause  Q/Esc=quit  Left/Right=seek  W/S=speed  L=loop  B=beep"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termvid",
        description="Terminal Video Player - Watch videos as colored text!",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Color modes:
  (default)     - Glyphs only, brightness from the glyph ramp
  --palette     - 256-color palette (6x6x6 color cube)
  --truecolor   - 24-bit color

Sizing (first match wins):
  --fill        - Cover the whole terminal
  --stretch     - Ignore the aspect ratio
  --resolution  - Fit into a custom box (overrides --preset)
  --preset      - Fit into a preset box (see --list-presets)
  (default)     - Fit into the terminal, centered

Examples:
  termvid movie.mp4                        # Play with default settings
  termvid -C --loop movie.mp4              # Truecolor, looping
  termvid --preset heavy -256 movie.mp4    # Preset box, palette colors
  termvid -V --aspect 9:16 short.mp4       # Vertical video
        """,
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the video file (anything ffmpeg can read)",
    )

    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--truecolor",
        "-C",
        action="store_true",
        help="Use 24-bit color",
    )
    color.add_argument(
        "--palette",
        "-256",
        action="store_true",
        help="Use the 256-color palette",
    )

    parser.add_argument(
        "--fps",
        "-F",
        type=float,
        default=None,
        help="Frame rate (default: video's native frame rate, 25 if unknown)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Initial playback speed, clamped to 0.01-100 (default: 1.0)",
    )
    parser.add_argument(
        "--loop",
        "-L",
        action="store_true",
        help="Restart at the end of the video",
    )
    parser.add_argument(
        "--audio",
        "-A",
        action="store_true",
        help="Play the audio track with ffplay (not synchronized with seek/pause)",
    )
    parser.add_argument(
        "--sound",
        action="store_true",
        help="Terminal bell sound effects",
    )

    parser.add_argument(
        "--vertical",
        "-V",
        action="store_true",
        help="Vertical video (9:16 aspect unless --aspect is given)",
    )
    parser.add_argument(
        "--aspect",
        metavar="W:H",
        help="Aspect ratio override, e.g. 16:9 or 1.85:1",
    )
    parser.add_argument(
        "--resolution",
        metavar="WxH",
        help="Bounding box in pixels, e.g. 800x600 or 800:600",
    )
    parser.add_argument(
        "--preset",
        metavar="KEY",
        help="Resolution preset (see --list-presets)",
    )
    parser.add_argument(
        "--fill",
        action="store_true",
        help="Cover the whole terminal, ignoring the aspect ratio",
    )
    parser.add_argument(
        "--stretch",
        action="store_true",
        help="Stretch to the box (or terminal) instead of keeping the aspect ratio",
    )
    parser.add_argument(
        "--chars",
        metavar="RAMP",
        help=f"Glyph ramp from dark to bright (default: {CHARS_DEFAULT!r})",
    )
    parser.add_argument(
        "--no-status",
        action="store_true",
        help="Hide the status bar",
    )

    parser.add_argument(
        "--font-hint",
        action="store_true",
        help="Print a terminal font size suggestion before playing",
    )
    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="List resolution presets and exit",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-file",
        help="Write log messages to this file instead of stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def configure_logging(level: str, log_file: str | None = None) -> None:
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT, filename=log_file)


def format_presets() -> str:
    """Table of all presets, one per line."""
    lines = ["Available presets:"]
    for key, preset in PRESETS.items():
        lines.append(
            f"  {key:<8} {preset.name:<28} {len(preset.chars):>3} glyphs, ~{preset.target_ppi} ppi"
        )
    return "\n".join(lines)


def resolve_preset(key: str | None) -> Preset | None:
    """Look up a preset; unknown keys log a warning and fall back to none."""
    if key is None:
        return None
    try:
        return get_preset(key)
    except KeyError:
        logger.warning(f"Unknown preset {key!r}, ignoring it (see --list-presets)")
        return None


def build_policy(args: argparse.Namespace, preset: Preset | None) -> AspectPolicy:
    """Sizing policy from the command line.

    Malformed --aspect or --resolution values are dropped with a warning.
    """
    aspect = None
    if args.aspect:
        try:
            aspect = parse_aspect_ratio(args.aspect)
        except InvalidUserInput as exc:
            logger.warning(f"{exc}; using the video's aspect ratio")

    box = preset.box if preset is not None else None
    if args.resolution:
        try:
            box = parse_resolution(args.resolution)
        except InvalidUserInput as exc:
            logger.warning(f"{exc}; ignoring the custom resolution")

    return AspectPolicy(
        force_full_terminal=args.fill,
        maintain_aspect=not args.stretch,
        vertical=args.vertical,
        aspect=aspect,
        box=box,
    )


def build_config(args: argparse.Namespace, preset: Preset | None) -> TerminalPlayerConfig:
    if args.truecolor:
        color_mode = ColorMode.TRUECOLOR
    elif args.palette:
        color_mode = ColorMode.PALETTE
    else:
        color_mode = ColorMode.NONE

    if args.chars is not None:
        ramp = args.chars
    elif preset is not None:
        ramp = preset.chars
    else:
        ramp = CHARS_DEFAULT

    return TerminalPlayerConfig(
        color_mode=color_mode,
        glyph_ramp=ramp,
        aspect_policy=build_policy(args, preset),
        show_status_bar=not args.no_status,
        fps=args.fps,
        speed=args.speed,
        loop=args.loop,
        play_audio=args.audio,
        sound_effects=args.sound,
    )


def print_summary(player: TerminalPlayer, preset: Preset | None, stream: TextIO) -> None:
    """Startup summary written before the screen is taken over."""
    info = player.info
    geometry = player.geometry
    terminal = player.terminal_size
    config = player.config

    if info.has_size:
        source = f"{info.width}x{info.height}"
    else:
        source = "unknown size"
    lines = [
        f"Input: {player.video_path}",
        f"Source: {source}, {info.fps:.3f} fps" if info.fps else f"Source: {source}",
        f"Duration: {info.duration:.1f}s" if info.duration > 0 else "Duration: unknown",
        f"Preset: {preset.name}" if preset is not None else "Preset: none",
        f"Terminal: {terminal.columns}x{terminal.rows}",
        f"Output: {geometry.width}x{geometry.height} at {player.fps:.3f} fps, "
        f"offset {geometry.x_offset},{geometry.y_offset}",
        f"Color: {config.color_mode.value}, {len(config.glyph_ramp)} glyphs",
        CONTROLS,
    ]
    print("\n".join(lines), file=stream)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    if args.list_presets:
        print(format_presets())
        return 0
    if args.input is None:
        parser.error("the following arguments are required: input")
    if args.chars is not None and len(args.chars) < 2:
        parser.error("--chars needs at least 2 characters")
    if args.fps is not None and not args.fps > 0:
        parser.error("--fps must be positive")

    preset = resolve_preset(args.preset)
    config = build_config(args, preset)
    player = TerminalPlayer(args.input, config=config)

    try:
        player.prepare()
        if not player.info.has_size:
            logger.warning("Could not determine the video size, filling the terminal")
        print_summary(player, preset, sys.stderr)
        if args.font_hint:
            ppi = preset.target_ppi if preset is not None else DEFAULT_TARGET_PPI
            terminal = player.terminal_size
            print(font_size_suggestion(ppi, terminal.columns, terminal.rows), file=sys.stderr)
        return player.play()
    except TermvidError as exc:
        logger.error(f"Playback failed: {exc}")
        print(f"Error: {exc}", file=sys.stderr)
        player.sound.play(SoundEffect.ERROR)
        return 1


if __name__ == "__main__":
    sys.exit(main())
