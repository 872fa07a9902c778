"""Resolution presets and glyph ramps.

A preset is a bounding box the output is fitted into, together with the glyph
ramp that suits its density and a rough target density used for font-size
hints.
"""

from __future__ import annotations

from dataclasses import dataclass

# Character ramps ordered from dark to bright
CHARS_DEFAULT = " .:-=+*#%@"
CHARS_DOT = " ."
CHARS_LIGHT = " .:-=+*"
CHARS_MEDIUM = " .:-=+*#%@&?/\\|()[]{}<>"
CHARS_HEAVY = CHARS_MEDIUM + "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
CHARS_ULTRA = (
    CHARS_HEAVY
    + "!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"
    + "".join(chr(code) for code in range(0xA1, 0x100) if code != 0xAD)
)


@dataclass(frozen=True)
class Preset:
    """A named bounding box with its glyph ramp."""

    key: str
    width: int
    height: int
    chars: str
    name: str
    target_ppi: int

    @property
    def box(self) -> tuple[int, int]:
        return self.width, self.height


_PRESET_LIST = [
    # Standard
    Preset("dot", 40, 24, CHARS_DOT, "Dot (40x24)", 10),
    Preset("light", 64, 36, CHARS_LIGHT, "Light (64x36)", 15),
    Preset("medium", 96, 54, CHARS_MEDIUM, "Medium (96x54)", 20),
    Preset("heavy", 128, 72, CHARS_HEAVY, "Heavy (128x72)", 25),
    Preset("ultra", 192, 108, CHARS_ULTRA, "Ultra (192x108)", 30),
    # Low resolution
    Preset("144p", 256, 144, CHARS_LIGHT, "144p (256x144)", 12),
    Preset("360p", 640, 360, CHARS_MEDIUM, "360p (640x360)", 18),
    Preset("480p", 854, 480, CHARS_MEDIUM, "480p (854x480)", 22),
    Preset("v144p", 144, 256, CHARS_LIGHT, "Vertical 144p (144x256)", 10),
    Preset("v360p", 360, 640, CHARS_MEDIUM, "Vertical 360p (360x640)", 16),
    Preset("v480p", 408, 726, CHARS_MEDIUM, "Vertical 480p (408x726)", 20),
    # HD
    Preset("hd", 1280, 720, CHARS_ULTRA, "HD Ready (1280x720)", 80),
    Preset("fhd", 1920, 1080, CHARS_ULTRA, "Full HD (1920x1080)", 120),
    Preset("2k", 2048, 1080, CHARS_ULTRA, "2K (2048x1080)", 130),
    Preset("wxga", 1280, 800, CHARS_ULTRA, "WXGA (1280x800)", 85),
    Preset("wsxga", 1680, 1050, CHARS_ULTRA, "WSXGA+ (1680x1050)", 100),
    Preset("uxga", 1600, 1200, CHARS_ULTRA, "UXGA (1600x1200)", 105),
    Preset("qhd", 2560, 1440, CHARS_ULTRA, "QHD (2560x1440)", 150),
    Preset("4k", 3840, 2160, CHARS_ULTRA, "4K UHD (3840x2160)", 200),
    # Vertical (9:16)
    Preset("vsd", 360, 640, CHARS_MEDIUM, "Vertical SD (360x640)", 25),
    Preset("v540", 456, 810, CHARS_HEAVY, "Vertical 540p (456x810)", 31),
    Preset("v600", 504, 896, CHARS_HEAVY, "Vertical 600p (504x896)", 34),
    Preset("v660", 552, 982, CHARS_HEAVY, "Vertical 660p (552x982)", 37),
    Preset("v720", 600, 1068, CHARS_ULTRA, "Vertical 720p (600x1068)", 40),
    Preset("vhd", 540, 960, CHARS_HEAVY, "Vertical HD (540x960)", 35),
    Preset("vfhd", 720, 1280, CHARS_ULTRA, "Vertical FHD (720x1280)", 45),
    Preset("v2k", 1080, 1920, CHARS_ULTRA, "Vertical 2K (1080x1920)", 70),
]

PRESETS: dict[str, Preset] = {preset.key: preset for preset in _PRESET_LIST}

# Density used for font hints with a custom resolution
DEFAULT_TARGET_PPI = 20


def get_preset(key: str) -> Preset:
    """Look up a preset by key (case-insensitive).

    :raises KeyError: if there is no such preset
    """
    return PRESETS[key.lower()]


def font_size_suggestion(target_ppi: int, columns: int, rows: int) -> str:
    """Suggest a terminal font size for a preset density.

    Rough heuristic: a typical terminal shows 80 columns at 12pt.
    """
    current_ppi = columns / 80.0 * 12.0
    suggested = 12.0 * (target_ppi / current_ppi) if current_ppi > 0 else 12.0
    suggested = max(6.0, min(72.0, suggested))
    return (
        f"Suggested font size: ~{suggested:.1f}pt "
        f"(current cols: {columns}, target PPI: {target_ppi})"
    )


__all__ = [
    "CHARS_DEFAULT",
    "CHARS_DOT",
    "CHARS_LIGHT",
    "CHARS_MEDIUM",
    "CHARS_HEAVY",
    "CHARS_ULTRA",
    "DEFAULT_TARGET_PPI",
    "PRESETS",
    "Preset",
    "font_size_suggestion",
    "get_preset",
]
