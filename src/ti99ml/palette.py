"""TI-99/4A palette table and CSS colour quantization."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Final, NamedTuple

from .markup import DEFAULT_FG

TRANSPARENT_CODE: Final[str] = "0"
BLACK_CODE: Final[str] = "1"
WHITE_CODE: Final[str] = "F"

_NEAR_BLACK_LIMIT = 30
_NEAR_WHITE_LIMIT = 225


class RGB(NamedTuple):
    r: int
    g: int
    b: int


@dataclass(frozen=True)
class PaletteEntry:
    """One of the sixteen fixed TMS9918A display colours."""

    code: str
    rgb: RGB
    name: str

    @property
    def hex(self) -> str:
        if self.code == TRANSPARENT_CODE:
            return "transparent"
        return "#{:02X}{:02X}{:02X}".format(*self.rgb)


PALETTE: Final[tuple[PaletteEntry, ...]] = (
    PaletteEntry("0", RGB(0, 0, 0), "transparent"),
    PaletteEntry("1", RGB(0, 0, 0), "black"),
    PaletteEntry("2", RGB(33, 200, 66), "medium-green"),
    PaletteEntry("3", RGB(94, 220, 120), "light-green"),
    PaletteEntry("4", RGB(84, 85, 237), "dark-blue"),
    PaletteEntry("5", RGB(125, 118, 252), "light-blue"),
    PaletteEntry("6", RGB(212, 82, 77), "dark-red"),
    PaletteEntry("7", RGB(66, 235, 245), "cyan"),
    PaletteEntry("8", RGB(252, 85, 84), "medium-red"),
    PaletteEntry("9", RGB(255, 121, 120), "light-red"),
    PaletteEntry("A", RGB(212, 193, 84), "dark-yellow"),
    PaletteEntry("B", RGB(230, 206, 128), "light-yellow"),
    PaletteEntry("C", RGB(33, 176, 59), "dark-green"),
    PaletteEntry("D", RGB(201, 91, 186), "magenta"),
    PaletteEntry("E", RGB(204, 204, 204), "grey"),
    PaletteEntry("F", RGB(255, 255, 255), "white"),
)

_PALETTE_BY_CODE: Final[dict[str, PaletteEntry]] = {
    entry.code: entry for entry in PALETTE
}

_RGB_FUNCTION = re.compile(r"rgba?\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")
_HEX6 = re.compile(r"#([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)
_HEX3 = re.compile(r"#([0-9a-f])([0-9a-f])([0-9a-f])", re.IGNORECASE)


def parse_color(spec: str | None) -> RGB | None:
    """Return the channels of a CSS ``rgb()``/``rgba()``/hex colour, or ``None``."""

    if not spec:
        return None

    match = _RGB_FUNCTION.search(spec)
    if match:
        return RGB(*(int(channel) for channel in match.groups()))

    match = _HEX6.search(spec)
    if match:
        return RGB(*(int(channel, 16) for channel in match.groups()))

    match = _HEX3.search(spec)
    if match:
        return RGB(*(int(digit * 2, 16) for digit in match.groups()))

    return None


def colour_distance(first: RGB, second: RGB) -> float:
    """Euclidean distance between two colours in RGB space."""

    return math.dist(first, second)


def quantize(spec: str | None) -> str:
    """Map a CSS colour string onto the nearest palette code.

    Near-black and near-white inputs snap to black and white before the
    nearest-neighbour search; the transparent entry never matches.  Unparseable
    input falls back to white.
    """

    rgb = parse_color(spec)
    if rgb is None:
        return WHITE_CODE

    if all(channel < _NEAR_BLACK_LIMIT for channel in rgb):
        return BLACK_CODE
    if all(channel > _NEAR_WHITE_LIMIT for channel in rgb):
        return WHITE_CODE

    closest_code = WHITE_CODE
    closest_distance = math.inf
    for entry in PALETTE:
        if entry.code == TRANSPARENT_CODE:
            continue
        distance = colour_distance(rgb, entry.rgb)
        # Strict comparison keeps the earliest entry on ties.
        if distance < closest_distance:
            closest_distance = distance
            closest_code = entry.code
    return closest_code


def palette_entry(code: str) -> PaletteEntry | None:
    return _PALETTE_BY_CODE.get(str(code).upper())


def palette_hex(code: str, *, default: str = DEFAULT_FG) -> str:
    """Return the display colour for ``code``, falling back to ``default``."""

    entry = palette_entry(code) or _PALETTE_BY_CODE[default.upper()]
    return entry.hex


__all__ = [
    "BLACK_CODE",
    "PALETTE",
    "PaletteEntry",
    "RGB",
    "TRANSPARENT_CODE",
    "WHITE_CODE",
    "colour_distance",
    "palette_entry",
    "palette_hex",
    "parse_color",
    "quantize",
]
