"""Render a decoded 99ML screen for a terminal."""
from __future__ import annotations

from typing import Iterable

from .links import LinkSpan, hit_test
from .markup import COLS, DEFAULT_BG, DEFAULT_FG, ROWS
from .markup_interpreter import CellColour, DecodeResult
from .palette import RGB, parse_color, palette_hex

_RESET = "\x1b[0m"
_UNDERLINE = "4"
_BLANK = " "


def display_char(char: str) -> str:
    """Return ``char`` if it is safe to print in one cell, else a blank."""

    return char if char.isprintable() else _BLANK


def _printable(text: str) -> str:
    return "".join(display_char(char) for char in text)


def render_text(result: DecodeResult) -> list[str]:
    """Return the screen as ``ROWS`` strings of ``COLS`` printable characters."""

    return [_printable("".join(row)) for row in result.screen]


def _rgb_for(code: str, *, default: str) -> RGB | None:
    """Return the channels for ``code``; ``None`` means transparent."""

    return parse_color(palette_hex(code, default=default))


def _sgr(colour: CellColour, *, underline: bool) -> str:
    """Return the SGR escape selecting ``colour`` in 24-bit mode.

    A transparent background leaves the terminal background showing; a
    transparent foreground takes the background colour so the glyph vanishes.
    """

    bg = _rgb_for(colour.bg, default=DEFAULT_BG)
    fg = _rgb_for(colour.fg, default=DEFAULT_FG) or bg
    params: list[str] = []
    if fg is not None:
        params.append(f"38;2;{fg.r};{fg.g};{fg.b}")
    if bg is not None:
        params.append(f"48;2;{bg.r};{bg.g};{bg.b}")
    if underline:
        params.append(_UNDERLINE)
    return "\x1b[" + ";".join(params) + "m"


def render_ansi(result: DecodeResult) -> str:
    """Return the screen with truecolour escapes, underlining link cells."""

    lines: list[str] = []
    for row in range(ROWS):
        pieces: list[str] = []
        active: str | None = None
        for col in range(COLS):
            is_link = hit_test(row, col, result.links) is not None
            sgr = _sgr(result.colours[row][col], underline=is_link)
            if sgr != active:
                # Reset first so underline does not bleed into plain cells.
                pieces.append(_RESET + sgr)
                active = sgr
            pieces.append(display_char(result.screen[row][col]))
        pieces.append(_RESET)
        lines.append("".join(pieces))
    return "\n".join(lines)


def status_line(result: DecodeResult) -> str:
    return f"Cursor: {result.cursor.hex()}  Links: {len(result.links)}"


def describe_links(spans: Iterable[LinkSpan]) -> list[str]:
    """Return one ``RR:CC-RR:CC href (text)`` line per span."""

    return [
        f"{span.start_row:02X}:{span.start_col:02X}-"
        f"{span.end_row:02X}:{span.end_col:02X} {_printable(span.href)} ({_printable(span.text)})"
        for span in spans
    ]


__all__ = ["describe_links", "display_char", "render_ansi", "render_text", "status_line"]
