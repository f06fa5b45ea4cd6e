"""Shared 99ML grammar constants and text helpers used by encoder and interpreter."""
from __future__ import annotations

import re
from typing import Final

COLS: Final[int] = 40
ROWS: Final[int] = 24

DOCUMENT_OPEN: Final[str] = "<99ml>"
DOCUMENT_CLOSE: Final[str] = "</99ml>"

ELLIPSIS: Final[str] = "..."

DEFAULT_FG: Final[str] = "F"
DEFAULT_BG: Final[str] = "4"

_WHITESPACE_RUN = re.compile(r"\s+")


def to_hex(value: int) -> str:
    """Return ``value`` clamped to a byte as two upper-case hex digits."""

    return f"{max(0, min(255, int(value))):02X}"


def clamp_row(row: int) -> int:
    return max(0, min(int(row), ROWS - 1))


def clamp_col(col: int) -> int:
    return max(0, min(int(col), COLS - 1))


def pos_tag(row: int, col: int) -> str:
    """Return the ``<pos:RR:CC>`` tag addressing ``(row, col)``."""

    return f"<pos:{to_hex(row)}:{to_hex(col)}>"


def clr_tag(fg: str, bg: str) -> str:
    """Return the ``<clr:F:B>`` tag selecting foreground ``fg`` on ``bg``."""

    return f"<clr:{fg.upper()}:{bg.upper()}>"


def chr_tag(char: str) -> str:
    return f"<chr:{to_hex(ord(char))}>"


def anchor(href: str, text: str) -> str:
    """Wrap ``text`` in an anchor pointing at ``href``."""

    return f'<a href="{href}">{text}</a>'


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text).strip()


def truncate_text(text: str | None, max_width: int) -> str:
    """Fit ``text`` into ``max_width`` cells, marking cut text with an ellipsis.

    Whitespace runs collapse to single spaces before measuring.  Widths of
    three or fewer cells are hard-cut because the ellipsis would not fit.
    """

    if not text:
        return ""
    cleaned = collapse_whitespace(text)
    if max_width <= 0:
        return ""
    if len(cleaned) <= max_width:
        return cleaned
    if max_width <= len(ELLIPSIS):
        return cleaned[:max_width]
    return cleaned[: max_width - len(ELLIPSIS)] + ELLIPSIS


def word_wrap(text: str | None, width: int) -> list[str]:
    """Greedily wrap ``text`` into lines no wider than ``width`` where possible.

    Words longer than ``width`` are placed on a line of their own rather than
    split.
    """

    if not text or width <= 0:
        return []

    lines: list[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


__all__ = [
    "COLS",
    "DEFAULT_BG",
    "DEFAULT_FG",
    "DOCUMENT_CLOSE",
    "DOCUMENT_OPEN",
    "ELLIPSIS",
    "ROWS",
    "anchor",
    "chr_tag",
    "clamp_col",
    "clamp_row",
    "clr_tag",
    "collapse_whitespace",
    "pos_tag",
    "to_hex",
    "truncate_text",
    "word_wrap",
]
