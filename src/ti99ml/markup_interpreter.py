"""Interpret 99ML markup into a character grid, colour grid and link spans."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Final, Iterator, NamedTuple

from .links import LinkSpan
from .markup import COLS, DEFAULT_BG, DEFAULT_FG, ROWS, clamp_col, clamp_row

_DOCUMENT_MARKER = re.compile(r"</?99ml>", re.IGNORECASE)

_BREAK_TAGS: Final[frozenset[str]] = frozenset({"br", "br/"})
_PARAGRAPH_TAGS: Final[frozenset[str]] = frozenset({"p", "/p"})

_POS_TAG = re.compile(r"pos:([0-9a-f]{2}):([0-9a-f]{2})", re.IGNORECASE)
_CLR_TAG = re.compile(r"clr:([0-9a-f]):([0-9a-f])", re.IGNORECASE)
_CHR_TAG = re.compile(r"chr:([0-9a-f]{2})", re.IGNORECASE)
_ANCHOR_OPEN = re.compile(r"a(?:\s.*)?", re.IGNORECASE | re.DOTALL)
_ANCHOR_ATTRIBUTE = re.compile(
    r"""([a-z][\w-]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""",
    re.IGNORECASE,
)
_ANCHOR_POSITION = re.compile(r"([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)

_LINE_CONTROL: Final[frozenset[str]] = frozenset({"\n", "\r"})


class Token(NamedTuple):
    """Either a trimmed tag body (``kind == "tag"``) or a literal text run."""

    kind: str
    value: str


def tokenize(content: str) -> Iterator[Token]:
    """Split ``content`` into tag and text tokens in a single left-to-right pass.

    Text between ``<`` and the next ``>`` is a tag; everything else is text.
    An opening bracket with no closing bracket before the end of input is kept
    as literal text, and empty tags produce no token.
    """

    index = 0
    length = len(content)
    while index < length:
        if content[index] == "<":
            close = content.find(">", index + 1)
            if close < 0:
                yield Token("text", content[index:])
                return
            body = content[index + 1 : close].strip()
            if body:
                yield Token("tag", body)
            index = close + 1
            continue
        start = index
        next_tag = content.find("<", index)
        index = length if next_tag < 0 else next_tag
        yield Token("text", content[start:index])


@dataclass(frozen=True)
class CellColour:
    """Foreground/background palette codes applied to one screen cell."""

    fg: str = DEFAULT_FG
    bg: str = DEFAULT_BG


@dataclass
class CursorState:
    """Write position on the grid.

    Explicit moves clamp to the visible grid.  Writing advances ``col`` past
    the last column so the next write wraps, and a wrap below the last row
    leaves ``row`` at :data:`ROWS` until the cursor is moved again.
    """

    row: int = 0
    col: int = 0

    def set_position(self, row: int, col: int) -> None:
        self.row = clamp_row(row)
        self.col = clamp_col(col)

    def line_break(self) -> None:
        """Move to column zero of the next row, staying on the last row."""

        self.col = 0
        self.row = min(self.row + 1, ROWS - 1)

    def reserve_cell(self) -> tuple[int, int] | None:
        """Return the cell for the next character and advance past it.

        Returns ``None`` when the cursor has run off the bottom of the grid.
        """

        if self.row >= ROWS:
            return None
        if self.col >= COLS:
            self.col = 0
            self.row += 1
            if self.row >= ROWS:
                return None
        cell = (self.row, self.col)
        self.col += 1
        return cell

    def span_end(self) -> tuple[int, int]:
        """Return the exclusive end cell of text written so far.

        Once text has run off the bottom row the end is just past the last
        cell of the grid.
        """

        if self.row >= ROWS:
            return ROWS - 1, COLS
        return self.row, self.col

    def clamped(self) -> CursorState:
        return CursorState(row=clamp_row(self.row), col=clamp_col(self.col))

    def hex(self) -> str:
        return f"{self.row:02X}:{self.col:02X}"


@dataclass
class _OpenLink:
    start_row: int
    start_col: int
    href: str
    text: list[str] = field(default_factory=list)


def _blank_screen() -> list[list[str]]:
    return [[" "] * COLS for _ in range(ROWS)]


def _blank_colours() -> list[list[CellColour]]:
    default = CellColour()
    return [[default] * COLS for _ in range(ROWS)]


@dataclass
class DecodeResult:
    """Fully populated screen produced by :func:`decode`.

    ``cursor`` is the final write position clamped to the visible grid.
    """

    screen: list[list[str]]
    colours: list[list[CellColour]]
    links: list[LinkSpan]
    cursor: CursorState

    def row_text(self, row: int) -> str:
        return "".join(self.screen[row])

    def text_at(self, row: int, col: int, length: int) -> str:
        return "".join(self.screen[row][col : col + length])


class _DecodeState:
    """Mutable interpreter state owned by a single :func:`decode` call."""

    def __init__(self) -> None:
        self.cursor = CursorState()
        self.colour = CellColour()
        self.screen = _blank_screen()
        self.colours = _blank_colours()
        self.links: list[LinkSpan] = []
        self.open_link: _OpenLink | None = None
        self._tag_handlers: tuple[tuple[re.Pattern[str], Callable[[re.Match[str]], None]], ...] = (
            (_POS_TAG, self._apply_position),
            (_CLR_TAG, self._apply_colour),
            (_CHR_TAG, self._apply_character),
            (_ANCHOR_OPEN, self._open_link),
        )

    def apply_tag(self, body: str) -> None:
        lowered = body.lower()
        if lowered in _BREAK_TAGS:
            self.cursor.line_break()
            return
        if lowered == "/a":
            self._close_link()
            return
        if lowered in _PARAGRAPH_TAGS:
            return
        for pattern, handler in self._tag_handlers:
            match = pattern.fullmatch(body)
            if match:
                handler(match)
                return

    def apply_text(self, text: str) -> None:
        for char in text:
            if char in _LINE_CONTROL:
                continue
            self.write_char(char)

    def write_char(self, char: str) -> None:
        if self.open_link is not None:
            self.open_link.text.append(char)
        cell = self.cursor.reserve_cell()
        if cell is None:
            return
        row, col = cell
        self.screen[row][col] = char
        self.colours[row][col] = self.colour

    def result(self) -> DecodeResult:
        return DecodeResult(
            screen=self.screen,
            colours=self.colours,
            links=self.links,
            cursor=self.cursor.clamped(),
        )

    def _apply_position(self, match: re.Match[str]) -> None:
        self.cursor.set_position(int(match.group(1), 16), int(match.group(2), 16))

    def _apply_colour(self, match: re.Match[str]) -> None:
        self.colour = CellColour(fg=match.group(1).upper(), bg=match.group(2).upper())

    def _apply_character(self, match: re.Match[str]) -> None:
        self.write_char(chr(int(match.group(1), 16)))

    def _open_link(self, match: re.Match[str]) -> None:
        attributes = _parse_attributes(match.group(0)[1:])
        position = _ANCHOR_POSITION.fullmatch(attributes.get("pos", "").strip())
        if position:
            self.cursor.set_position(int(position.group(1), 16), int(position.group(2), 16))
        self.open_link = _OpenLink(
            start_row=self.cursor.row,
            start_col=self.cursor.col,
            href=attributes.get("href", ""),
        )

    def _close_link(self) -> None:
        link = self.open_link
        if link is None:
            return
        end_row, end_col = self.cursor.span_end()
        self.links.append(
            LinkSpan(
                start_row=link.start_row,
                start_col=link.start_col,
                end_row=end_row,
                end_col=end_col,
                href=link.href,
                text="".join(link.text),
            )
        )
        self.open_link = None


def _parse_attributes(source: str) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for match in _ANCHOR_ATTRIBUTE.finditer(source):
        name = match.group(1).lower()
        value = next(group for group in match.groups()[1:] if group is not None)
        attributes.setdefault(name, value)
    return attributes


def decode(markup: str) -> DecodeResult:
    """Interpret ``markup`` and return the populated screen, colours and links.

    Unknown or malformed tags are ignored and text that runs past the bottom
    of the grid is dropped, so any input produces a complete screen.  An
    anchor left open at the end of input produces no span.
    """

    state = _DecodeState()
    content = _DOCUMENT_MARKER.sub("", markup or "")
    for token in tokenize(content):
        if token.kind == "tag":
            state.apply_tag(token.value)
        else:
            state.apply_text(token.value)
    return state.result()


__all__ = [
    "CellColour",
    "CursorState",
    "DecodeResult",
    "Token",
    "decode",
    "tokenize",
]
