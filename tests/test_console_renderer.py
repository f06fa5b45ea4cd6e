"""Console rendering tests for decoded 99ML screens."""
from __future__ import annotations

import re

import pytest

from ti99ml import console_renderer
from ti99ml.console_renderer import (
    describe_links,
    display_char,
    render_ansi,
    render_text,
    status_line,
)
from ti99ml.markup import COLS, ROWS
from ti99ml.markup_interpreter import decode

_WHITE_ON_BLUE = "\x1b[0m\x1b[38;2;255;255;255;48;2;84;85;237m"
_SGR = re.compile(r"\x1b\[[0-9;]*m")
_CONTROL_MARKUP = "<pos:02:00>ab<chr:1B>[2Jcd<chr:08><chr:09>"


def test_render_text_returns_full_grid() -> None:
    lines = render_text(decode("<pos:01:02>Hi"))

    assert len(lines) == ROWS
    assert all(len(line) == COLS for line in lines)
    assert lines[1] == "  Hi" + " " * (COLS - 4)


def test_status_line_reports_cursor_in_hex_and_link_count() -> None:
    result = decode("<pos:0A:1F><a href=x>y</a>")

    assert status_line(result) == "Cursor: 0A:20  Links: 1"


def test_describe_links_lists_span_geometry() -> None:
    result = decode('<pos:0E:00><a href="page2.99ml">Next Page</a>')

    assert describe_links(result.links) == ["0E:00-0E:09 page2.99ml (Next Page)"]


def test_render_ansi_colours_each_row_and_resets() -> None:
    rows = render_ansi(decode("")).split("\n")

    assert len(rows) == ROWS
    assert rows[0].startswith(_WHITE_ON_BLUE)
    assert rows[0].endswith("\x1b[0m")
    assert rows[0].count("\x1b[38;2") == 1


def test_render_ansi_underlines_link_cells() -> None:
    first_row = render_ansi(decode("<a href=x>ab</a>cd")).split("\n")[0]

    assert first_row.startswith("\x1b[0m\x1b[38;2;255;255;255;48;2;84;85;237;4mab")
    assert _WHITE_ON_BLUE + "cd" in first_row


def test_render_ansi_leaves_transparent_background_unset() -> None:
    first_row = render_ansi(decode("<clr:7:0>x<clr:0:6>y")).split("\n")[0]

    assert first_row.startswith("\x1b[0m\x1b[38;2;66;235;245mx")
    assert "\x1b[0m\x1b[38;2;212;82;77;48;2;212;82;77my" in first_row


@pytest.mark.parametrize("char", ["\x1b", "\x08", "\t", "\x00", "\x7f"])
def test_display_char_blanks_control_characters(char: str) -> None:
    assert display_char(char) == " "


def test_render_text_blanks_control_characters() -> None:
    row = render_text(decode(_CONTROL_MARKUP))[2]

    assert row == "ab [2Jcd  " + " " * (COLS - 10)
    assert row.isprintable()


def test_render_ansi_emits_only_colour_escapes() -> None:
    row = render_ansi(decode(_CONTROL_MARKUP)).split("\n")[2]
    visible = _SGR.sub("", row)

    assert visible == "ab [2Jcd  " + " " * (COLS - 10)
    assert "\x1b" not in visible


def test_describe_links_blanks_control_characters() -> None:
    result = decode("<a href=x>a<chr:1B>b</a>")

    assert describe_links(result.links) == ["00:00-00:03 x (a b)"]


def test_render_ansi_takes_colours_from_palette(monkeypatch: pytest.MonkeyPatch) -> None:
    requested: list[tuple[str, str]] = []

    def fake_palette_hex(code: str, *, default: str) -> str:
        requested.append((code, default))
        return "#102030"

    monkeypatch.setattr(console_renderer, "palette_hex", fake_palette_hex)
    first_row = render_ansi(decode("<clr:5:4>x")).split("\n")[0]

    assert first_row.startswith("\x1b[0m\x1b[38;2;16;32;48;48;2;16;32;48mx")
    assert ("5", "F") in requested
    assert ("4", "4") in requested
