import pytest

from ti99ml import markup


@pytest.mark.parametrize(
    "value, expected",
    [(0, "00"), (10, "0A"), (31, "1F"), (255, "FF"), (300, "FF"), (-4, "00")],
)
def test_to_hex_clamps_and_pads(value: int, expected: str) -> None:
    assert markup.to_hex(value) == expected


def test_tag_builders_use_upper_case_hex() -> None:
    assert markup.pos_tag(10, 31) == "<pos:0A:1F>"
    assert markup.clr_tag("b", "4") == "<clr:B:4>"
    assert markup.chr_tag("<") == "<chr:3C>"
    assert markup.anchor("https://example.com/", "Home") == '<a href="https://example.com/">Home</a>'


def test_truncate_text_collapses_whitespace_before_measuring() -> None:
    assert markup.truncate_text("  Hello \n\t  World  ", 40) == "Hello World"


@pytest.mark.parametrize("width", [4, 5, 10, 39, 40])
def test_truncate_text_marks_cut_text_with_ellipsis(width: int) -> None:
    source = "abcdefghijklmnopqrstuvwxyz0123456789ABCDEFGHIJ"
    result = markup.truncate_text(source, width)

    assert len(result) == width
    assert result.endswith("...")
    assert result[:-3] == source[: width - 3]


def test_truncate_text_keeps_fitting_text_unchanged() -> None:
    assert markup.truncate_text("exactly", 7) == "exactly"
    assert not markup.truncate_text("exactly", 7).endswith("...")


@pytest.mark.parametrize(
    "text, width, expected",
    [
        ("abcdef", 3, "abc"),
        ("abcdef", 2, "ab"),
        ("abcdef", 1, "a"),
        ("ab", 3, "ab"),
        ("abcdef", 0, ""),
    ],
)
def test_truncate_text_hard_cuts_narrow_widths(text: str, width: int, expected: str) -> None:
    assert markup.truncate_text(text, width) == expected


def test_truncate_text_handles_missing_text() -> None:
    assert markup.truncate_text(None, 10) == ""
    assert markup.truncate_text("   ", 10) == ""


def test_word_wrap_breaks_on_word_boundaries() -> None:
    text = "the quick brown fox jumps over the lazy dog"

    assert markup.word_wrap(text, 10) == ["the quick", "brown fox", "jumps over", "the lazy", "dog"]


def test_word_wrap_keeps_long_words_whole() -> None:
    assert markup.word_wrap("a supercalifragilistic b", 5) == ["a", "supercalifragilistic", "b"]


def test_word_wrap_rejects_empty_input() -> None:
    assert markup.word_wrap("", 10) == []
    assert markup.word_wrap("words", 0) == []
