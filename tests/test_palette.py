import pytest

from ti99ml import palette
from ti99ml.palette import PALETTE, RGB


@pytest.mark.parametrize("entry", PALETTE[1:], ids=lambda entry: entry.name)
def test_quantize_maps_palette_colours_to_their_own_code(entry: palette.PaletteEntry) -> None:
    r, g, b = entry.rgb

    assert palette.quantize(f"rgb({r}, {g}, {b})") == entry.code
    assert palette.quantize(entry.hex) == entry.code


@pytest.mark.parametrize(
    "spec, expected",
    [
        ("rgb(33, 200, 66)", RGB(33, 200, 66)),
        ("rgba(66, 235, 245, 0.5)", RGB(66, 235, 245)),
        ("#D4C154", RGB(212, 193, 84)),
        ("#d4c154", RGB(212, 193, 84)),
        ("#fa0", RGB(255, 170, 0)),
        ("color: #abc;", RGB(170, 187, 204)),
    ],
)
def test_parse_color_accepts_functional_and_hex_forms(spec: str, expected: RGB) -> None:
    assert palette.parse_color(spec) == expected


@pytest.mark.parametrize("spec", ["", None, "blue", "hsl(120, 50%, 50%)", "#12"])
def test_parse_color_rejects_unknown_forms(spec: str | None) -> None:
    assert palette.parse_color(spec) is None


def test_parse_color_prefers_functional_form() -> None:
    assert palette.parse_color("#ffffff rgb(212, 82, 77)") == RGB(212, 82, 77)


def test_parse_color_prefers_six_digit_hex_over_three_digit() -> None:
    assert palette.parse_color("#abc #112233") == RGB(0x11, 0x22, 0x33)


@pytest.mark.parametrize(
    "spec, expected",
    [
        ("rgb(29, 29, 29)", palette.BLACK_CODE),
        ("rgba(0, 0, 0, 0)", palette.BLACK_CODE),
        ("rgb(226, 230, 240)", palette.WHITE_CODE),
        ("", palette.WHITE_CODE),
        ("transparent", palette.WHITE_CODE),
        ("rgb(220, 80, 80)", "6"),
        ("#00FFFF", "7"),
    ],
)
def test_quantize_snaps_and_falls_back(spec: str, expected: str) -> None:
    assert palette.quantize(spec) == expected


def test_quantize_never_returns_transparent() -> None:
    assert palette.quantize("rgb(1, 2, 31)") != palette.TRANSPARENT_CODE


def test_colour_distance_is_euclidean() -> None:
    assert palette.colour_distance(RGB(0, 0, 0), RGB(3, 4, 0)) == 5.0


def test_palette_hex_returns_display_colours() -> None:
    assert palette.palette_hex("4") == "#5455ED"
    assert palette.palette_hex("b") == "#E6CE80"
    assert palette.palette_hex("0") == "transparent"


def test_palette_hex_falls_back_for_unknown_codes() -> None:
    assert palette.palette_hex("Z") == "#FFFFFF"
    assert palette.palette_hex("Z", default="4") == "#5455ED"
