"""Public 99ML API: page layout encoding, markup interpretation and link hit testing."""
from __future__ import annotations

from .layout_config import LayoutConfigError, LayoutSettings, load_layout_config
from .layout_encoder import (
    EncodeMetadata,
    EncodeResult,
    FragmentFormatError,
    LayoutEncoder,
    PageData,
    TextFragment,
    encode,
    page_data_from_mapping,
)
from .links import LinkSpan, hit_test
from .markup import COLS, ROWS, truncate_text, word_wrap
from .markup_interpreter import CellColour, CursorState, DecodeResult, decode
from .palette import PALETTE, parse_color, quantize

__all__ = [
    "COLS",
    "CellColour",
    "CursorState",
    "DecodeResult",
    "EncodeMetadata",
    "EncodeResult",
    "FragmentFormatError",
    "LayoutConfigError",
    "LayoutEncoder",
    "LayoutSettings",
    "LinkSpan",
    "PALETTE",
    "PageData",
    "ROWS",
    "TextFragment",
    "decode",
    "encode",
    "hit_test",
    "load_layout_config",
    "page_data_from_mapping",
    "parse_color",
    "quantize",
    "truncate_text",
    "word_wrap",
]
