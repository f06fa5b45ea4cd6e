"""Encoder colour roles and reserved rows, optionally loaded from TOML."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping

import tomllib

from .markup import DEFAULT_BG, DEFAULT_FG, ROWS

_HEX_DIGITS = frozenset("0123456789ABCDEF")
_COLOUR_KEYS = ("body", "heading", "link", "title", "footer", "background")
_ROW_KEYS = ("footer_row", "reserved_rows")


class LayoutConfigError(ValueError):
    """Raised when a layout configuration file fails validation."""


@dataclass(frozen=True)
class LayoutSettings:
    """Palette codes per text role and the rows kept free of body text."""

    body: str = DEFAULT_FG
    heading: str = "B"
    link: str = "7"
    title: str = "B"
    footer: str = "E"
    background: str = DEFAULT_BG
    footer_row: int = 0x17
    reserved_rows: int = 2

    @property
    def last_body_row(self) -> int:
        """Return the first row that body text may not occupy."""

        return ROWS - self.reserved_rows


DEFAULT_LAYOUT = LayoutSettings()


def load_layout_config(config_path: Path) -> LayoutSettings:
    """Parse the ``[layout]`` table at ``config_path`` over :data:`DEFAULT_LAYOUT`."""

    with config_path.open("rb") as stream:
        try:
            raw_data = tomllib.load(stream)
        except tomllib.TOMLDecodeError as exc:
            raise LayoutConfigError(f"{config_path}: {exc}") from exc

    return parse_layout_config(raw_data)


def parse_layout_config(data: Mapping[str, Any]) -> LayoutSettings:
    layout = data.get("layout", {})
    if not isinstance(layout, Mapping):
        raise LayoutConfigError("[layout] section must be a mapping")

    unknown = sorted(set(layout) - set(_COLOUR_KEYS) - set(_ROW_KEYS))
    if unknown:
        raise LayoutConfigError(f"unknown layout keys: {', '.join(unknown)}")

    overrides: Dict[str, Any] = {}
    for key in _COLOUR_KEYS:
        if key in layout:
            overrides[key] = _coerce_colour_code(key, layout[key])
    for key in _ROW_KEYS:
        if key in layout:
            overrides[key] = _coerce_row(key, layout[key])

    return replace(DEFAULT_LAYOUT, **overrides)


def _coerce_colour_code(key: str, raw: Any) -> str:
    if isinstance(raw, int) and not isinstance(raw, bool) and 0 <= raw <= 0xF:
        return f"{raw:X}"
    if isinstance(raw, str):
        code = raw.strip().upper()
        if len(code) == 1 and code in _HEX_DIGITS:
            return code
    raise LayoutConfigError(f"{key} must be a single hex digit colour code, got {raw!r}")


def _coerce_row(key: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise LayoutConfigError(f"{key} must be an integer row")
    if isinstance(raw, str):
        try:
            raw = int(raw.strip(), 0)
        except ValueError as exc:
            raise LayoutConfigError(f"invalid {key}: {raw!r}") from exc
    if not isinstance(raw, int):
        raise LayoutConfigError(f"{key} must be an integer row")
    if not 0 <= raw < ROWS:
        raise LayoutConfigError(f"{key} must be between 0 and {ROWS - 1}, got {raw}")
    return raw


__all__ = [
    "DEFAULT_LAYOUT",
    "LayoutConfigError",
    "LayoutSettings",
    "load_layout_config",
    "parse_layout_config",
]
