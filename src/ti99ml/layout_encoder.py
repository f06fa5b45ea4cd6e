"""Greedy placement of extracted page text onto the 24x40 99ML grid."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence, TypedDict
from urllib.parse import urlsplit

from .layout_config import DEFAULT_LAYOUT, LayoutSettings
from .markup import (
    COLS,
    DOCUMENT_CLOSE,
    DOCUMENT_OPEN,
    ROWS,
    anchor,
    chr_tag,
    clamp_col,
    clamp_row,
    clr_tag,
    pos_tag,
    truncate_text,
)

logger = logging.getLogger(__name__)

TITLE_ROW = 0

_MARKUP_SPECIAL = ("<", ">")
_HREF_ESCAPES = {'"': "%22", "'": "%27", "<": "%3C", ">": "%3E", " ": "%20"}


class FragmentFormatError(ValueError):
    """Raised when extracted page data does not have the expected structure."""


@dataclass(frozen=True)
class TextFragment:
    """One run of visible page text with its precomputed grid position."""

    text: str
    row: int
    col: int
    is_heading: bool = False
    is_link: bool = False
    href: str | None = None
    color: str = ""
    bg_color: str = ""


@dataclass(frozen=True)
class PageData:
    """Title and text fragments extracted from one rendered page."""

    title: str
    fragments: tuple[TextFragment, ...]
    links_found: int | None = None


class MetadataPayload(TypedDict):
    title: str
    textNodesFound: int
    linksFound: int
    linksPlaced: int


class ConversionPayload(TypedDict):
    content: str
    metadata: MetadataPayload


@dataclass(frozen=True)
class EncodeMetadata:
    title: str
    fragments_seen: int
    links_found: int
    links_placed: int


@dataclass(frozen=True)
class EncodeResult:
    """Markup document plus counters describing the placement run."""

    markup: str
    metadata: EncodeMetadata

    def as_dict(self) -> ConversionPayload:
        """Return the JSON shape served by the conversion endpoint."""

        return {
            "content": self.markup,
            "metadata": {
                "title": self.metadata.title,
                "textNodesFound": self.metadata.fragments_seen,
                "linksFound": self.metadata.links_found,
                "linksPlaced": self.metadata.links_placed,
            },
        }


class OccupancyGrid:
    """Record which cells already hold placed text during one encode run."""

    def __init__(self) -> None:
        self._cells: list[list[str | None]] = [[None] * COLS for _ in range(ROWS)]

    def owner(self, row: int, col: int) -> str | None:
        return self._cells[row][col]

    def is_free(self, row: int, col: int) -> bool:
        return self._cells[row][col] is None

    def first_free(self, row: int, col: int) -> int | None:
        """Return the first free column at or right of ``col`` on ``row``."""

        for candidate in range(max(0, col), COLS):
            if self._cells[row][candidate] is None:
                return candidate
        return None

    def mark(self, row: int, start_col: int, length: int, owner: str) -> None:
        """Claim ``length`` cells from ``start_col``, stopping at the last column."""

        for col in range(start_col, min(start_col + length, COLS)):
            self._cells[row][col] = owner


def source_hostname(source_id: str) -> str:
    """Return the host part of ``source_id``, or the identifier itself."""

    try:
        hostname = urlsplit(source_id).hostname
    except ValueError:
        hostname = None
    return hostname or source_id


def escape_text(text: str) -> str:
    """Replace characters that would open or close a tag with ``<chr:XX>``."""

    if not any(special in text for special in _MARKUP_SPECIAL):
        return text
    return "".join(chr_tag(char) if char in _MARKUP_SPECIAL else char for char in text)


def escape_href(href: str) -> str:
    return "".join(_HREF_ESCAPES.get(char, char) for char in href)


def count_link_targets(fragments: Iterable[TextFragment]) -> int:
    return len({fragment.href for fragment in fragments if fragment.is_link and fragment.href})


class LayoutEncoder:
    """Place text fragments left-to-right, top-to-bottom without overlap.

    Each call to :meth:`encode` owns a fresh :class:`OccupancyGrid`, so one
    encoder may serve concurrent callers.
    """

    def __init__(self, settings: LayoutSettings | None = None) -> None:
        self.settings = settings or DEFAULT_LAYOUT

    def encode_page(self, page: PageData, source_id: str) -> EncodeResult:
        return self.encode(
            page.fragments, page.title, source_id, links_found=page.links_found
        )

    def encode(
        self,
        fragments: Sequence[TextFragment],
        title: str,
        source_id: str,
        *,
        links_found: int | None = None,
    ) -> EncodeResult:
        settings = self.settings
        grid = OccupancyGrid()
        parts: list[str] = [DOCUMENT_OPEN, clr_tag(settings.body, settings.background)]

        placed_title = truncate_text(title, COLS)
        if placed_title:
            start_col = (COLS - len(placed_title)) // 2
            parts.append(
                clr_tag(settings.title, settings.background)
                + pos_tag(TITLE_ROW, start_col)
                + escape_text(placed_title)
            )
            grid.mark(TITLE_ROW, start_col, len(placed_title), "title")

        placed_links: set[str] = set()
        for fragment in self._ordered(fragments):
            token = self._place(fragment, grid, placed_links)
            if token is not None:
                parts.append(token)

        parts.append(self._footer(source_id, grid))
        parts.append(DOCUMENT_CLOSE)

        if links_found is None:
            links_found = count_link_targets(fragments)
        metadata = EncodeMetadata(
            title=title,
            fragments_seen=len(fragments),
            links_found=links_found,
            links_placed=len(placed_links),
        )
        logger.info(
            "Encoded %d fragments from %s (%d of %d links placed)",
            metadata.fragments_seen,
            source_id,
            metadata.links_placed,
            metadata.links_found,
        )
        return EncodeResult(markup="\n".join(parts), metadata=metadata)

    @staticmethod
    def _ordered(fragments: Iterable[TextFragment]) -> list[TextFragment]:
        body = [
            fragment for fragment in fragments if clamp_row(fragment.row) != TITLE_ROW
        ]
        return sorted(body, key=lambda item: (clamp_row(item.row), clamp_col(item.col)))

    def _place(
        self,
        fragment: TextFragment,
        grid: OccupancyGrid,
        placed_links: set[str],
    ) -> str | None:
        settings = self.settings
        row = clamp_row(fragment.row)
        if row >= settings.last_body_row:
            logger.debug("Skipping %r: row %d is reserved", fragment.text, row)
            return None

        start_col = grid.first_free(row, clamp_col(fragment.col))
        if start_col is None:
            logger.debug("Skipping %r: row %d is full", fragment.text, row)
            return None

        text = truncate_text(fragment.text, COLS - start_col)
        if not text:
            return None
        if start_col != fragment.col:
            logger.debug("Moved %r from column %d to %d", text, fragment.col, start_col)

        if fragment.is_heading:
            colour = settings.heading
        elif fragment.is_link:
            colour = settings.link
        else:
            colour = settings.body
        prefix = clr_tag(colour, settings.background) + pos_tag(row, start_col)

        href = fragment.href
        if fragment.is_link and href and href not in placed_links:
            token = prefix + anchor(escape_href(href), escape_text(text))
            placed_links.add(href)
        else:
            token = prefix + escape_text(text)

        grid.mark(row, start_col, len(text), "text")
        return token

    def _footer(self, source_id: str, grid: OccupancyGrid) -> str:
        settings = self.settings
        footer = f"Source: {source_hostname(source_id)}"[:COLS]
        footer_col = (COLS - len(footer)) // 2
        grid.mark(settings.footer_row, footer_col, len(footer), "footer")
        return (
            clr_tag(settings.footer, settings.background)
            + pos_tag(settings.footer_row, footer_col)
            + escape_text(footer)
        )


def encode(
    fragments: Sequence[TextFragment],
    title: str,
    source_id: str,
    *,
    settings: LayoutSettings | None = None,
) -> EncodeResult:
    """Encode ``fragments`` under ``title`` into a complete 99ML document."""

    return LayoutEncoder(settings).encode(fragments, title, source_id)


def _coerce_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def fragment_from_mapping(record: Mapping[str, Any]) -> TextFragment:
    """Build a :class:`TextFragment` from an extractor ``textNodes`` record."""

    href = record.get("href")
    return TextFragment(
        text=str(record.get("text") or ""),
        row=clamp_row(_coerce_int(record.get("row"))),
        col=clamp_col(_coerce_int(record.get("col"))),
        is_heading=bool(record.get("isHeading", False)),
        is_link=bool(record.get("isLink", False)),
        href=str(href) if href else None,
        color=str(record.get("color") or ""),
        bg_color=str(record.get("bgColor") or ""),
    )


def page_data_from_mapping(data: Any) -> PageData:
    """Convert the extractor's JSON page record into :class:`PageData`."""

    if not isinstance(data, Mapping):
        raise FragmentFormatError("page data must be a JSON object")
    nodes = data.get("textNodes", [])
    if not isinstance(nodes, list):
        raise FragmentFormatError("textNodes must be a list of records")

    fragments = tuple(
        fragment_from_mapping(record) for record in nodes if isinstance(record, Mapping)
    )
    links = data.get("links")
    links_found = len(links) if isinstance(links, list) else None
    return PageData(
        title=str(data.get("title") or ""),
        fragments=fragments,
        links_found=links_found,
    )


__all__ = [
    "EncodeMetadata",
    "EncodeResult",
    "FragmentFormatError",
    "LayoutEncoder",
    "OccupancyGrid",
    "PageData",
    "TITLE_ROW",
    "TextFragment",
    "encode",
    "escape_href",
    "escape_text",
    "fragment_from_mapping",
    "page_data_from_mapping",
    "source_hostname",
]
