"""Hyperlink spans on the 24x40 grid and cell hit testing."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from .markup import COLS


@dataclass(frozen=True)
class LinkSpan:
    """Contiguous run of cells covered by one anchor, possibly across rows.

    ``end_col`` is exclusive: it is the cursor column after the last character
    of the link text.
    """

    start_row: int
    start_col: int
    end_row: int
    end_col: int
    href: str
    text: str

    def contains(self, row: int, col: int) -> bool:
        """Return ``True`` when the cell at ``(row, col)`` lies inside the span."""

        if self.start_row == self.end_row:
            return row == self.start_row and self.start_col <= col < self.end_col
        if row == self.start_row:
            return self.start_col <= col < COLS
        if row == self.end_row:
            return 0 <= col < self.end_col
        return self.start_row < row < self.end_row and 0 <= col < COLS

    def cells(self) -> Iterator[tuple[int, int]]:
        """Yield every ``(row, col)`` covered by the span in row-major order."""

        for row in range(self.start_row, self.end_row + 1):
            for col in range(COLS):
                if self.contains(row, col):
                    yield row, col

    def as_dict(self) -> dict[str, int | str]:
        return {
            "startRow": self.start_row,
            "startCol": self.start_col,
            "endRow": self.end_row,
            "endCol": self.end_col,
            "href": self.href,
            "text": self.text,
        }


def hit_test(row: int, col: int, spans: Iterable[LinkSpan]) -> LinkSpan | None:
    """Return the first span in ``spans`` that covers ``(row, col)``.

    Overlapping spans are allowed in hand-written markup; the span discovered
    first wins.
    """

    for span in spans:
        if span.contains(row, col):
            return span
    return None


__all__ = ["LinkSpan", "hit_test"]
