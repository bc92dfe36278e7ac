"""Data models for manmark."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class Format(Enum):
    """Inline formatting styles."""

    BOLD = auto()
    UNDERLINE = auto()


class ListType(Enum):
    """Kinds of list recognised by the block dispatcher.

    Attributes:
        NUMBERED: Items introduced with ``. `` and rendered ``1.``, ``2.``, ...
        BULLET: Items introduced with ``- `` and rendered with a bullet.
    """

    NUMBERED = auto()
    BULLET = auto()


class Alignment(Enum):
    """Table cell alignment, valued by its tbl(1) column code."""

    LEFT = "l"
    CENTER = "c"
    RIGHT = "r"
    LEFT_EXPAND = "lx"
    CENTER_EXPAND = "cx"
    RIGHT_EXPAND = "rx"

    @classmethod
    def from_marker(cls, marker: str) -> Alignment | None:
        """Map a cell alignment marker to an `Alignment`.

        Returns None for characters that are not alignment markers.
        """
        return _ALIGNMENT_MARKERS.get(marker)


_ALIGNMENT_MARKERS = {
    "[": Alignment.LEFT,
    "-": Alignment.CENTER,
    "]": Alignment.RIGHT,
    "<": Alignment.LEFT_EXPAND,
    "=": Alignment.CENTER_EXPAND,
    ">": Alignment.RIGHT_EXPAND,
}


@dataclass
class FormatState:
    """Open inline formatting toggles.

    At most one of the two may be set at a time.
    """

    bold: bool = False
    underline: bool = False

    @property
    def is_open(self) -> bool:
        return self.bold or self.underline


@dataclass
class Preamble:
    """Parsed first line of a document.

    Attributes:
        name: Page name, e.g. ``ls``.
        section: Manual section including any subsection suffix, e.g. ``8`` or ``3p``.
        extras: Up to two footer fields, each kept with its surrounding quotes.
    """

    name: str
    section: str
    extras: tuple[str, ...] = ()


@dataclass
class Cell:
    alignment: Alignment = Alignment.LEFT
    contents: str = ""


@dataclass
class Row:
    cells: list[Cell] = field(default_factory=list)


@dataclass
class Table:
    """Rows collected while parsing a single table.

    Attributes:
        style: Style marker that opened the table (``[``, ``]`` or ``|``).
        rows: Rows in document order.
    """

    style: str
    rows: list[Row] = field(default_factory=list)

    @property
    def current_row(self) -> Row | None:
        return self.rows[-1] if self.rows else None

    @property
    def previous_row(self) -> Row | None:
        return self.rows[-2] if len(self.rows) > 1 else None
