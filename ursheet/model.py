"""Core data types shared by the lexer, the solver and the renderer."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

FAMILY_SIZE = 64
MAX_COLS = 26 * 26 + 25
MAX_ROWS = 1024


class TokenKind(Enum):
    """Kinds of token a cell's source text is split into."""

    STRING = '"'
    REFERENCE = "@"
    DELIMITER = "|"
    ADD = "+"
    MUL = "*"
    DIV = "/"
    SUB = "-"
    EXPR = "="
    CLONE = "^"
    RPAR = ")"
    LPAR = "("
    NUMBER = "number"


class CellKind(Enum):
    """What a cell holds once it has been worked out."""

    EMPTY = "empty"
    ERROR = "error"
    NUMBER = "number"
    TEXT = "text"


class CellError(Enum):
    """Reasons a cell cannot be worked out."""

    OVERFLOW = 0
    UNKNOWN = 1
    MALFORMED = 2
    BOUNDS = 3
    PREMATURE = 4

    def label(self) -> str:
        """Text shown in place of a cell holding this error."""
        return "!" + self.name.lower()


@dataclass(frozen=True)
class Token:
    """One token of a cell.

    ``value`` is a float for numbers, a string for text and a grid index
    for references; ``grid`` is the table a reference points into.
    """

    kind: TokenKind
    value: float | str | int | None = None
    grid: Sequence[Cell] | None = field(default=None, repr=False, compare=False)


@dataclass
class Cell:
    """A single cell of the table: its tokens and its worked-out value."""

    tokens: list[Token] = field(default_factory=list)
    kind: CellKind = CellKind.EMPTY
    value: float | str | None = None
    clonable: bool = False

    def set_error(self, error: CellError) -> None:
        """Mark the cell as failed with the given error."""
        self.kind = CellKind.ERROR
        self.value = error.label()

    def copy_from(self, other: Cell) -> None:
        """Make this cell an independent copy of ``other``."""
        self.tokens = list(other.tokens)
        self.kind = other.kind
        self.value = other.value
        self.clonable = other.clonable