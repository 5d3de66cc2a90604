"""Lexing, evaluation and rendering of a whole sheet, plus the command line."""

from __future__ import annotations

import getopt
import math
import re
import string
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from .model import (
    FAMILY_SIZE,
    MAX_COLS,
    MAX_ROWS,
    Cell,
    CellError,
    CellKind,
    Token,
    TokenKind,
)
from .solver import SolverError, clone, solve

PROGRAM = "ursh"
USAGE = f"usage: {PROGRAM} -s <sheet> -d <decimal-precision>"

_LETTERS = frozenset(string.ascii_letters)
_DIGITS = frozenset(string.digits)
_OPERATORS = frozenset("+/*^()=")

_HEX_NUMBER = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?\d+)?"
)
_DEC_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_ATOI = re.compile(r"\s*([+-]?\d+)")


class SheetError(Exception):
    """Raised when a sheet or the command line cannot be used."""


def table_dimensions(src: str) -> tuple[int, int]:
    """Return ``(rows, cols)``: the number of newlines and the most bars on a line."""
    rows = 0
    cols = 0
    bars = 0
    for char in src:
        if char == "|":
            bars += 1
        elif char == "\n":
            rows += 1
            cols = max(cols, bars)
            bars = 0
    return rows, max(cols, bars)


def _read_number(src: str, pos: int) -> tuple[float, int]:
    """Parse the number starting at ``pos``; return it and where it ends."""
    match = _HEX_NUMBER.match(src, pos)
    if match:
        return float.fromhex(match.group()), match.end()
    match = _DEC_NUMBER.match(src, pos)
    if match is None:
        raise SheetError(f"no number at position {pos}")
    return float(match.group()), match.end()


def _to_row(value: float) -> int:
    """Turn a parsed row number into an unsigned 16-bit row."""
    if not math.isfinite(value) or abs(value) >= 2**31:
        return 0
    return int(value) & 0xFFFF


def _integer_digits(value: float) -> int:
    if not math.isfinite(value):
        return 0
    whole = abs(int(value))
    return len(str(whole)) if whole else 0


class Sheet:
    """A parsed and evaluated table."""

    def __init__(self, src: str, precision: int = 1) -> None:
        self.rows, self.cols = table_dimensions(src)
        if self.cols >= MAX_COLS:
            raise SheetError(f"Maximum number of columns reached which is {MAX_COLS}")
        if self.rows >= MAX_ROWS:
            raise SheetError(f"Maximum number of rows reached which is {MAX_ROWS}")
        self.precision = precision
        self.grid: list[Cell] = [Cell() for _ in range(self.rows * self.cols)]
        self.widths: list[int] = [0] * self.cols
        self._lex(src)

    def cell(self, row: int, col: int) -> Cell:
        """Return the cell at ``row`` and ``col``."""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"cell ({row}, {col}) is outside the sheet")
        return self.grid[row * self.cols + col]

    def render(self) -> str:
        """Return the table as text, each column padded to its width."""
        lines = [
            "".join(
                self._format(self.grid[row * self.cols + col], self.widths[col])
                for col in range(self.cols)
            )
            for row in range(self.rows)
        ]
        return "\n" + "".join(line + "\n" for line in lines) + "\n"

    def _format(self, cell: Cell, width: int) -> str:
        if cell.kind is CellKind.EMPTY:
            return " "
        if cell.kind is CellKind.NUMBER:
            return f" {cell.value:<{width}.{self.precision}f} "
        return f" {cell.value:<{width}} "

    def _lex(self, src: str) -> None:
        size = len(src)
        row = col = index = 0
        k = 0
        while k < size:
            char = src[k]
            if char == "\n":
                row += 1
                col = 0
                index = row * self.cols
                k += 1
                continue
            if index >= len(self.grid):
                # Text after the last line break is not part of the table.
                k += 1
                continue
            cell = self.grid[index]
            if char in " \t":
                pass
            elif char in _OPERATORS:
                self._push(cell, Token(TokenKind(char)))
            elif char == "|":
                self._operate(index)
                if col < len(self.widths):
                    self._adjust_width(cell, col)
                index += 1
                col += 1
            elif char == '"':
                end = src.find('"', k + 1)
                if end == -1:
                    end = size
                self._push(cell, Token(TokenKind.STRING, src[k + 1 : end]))
                k = end
            elif char == "@":
                target, k = self._read_reference(src, k)
                if target is None:
                    cell.set_error(CellError.BOUNDS)
                else:
                    self._push(cell, Token(TokenKind.REFERENCE, target, self.grid))
            elif char in _DIGITS or (char == "-" and src[k + 1 : k + 2] in _DIGITS):
                value, end = _read_number(src, k)
                self._push(cell, Token(TokenKind.NUMBER, value))
                k = end - 1
            elif char == "-":
                self._push(cell, Token(TokenKind.SUB))
            else:
                cell.set_error(CellError.UNKNOWN)
            k += 1

    def _read_reference(self, src: str, k: int) -> tuple[int | None, int]:
        def at(pos: int) -> str:
            return src[pos] if pos < len(src) else ""

        col = row = 0
        k += 1
        if at(k) in _LETTERS:
            col = ord(at(k).lower()) - ord("a")
        k += 1
        if at(k - 1) in _LETTERS and at(k) in _LETTERS:
            col = (ord(at(k - 1).lower()) - ord("a") + 1) * 26 + (
                ord(at(k).lower()) - ord("a")
            )
            k += 1
        if at(k) in _DIGITS:
            value, end = _read_number(src, k)
            row = _to_row(value)
            k = end - 1
        if col >= self.cols or row >= self.rows:
            return None, k
        return row * self.cols + col, k

    @staticmethod
    def _push(cell: Cell, token: Token) -> None:
        if len(cell.tokens) == FAMILY_SIZE:
            cell.set_error(CellError.OVERFLOW)
            return
        cell.tokens.append(token)

    def _operate(self, index: int) -> None:
        cell = self.grid[index]
        if not cell.tokens or cell.kind is CellKind.ERROR:
            return
        head = cell.tokens[0]
        kind = head.kind
        if kind is TokenKind.STRING:
            cell.kind = CellKind.TEXT
            cell.value = head.value
        elif kind is TokenKind.NUMBER:
            cell.kind = CellKind.NUMBER
            cell.value = head.value
        elif kind is TokenKind.REFERENCE:
            if head.value >= index:
                cell.set_error(CellError.PREMATURE)
            else:
                cell.copy_from(self.grid[head.value])
        elif kind is TokenKind.EXPR:
            try:
                solve(cell, index)
            except SolverError:
                cell.set_error(CellError.MALFORMED)
        elif kind is TokenKind.CLONE:
            if index <= self.cols - 1:
                cell.set_error(CellError.PREMATURE)
            else:
                try:
                    clone(cell, self.grid[index - self.cols], self.cols)
                except SolverError:
                    cell.set_error(CellError.MALFORMED)
        else:
            cell.set_error(CellError.MALFORMED)

    def _adjust_width(self, cell: Cell, col: int) -> None:
        if cell.kind in (CellKind.ERROR, CellKind.TEXT):
            width = len(cell.value)
        elif cell.kind is CellKind.NUMBER:
            width = self.precision + 1 + _integer_digits(cell.value)
        else:
            width = 0
        self.widths[col] = max(self.widths[col], width)


@dataclass(frozen=True)
class Options:
    """Settings taken from the command line."""

    filename: str | None
    precision: int = 1
    show_help: bool = False


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) & 0xFFFF if match else 0


def parse_args(argv: Sequence[str]) -> Options:
    """Read ``-s <sheet>``, ``-d <precision>`` and ``-h`` from ``argv``."""
    try:
        pairs, _ = getopt.gnu_getopt(list(argv), "s:d:h")
    except getopt.GetoptError as exc:
        if "requires argument" in exc.msg:
            raise SheetError(f"'-{exc.opt}' expects an argument.") from exc
        raise SheetError(f"'-{exc.opt}' is not an option.") from exc

    filename: str | None = None
    precision = 1
    for opt, value in pairs:
        if opt == "-s":
            filename = value
        elif opt == "-d":
            precision = _atoi(value)
        elif opt == "-h":
            return Options(filename, precision, show_help=True)
    if not filename:
        raise SheetError("no sheet provided to work with...")
    return Options(filename, precision)


def _warn(message: str) -> None:
    print(f"{PROGRAM}: {message}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command: read a sheet, evaluate it and print the table."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options = parse_args(args)
    except SheetError as exc:
        _warn(str(exc))
        return 1
    if options.show_help:
        _warn(USAGE)
        return 0
    try:
        with open(options.filename, encoding="utf-8", errors="replace", newline="") as handle:
            src = handle.read()
    except OSError as exc:
        _warn(f"fatal: {options.filename} is generating some issues: {exc.strerror}")
        return 1
    try:
        sheet = Sheet(src, options.precision)
    except SheetError as exc:
        _warn(str(exc))
        return 1
    sys.stdout.write(sheet.render())
    return 0