"""Evaluation of cell expressions written in infix notation."""

from __future__ import annotations

import math
from contextlib import suppress
from dataclasses import dataclass, field

from .model import FAMILY_SIZE, Cell, CellError, CellKind, Token, TokenKind

_PARTITION = FAMILY_SIZE // 2

_QUEUED = frozenset(
    {
        TokenKind.LPAR,
        TokenKind.RPAR,
        TokenKind.ADD,
        TokenKind.SUB,
        TokenKind.MUL,
        TokenKind.DIV,
    }
)
_ADDITIVE = frozenset({TokenKind.ADD, TokenKind.SUB})
_MULTIPLICATIVE = frozenset({TokenKind.MUL, TokenKind.DIV})
_OPERANDS = frozenset({TokenKind.NUMBER, TokenKind.REFERENCE})


class SolverError(Exception):
    """Raised when an expression cannot be worked out."""

    def __init__(self, error: CellError) -> None:
        super().__init__(error.label())
        self.error = error


def _yields_to(top: TokenKind, current: TokenKind) -> bool:
    """Whether the operator on top of the queue goes out before ``current``."""
    if top is current:
        return True
    if top in _ADDITIVE and current in _ADDITIVE:
        return True
    if top in _MULTIPLICATIVE and current in _MULTIPLICATIVE:
        return True
    return current in _ADDITIVE and top in _MULTIPLICATIVE


@dataclass
class _Expression:
    stack: list[Token] = field(default_factory=list)
    queue: list[TokenKind] = field(default_factory=list)
    operands: int = 0
    operators: int = 0
    refs_used: bool = False

    def push(self, token: Token) -> None:
        if len(self.stack) == _PARTITION:
            raise SolverError(CellError.OVERFLOW)
        self.stack.append(token)
        if token.kind in _OPERANDS:
            self.operands += 1
        else:
            self.operators += 1

    def _push_quietly(self, kind: TokenKind) -> None:
        with suppress(SolverError):
            self.push(Token(kind))

    def push_operator(self, kind: TokenKind) -> None:
        if not self.queue or kind is TokenKind.LPAR:
            self.queue.append(kind)
            return
        if kind is TokenKind.RPAR:
            self._close_parenthesis()
            return
        while self.queue and _yields_to(self.queue[-1], kind):
            self._push_quietly(self.queue.pop())
        self.queue.append(kind)

    def _close_parenthesis(self) -> None:
        while self.queue:
            kind = self.queue.pop()
            if kind is TokenKind.LPAR:
                return
            self._push_quietly(kind)
        raise SolverError(CellError.MALFORMED)

    def drain(self) -> None:
        while self.queue:
            self.push(Token(self.queue.pop()))


def _target(token: Token) -> Cell:
    grid = token.grid
    index = token.value
    if grid is None or not isinstance(index, int) or not 0 <= index < len(grid):
        raise SolverError(CellError.BOUNDS)
    return grid[index]


def _number_of(cell: Cell) -> float:
    if cell.kind is CellKind.NUMBER and isinstance(cell.value, (int, float)):
        return float(cell.value)
    return 0.0


def _divide(a: float, b: float) -> float:
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _apply(a: float, b: float, kind: TokenKind) -> float:
    if kind is TokenKind.ADD:
        return a + b
    if kind is TokenKind.SUB:
        return a - b
    if kind is TokenKind.MUL:
        return a * b
    if kind is TokenKind.DIV:
        return _divide(a, b)
    return 0.0


def solve(cell: Cell, index: int) -> float:
    """Work out the expression held by ``cell``, which sits at ``index``.

    The first token (the expression marker) is skipped. On success the
    cell's tokens are replaced by the expression in postfix order and the
    cell becomes a number, whose value is returned.
    """
    expr = _Expression()
    for token in cell.tokens[1:]:
        kind = token.kind
        if kind in _QUEUED:
            expr.push_operator(kind)
        elif kind is TokenKind.REFERENCE:
            if not isinstance(token.value, int) or token.value >= index:
                raise SolverError(CellError.PREMATURE)
            if _target(token).kind is not CellKind.NUMBER:
                raise SolverError(CellError.MALFORMED)
            expr.push(token)
            expr.refs_used = True
        elif kind is TokenKind.NUMBER:
            expr.push(token)
        else:
            raise SolverError(CellError.MALFORMED)

    expr.drain()
    if not expr.stack:
        raise SolverError(CellError.MALFORMED)
    if expr.refs_used:
        cell.clonable = True
    cell.tokens = list(expr.stack)
    if expr.operands - expr.operators != 1:
        raise SolverError(CellError.MALFORMED)
    return evaluate(cell)


def clone(cell: Cell, source: Cell, ncols: int) -> float | str | None:
    """Copy ``source`` into ``cell``, shifting its references one row down.

    Returns the cell's resulting value.
    """
    cell.copy_from(source)
    if not source.clonable:
        return cell.value
    cell.tokens = [
        Token(tok.kind, tok.value + ncols, tok.grid)
        if tok.kind is TokenKind.REFERENCE and isinstance(tok.value, int)
        else tok
        for tok in cell.tokens
    ]
    return evaluate(cell)


def evaluate(cell: Cell) -> float:
    """Evaluate the postfix tokens of ``cell`` and store the result in it."""
    numbers: list[float] = []
    for token in cell.tokens:
        if token.kind is TokenKind.REFERENCE:
            numbers.append(_number_of(_target(token)))
        elif token.kind is TokenKind.NUMBER:
            numbers.append(float(token.value))
        elif len(numbers) > 1:
            right = numbers.pop()
            numbers[-1] = _apply(numbers[-1], right, token.kind)
    cell.kind = CellKind.NUMBER
    cell.value = numbers[0] if numbers else 0.0
    return cell.value