import math

import pytest

from ursheet.model import Cell, CellError, CellKind, Token, TokenKind
from ursheet.solver import SolverError, clone, evaluate, solve


def _tokens(*items, grid=None):
    out = [Token(TokenKind.EXPR)]
    for item in items:
        if isinstance(item, (int, float)):
            out.append(Token(TokenKind.NUMBER, float(item)))
        elif isinstance(item, str) and item.startswith("@"):
            out.append(Token(TokenKind.REFERENCE, int(item[1:]), grid))
        else:
            out.append(Token(TokenKind(item)))
    return out


def _solve(*items):
    return solve(Cell(tokens=_tokens(*items)), 0)


def test_single_number():
    assert _solve(5) == 5.0


def test_precedence_pinned():
    assert _solve(1, "+", 2, "*", 3) == 7.0


def test_precedence_matches_explicit_grouping():
    assert _solve(2, "+", 3, "*", 4) == _solve(2, "+", "(", 3, "*", 4, ")")
    assert _solve(2, "*", 3, "+", 4) == _solve("(", 2, "*", 3, ")", "+", 4)


def test_left_associative_subtraction():
    assert _solve(8, "-", 3, "-", 2) == _solve("(", 8, "-", 3, ")", "-", 2)
    assert _solve(8, "-", 3, "-", 2) != _solve(8, "-", "(", 3, "-", 2, ")")


def test_left_associative_division():
    assert _solve(8, "/", 4, "/", 2) == _solve("(", 8, "/", 4, ")", "/", 2)


def test_parentheses_are_commutative_under_multiplication():
    assert _solve("(", 2, "+", 3, ")", "*", 4) == _solve(4, "*", "(", 2, "+", 3, ")")


def test_solve_leaves_postfix_tokens():
    cell = Cell(tokens=_tokens(1, "+", 2, "*", 3))
    solve(cell, 0)
    assert [t.kind for t in cell.tokens] == [
        TokenKind.NUMBER,
        TokenKind.NUMBER,
        TokenKind.NUMBER,
        TokenKind.MUL,
        TokenKind.ADD,
    ]
    assert cell.kind is CellKind.NUMBER


@pytest.mark.parametrize(
    "items",
    [
        (),
        (1, 2),
        (1, "+"),
        ("(", 1),
        (1, ")"),
        (1, "+", 2, ")"),
        ("+",),
    ],
)
def test_malformed_expressions(items):
    with pytest.raises(SolverError) as info:
        _solve(*items)
    assert info.value.error is CellError.MALFORMED


def test_string_token_is_malformed():
    cell = Cell(tokens=[Token(TokenKind.EXPR), Token(TokenKind.STRING, "hi")])
    with pytest.raises(SolverError) as info:
        solve(cell, 0)
    assert info.value.error is CellError.MALFORMED


def test_stack_overflow():
    with pytest.raises(SolverError) as info:
        _solve(*([1] * 33))
    assert info.value.error is CellError.OVERFLOW


def test_reference_to_later_cell_is_premature():
    grid = [Cell(), Cell(kind=CellKind.NUMBER, value=1.0)]
    grid[0].tokens = _tokens("@1", grid=grid)
    with pytest.raises(SolverError) as info:
        solve(grid[0], 0)
    assert info.value.error is CellError.PREMATURE


def test_reference_to_itself_is_premature():
    grid = [Cell()]
    grid[0].tokens = _tokens("@0", grid=grid)
    with pytest.raises(SolverError) as info:
        solve(grid[0], 0)
    assert info.value.error is CellError.PREMATURE


def test_reference_to_text_is_malformed():
    grid = [Cell(kind=CellKind.TEXT, value="abc"), Cell()]
    grid[1].tokens = _tokens("@0", grid=grid)
    with pytest.raises(SolverError) as info:
        solve(grid[1], 1)
    assert info.value.error is CellError.MALFORMED


def test_reference_reads_value_and_marks_clonable():
    grid = [Cell(kind=CellKind.NUMBER, value=4.5), Cell()]
    grid[1].tokens = _tokens("@0", grid=grid)
    assert solve(grid[1], 1) == 4.5
    assert grid[1].clonable is True
    assert grid[1].value == 4.5


def test_no_reference_is_not_clonable():
    cell = Cell(tokens=_tokens(3, "+", 4))
    solve(cell, 0)
    assert cell.clonable is False


def test_division_by_zero():
    assert math.isinf(_solve(1, "/", 0))
    assert _solve(1, "/", 0) > 0
    assert math.isnan(_solve(0, "/", 0))


def test_evaluate_empty_cell():
    cell = Cell()
    assert evaluate(cell) == 0.0
    assert cell.kind is CellKind.NUMBER


def _two_by_two():
    # row 0: [2, = @0 * 10]   row 1: [5, ^]
    grid = [
        Cell(kind=CellKind.NUMBER, value=2.0),
        Cell(),
        Cell(kind=CellKind.NUMBER, value=5.0),
        Cell(tokens=[Token(TokenKind.CLONE)]),
    ]
    grid[1].tokens = _tokens("@0", "*", 10, grid=grid)
    solve(grid[1], 1)
    return grid


def test_clone_shifts_references_down():
    grid = _two_by_two()
    result = clone(grid[3], grid[1], 2)
    expected = Cell(tokens=_tokens("@2", "*", 10, grid=grid))
    assert result == solve(expected, 3)
    assert [t.value for t in grid[3].tokens if t.kind is TokenKind.REFERENCE] == [2]
    assert grid[3].kind is CellKind.NUMBER


def test_clone_leaves_source_untouched():
    grid = _two_by_two()
    before = grid[1].value
    clone(grid[3], grid[1], 2)
    assert grid[1].value == before
    assert [t.value for t in grid[1].tokens if t.kind is TokenKind.REFERENCE] == [0]


def test_clone_of_non_clonable_copies_value():
    source = Cell(kind=CellKind.TEXT, value="name")
    target = Cell(tokens=[Token(TokenKind.CLONE)])
    assert clone(target, source, 3) == "name"
    assert target.kind is CellKind.TEXT