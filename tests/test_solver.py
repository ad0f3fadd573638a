import random

import pytest

import noguess.solver as solver_module
from noguess import (
    Board,
    Constraint,
    DeterministicSolver,
    DifficultyConfig,
    evaluate_component,
    generate_board,
    generate_board_with_start_cell,
    solve,
)


def all_cells(board):
    return {(r, c) for r in range(board.rows) for c in range(board.cols)}


def one_two_one_board():
    """
    Hidden top row over a revealed 1-2-1, cleared bottom row:

        M . M
        1 2 1
        0 0 0
    """
    return Board(3, 3, bomb_positions=[(0, 0), (0, 2)], start_cell=(2, 1))


def test_corner_bomb_scenario():
    board = Board(3, 3, bomb_positions=[(0, 0)], start_cell=(2, 2))
    solvable, revealed, flagged = solve(board, max_component_size=1)
    assert solvable is True
    assert flagged == {(0, 0)}
    assert revealed == all_cells(board) - {(0, 0)}


def test_zero_bomb_board_is_solved_by_flood():
    board = Board(4, 5, start_cell=(1, 2))
    result = solve(board, max_component_size=0)
    assert result.solvable
    assert result.revealed == all_cells(board)
    assert result.flagged == set()


def test_board_without_start_cell_is_not_solvable():
    board = generate_board(DifficultyConfig(9, 9, 10), rng=random.Random(1))
    assert solve(board) == (False, set(), set())


def test_nonzero_start_cell_reveals_only_itself():
    board = Board(3, 3, bomb_positions=[(0, 0)], start_cell=(1, 1))
    solver = DeterministicSolver(board, max_component_size=18)
    result = solver.solve()
    assert not result.solvable
    assert result.revealed == {(1, 1)}
    assert result.flagged == set()
    assert solver.evaluated_components_count == 1


def test_fifty_fifty_is_stuck():
    board = Board(2, 3, bomb_positions=[(0, 0)], start_cell=(1, 2))
    result = solve(board, max_component_size=18)
    assert not result.solvable
    assert result.revealed == {(0, 1), (0, 2), (1, 1), (1, 2)}
    assert result.flagged == set()


def test_enumeration_resolves_one_two_one():
    board = one_two_one_board()
    solver = DeterministicSolver(board, max_component_size=3)
    result = solver.solve()
    assert result.solvable
    assert result.flagged == {(0, 0), (0, 2)}
    assert result.revealed == all_cells(board) - {(0, 0), (0, 2)}
    assert solver.inferred_trivial_count == 0
    assert solver.inferred_enumeration_count == 3
    assert solver.evaluated_components_count == 1
    assert solver.max_component_len == 3


def test_oversized_component_is_skipped():
    board = one_two_one_board()
    solver = DeterministicSolver(board, max_component_size=2)
    result = solver.solve()
    assert not result.solvable
    assert result.revealed == {(r, c) for r in (1, 2) for c in range(3)}
    assert result.flagged == set()
    assert solver.skipped_components_count == 1
    assert solver.evaluated_components_count == 0


def test_contradiction_returns_accumulated_sets(monkeypatch):
    monkeypatch.setattr(
        solver_module,
        "evaluate_component",
        lambda component, constraints: (set(), set(), False),
    )
    board = one_two_one_board()
    solver = DeterministicSolver(board, max_component_size=3)
    result = solver.solve()
    assert not result.solvable
    assert result.revealed == {(r, c) for r in (1, 2) for c in range(3)}
    assert solver.contradiction
    assert solver.stats()["contradiction"] is True


def test_solver_does_not_touch_gameplay_state():
    board = generate_board_with_start_cell(
        DifficultyConfig(9, 9, 10), rng=random.Random(5)
    )
    solve(board)
    assert board.revealed_count == 0
    assert not any(cell.revealed or cell.flagged for cell in board.cells)
    assert not board.is_game_over


@pytest.mark.parametrize("max_component_size", [0, 1, 4, 10, 18])
@pytest.mark.parametrize(
    "config",
    [DifficultyConfig(9, 9, 10), DifficultyConfig(16, 16, 40), DifficultyConfig(8, 8, 20)],
)
def test_never_reveals_a_bomb(config, max_component_size):
    rng = random.Random(hash((config, max_component_size)) & 0xFFFF)
    for _ in range(15):
        board = generate_board_with_start_cell(config, rng=rng)
        bombs = set(board.bomb_positions)
        result = solve(board, max_component_size)

        assert not (result.revealed & bombs)
        assert result.flagged <= bombs
        assert not (result.revealed & result.flagged)
        if result.solvable:
            assert result.revealed == all_cells(board) - bombs


def test_larger_cap_certifies_at_least_as_often():
    rng = random.Random(99)
    config = DifficultyConfig(9, 9, 10)
    for _ in range(20):
        board = generate_board_with_start_cell(config, rng=rng)
        if solve(board, max_component_size=0).solvable:
            assert solve(board, max_component_size=12).solvable


def test_evaluate_component_forces_one_two_one():
    constraints = [
        Constraint(("a", "b"), 1),
        Constraint(("a", "b", "c"), 2),
        Constraint(("b", "c"), 1),
    ]
    forced_safe, forced_mine, consistent = evaluate_component(["a", "b", "c"], constraints)
    assert consistent
    assert forced_safe == {"b"}
    assert forced_mine == {"a", "c"}


def test_evaluate_component_reports_contradiction():
    constraints = [
        Constraint(("a", "b"), 1),
        Constraint(("b", "c"), 1),
        Constraint(("a", "c"), 1),
    ]
    assert evaluate_component(["a", "b", "c"], constraints) == (set(), set(), False)


def test_evaluate_component_ambiguous_and_unconstrained():
    safe, mine, consistent = evaluate_component(["a", "b"], [Constraint(("a", "b"), 1)])
    assert consistent and safe == set() and mine == set()

    safe, mine, consistent = evaluate_component(["a"], [Constraint(("z",), 1)])
    assert consistent and safe == set() and mine == set()

    assert evaluate_component([], [Constraint(("a",), 1)]) == (set(), set(), True)


def test_evaluate_component_ignores_unknowns_outside_component():
    # "x" lies outside the component; the caller already discounted it
    safe, mine, consistent = evaluate_component(["a", "b"], [Constraint(("a", "b", "x"), 0)])
    assert consistent
    assert safe == {"a", "b"}
    assert mine == set()


def test_evaluate_component_spans_several_mask_chunks():
    cells = list(range(17))
    constraints = [Constraint(tuple(cells[:16]), 16), Constraint((16,), 0)]
    safe, mine, consistent = evaluate_component(cells, constraints)
    assert consistent
    assert mine == set(range(16))
    assert safe == {16}
