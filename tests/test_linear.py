import random

import numpy as np
import pytest

from noguess.board import Board, View
from noguess.errors import InconsistentViewError
from noguess.frontier import ConstraintSystem
from noguess.generator import place_mines
from noguess.linear import compute_rref, interpret_rows, solve_component, solve_linear


def _random_position(seed, width=16, height=16, mine_count=40, clicks=4):
    """A board plus a view reached by opening a few random safe cells."""
    rng = random.Random(seed)
    mines = place_mines(width, height, mine_count, width // 2, height // 2, 1, rng)
    board = Board.from_mines(width, height, mines)
    view = View.hidden(width, height)
    view.reveal(board, width // 2, height // 2)

    safe = [i for i in range(width * height) if not mines[i]]
    for cell in rng.sample(safe, clicks):
        view.reveal(board, *divmod(cell, height))
    return board, view


def _assert_sound(board, deduction):
    for cell in deduction.safe:
        assert not board.mines[cell]
    for cell in deduction.mine:
        assert board.mines[cell]


def test_one_two_one_pattern():
    system = ConstraintSystem.from_view(View.from_layout(["...", "121"]), 2)

    deduction = solve_linear(system)

    assert deduction.as_coords(2) == ([(1, 0)], [(0, 0), (2, 0)])


def test_linear_step_is_idempotent():
    system = ConstraintSystem.from_view(View.from_layout(["...", "121"]), 2)
    first = solve_linear(system)
    assert solve_linear(system) == first

    # Flag what was found; nothing new may appear
    view = View.from_layout(["F.F", "121"])
    again = solve_linear(ConstraintSystem.from_view(view, 2))
    assert again.safe <= first.safe
    assert not again.mine


def test_compute_rref_reduces_identity_like_system():
    matrix = np.array(
        [
            [1.0, 1.0, 0.0, 1.0],
            [1.0, 1.0, 1.0, 2.0],
            [0.0, 1.0, 1.0, 1.0],
        ]
    )

    compute_rref(matrix)

    assert np.allclose(matrix[:, :3], np.eye(3))
    assert np.allclose(matrix[:, 3], [1.0, 0.0, 1.0])


def test_interpret_rows_uses_bounds():
    # x0 - x1 = 1 forces x0 = 1, x1 = 0
    matrix = np.array([[1.0, -1.0, 1.0]])
    deduction = interpret_rows(matrix, [10, 11])
    assert deduction.mine == {10}
    assert deduction.safe == {11}

    # x0 - x1 = -1 forces the opposite
    matrix = np.array([[1.0, -1.0, -1.0]])
    deduction = interpret_rows(matrix, [10, 11])
    assert deduction.mine == {11}
    assert deduction.safe == {10}


def test_interpret_rows_leaves_open_rows_alone():
    matrix = np.array([[1.0, 1.0, 1.0]])
    assert not interpret_rows(matrix, [0, 1])


@pytest.mark.parametrize(
    "matrix",
    [
        np.array([[0.0, 0.0, 1.0]]),
        np.array([[1.0, 1.0, 3.0]]),
        np.array([[1.0, -1.0, -2.0]]),
    ],
)
def test_interpret_rows_rejects_impossible_rows(matrix):
    with pytest.raises(InconsistentViewError):
        interpret_rows(matrix, [0, 1])


def test_contradictory_component_raises():
    # 1 and 2 over the same two hidden cells
    visible = [-1, 1, -1, 2]
    system = ConstraintSystem(2, 2, visible, [0, 0, 0, 0], 2)
    with pytest.raises(InconsistentViewError):
        solve_component(system, [0, 1])


def test_empty_frontier_yields_nothing():
    system = ConstraintSystem.from_view(View.hidden(4, 4), 3)
    assert not solve_linear(system)


@pytest.mark.parametrize("seed", range(8))
def test_full_and_windowed_elimination_are_sound(seed):
    board, view = _random_position(seed)
    system = ConstraintSystem.from_view(view, board.mine_count)

    full = solve_linear(system)
    windowed = solve_linear(system, window_size=6)

    _assert_sound(board, full)
    _assert_sound(board, windowed)
    assert not (full.safe & windowed.mine)
    assert not (full.mine & windowed.safe)
