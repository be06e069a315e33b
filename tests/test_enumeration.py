import random

import pytest

from noguess.board import Board, View
from noguess.enumeration import enumerate_component, enumerate_solutions
from noguess.errors import InconsistentViewError
from noguess.frontier import ConstraintSystem, Deduction
from noguess.generator import place_mines


def _system(rows, mine_count):
    return ConstraintSystem.from_view(View.from_layout(rows), mine_count)


def test_one_two_one_has_a_single_solution():
    system = _system(["...", "121"], 2)

    comp = enumerate_component(system, system.components()[0], system.remaining_mines)

    assert comp.solution_count == 1
    assert list(comp.by_count) == [2]
    assert not comp.exhausted
    assert enumerate_solutions(system).as_coords(2) == ([(1, 0)], [(0, 0), (2, 0)])


def test_symmetric_pairs_force_nothing():
    system = _system(["...", "24.", "1FF"], 4)

    comp = enumerate_component(system, system.components()[0], system.remaining_mines)

    assert comp.solution_count == 4
    assert not enumerate_solutions(system)


def test_mine_budget_clears_interior():
    # Each clue takes one of the two mines, so the far cell is safe
    system = _system([".1..1.."], 2)

    assert enumerate_solutions(system) == Deduction(safe=[6])


def test_mine_budget_fills_interior():
    system = _system([".1..1.."], 3)

    assert enumerate_solutions(system) == Deduction(mine=[6])


def test_mine_budget_limits_component_counts():
    # The left pair of clues holds one or two mines; only one fits the budget
    system = _system([".1.1..1."], 2)
    comp = enumerate_component(system, system.components()[0], system.remaining_mines)
    assert comp.mine_counts() == {1, 2}

    assert enumerate_solutions(system) == Deduction(safe=[0, 4], mine=[2])


def test_budget_too_small_is_inconsistent():
    system = _system([".1..1."], 1)

    with pytest.raises(InconsistentViewError):
        enumerate_solutions(system)


def test_node_budget_abandons_component():
    system = _system(["...", "121"], 2)

    comp = enumerate_component(system, system.components()[0], 2, max_nodes=1)

    assert comp.exhausted
    assert comp.by_count == {}
    assert comp.mine_counts() == {0, 1, 2, 3}
    assert not enumerate_solutions(system, max_nodes=1)


def test_solution_budget_abandons_component():
    system = _system(["...", "24.", "1FF"], 4)

    comp = enumerate_component(system, system.components()[0], 2, max_solutions=2)

    assert comp.exhausted


@pytest.mark.parametrize("seed", range(6))
def test_enumeration_is_sound_on_random_positions(seed):
    rng = random.Random(seed)
    mines = place_mines(9, 9, 10, 4, 4, 1, rng)
    board = Board.from_mines(9, 9, mines)
    view = View.hidden(9, 9)
    view.reveal(board, 4, 4)
    safe = [i for i in range(81) if not mines[i]]
    for cell in rng.sample(safe, 3):
        view.reveal(board, *divmod(cell, 9))

    deduction = enumerate_solutions(
        ConstraintSystem.from_view(view, board.mine_count), max_nodes=50_000
    )

    for cell in deduction.safe:
        assert not board.mines[cell]
    for cell in deduction.mine:
        assert board.mines[cell]
