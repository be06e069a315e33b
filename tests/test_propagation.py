import pytest

from noguess.board import View
from noguess.errors import InconsistentViewError
from noguess.frontier import ConstraintSystem, Deduction
from noguess.propagation import (
    apply_arithmetic_rule,
    apply_global_count_rule,
    apply_subset_rule,
    propagate,
)


def _system(rows, mine_count):
    return ConstraintSystem.from_view(View.from_layout(rows), mine_count)


def test_arithmetic_rule_marks_full_clue_as_mines():
    # Centre 3 whose only hidden neighbours are the top row
    system = _system(["...", "232", "000"], 3)

    deduction = apply_arithmetic_rule(system)

    assert deduction.as_coords(3) == ([], [(0, 0), (1, 0), (2, 0)])
    assert propagate(system) == deduction


def test_arithmetic_rule_marks_satisfied_clue_as_safe():
    system = _system(["F..", "1..", "..."], 1)

    deduction = apply_arithmetic_rule(system)

    assert deduction.as_coords(3) == ([(0, 2), (1, 0), (1, 1), (1, 2)], [])


def test_subset_rule_on_wall_pattern():
    # 1-1-1 along a wall: the outer clues are subsets of the middle one
    system = _system(["...", "111"], 1)

    assert not apply_arithmetic_rule(system)
    assert apply_subset_rule(system).as_coords(2) == ([(0, 0), (2, 0)], [])
    assert propagate(system).as_coords(2) == ([(0, 0), (2, 0)], [(1, 0)])


def test_subset_rule_leaves_symmetric_pair_open():
    # A=1 over {a, b}, B=2 over {a, b, c, d}: {c, d} holds one mine, nothing forced
    system = _system(["...", "24.", "1FF"], 4)

    assert not apply_subset_rule(system)
    assert not propagate(system)


def test_subset_rule_fires_once_one_of_the_pair_is_pinned():
    system = _system(["..F", "24.", "1FF"], 4)

    deduction = propagate(system)

    assert deduction.as_coords(3) == ([(2, 1)], [])


def test_one_two_one_is_resolved_by_nested_clues():
    system = _system(["...", "121"], 2)

    assert propagate(system).as_coords(2) == ([(1, 0)], [(0, 0), (2, 0)])


def test_global_count_rule():
    no_mines_left = _system(["F...", "1..."], 1)
    assert apply_global_count_rule(no_mines_left).as_coords(2) == (
        [(1, 0), (1, 1), (2, 0), (2, 1), (3, 0), (3, 1)],
        [],
    )

    only_mines_left = _system([".2.."], 3)
    assert apply_global_count_rule(only_mines_left) == Deduction(mine=[0, 2, 3])


def test_propagation_reaches_a_fixed_point():
    system = _system(["...", "111"], 1)
    first = propagate(system)
    assert propagate(system) == first


def test_contradicting_clues_raise():
    # A flag next to the 1 forces both ends safe, leaving the 2 unsatisfiable
    system = _system([".F.", "121"], 2)

    with pytest.raises(InconsistentViewError):
        propagate(system)
