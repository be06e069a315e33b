import pytest

from noguess.board import HIDDEN, View
from noguess.errors import InconsistentViewError
from noguess.frontier import ConstraintSystem, Deduction


def test_one_two_one_constraint_system():
    system = ConstraintSystem.from_view(View.from_layout(["...", "121"]), 2)

    assert system.frontier == [0, 2, 4]
    assert system.interior == []
    assert system.remaining_mines == 2
    assert [(c.cell, c.effective, c.hidden) for c in system.clues] == [
        (1, 1, (0, 2)),
        (3, 2, (0, 2, 4)),
        (5, 1, (2, 4)),
    ]
    assert system.components() == [[0, 1, 2]]


def test_components_split_on_unshared_cells():
    system = ConstraintSystem.from_view(View.from_layout([".1..1."]), 2)

    assert system.frontier == [0, 2, 3, 5]
    assert system.components() == [[0, 1], [2, 3]]
    assert [c.cell for c in system.clues_within([0, 1])] == [1]
    assert system.clues_within([1, 2]) == []


def test_interior_cells_are_not_on_the_frontier():
    system = ConstraintSystem.from_view(View.from_layout([".1..1.."]), 2)
    assert system.interior == [6]


def test_exploded_cells_count_as_known_mines():
    system = ConstraintSystem.from_view(View.from_layout(["X..", "121"]), 2)

    assert system.flag_count == 1
    assert system.remaining_mines == 1
    assert system.frontier == [2, 4]
    assert system.clues[0].effective == 0


def test_overfull_clue_is_inconsistent():
    with pytest.raises(InconsistentViewError):
        ConstraintSystem.from_view(View.from_layout(["...", "141"]), 2)


def test_too_many_flags_for_a_clue_is_inconsistent():
    with pytest.raises(InconsistentViewError):
        ConstraintSystem.from_view(View.from_layout(["FF.", "1.."]), 2)


def test_flagged_and_revealed_cell_is_inconsistent():
    visible = [HIDDEN, 1, HIDDEN, 2, HIDDEN, 1]
    flags = [0, 1, 0, 0, 0, 0]
    with pytest.raises(InconsistentViewError):
        ConstraintSystem(3, 2, visible, flags, 2)


def test_mine_count_must_fit_hidden_cells():
    with pytest.raises(InconsistentViewError):
        ConstraintSystem.from_view(View.from_layout(["...", "121"]), 5)


def test_deduction_rejects_contradictions():
    deduction = Deduction(safe=[1], mine=[2])
    assert deduction.add_safe(3)
    assert not deduction.add_safe(3)
    with pytest.raises(InconsistentViewError):
        deduction.add_mine(1)
    with pytest.raises(InconsistentViewError):
        deduction.update(Deduction(safe=[2]))


def test_deduction_equality_and_coords():
    deduction = Deduction(safe=[2], mine=[0, 4])
    assert deduction == Deduction(safe=[2], mine=[4, 0])
    assert len(deduction) == 3
    assert not Deduction()
    assert deduction.as_coords(2) == ([(1, 0)], [(0, 0), (2, 0)])
