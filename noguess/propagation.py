"""Local constraint propagation: arithmetic rule, subset rule, global mine count."""

from typing import Dict, List, Set, Tuple, Union, cast

from .errors import InconsistentViewError
from .frontier import ConstraintSystem, Deduction

# Live clue entry: [set_of_unresolved_hidden_cells, mines_remaining_among_them]
LiveClue = List[Union[Set[int], int]]


def _live_clues(system: ConstraintSystem) -> List[LiveClue]:
    return [[set(clue.hidden), clue.effective] for clue in system.clues]


def _settle(live: List[LiveClue], step: Deduction) -> List[LiveClue]:
    """Remove newly resolved cells from every live clue, dropping exhausted ones."""
    settled: List[LiveClue] = []
    for entry in live:
        hidden = cast(Set[int], entry[0])
        remaining = cast(int, entry[1])

        if not hidden.isdisjoint(step.mine):
            mines_here = hidden & step.mine
            remaining -= len(mines_here)
            hidden -= mines_here
        if not hidden.isdisjoint(step.safe):
            hidden -= step.safe

        if remaining < 0 or remaining > len(hidden):
            raise InconsistentViewError("Propagation reached an unsatisfiable clue.")
        if hidden:
            settled.append([hidden, remaining])
    return settled


def _sweep_arithmetic(live: List[LiveClue]) -> Deduction:
    step = Deduction()
    for entry in live:
        hidden = cast(Set[int], entry[0])
        remaining = cast(int, entry[1])
        if remaining == 0:
            for cell in hidden:
                step.add_safe(cell)
        elif remaining == len(hidden):
            for cell in hidden:
                step.add_mine(cell)
    return step


def _sweep_subset(live: List[LiveClue]) -> Deduction:
    """
    Compare every pair of clues sharing a hidden cell.

    When the hidden set of A is a strict subset of the hidden set of B, the
    cells of B outside A hold exactly ``remaining_B - remaining_A`` mines.
    """
    step = Deduction()

    cell_to_clues: Dict[int, List[int]] = {}
    for idx, entry in enumerate(live):
        for cell in cast(Set[int], entry[0]):
            cell_to_clues.setdefault(cell, []).append(idx)

    seen_pairs: Set[Tuple[int, int]] = set()
    for a, entry_a in enumerate(live):
        hidden_a = cast(Set[int], entry_a[0])
        for cell in hidden_a:
            for b in cell_to_clues[cell]:
                if b == a:
                    continue
                pair = (a, b) if a < b else (b, a)
                if pair in seen_pairs:
                    continue
                seen_pairs.add(pair)

                hidden_b = cast(Set[int], live[b][0])
                if len(hidden_a) < len(hidden_b):
                    small, big, rs, rb = hidden_a, hidden_b, entry_a[1], live[b][1]
                elif len(hidden_b) < len(hidden_a):
                    small, big, rs, rb = hidden_b, hidden_a, live[b][1], entry_a[1]
                else:
                    continue
                if not small <= big:
                    continue

                diff = big - small
                diff_mines = cast(int, rb) - cast(int, rs)
                if diff_mines < 0 or diff_mines > len(diff):
                    raise InconsistentViewError("Nested clues disagree.")
                if diff_mines == 0:
                    for d in diff:
                        step.add_safe(d)
                elif diff_mines == len(diff):
                    for d in diff:
                        step.add_mine(d)
    return step


def _global_count(
    system: ConstraintSystem, known: Deduction
) -> Deduction:
    step = Deduction()
    unknown = [c for c in system.hidden_cells if c not in known.safe and c not in known.mine]
    if not unknown:
        return step

    remaining = system.remaining_mines - len(known.mine)
    if remaining < 0 or remaining > len(unknown):
        raise InconsistentViewError("Deductions disagree with the total mine count.")
    if remaining == 0:
        for cell in unknown:
            step.add_safe(cell)
    elif remaining == len(unknown):
        for cell in unknown:
            step.add_mine(cell)
    return step


def apply_arithmetic_rule(system: ConstraintSystem) -> Deduction:
    """One sweep of the single-clue rule: 0 left means safe, all left means mines."""
    return _sweep_arithmetic(_live_clues(system))


def apply_subset_rule(system: ConstraintSystem) -> Deduction:
    """One sweep of the pairwise subset rule over overlapping clues."""
    return _sweep_subset(_live_clues(system))


def apply_global_count_rule(system: ConstraintSystem) -> Deduction:
    """Resolve every hidden cell when no mines, or only mines, remain."""
    return _global_count(system, Deduction())


def propagate(system: ConstraintSystem) -> Deduction:
    """
    Apply the local rules until a full sweep adds nothing.

    The arithmetic rule runs first; the subset rule only when it stalls and
    the global mine count only when both stall. Every new deduction is fed
    back into the clues and the sweep restarts from the arithmetic rule.

    Raises:
        InconsistentViewError: If the clues contradict each other.
    """
    live = _live_clues(system)
    deduction = Deduction()

    while True:
        step = _sweep_arithmetic(live)
        if not step:
            step = _sweep_subset(live)
        if not step:
            step = _global_count(system, deduction)
        if not step:
            return deduction

        deduction.update(step)
        live = _settle(live, step)
