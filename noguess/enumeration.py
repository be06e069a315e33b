"""Exhaustive enumeration of frontier assignments under the global mine budget."""

import logging
from typing import Dict, Iterable, List, Set

from .config import MAX_SEARCH_NODES, MAX_SOLUTIONS
from .errors import EnumerationBudgetExceeded, InconsistentViewError
from .frontier import ConstraintSystem, Deduction

logger = logging.getLogger(__name__)


class ComponentSolutions:
    """
    Solutions of one connected component, bucketed by mine count.

    ``by_count[k] = [solutions, ever_mine_mask, ever_safe_mask]`` where bit
    ``i`` of a mask refers to ``columns[i]``.
    """

    def __init__(self, columns: List[int]) -> None:
        self.columns: List[int] = columns
        self.by_count: Dict[int, List[int]] = {}
        self.solution_count: int = 0
        self.exhausted: bool = False

    def mine_counts(self) -> Set[int]:
        if self.exhausted:
            return set(range(len(self.columns) + 1))
        return set(self.by_count)


def enumerate_component(
    system: ConstraintSystem,
    component: Iterable[int],
    mine_limit: int,
    *,
    max_solutions: int = MAX_SOLUTIONS,
    max_nodes: int = MAX_SEARCH_NODES,
) -> ComponentSolutions:
    """
    Enumerate every 0/1 assignment of a component consistent with its clues.

    Variables are visited most-constrained first. After each tentative
    assignment every clue of the variable is checked: too many mines, or too
    few unassigned cells left to reach its value, prunes the branch.

    Args:
        system: The constraint system the component belongs to.
        component: Frontier positions forming one connected component.
        mine_limit: No assignment may use more mines than this.
        max_solutions: Budget of recorded solutions.
        max_nodes: Budget of DFS nodes.

    Returns:
        The solutions; ``exhausted`` is set when a budget was hit.
    """
    order = sorted(component, key=lambda col: (-len(system.cell_clues[col]), col))
    result = ComponentSolutions(order)
    n = len(order)
    full = (1 << n) - 1

    clue_ids = sorted({cid for col in order for cid in system.cell_clues[col]})
    slot = {cid: i for i, cid in enumerate(clue_ids)}
    need = [system.clues[cid].effective for cid in clue_ids]
    unassigned = [len(system.clues[cid].columns) for cid in clue_ids]
    assigned = [0] * len(clue_ids)
    clues_of = [[slot[cid] for cid in system.cell_clues[col]] for col in order]

    nodes = 0

    def record(mask: int, mines: int) -> None:
        bucket = result.by_count.get(mines)
        if bucket is None:
            bucket = result.by_count[mines] = [0, 0, 0]
        bucket[0] += 1
        bucket[1] |= mask
        bucket[2] |= ~mask & full
        result.solution_count += 1
        if result.solution_count > max_solutions:
            raise EnumerationBudgetExceeded("solution budget")

    def dfs(i: int, mask: int, mines: int) -> None:
        nonlocal nodes
        nodes += 1
        if nodes > max_nodes:
            raise EnumerationBudgetExceeded("node budget")

        if i == n:
            record(mask, mines)
            return

        var_clues = clues_of[i]
        for value in (0, 1):
            if value and mines >= mine_limit:
                continue

            touched = 0
            ok = True
            for c in var_clues:
                unassigned[c] -= 1
                assigned[c] += value
                touched += 1
                if assigned[c] > need[c] or assigned[c] + unassigned[c] < need[c]:
                    ok = False
                    break

            if ok:
                dfs(i + 1, mask | (value << i), mines + value)

            for c in var_clues[:touched]:
                unassigned[c] += 1
                assigned[c] -= value

    try:
        dfs(0, 0, 0)
    except EnumerationBudgetExceeded as exc:
        logger.debug("Enumeration of %d cells abandoned (%s)", n, exc)
        result.exhausted = True
        result.by_count.clear()

    return result


def _combine(a: Set[int], b: Set[int]) -> Set[int]:
    return {x + y for x in a for y in b}


def enumerate_solutions(
    system: ConstraintSystem,
    *,
    max_solutions: int = MAX_SOLUTIONS,
    max_nodes: int = MAX_SEARCH_NODES,
) -> Deduction:
    """
    Deduce cells that take the same value in every consistent assignment.

    Each component is enumerated on its own; the global mine budget then
    keeps only the mine counts for which the other components and the
    interior cells can absorb the remaining mines. A cell that is safe (or a
    mine) in every surviving solution is forced. When every surviving
    combination leaves no mine for the interior, interior cells are safe;
    when it always fills the interior, they are all mines.

    A component that exceeds its budget contributes no deductions and is
    assumed to hold any number of mines, which only widens the solution set.

    Raises:
        InconsistentViewError: If no assignment satisfies the clues and the
            mine budget.
    """
    remaining = system.remaining_mines
    interior = len(system.interior)
    deduction = Deduction()

    solved: List[ComponentSolutions] = []
    for component in system.components():
        comp = enumerate_component(
            system,
            component,
            remaining,
            max_solutions=max_solutions,
            max_nodes=max_nodes,
        )
        if not comp.exhausted and not comp.by_count:
            raise InconsistentViewError("A frontier component has no solution.")
        solved.append(comp)

    counts = [comp.mine_counts() for comp in solved]
    prefix: List[Set[int]] = [{0}]
    for c in counts:
        prefix.append(_combine(prefix[-1], c))
    suffix: List[Set[int]] = [{0}]
    for c in reversed(counts):
        suffix.append(_combine(suffix[-1], c))
    suffix.reverse()

    interior_options = {remaining - t for t in prefix[-1] if 0 <= remaining - t <= interior}
    if not interior_options:
        raise InconsistentViewError("No assignment fits the global mine count.")

    for i, comp in enumerate(solved):
        if comp.exhausted:
            continue

        others = _combine(prefix[i], suffix[i + 1])
        ever_mine = 0
        ever_safe = 0
        for k, (_, mine_mask, safe_mask) in comp.by_count.items():
            if any(0 <= remaining - k - s <= interior for s in others):
                ever_mine |= mine_mask
                ever_safe |= safe_mask

        for bit, col in enumerate(comp.columns):
            is_mine_somewhere = (ever_mine >> bit) & 1
            is_safe_somewhere = (ever_safe >> bit) & 1
            if not is_mine_somewhere:
                deduction.add_safe(system.frontier[col])
            elif not is_safe_somewhere:
                deduction.add_mine(system.frontier[col])

    if interior:
        if interior_options == {0}:
            for cell in system.interior:
                deduction.add_safe(cell)
        elif interior_options == {interior}:
            for cell in system.interior:
                deduction.add_mine(cell)

    return deduction
