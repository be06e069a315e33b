"""
Linear-system deductions over the frontier.

Each clue is an equation ``sum(x_j for hidden neighbours j) = effective``
with every ``x_j`` in {0, 1}. After reduction to row-echelon form, a row
whose target equals the smallest (or largest) value its coefficients can
reach pins every one of its variables.
"""

import logging
from typing import List, Sequence

import numpy as np

from .config import MATCH_EPS, PIVOT_EPS, WINDOW_SIZE
from .errors import InconsistentViewError
from .frontier import ConstraintSystem, Deduction
from .utils import cell_coords

logger = logging.getLogger(__name__)


def compute_rref(matrix: np.ndarray, pivot_eps: float = PIVOT_EPS) -> np.ndarray:
    """
    Reduce an augmented matrix to reduced row-echelon form in place.

    Uses partial pivoting: for each column the row with the largest absolute
    coefficient becomes the pivot, and columns whose best pivot is below
    ``pivot_eps`` are skipped.

    Args:
        matrix: ``M x (N + 1)`` float array, last column is the target.
        pivot_eps: Smallest magnitude accepted as a pivot.

    Returns:
        The same array, reduced.
    """
    rows, cols = matrix.shape
    n = cols - 1
    r = 0

    for lead in range(n):
        if r >= rows:
            break

        pivot = r + int(np.argmax(np.abs(matrix[r:, lead])))
        if abs(matrix[pivot, lead]) < pivot_eps:
            continue

        if pivot != r:
            matrix[[r, pivot]] = matrix[[pivot, r]]

        matrix[r] /= matrix[r, lead]

        factors = matrix[:, lead].copy()
        factors[r] = 0.0
        mask = np.abs(factors) > pivot_eps
        if mask.any():
            matrix[mask] -= np.outer(factors[mask], matrix[r])

        r += 1

    return matrix


def interpret_rows(
    matrix: np.ndarray,
    cells: Sequence[int],
    match_eps: float = MATCH_EPS,
) -> Deduction:
    """
    Extract forced values from a reduced matrix.

    For each row, ``min_sum`` adds the negative coefficients and ``max_sum``
    the positive ones. A target equal to ``min_sum`` forces negative
    coefficients to mines and positive ones to safe cells; a target equal to
    ``max_sum`` forces the opposite.

    Raises:
        InconsistentViewError: If a row reads ``0 = k`` with ``k != 0`` or its
            target lies outside ``[min_sum, max_sum]``.
    """
    deduction = Deduction()
    coefficients = matrix[:, :-1]
    targets = matrix[:, -1]

    for row, target in zip(coefficients, targets):
        nonzero = np.flatnonzero(np.abs(row) > match_eps)
        if nonzero.size == 0:
            if abs(target) > match_eps:
                raise InconsistentViewError("Linear system reduces to 0 = k.")
            continue

        values = row[nonzero]
        min_sum = float(values[values < 0].sum())
        max_sum = float(values[values > 0].sum())

        if target < min_sum - match_eps or target > max_sum + match_eps:
            raise InconsistentViewError("Linear row target is out of reach.")

        if abs(target - min_sum) < match_eps:
            for j, c in zip(nonzero, values):
                if c < 0:
                    deduction.add_mine(cells[j])
                else:
                    deduction.add_safe(cells[j])
        elif abs(target - max_sum) < match_eps:
            for j, c in zip(nonzero, values):
                if c > 0:
                    deduction.add_mine(cells[j])
                else:
                    deduction.add_safe(cells[j])

    return deduction


def solve_component(
    system: ConstraintSystem,
    columns: Sequence[int],
    *,
    pivot_eps: float = PIVOT_EPS,
    match_eps: float = MATCH_EPS,
) -> Deduction:
    """
    Solve the equations of one set of frontier columns.

    Only clues whose hidden neighbours all fall inside ``columns`` are used.
    """
    if not columns:
        return Deduction()

    local = {col: j for j, col in enumerate(columns)}
    clues = system.clues_within(columns)
    if not clues:
        return Deduction()

    n = len(columns)
    matrix = np.zeros((len(clues), n + 1), dtype=np.float64)
    for i, clue in enumerate(clues):
        for col in clue.columns:
            matrix[i, local[col]] = 1.0
        matrix[i, n] = clue.effective

    compute_rref(matrix, pivot_eps)
    cells = [system.frontier[col] for col in columns]
    return interpret_rows(matrix, cells, match_eps)


def _solve_windows(
    system: ConstraintSystem,
    component: List[int],
    window_size: int,
    pivot_eps: float,
    match_eps: float,
) -> Deduction:
    height = system.height

    def row_major(col: int):
        x, y = cell_coords(system.frontier[col], height)
        return (y, x)

    ordered = sorted(component, key=row_major)
    step = max(1, window_size // 2)
    deduction = Deduction()

    start = 0
    while start < len(ordered):
        window = ordered[start:start + window_size]
        deduction.update(
            solve_component(system, window, pivot_eps=pivot_eps, match_eps=match_eps)
        )
        if start + window_size >= len(ordered):
            break
        start += step

    return deduction


def solve_linear(
    system: ConstraintSystem,
    *,
    window_size: int = WINDOW_SIZE,
    pivot_eps: float = PIVOT_EPS,
    match_eps: float = MATCH_EPS,
) -> Deduction:
    """
    Run Gaussian elimination on every connected component of the frontier.

    Components larger than ``window_size`` are cut into overlapping windows
    (stride ``window_size // 2``) ordered row by row; window results are
    merged. Windowing drops the clues that straddle a window edge, so it can
    only miss deductions, never invent them.

    Raises:
        InconsistentViewError: If any component's equations are contradictory.
    """
    deduction = Deduction()

    for component in system.components():
        if len(component) > window_size:
            logger.debug(
                "Windowing component of %d cells (window %d)", len(component), window_size
            )
            deduction.update(
                _solve_windows(system, component, window_size, pivot_eps, match_eps)
            )
        else:
            deduction.update(
                solve_component(system, component, pivot_eps=pivot_eps, match_eps=match_eps)
            )

    return deduction
