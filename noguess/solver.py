"""No-guess solver driver: simulated play-through, solvability check and hints."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from .board import EXPLODED, HIDDEN, MINE, Board, View, flood_reveal
from .config import (
    HINT_ZERO_BONUS,
    MATCH_EPS,
    MAX_ENUMERATION_FRONTIER,
    MAX_SEARCH_NODES,
    MAX_SOLUTIONS,
    PIVOT_EPS,
    WINDOW_SIZE,
)
from .enumeration import enumerate_solutions
from .errors import InconsistentViewError
from .frontier import ConstraintSystem, Deduction
from .linear import solve_linear
from .propagation import propagate
from .utils import cell_coords, get_neighborhoods

logger = logging.getLogger(__name__)


class DriverState(Enum):
    READY = "ready"
    REVEALING = "revealing"
    DEDUCING = "deducing"
    SUCCESS = "success"
    UNSOLVABLE = "unsolvable"


@dataclass(frozen=True)
class Hint:
    """
    A safe cell worth revealing next.

    ``strategy`` names the technique that proved the cell safe and
    ``constraint_cells`` lists the revealed numbers around it. Hints compare
    by cell and score only.
    """

    x: int
    y: int
    score: int
    strategy: str = field(default="", compare=False)
    constraint_cells: Tuple[Tuple[int, int], ...] = field(default=(), compare=False)


Layer = Callable[[ConstraintSystem], Deduction]


def _build_layers(
    *,
    use_linear: bool,
    use_enumeration: bool,
    window_size: int,
    pivot_eps: float,
    match_eps: float,
    max_enumeration_frontier: int,
    max_solutions: int,
    max_nodes: int,
) -> List[Tuple[str, Layer]]:
    """Deduction techniques in escalation order, cheapest first."""
    layers: List[Tuple[str, Layer]] = [("propagation", propagate)]

    if use_linear:
        def linear(system: ConstraintSystem) -> Deduction:
            return solve_linear(
                system,
                window_size=window_size,
                pivot_eps=pivot_eps,
                match_eps=match_eps,
            )

        layers.append(("linear", linear))

    if use_enumeration:
        def enumerate_small(system: ConstraintSystem) -> Deduction:
            if len(system.frontier) > max_enumeration_frontier:
                return Deduction()
            return enumerate_solutions(
                system, max_solutions=max_solutions, max_nodes=max_nodes
            )

        layers.append(("enumeration", enumerate_small))

    return layers


class SolverDriver:
    """
    Plays a board from a first click using deduction only.

    The driver owns its own view of the board. It consults the mine layout
    only to learn the number a revealed cell shows; every decision comes from
    the revealed numbers and the flags it has placed.

    Each round escalates through the techniques:
    1. Propagation: arithmetic rule, subset rule, global mine count
    2. Linear: Gaussian elimination per frontier component
    3. Enumeration: exhaustive assignments with the global mine budget
    """

    def __init__(
        self,
        board: Board,
        *,
        use_linear: bool = True,
        use_enumeration: bool = True,
        window_size: int = WINDOW_SIZE,
        pivot_eps: float = PIVOT_EPS,
        match_eps: float = MATCH_EPS,
        max_enumeration_frontier: int = MAX_ENUMERATION_FRONTIER,
        max_solutions: int = MAX_SOLUTIONS,
        max_nodes: int = MAX_SEARCH_NODES,
        record_moves: bool = True,
    ) -> None:
        """
        Initialize a driver bound to a specific board.

        Args:
            board: The board to play.
            use_linear: Enable the Gaussian elimination layer.
            use_enumeration: Enable the backtracking enumerator.
            window_size: Largest component solved as a single linear system.
            pivot_eps: Smallest pivot accepted during row reduction.
            match_eps: Tolerance when matching a row target to its bounds.
            max_enumeration_frontier: Frontier size above which enumeration
                is skipped.
            max_solutions: Enumeration budget of solutions per component.
            max_nodes: Enumeration budget of search nodes per component.
            record_moves: If True, keep the sequence of reveals and flags.
                Set to False for benchmarks.
        """
        self.board = board
        self.width: int = board.width
        self.height: int = board.height
        self.record_moves = record_moves

        self._numbers: List[int] = board.numbers.tolist()
        self._neighborhoods = get_neighborhoods(self.width, self.height)
        self._layers = _build_layers(
            use_linear=use_linear,
            use_enumeration=use_enumeration,
            window_size=window_size,
            pivot_eps=pivot_eps,
            match_eps=match_eps,
            max_enumeration_frontier=max_enumeration_frontier,
            max_solutions=max_solutions,
            max_nodes=max_nodes,
        )

        total = self.width * self.height
        self.mine_count: int = board.mine_count
        self.safe_total: int = total - self.mine_count

        self.visible: List[int] = [HIDDEN] * total
        self.flags: List[int] = [0] * total
        self.revealed_count: int = 0
        self.flag_count: int = 0
        self.state: DriverState = DriverState.READY

        # Metrics / counters (for analysis)
        self.rounds: int = 0
        self.reveal_moves_count: int = 0
        self.max_frontier: int = 0
        self.inferred_counts: Dict[str, int] = {name: 0 for name, _ in self._layers}
        self.attempted_counts: Dict[str, int] = {name: 0 for name, _ in self._layers}
        self.moves_sequence: List[Tuple[int, int, str, str]] = []

    # -------------------------------------------------------------------------
    # Core functionality methods
    # -------------------------------------------------------------------------

    def reveal_cell(self, cell: int, method: str) -> List[int]:
        """Open a cell with flood fill and return the newly revealed indices."""
        opened = flood_reveal(
            self._numbers, self.visible, self.flags, cell, self._neighborhoods
        )
        self.reveal_moves_count += 1
        if self.record_moves:
            x, y = cell_coords(cell, self.height)
            self.moves_sequence.append((x, y, "S", method))

        for c in opened:
            if self.visible[c] == EXPLODED:
                raise InconsistentViewError(
                    f"Cell {cell_coords(c, self.height)} was opened on a mine."
                )
        self.revealed_count += len(opened)
        return opened

    def mark_cell(self, cell: int, method: str) -> None:
        """Flag a cell proven to be a mine."""
        if self.flags[cell]:
            return
        self.flags[cell] = 1
        self.flag_count += 1
        if self.record_moves:
            x, y = cell_coords(cell, self.height)
            self.moves_sequence.append((x, y, "M", method))

    def apply(self, deduction: Deduction, method: str) -> None:
        """Flag every proven mine, then reveal every proven safe cell."""
        self.state = DriverState.REVEALING
        self.inferred_counts[method] += len(deduction)

        for cell in sorted(deduction.mine):
            self.mark_cell(cell, method)
        for cell in sorted(deduction.safe):
            if self.visible[cell] == HIDDEN:
                self.reveal_cell(cell, method)

    def constraint_system(self) -> ConstraintSystem:
        return ConstraintSystem(
            self.width, self.height, self.visible, self.flags, self.mine_count
        )

    def deduction_round(self) -> bool:
        """
        Run one round of deductions and apply the result.

        Returns:
            True if at least one cell was resolved, False if every technique
            came up empty.
        """
        self.state = DriverState.DEDUCING
        self.rounds += 1

        system = self.constraint_system()
        self.max_frontier = max(self.max_frontier, len(system.frontier))

        for method, layer in self._layers:
            self.attempted_counts[method] += 1
            deduction = layer(system)
            if deduction:
                logger.debug(
                    "Round %d: %s found %d safe, %d mines",
                    self.rounds,
                    method,
                    len(deduction.safe),
                    len(deduction.mine),
                )
                self.apply(deduction, method)
                return True

        logger.debug(
            "Round %d: no progress with %d frontier cells", self.rounds, len(system.frontier)
        )
        return False

    # -------------------------------------------------------------------------
    # Main solving loop
    # -------------------------------------------------------------------------

    def solve(self, start_x: int, start_y: int) -> bool:
        """
        Play the board from (start_x, start_y) without guessing.

        Returns:
            True if every non-mine cell ends up revealed, False as soon as a
            round makes no progress or the position turns out inconsistent.

        Raises:
            ValueError: If the start is outside the board.
            RuntimeError: If the driver was already used.
        """
        if not (0 <= start_x < self.width and 0 <= start_y < self.height):
            raise ValueError("Start cell is outside the board.")
        if self.state is not DriverState.READY or self.rounds:
            raise RuntimeError("A SolverDriver can only solve once.")

        try:
            self.state = DriverState.REVEALING
            self.reveal_cell(start_x * self.height + start_y, "first_move")

            while self.revealed_count < self.safe_total:
                if not self.deduction_round():
                    self.state = DriverState.UNSOLVABLE
                    return False
                self.state = DriverState.READY
        except InconsistentViewError as exc:
            logger.warning("Solver stopped on an inconsistent position: %s", exc)
            self.state = DriverState.UNSOLVABLE
            return False

        self.state = DriverState.SUCCESS
        return True

    def view(self) -> View:
        """Snapshot of the driver's current view."""
        return View(self.width, self.height, self.visible, self.flags)

    def metrics(self) -> Dict[str, Any]:
        """Counters describing the play-through so far."""
        return {
            "state": self.state.value,
            "rounds": self.rounds,
            "reveal_moves_count": self.reveal_moves_count,
            "revealed_cells_count": self.revealed_count,
            "markings_count": self.flag_count,
            "max_frontier": self.max_frontier,
            "moves_sequence": self.moves_sequence,
            **{f"inferred_{k}_count": v for k, v in self.inferred_counts.items()},
            **{f"attempted_{k}_count": v for k, v in self.attempted_counts.items()},
        }


def is_solvable(board: Board, start_x: int, start_y: int, **options: Any) -> bool:
    """
    Check whether ``board`` can be cleared by deduction alone from a first click.

    Args:
        board: The board to check.
        start_x: X-coordinate of the first click.
        start_y: Y-coordinate of the first click.
        **options: Keyword overrides forwarded to SolverDriver.

    Returns:
        False for an out-of-bounds start, a mined start, or any position where
        deduction stalls; True otherwise.
    """
    if not (0 <= start_x < board.width and 0 <= start_y < board.height):
        return False
    if board.is_mine(start_x, start_y):
        return False

    options.setdefault("record_moves", False)
    return SolverDriver(board, **options).solve(start_x, start_y)


def _provable_safe_cells(
    board: Board,
    visible: List[int],
    flags: List[int],
    layers: List[Tuple[str, Layer]],
) -> Dict[int, str]:
    """
    Every safe cell the layers can prove from a view.

    Each pass runs all layers on the same position. Mines found in a pass
    become virtual flags and the passes repeat until no new mine appears.

    Returns:
        Mapping from flat cell index to the name of the first layer that
        proved it safe.

    Raises:
        InconsistentViewError: If the view admits no mine placement.
    """
    flags = list(flags)
    proven: Dict[int, str] = {}

    while True:
        system = ConstraintSystem(board.width, board.height, visible, flags, board.mine_count)

        new_mines: Set[int] = set()
        for method, layer in layers:
            deduction = layer(system)
            for cell in deduction.safe:
                proven.setdefault(cell, method)
            new_mines |= deduction.mine

        if not new_mines:
            return proven
        if not new_mines.isdisjoint(proven):
            raise InconsistentViewError("A cell was proven both safe and a mine.")
        for cell in new_mines:
            flags[cell] = 1


def get_hint(board: Board, view: View, **options: Any) -> Optional[Hint]:
    """
    Return the best safe cell currently provable in ``view``.

    Every enabled layer runs, so a high-scoring cell only enumeration can
    prove still competes with the cells propagation finds.

    Score: +10 if the cell's number is 0 (it will cascade), +1 per revealed
    neighbour. Ties go to the smallest (x, y).

    Returns:
        The hint, or None when nothing is provable or the view contradicts
        the board.
    """
    if (view.width, view.height) != (board.width, board.height):
        return None

    numbers: List[int] = board.numbers.tolist()
    visible: List[int] = view.visible.tolist()
    flags: List[int] = view.flags.tolist()

    for cell, value in enumerate(visible):
        if 0 <= value <= 8 and value != numbers[cell]:
            return None
        if value == EXPLODED and numbers[cell] != MINE:
            return None

    layers = _build_layers(
        use_linear=options.get("use_linear", True),
        use_enumeration=options.get("use_enumeration", True),
        window_size=options.get("window_size", WINDOW_SIZE),
        pivot_eps=options.get("pivot_eps", PIVOT_EPS),
        match_eps=options.get("match_eps", MATCH_EPS),
        max_enumeration_frontier=options.get(
            "max_enumeration_frontier", MAX_ENUMERATION_FRONTIER
        ),
        max_solutions=options.get("max_solutions", MAX_SOLUTIONS),
        max_nodes=options.get("max_nodes", MAX_SEARCH_NODES),
    )

    try:
        proven = _provable_safe_cells(board, visible, flags, layers)
    except InconsistentViewError as exc:
        logger.debug("No hint for an inconsistent view: %s", exc)
        return None

    neighborhoods = get_neighborhoods(board.width, board.height)
    best: Optional[Tuple[int, int, int, int]] = None
    for cell in proven:
        score = sum(1 for n in neighborhoods[cell] if 0 <= visible[n] <= 8)
        if numbers[cell] == 0:
            score += HINT_ZERO_BONUS
        x, y = cell_coords(cell, board.height)
        key = (-score, x, y, cell)
        if best is None or key < best:
            best = key

    if best is None:
        return None

    cell = best[3]
    clues = tuple(
        sorted(
            cell_coords(n, board.height)
            for n in neighborhoods[cell]
            if 0 <= visible[n] <= 8
        )
    )
    return Hint(
        x=best[1],
        y=best[2],
        score=-best[0],
        strategy=proven[cell],
        constraint_cells=clues,
    )
