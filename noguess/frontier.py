"""Constraint system derived from a view: frontier, clues, components, deductions."""

from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .board import EXPLODED, HIDDEN
from .errors import InconsistentViewError
from .utils import cell_coords, get_neighborhoods


class Deduction:
    """Cells proven safe and cells proven to be mines."""

    __slots__ = ("safe", "mine")

    def __init__(
        self,
        safe: Optional[Iterable[int]] = None,
        mine: Optional[Iterable[int]] = None,
    ) -> None:
        self.safe: Set[int] = set()
        self.mine: Set[int] = set()
        for cell in safe or ():
            self.add_safe(cell)
        for cell in mine or ():
            self.add_mine(cell)

    def add_safe(self, cell: int) -> bool:
        """Record a safe cell; return True if it was new."""
        if cell in self.mine:
            raise InconsistentViewError(f"Cell {cell} deduced both safe and mine.")
        if cell in self.safe:
            return False
        self.safe.add(cell)
        return True

    def add_mine(self, cell: int) -> bool:
        """Record a mine cell; return True if it was new."""
        if cell in self.safe:
            raise InconsistentViewError(f"Cell {cell} deduced both safe and mine.")
        if cell in self.mine:
            return False
        self.mine.add(cell)
        return True

    def update(self, other: "Deduction") -> bool:
        """Merge another deduction in; return True if anything was new."""
        changed = False
        for cell in other.safe:
            changed |= self.add_safe(cell)
        for cell in other.mine:
            changed |= self.add_mine(cell)
        return changed

    def __bool__(self) -> bool:
        return bool(self.safe or self.mine)

    def __len__(self) -> int:
        return len(self.safe) + len(self.mine)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Deduction):
            return NotImplemented
        return self.safe == other.safe and self.mine == other.mine

    def __repr__(self) -> str:
        return f"Deduction(safe={sorted(self.safe)}, mine={sorted(self.mine)})"

    def as_coords(self, height: int) -> Tuple[List[Tuple[int, int]], List[Tuple[int, int]]]:
        """Return (safe, mine) as sorted lists of (x, y)."""
        return (
            sorted(cell_coords(c, height) for c in self.safe),
            sorted(cell_coords(c, height) for c in self.mine),
        )


class Clue:
    """A revealed number with at least one hidden, unflagged neighbour."""

    __slots__ = ("cell", "effective", "hidden", "columns")

    def __init__(
        self,
        cell: int,
        effective: int,
        hidden: Tuple[int, ...],
        columns: Tuple[int, ...],
    ) -> None:
        self.cell = cell
        self.effective = effective
        self.hidden = hidden
        self.columns = columns

    def __repr__(self) -> str:
        return f"Clue(cell={self.cell}, effective={self.effective}, hidden={self.hidden})"


class ConstraintSystem:
    """
    Snapshot of the constraints a view imposes on its hidden cells.

    The frontier is the ordered list of hidden, unflagged cells adjacent to a
    revealed number; every other hidden, unflagged cell is interior. Each
    clue refers to its hidden neighbours both by flat cell index and by
    position ("column") in the frontier.
    """

    def __init__(
        self,
        width: int,
        height: int,
        visible: Sequence[int],
        flags: Sequence[int],
        mine_count: int,
    ) -> None:
        """
        Derive the constraint system of a view.

        Raises:
            InconsistentViewError: If a clue cannot be satisfied by its flags
                and hidden neighbours, a cell is both flagged and revealed,
                or the flags disagree with the total mine count.
        """
        self.width: int = width
        self.height: int = height
        self.neighborhoods = get_neighborhoods(width, height)

        hidden_cells: List[int] = []
        flag_count = 0
        raw_clues: List[Tuple[int, int, Tuple[int, ...]]] = []
        on_frontier: Set[int] = set()

        for cell in range(width * height):
            value = int(visible[cell])
            if flags[cell]:
                if value != HIDDEN:
                    raise InconsistentViewError(f"Cell {cell} is flagged and revealed.")
                flag_count += 1
                continue
            if value == HIDDEN:
                hidden_cells.append(cell)
                continue
            if value == EXPLODED:
                # An exploded cell is a known mine, like a flag
                flag_count += 1
                continue

            flagged = 0
            hidden: List[int] = []
            for n in self.neighborhoods[cell]:
                if flags[n] or int(visible[n]) == EXPLODED:
                    flagged += 1
                elif int(visible[n]) == HIDDEN:
                    hidden.append(n)

            effective = value - flagged
            if effective < 0 or effective > len(hidden):
                raise InconsistentViewError(
                    f"Clue at {cell_coords(cell, height)} cannot be satisfied."
                )
            if hidden:
                raw_clues.append((cell, effective, tuple(hidden)))
                on_frontier.update(hidden)

        self.flag_count: int = flag_count
        self.mine_count: int = mine_count
        self.remaining_mines: int = mine_count - flag_count
        self.hidden_cells: List[int] = hidden_cells

        if self.remaining_mines < 0 or self.remaining_mines > len(hidden_cells):
            raise InconsistentViewError("Flags disagree with the total mine count.")

        self.frontier: List[int] = sorted(on_frontier)
        self.position: Dict[int, int] = {c: i for i, c in enumerate(self.frontier)}
        self.interior: List[int] = [c for c in hidden_cells if c not in self.position]

        self.clues: List[Clue] = []
        self.cell_clues: List[List[int]] = [[] for _ in self.frontier]
        for cell, effective, hidden in raw_clues:
            columns = tuple(self.position[h] for h in hidden)
            clue_id = len(self.clues)
            self.clues.append(Clue(cell, effective, hidden, columns))
            for col in columns:
                self.cell_clues[col].append(clue_id)

    @classmethod
    def from_view(cls, view, mine_count: int) -> "ConstraintSystem":
        return cls(view.width, view.height, view.visible, view.flags, mine_count)

    def components(self) -> List[List[int]]:
        """
        Partition the frontier into connected components.

        Two frontier cells are connected when they share a clue. Each
        component is a list of frontier positions in BFS order, and
        components are ordered by their first frontier position.
        """
        seen = [False] * len(self.frontier)
        components: List[List[int]] = []

        for start in range(len(self.frontier)):
            if seen[start]:
                continue
            seen[start] = True
            queue: Deque[int] = deque([start])
            component: List[int] = []

            while queue:
                col = queue.popleft()
                component.append(col)
                for clue_id in self.cell_clues[col]:
                    for other in self.clues[clue_id].columns:
                        if not seen[other]:
                            seen[other] = True
                            queue.append(other)

            components.append(component)

        return components

    def clues_within(self, columns: Iterable[int]) -> List[Clue]:
        """Clues whose hidden neighbours all lie inside ``columns``."""
        inside = set(columns)
        seen: Set[int] = set()
        result: List[Clue] = []
        for col in inside:
            for clue_id in self.cell_clues[col]:
                if clue_id in seen:
                    continue
                seen.add(clue_id)
                clue = self.clues[clue_id]
                if all(c in inside for c in clue.columns):
                    result.append(clue)
        result.sort(key=lambda c: c.cell)
        return result
