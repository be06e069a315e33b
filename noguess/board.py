"""Board and view containers, clue numbers and flood-fill reveals."""

from typing import Iterable, List, MutableSequence, Sequence, Tuple

import numpy as np

from .utils import cell_coords, get_neighborhoods

HIDDEN = -1
EXPLODED = 9
MINE = -1


def calculate_numbers(width: int, height: int, mines: Iterable[int]) -> np.ndarray:
    """
    Compute the clue number of every cell.

    Args:
        width: Board width (number of columns).
        height: Board height (number of rows).
        mines: Flat column-major mine mask of length ``width * height``.

    Returns:
        A flat ``int8`` array where mine cells hold -1 and every other cell
        holds the number of mines among its 8 neighbours.

    Raises:
        ValueError: If the mask length does not match the dimensions.
    """
    mask = mines if isinstance(mines, np.ndarray) else np.array(list(mines))
    if mask.size != width * height:
        raise ValueError("mines must hold width * height cells.")

    grid = mask.astype(bool).reshape(width, height)
    padded = np.pad(grid.astype(np.int8), 1)

    counts = np.zeros((width, height), dtype=np.int8)
    for dx in (-1, 0, 1):
        for dy in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            counts += padded[1 + dx:1 + dx + width, 1 + dy:1 + dy + height]

    counts[grid] = MINE
    return counts.reshape(-1)


def flood_reveal(
    numbers: Sequence[int],
    visible: MutableSequence[int],
    flags: Sequence[int],
    start: int,
    neighborhoods: Sequence[Sequence[int]],
) -> List[int]:
    """
    Reveal a region starting at ``start`` using Minesweeper flood fill rules.

    Hidden, unflagged cells are opened; every opened 0 opens its neighbours
    too. Opening a mine marks it exploded and stops there.

    Returns:
        Flat indices of the newly revealed cells, in reveal order.
    """
    stack: List[int] = [start]
    revealed: List[int] = []

    while stack:
        cell = stack.pop()
        if visible[cell] != HIDDEN or flags[cell]:
            continue

        value = int(numbers[cell])
        if value == MINE:
            visible[cell] = EXPLODED
            revealed.append(cell)
            continue

        visible[cell] = value
        revealed.append(cell)

        if value == 0:
            for n in neighborhoods[cell]:
                if visible[n] == HIDDEN and not flags[n]:
                    stack.append(n)

    return revealed


class Board:
    """Immutable mine layout plus its clue numbers, stored column-major."""

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def __init__(
        self,
        width: int,
        height: int,
        mines: Iterable[int],
        numbers: Iterable[int],
    ) -> None:
        """
        Wrap existing mine and number buffers.

        Args:
            width: Board width, must be > 0.
            height: Board height, must be > 0.
            mines: Flat mine mask (non-zero = mine), ``index = x * height + y``.
            numbers: Flat clue numbers with -1 on mines.

        Raises:
            ValueError: If dimensions are invalid or buffer sizes disagree.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")

        self.width: int = width
        self.height: int = height
        self.mines: np.ndarray = np.array(list(mines), dtype=np.uint8).reshape(-1)
        self.numbers: np.ndarray = np.array(list(numbers), dtype=np.int8).reshape(-1)

        if self.mines.size != width * height or self.numbers.size != width * height:
            raise ValueError("mines and numbers must hold width * height cells.")

        self.mines.setflags(write=False)
        self.numbers.setflags(write=False)

    @classmethod
    def from_mines(cls, width: int, height: int, mines: Iterable[int]) -> "Board":
        """Build a board from a flat mine mask, computing its numbers."""
        mask = np.array(list(mines), dtype=np.uint8)
        return cls(width, height, mask, calculate_numbers(width, height, mask))

    @classmethod
    def from_layout(cls, rows: Sequence[str]) -> "Board":
        """
        Build a board from an ASCII picture.

        Each string is one row (``y``), each character one column (``x``);
        ``*`` marks a mine, any other character a safe cell.
        """
        height = len(rows)
        width = len(rows[0]) if rows else 0
        if any(len(row) != width for row in rows):
            raise ValueError("All layout rows must have the same length.")

        mask = [0] * (width * height)
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                if ch == "*":
                    mask[x * height + y] = 1
        return cls.from_mines(width, height, mask)

    @property
    def mine_count(self) -> int:
        return int(self.mines.sum())

    def is_mine(self, x: int, y: int) -> bool:
        return bool(self.mines[x * self.height + y])

    def number(self, x: int, y: int) -> int:
        return int(self.numbers[x * self.height + y])

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return the flat (numbers, mines) buffers."""
        return self.numbers, self.mines

    def mine_cells(self) -> List[Tuple[int, int]]:
        return [cell_coords(int(i), self.height) for i in np.flatnonzero(self.mines)]

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def format_board(self, color: bool = True) -> str:
        """Render the full board (mines and numbers) as a multi-line string."""
        w, h = self.width, self.height

        def cell_str(x: int, y: int) -> str:
            v = int(self.numbers[x * h + y])
            if v == MINE:
                return self._m("*") if color else "*"
            return str(v)

        def coord(s: str) -> str:
            return self._c(s) if color else s

        out = [coord("   ") + coord(" ".join(f"{x:2d}" for x in range(w)))]
        out.append(coord("   " + "-" * (3 * w - 1)))
        for y in range(h):
            row_cells = " ".join(f" {cell_str(x, y)}" for x in range(w))
            out.append(coord(f"{y:2d} ") + coord("|") + row_cells)
        return "\n".join(out)


class View:
    """What a player sees: revealed numbers, hidden cells and flags."""

    def __init__(
        self,
        width: int,
        height: int,
        visible: Iterable[int],
        flags: Iterable[int],
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")

        self.width: int = width
        self.height: int = height
        self.visible: np.ndarray = np.array(list(visible), dtype=np.int8).reshape(-1)
        self.flags: np.ndarray = np.array(list(flags), dtype=np.uint8).reshape(-1)

        if self.visible.size != width * height or self.flags.size != width * height:
            raise ValueError("visible and flags must hold width * height cells.")

    @classmethod
    def hidden(cls, width: int, height: int) -> "View":
        """A view with every cell hidden and unflagged."""
        total = width * height
        return cls(width, height, [HIDDEN] * total, [0] * total)

    @classmethod
    def from_layout(cls, rows: Sequence[str]) -> "View":
        """
        Build a view from an ASCII picture.

        ``0``-``8`` are revealed numbers, ``F`` a flagged hidden cell, ``X`` an
        exploded mine and any other character a hidden cell.
        """
        height = len(rows)
        width = len(rows[0]) if rows else 0
        visible = [HIDDEN] * (width * height)
        flags = [0] * (width * height)
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                i = x * height + y
                if ch.isdigit():
                    visible[i] = int(ch)
                elif ch == "F":
                    flags[i] = 1
                elif ch == "X":
                    visible[i] = EXPLODED
        return cls(width, height, visible, flags)

    def is_hidden(self, x: int, y: int) -> bool:
        return int(self.visible[x * self.height + y]) == HIDDEN

    def is_flagged(self, x: int, y: int) -> bool:
        return bool(self.flags[x * self.height + y])

    def value(self, x: int, y: int) -> int:
        return int(self.visible[x * self.height + y])

    def reveal(self, board: Board, x: int, y: int) -> List[Tuple[int, int]]:
        """Open (x, y) on ``board`` with flood fill; return the newly revealed cells."""
        neighborhoods = get_neighborhoods(self.width, self.height)
        opened = flood_reveal(
            board.numbers, self.visible, self.flags, x * self.height + y, neighborhoods
        )
        return [cell_coords(i, self.height) for i in opened]

    def toggle_flag(self, x: int, y: int) -> None:
        """Flag or unflag a hidden cell; revealed cells are left alone."""
        i = x * self.height + y
        if int(self.visible[i]) == HIDDEN:
            self.flags[i] = 0 if self.flags[i] else 1

    def revealed_count(self) -> int:
        return int(np.count_nonzero((self.visible >= 0) & (self.visible <= 8)))

    def format_view(self) -> str:
        """Render as rows of characters: numbers, ``.`` hidden, ``F`` flag, ``X`` exploded."""
        lines: List[str] = []
        for y in range(self.height):
            chars: List[str] = []
            for x in range(self.width):
                i = x * self.height + y
                v = int(self.visible[i])
                if self.flags[i]:
                    chars.append("F")
                elif v == HIDDEN:
                    chars.append(".")
                elif v == EXPLODED:
                    chars.append("X")
                else:
                    chars.append(str(v))
            lines.append("".join(chars))
        return "\n".join(lines)
