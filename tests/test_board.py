import random

import numpy as np
import pytest

from noguess.board import EXPLODED, HIDDEN, Board, View, calculate_numbers, flood_reveal
from noguess.utils import cell_coords, cell_index, get_neighborhoods, neighbors, safe_zone


def _brute_force_numbers(width, height, mines):
    out = []
    for x in range(width):
        for y in range(height):
            if mines[x * height + y]:
                out.append(-1)
                continue
            count = 0
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    nx, ny = x + dx, y + dy
                    if (dx or dy) and 0 <= nx < width and 0 <= ny < height:
                        count += mines[nx * height + ny]
            out.append(count)
    return out


def test_cell_index_round_trip_is_column_major():
    assert cell_index(2, 1, 3) == 7
    assert cell_coords(7, 3) == (2, 1)


def test_neighbors_order_and_clipping():
    assert neighbors(1, 1, 3, 3) == (
        (0, 0), (0, 1), (0, 2), (1, 0), (1, 2), (2, 0), (2, 1), (2, 2)
    )
    assert neighbors(0, 0, 3, 3) == ((0, 1), (1, 0), (1, 1))


def test_neighborhoods_are_cached_per_dimension():
    first = get_neighborhoods(4, 5)
    assert get_neighborhoods(4, 5) is first
    assert get_neighborhoods(5, 4) is not first
    assert len(first) == 20


def test_neighborhoods_reject_empty_grid():
    with pytest.raises(ValueError):
        get_neighborhoods(0, 3)


def test_safe_zone_is_clipped_to_the_board():
    assert safe_zone(3, 3, 0, 0, 1) == {0, 1, 3, 4}
    assert len(safe_zone(9, 9, 4, 4, 1)) == 9
    assert safe_zone(9, 9, 4, 4, 0) == {4 * 9 + 4}


@pytest.mark.parametrize("seed", range(5))
def test_calculate_numbers_matches_neighbour_count(seed):
    rng = random.Random(seed)
    width, height = rng.randint(1, 12), rng.randint(1, 12)
    mines = [1 if rng.random() < 0.25 else 0 for _ in range(width * height)]

    numbers = calculate_numbers(width, height, mines)

    assert numbers.dtype == np.int8
    assert numbers.tolist() == _brute_force_numbers(width, height, mines)


def test_calculate_numbers_rejects_wrong_size():
    with pytest.raises(ValueError):
        calculate_numbers(3, 3, [0] * 8)


def test_board_from_layout():
    board = Board.from_layout(["*.*", "121"])
    assert (board.width, board.height) == (3, 2)
    assert board.mine_count == 2
    assert board.is_mine(0, 0) and board.is_mine(2, 0)
    assert board.number(1, 0) == 2
    assert board.number(1, 1) == 2
    assert board.mine_cells() == [(0, 0), (2, 0)]


def test_board_arrays_are_read_only():
    board = Board.from_layout(["*.", ".."])
    numbers, mines = board.to_arrays()
    with pytest.raises(ValueError):
        mines[0] = 0
    with pytest.raises(ValueError):
        numbers[0] = 0


def test_board_rejects_bad_buffers():
    with pytest.raises(ValueError):
        Board(0, 3, [], [])
    with pytest.raises(ValueError):
        Board(2, 2, [0, 0, 0, 0], [0, 0, 0])


def test_format_board_without_color():
    text = Board.from_layout(["*.", ".."]).format_board(color=False)
    lines = text.split("\n")
    assert len(lines) == 4
    assert "*" in lines[2]
    assert "\033[" not in text


def test_flood_reveal_opens_zero_region_and_its_border():
    board = Board.from_layout(["*....", ".....", "....."])
    view = View.hidden(board.width, board.height)

    opened = view.reveal(board, 4, 2)

    assert (0, 0) not in opened
    assert view.revealed_count() == board.width * board.height - 1
    assert view.value(1, 1) == 1
    assert view.is_hidden(0, 0)


def test_flood_reveal_never_opens_flagged_cells():
    board = Board.from_layout([".....", ".....", "....*"])
    view = View.hidden(board.width, board.height)
    view.toggle_flag(0, 1)

    view.reveal(board, 0, 0)

    assert view.is_hidden(0, 1)
    assert view.is_flagged(0, 1)


def test_reveal_on_mine_marks_it_exploded():
    board = Board.from_layout(["*.", ".."])
    visible = [HIDDEN] * 4
    opened = flood_reveal(
        board.numbers, visible, [0] * 4, 0, get_neighborhoods(2, 2)
    )
    assert opened == [0]
    assert visible[0] == EXPLODED


def test_toggle_flag_ignores_revealed_cells():
    board = Board.from_layout(["*.", ".."])
    view = View.hidden(2, 2)
    view.reveal(board, 1, 1)
    view.toggle_flag(1, 1)
    assert not view.is_flagged(1, 1)

    view.toggle_flag(0, 0)
    assert view.is_flagged(0, 0)
    view.toggle_flag(0, 0)
    assert not view.is_flagged(0, 0)


def test_view_layout_round_trip():
    rows = ["..F", "24X", "1FF"]
    view = View.from_layout(rows)
    assert view.format_view() == "\n".join(rows)
    assert view.value(2, 1) == EXPLODED
    assert view.is_flagged(2, 0)
    assert view.revealed_count() == 3
