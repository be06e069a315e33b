"""Analysis and benchmarking tools for the no-guess generator and solver."""

import random
import time
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .board import Board, View
from .config import DEFAULT_MAX_ATTEMPTS, LEVELS
from .generator import generate_solvable_board, place_mines
from .solver import SolverDriver


def format_view(view: View, *, show_coords: bool = True) -> str:
    """
    Format a view as a human-readable string.

    Args:
        view: View whose cells will be displayed.
        show_coords: If True, include coordinate labels and a header.

    Returns:
        A text grid where hidden cells are '.', flags 'F', exploded mines 'X'
        and revealed cells their number.
    """
    w, h = view.width, view.height
    rows = view.format_view().split("\n")

    lines: List[str] = []
    if show_coords:
        header = " ".join(f"{x:2d}" for x in range(w))
        lines.append("   " + header)
        lines.append("   " + "-" * (3 * w - 1))

    for y in range(h):
        row = " ".join(f" {ch}" for ch in rows[y])
        lines.append(f"{y:2d} |" + row if show_coords else row)

    return "\n".join(lines)


def run_solver_on_random_boards(
    width: int,
    height: int,
    mine_count: int,
    runs: int,
    *,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """
    Measure how often a uniformly random board is solvable without guessing.

    The first click is the centre cell and its 3x3 neighbourhood is kept free
    of mines, like a first click in a regular game.

    Returns:
        ``solvable_rate`` plus averaged driver counters (prefixed ``avg_``).
    """
    rng = random.Random(seed)
    sx, sy = width // 2, height // 2
    solvable = 0
    sums: Dict[str, float] = {}

    for _ in range(runs):
        mines = place_mines(width, height, mine_count, sx, sy, 1, rng)
        board = Board.from_mines(width, height, mines)
        driver = SolverDriver(board, record_moves=False)
        if driver.solve(sx, sy):
            solvable += 1

        for k, v in driver.metrics().items():
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                sums[f"avg_{k}"] = sums.get(f"avg_{k}", 0.0) + float(v)

    out: Dict[str, float] = {k: total / runs for k, total in sums.items()}
    out["solvable_rate"] = solvable / runs
    return out


def run_generator_many_tests(
    width: int,
    height: int,
    mine_count: int,
    runs: int,
    *,
    safe_radius: int = 1,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """
    Run many independent generations with the first click at the centre.

    Args:
        width: Board width.
        height: Board height.
        mine_count: Total number of mines on the board.
        runs: Number of independent generations.
        safe_radius: Radius of the mine-free square around the first click.
        max_attempts: Attempt budget of each generation.
        seed: Base seed; run ``i`` uses ``seed + i``. None means unseeded.

    Returns:
        Dict with:
        - success_rate
        - avg_attempts, median_attempts, p90_attempts (successful runs only)
        - avg_seconds
    """
    sx, sy = width // 2, height // 2
    attempts: List[int] = []
    seconds: List[float] = []
    successes = 0

    for i in range(runs):
        run_seed = None if seed is None else seed + i
        started = time.perf_counter()
        result = generate_solvable_board(
            width, height, mine_count, sx, sy, safe_radius, max_attempts, run_seed
        )
        seconds.append(time.perf_counter() - started)
        if result.success:
            successes += 1
            attempts.append(result.attempts)

    arr = np.array(attempts, dtype=float)
    return {
        "success_rate": successes / runs,
        "avg_attempts": float(arr.mean()) if arr.size else 0.0,
        "median_attempts": float(np.median(arr)) if arr.size else 0.0,
        "p90_attempts": float(np.percentile(arr, 90)) if arr.size else 0.0,
        "avg_seconds": float(np.mean(seconds)) if seconds else 0.0,
    }


def run_generator_level_analysis(
    runs: int,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    seed: Optional[int] = None,
    show: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Benchmark generation on the standard difficulty levels and plot summaries.

    Standard difficulty levels:
        - Beginner: 9x9, 10 mines
        - Intermediate: 16x16, 40 mines
        - Expert: 30x16, 99 mines

    Returns:
        Mapping from level name to statistics from run_generator_many_tests().
    """
    levels: Dict[str, Tuple[int, int, int]] = dict(LEVELS)

    results: Dict[str, Dict[str, float]] = {}
    for level, (w, h, m) in levels.items():
        results[level] = run_generator_many_tests(
            w, h, m, runs, max_attempts=max_attempts, seed=seed
        )

    level_names = list(levels.keys())
    x = np.arange(len(level_names))

    # 1) Success rate by level
    fig_rate = plt.figure()
    plt.bar(x, [results[n]["success_rate"] for n in level_names])
    plt.xticks(x, level_names)
    plt.ylabel("Success rate")
    plt.ylim(0.0, 1.0)
    plt.title("No-guess generation success rate")
    plt.tight_layout()

    # 2) Attempts by level
    bar_w = 0.35
    fig_attempts = plt.figure()
    plt.bar(
        x - bar_w / 2,
        [results[n]["avg_attempts"] for n in level_names],
        width=bar_w,
        label="mean",
    )
    plt.bar(
        x + bar_w / 2,
        [results[n]["p90_attempts"] for n in level_names],
        width=bar_w,
        label="p90",
    )
    plt.xticks(x, level_names)
    plt.ylabel("Attempts per generated board")
    plt.title("Rejection-sampling attempts")
    plt.legend()
    plt.tight_layout()

    if show:
        plt.show()
    else:
        plt.close(fig_rate)
        plt.close(fig_attempts)

    return results
