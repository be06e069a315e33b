"""No-guess board generation by rejection sampling."""

import logging
import random
import threading
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Tuple

import numpy as np

from .board import Board, calculate_numbers
from .config import DEFAULT_MAX_ATTEMPTS, DEFAULT_SAFE_RADIUS, PROGRESS_INTERVAL
from .errors import Reason
from .solver import SolverDriver
from .utils import safe_zone

logger = logging.getLogger(__name__)


class GenerationProgress(Protocol):
    """Observer of a generation run that can also ask it to stop."""

    def report(self, attempt: int, max_attempts: int) -> None:
        ...

    def cancelled(self) -> bool:
        ...


class CancellationToken:
    """Thread-safe cancellation flag usable as a GenerationProgress."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.last_report: Optional[Tuple[int, int]] = None

    def cancel(self) -> None:
        self._event.set()

    def cancelled(self) -> bool:
        return self._event.is_set()

    def report(self, attempt: int, max_attempts: int) -> None:
        self.last_report = (attempt, max_attempts)


@dataclass
class GenerationResult:
    """Outcome of generate_solvable_board."""

    success: bool
    attempts: int
    board: Optional[Board] = None
    reason: Optional[Reason] = None
    cancelled: bool = False


def place_mines(
    width: int,
    height: int,
    mine_count: int,
    safe_x: int,
    safe_y: int,
    safe_radius: int,
    rng: random.Random,
) -> np.ndarray:
    """
    Place mines uniformly at random outside the safe square.

    Args:
        width: Board width.
        height: Board height.
        mine_count: Number of mines to place.
        safe_x: X-coordinate of the first click.
        safe_y: Y-coordinate of the first click.
        safe_radius: Chebyshev radius around the first click kept free of mines.
        rng: Random source.

    Returns:
        Flat column-major ``uint8`` mine mask.

    Raises:
        ValueError: If there are fewer eligible cells than mines.
    """
    safe = safe_zone(width, height, safe_x, safe_y, safe_radius)

    # Eligible cells = all cells not in the safe zone.
    eligible: List[int] = [i for i in range(width * height) if i not in safe]
    if mine_count > len(eligible):
        raise ValueError("Cannot place that many mines outside the safe zone.")

    mask = np.zeros(width * height, dtype=np.uint8)
    mask[rng.sample(eligible, mine_count)] = 1
    return mask


def _invalid_parameters(
    width: int,
    height: int,
    mine_count: int,
    safe_x: int,
    safe_y: int,
    safe_radius: int,
    max_attempts: int,
) -> Optional[str]:
    if width <= 0 or height <= 0 or width * height <= 9:
        return "board must be larger than 3x3"
    if not (0 <= safe_x < width and 0 <= safe_y < height):
        return "safe cell is outside the board"
    if safe_radius < 0:
        return "safe radius must be non-negative"
    if max_attempts < 1:
        return "max_attempts must be at least 1"
    zone = len(safe_zone(width, height, safe_x, safe_y, safe_radius))
    if mine_count < 0 or mine_count > width * height - zone:
        return "mine count does not fit outside the safe zone"
    return None


def generate_solvable_board(
    width: int,
    height: int,
    mine_count: int,
    safe_x: int,
    safe_y: int,
    safe_radius: int = DEFAULT_SAFE_RADIUS,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    seed: Optional[int] = None,
    *,
    rng: Optional[random.Random] = None,
    progress: Optional[GenerationProgress] = None,
    **solver_options: Any,
) -> GenerationResult:
    """
    Generate a board that can be cleared from (safe_x, safe_y) without guessing.

    Mines are placed at random outside the safe square and the solver driver
    replays the game from the safe cell; the first layout it clears is
    returned.

    Args:
        width: Board width.
        height: Board height.
        mine_count: Number of mines.
        safe_x: X-coordinate of the first click.
        safe_y: Y-coordinate of the first click.
        safe_radius: Chebyshev radius kept free of mines around the first click.
        max_attempts: Number of layouts to try before giving up.
        seed: Seed for a private random.Random; same seed, same board.
        rng: Random source to use instead of ``seed``.
        progress: Optional observer; ``cancelled()`` is checked before every
            attempt and ``report()`` is called every few attempts.
        **solver_options: Keyword overrides forwarded to SolverDriver.

    Returns:
        A GenerationResult. Invalid parameters, cancellation and an exhausted
        attempt budget all come back with ``success=False`` and a reason.
    """
    problem = _invalid_parameters(
        width, height, mine_count, safe_x, safe_y, safe_radius, max_attempts
    )
    if problem is not None:
        logger.debug("Rejected generation parameters: %s", problem)
        return GenerationResult(
            success=False, attempts=0, reason=Reason.INVALID_PARAMETERS
        )

    if rng is None:
        rng = random.Random(seed)
    solver_options.setdefault("record_moves", False)

    attempts = 0
    while attempts < max_attempts:
        if progress is not None and progress.cancelled():
            logger.info("Generation cancelled after %d attempts", attempts)
            return GenerationResult(
                success=False,
                attempts=attempts,
                reason=Reason.CANCELLED,
                cancelled=True,
            )

        attempts += 1
        mines = place_mines(width, height, mine_count, safe_x, safe_y, safe_radius, rng)
        board = Board(width, height, mines, calculate_numbers(width, height, mines))

        solved = SolverDriver(board, **solver_options).solve(safe_x, safe_y)

        if progress is not None and (
            solved or attempts % PROGRESS_INTERVAL == 0 or attempts == max_attempts
        ):
            progress.report(attempts, max_attempts)

        if solved:
            logger.info(
                "Generated %dx%d board with %d mines in %d attempts",
                width, height, mine_count, attempts,
            )
            return GenerationResult(success=True, attempts=attempts, board=board)

    logger.info(
        "No solvable %dx%d board with %d mines after %d attempts",
        width, height, mine_count, attempts,
    )
    return GenerationResult(
        success=False, attempts=attempts, reason=Reason.BUDGET_EXCEEDED
    )
