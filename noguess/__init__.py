"""
No-Guess Minesweeper reasoning engine

Decides whether a board can be cleared by pure deduction, proposes logical
hints and generates boards that never require a guess. Deduction layers:
- Propagation: single-clue arithmetic, pairwise subset rule, global mine count
- Linear: Gaussian elimination over each frontier component
- Enumeration: exhaustive assignments under the global mine budget
"""

from .board import Board, View, calculate_numbers
from .errors import InconsistentViewError, Reason
from .frontier import ConstraintSystem, Deduction
from .generator import (
    CancellationToken,
    GenerationProgress,
    GenerationResult,
    generate_solvable_board,
)
from .solver import DriverState, Hint, SolverDriver, get_hint, is_solvable
from .analysis import (
    format_view,
    run_solver_on_random_boards,
    run_generator_many_tests,
    run_generator_level_analysis,
)

__version__ = "1.0.0"

__all__ = [
    # Core types
    "Board",
    "View",
    "ConstraintSystem",
    "Deduction",
    "Hint",
    "GenerationResult",
    "Reason",
    "InconsistentViewError",
    # Engine
    "SolverDriver",
    "DriverState",
    "CancellationToken",
    "GenerationProgress",
    # Public operations
    "calculate_numbers",
    "is_solvable",
    "get_hint",
    "generate_solvable_board",
    # Analysis functions
    "format_view",
    "run_solver_on_random_boards",
    "run_generator_many_tests",
    "run_generator_level_analysis",
]
