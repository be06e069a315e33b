"""
Tuning constants for the reasoning engine and the board generator.

The solver and enumeration values can be overridden per call through the
keyword arguments of SolverDriver, get_hint and generate_solvable_board;
the generator defaults through generate_solvable_board's own parameters.
"""

# Linear system solver
WINDOW_SIZE = 50        # Largest component solved as a single matrix
PIVOT_EPS = 1e-6        # Pivot rejection threshold during row reduction
MATCH_EPS = 1e-3        # Tolerance when matching a row target to its bounds

# Backtracking enumerator
MAX_SOLUTIONS = 1 << 16       # Recorded solutions per component before giving up
MAX_SEARCH_NODES = 1 << 18    # DFS nodes per component before giving up
MAX_ENUMERATION_FRONTIER = 120  # Frontier size above which enumeration is skipped

# Generator
DEFAULT_SAFE_RADIUS = 1
DEFAULT_MAX_ATTEMPTS = 500
PROGRESS_INTERVAL = 10  # Attempts between two progress reports

# Hint scoring
HINT_ZERO_BONUS = 10

# Standard difficulty levels: name -> (width, height, mine_count)
LEVELS = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (30, 16, 99),
}
