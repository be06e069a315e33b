"""
Quickstart example for the No-Guess Minesweeper engine.

This script demonstrates generation, solvability checks and hints.
"""

from noguess import (
    Board,
    SolverDriver,
    View,
    format_view,
    generate_solvable_board,
    get_hint,
    is_solvable,
    run_generator_many_tests,
)
from noguess.config import LEVELS


def main():
    print("=" * 60)
    print("No-Guess Minesweeper - Quickstart Example")
    print("=" * 60)

    # Example 1: Generate a no-guess board
    print("\n1. Generating an Intermediate no-guess board (16x16, 40 mines)...")
    print("-" * 60)

    result = generate_solvable_board(16, 16, 40, safe_x=8, safe_y=8, seed=2024)
    print(f"Success: {result.success} after {result.attempts} attempts")
    if not result.success:
        print(f"Reason: {result.reason.value}")
        return

    board = result.board
    print(board.format_board())

    # Example 2: Replay it with the solver driver
    print("\n2. Replaying the board from (8, 8)...")
    print("-" * 60)

    driver = SolverDriver(board)
    solved = driver.solve(8, 8)
    metrics = driver.metrics()

    print(f"Solved without guessing: {solved}")
    print(f"Deduction rounds: {metrics['rounds']}")
    print(f"Reveal moves: {metrics['reveal_moves_count']}")
    print(f"Mines flagged: {metrics['markings_count']}")
    print(f"Propagation inferences: {metrics['inferred_propagation_count']}")
    print(f"Linear inferences: {metrics['inferred_linear_count']}")
    print(f"Enumeration inferences: {metrics['inferred_enumeration_count']}")
    print(f"Largest frontier: {metrics['max_frontier']}")

    # Example 3: Ask for a hint after the first click
    print("\n3. Hint after the first click:")
    print("-" * 60)

    view = View.hidden(board.width, board.height)
    view.reveal(board, 8, 8)
    print(format_view(view))

    hint = get_hint(board, view)
    if hint is None:
        print("No provable move.")
    else:
        print(f"Reveal ({hint.x}, {hint.y}) next (score {hint.score})")
        print(f"Proven by {hint.strategy} from the numbers at {list(hint.constraint_cells)}")

    # Example 4: A board that needs a guess
    print("\n4. Checking a board with a forced 50/50...")
    print("-" * 60)

    guess_board = Board.from_layout(["*....", "....."])
    print(guess_board.format_board(color=False))
    print(f"Solvable from (4, 1): {is_solvable(guess_board, 4, 1)}")

    # Example 5: Generation statistics per difficulty level
    print("\n5. Generation statistics by difficulty level (5 boards each)...")
    print("-" * 60)

    for name, (w, h, m) in LEVELS.items():
        stats = run_generator_many_tests(w, h, m, runs=5, seed=0)
        print(
            f"{name.capitalize():15s} ({w}x{h}, {m:2d} mines): "
            f"{stats['success_rate']*100:5.1f}% success, "
            f"{stats['avg_attempts']:6.1f} attempts, "
            f"{stats['avg_seconds']:.2f}s"
        )

    print("\n" + "=" * 60)
    print("Done! See DESIGN.md for the structure of the engine.")
    print("=" * 60)


if __name__ == "__main__":
    main()
