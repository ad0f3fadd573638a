"""
Quickstart example for the no-guess board generator.

This script demonstrates basic usage of the generator, solver and search.
"""

import logging

from noguess import (
    DIFFICULTY_PRESETS,
    NoGuessSearch,
    DeterministicSolver,
    format_solver_knowledge,
    generate_board_with_start_cell,
    get_difficulty,
    run_search_many_tests,
    search_with_fallback,
    wait_for_board,
)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("No-Guess Minesweeper - Quickstart Example")
    print("=" * 60)

    # Example 1: Certify a single random board
    print("\n1. Certifying one random Intermediate board (16x16, 40 bombs)...")
    print("-" * 60)

    config = get_difficulty("intermediate")
    board = generate_board_with_start_cell(config)
    solver = DeterministicSolver(board, max_component_size=18)
    result = solver.solve()

    print(f"Start cell: {board.start_cell}")
    print(f"Solvable without guessing: {result.solvable}")
    print(f"Cells deduced safe: {len(result.revealed)}/{board.safe_cell_count}")
    print(f"Bombs deduced: {len(result.flagged)}/{board.bomb_count}")
    print(f"Trivial inferences: {solver.inferred_trivial_count}")
    print(f"Enumeration inferences: {solver.inferred_enumeration_count}")
    print("\nSolver knowledge:")
    print(format_solver_knowledge(board, result))

    # Example 2: Background search with progress
    print("\n2. Searching for an Expert no-guess board in the background...")
    print("-" * 60)

    spinner = "|/-\\"
    state = {"attempt": 0, "tick": 0}

    def on_progress(attempt):
        state["attempt"] = attempt

    def on_tick():
        state["tick"] += 1
        print(f"\rGenerating {spinner[state['tick'] % 4]}  attempt {state['attempt']:4d}", end="")

    search = NoGuessSearch(get_difficulty("expert"), tries=1000).start()
    expert = wait_for_board(search, on_progress=on_progress, on_tick=on_tick)
    print(f"\nCertified after {state['attempt']} attempts.")
    print(expert.format_board(reveal_all=True))

    # Example 3: Search with fallback to a plain board
    print("\n3. Search with fallback (tiny budget on Insane)...")
    print("-" * 60)

    _, certified = search_with_fallback(get_difficulty("insane"), tries=5)
    print(f"Certified: {certified}")

    # Example 4: Attempts needed per difficulty level
    print("\n4. Attempts per no-guess board by difficulty (5 searches each)...")
    print("-" * 60)

    for name in ("beginner", "intermediate", "advanced"):
        stats = run_search_many_tests(DIFFICULTY_PRESETS[name], runs=5)
        cfg = DIFFICULTY_PRESETS[name]
        print(
            f"{name:13s} ({cfg.rows}x{cfg.cols}, {cfg.bomb_count:3d} bombs): "
            f"{stats['avg_attempts']:6.1f} attempts on average, "
            f"success rate {stats['success_rate']*100:5.1f}%"
        )

    print("\n" + "=" * 60)
    print("Done! Run `streamlit run app/demo.py` for the interactive demo.")
    print("=" * 60)


if __name__ == "__main__":
    main()
