"""Analysis and benchmarking tools for the no-guess board search."""

import time
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from .config import (
    DEFAULT_MAX_COMPONENT_SIZE,
    DEFAULT_TRIES,
    DIFFICULTY_PRESETS,
    DifficultyConfig,
)
from .engine import Board, generate_board_with_start_cell
from .errors import NotFoundError
from .search import search_no_guess_board
from .solver import DeterministicSolver, SolveResult


def format_solver_knowledge(
    board: Board, result: SolveResult, *, show_coords: bool = True
) -> str:
    """
    Format the solver's deduced knowledge as a human-readable grid.

    Args:
        board: Board the solver ran on.
        result: The solver's verdict and deduced sets.
        show_coords: If True, include coordinate labels and a header.

    Returns:
        A text grid where unknown cells are '.', flagged cells 'F' and
        revealed cells show their value.
    """
    revealed = result.revealed
    flagged = result.flagged

    def cell_char(row: int, col: int) -> str:
        if (row, col) in flagged:
            return "F"
        if (row, col) in revealed:
            return str(board.cell(row, col).value)
        return "."

    lines: List[str] = []
    if show_coords:
        header = " ".join(f"{c:2d}" for c in range(board.cols))
        lines.append("   " + header)
        lines.append("   " + "-" * (3 * board.cols - 1))

    for r in range(board.rows):
        row = " ".join(f" {cell_char(r, c)}" for c in range(board.cols))
        lines.append(f"{r:2d} |" + row if show_coords else row)

    return "\n".join(lines)


def run_solver_many_tests(
    config: DifficultyConfig,
    runs: int,
    *,
    max_component_size: int = DEFAULT_MAX_COMPONENT_SIZE,
) -> Dict[str, float]:
    """
    Certify many raw start-cell boards and average the solver counters.

    Args:
        config: Board dimensions and bomb count.
        runs: Number of independent boards.
        max_component_size: Component size cap for the solver.

    Returns:
        Averages of the solver counters (prefixed with "avg_"), plus
        "certified_rate" (fraction of boards solvable without guessing) and
        "avg_revealed_fraction" (share of safe cells the solver reached).
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    sums: Dict[str, float] = defaultdict(float)
    certified = 0
    revealed_fraction = 0.0

    for _ in range(runs):
        board = generate_board_with_start_cell(config)
        solver = DeterministicSolver(board, max_component_size)
        result = solver.solve()
        if result.solvable:
            certified += 1
        revealed_fraction += len(result.revealed) / board.safe_cell_count

        for k, v in solver.stats().items():
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                sums[f"avg_{k}"] += float(v)

    out: Dict[str, float] = {k: total / runs for k, total in sums.items()}
    out["certified_rate"] = certified / runs
    out["avg_revealed_fraction"] = revealed_fraction / runs
    return out


def run_search_single_test(
    config: DifficultyConfig,
    *,
    tries: int = DEFAULT_TRIES,
    max_component_size: int = DEFAULT_MAX_COMPONENT_SIZE,
    show_boards: bool = False,
) -> Dict[str, object]:
    """
    Run one retry search and report its outcome.

    Returns:
        Dict with "found" (bool), "attempts" (int), "elapsed_seconds" (float)
        and "board" (the certified Board or None).
    """
    attempts = 0

    def count(attempt: int) -> None:
        nonlocal attempts
        attempts = attempt

    started = time.perf_counter()
    try:
        board = search_no_guess_board(
            config, tries, max_component_size, on_attempt=count
        )
    except NotFoundError as exc:
        board = None
        attempts = exc.attempts
    elapsed = time.perf_counter() - started

    if show_boards:
        if board is None:
            print(f"No no-guess board found in {attempts} attempts.")
        else:
            print(f"Certified board after {attempts} attempts ({elapsed:.2f}s):")
            print(board.format_board(reveal_all=True))

    return {
        "found": board is not None,
        "attempts": attempts,
        "elapsed_seconds": elapsed,
        "board": board,
    }


def run_search_many_tests(
    config: DifficultyConfig,
    runs: int,
    *,
    tries: int = DEFAULT_TRIES,
    max_component_size: int = DEFAULT_MAX_COMPONENT_SIZE,
) -> Dict[str, float]:
    """
    Run many independent searches and summarize attempts and timing.

    Returns:
        Dict with success_rate, avg_attempts, median_attempts, p90_attempts,
        max_attempts and avg_elapsed_seconds. Attempt statistics cover
        successful searches only and are 0.0 when none succeeded.
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    found_attempts: List[int] = []
    elapsed: List[float] = []
    for _ in range(runs):
        outcome = run_search_single_test(
            config, tries=tries, max_component_size=max_component_size
        )
        elapsed.append(float(outcome["elapsed_seconds"]))  # type: ignore[arg-type]
        if outcome["found"]:
            found_attempts.append(int(outcome["attempts"]))  # type: ignore[call-overload]

    attempts = np.asarray(found_attempts, dtype=float)
    has_found = attempts.size > 0
    return {
        "success_rate": len(found_attempts) / runs,
        "avg_attempts": float(attempts.mean()) if has_found else 0.0,
        "median_attempts": float(np.median(attempts)) if has_found else 0.0,
        "p90_attempts": float(np.percentile(attempts, 90)) if has_found else 0.0,
        "max_attempts": float(attempts.max()) if has_found else 0.0,
        "avg_elapsed_seconds": float(np.mean(elapsed)),
    }


def run_difficulty_analysis(
    runs: int,
    *,
    levels: Optional[Sequence[str]] = None,
    tries: int = DEFAULT_TRIES,
    max_component_size: int = DEFAULT_MAX_COMPONENT_SIZE,
    show: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run search statistics on difficulty presets and plot summaries.

    Args:
        runs: Number of independent searches per level.
        levels: Preset names to include (default: every preset).
        tries: Try budget per search.
        max_component_size: Component size cap for the solver.
        show: If True, display the figures.

    Returns:
        Mapping from level name to run_search_many_tests() statistics, each
        extended with the run_solver_many_tests() certified_rate.
    """
    names = list(levels) if levels is not None else list(DIFFICULTY_PRESETS)

    results: Dict[str, Dict[str, float]] = {}
    for level in names:
        config = DIFFICULTY_PRESETS[level]
        stats = run_search_many_tests(
            config, runs, tries=tries, max_component_size=max_component_size
        )
        stats["certified_rate"] = run_solver_many_tests(
            config, runs, max_component_size=max_component_size
        )["certified_rate"]
        results[level] = stats

    x = np.arange(len(names))
    bar_w = 0.35

    # 1) Attempts needed per level
    avg_attempts = [results[n]["avg_attempts"] for n in names]
    p90_attempts = [results[n]["p90_attempts"] for n in names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, avg_attempts, width=bar_w, label="mean")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, p90_attempts, width=bar_w, label="p90")  # type: ignore[misc]
    plt.xticks(x, names)  # type: ignore[misc]
    plt.ylabel("Attempts until certified")  # type: ignore[misc]
    plt.title("Attempts per no-guess board")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    # 2) Rates per level
    success = [results[n]["success_rate"] for n in names]
    certified = [results[n]["certified_rate"] for n in names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, success, width=bar_w, label="search success")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, certified, width=bar_w, label="single board certified")  # type: ignore[misc]
    plt.xticks(x, names)  # type: ignore[misc]
    plt.ylabel("Rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("No-guess rates by difficulty level")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    if show:
        plt.show()  # type: ignore[misc]

    return results


def compare_component_caps(
    config: DifficultyConfig,
    caps: Sequence[int],
    runs: int,
    *,
    show: bool = True,
) -> Dict[int, float]:
    """
    Measure how the component size cap changes the certification rate.

    Returns:
        Mapping from cap to the fraction of raw boards certified.
    """
    rates: Dict[int, float] = {}
    for cap in caps:
        rates[cap] = run_solver_many_tests(config, runs, max_component_size=cap)[
            "certified_rate"
        ]

    plt.figure()  # type: ignore[misc]
    plt.plot(list(rates), list(rates.values()), marker="o")  # type: ignore[misc]
    plt.xlabel("max_component_size")  # type: ignore[misc]
    plt.ylabel("Certified rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title(f"Certified rate vs component cap ({config.rows}x{config.cols}, {config.bomb_count} bombs)")  # type: ignore[misc]
    plt.tight_layout()
    if show:
        plt.show()  # type: ignore[misc]

    return rates
