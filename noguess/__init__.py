"""
No-Guess Minesweeper Generator

Generates minesweeper boards that can be completed by pure deduction from a
designated start cell:
- Generator: random bomb placement with a bomb-free 3x3 start block
- Deterministic solver: trivial constraint propagation, then exhaustive
  enumeration over bounded constraint-graph components
- Retry search: bounded generate-and-certify loop, synchronous or on a
  cancellable background thread with progress reporting
"""

from .config import (
    DEFAULT_MAX_COMPONENT_SIZE,
    DEFAULT_TRIES,
    DIFFICULTY_PRESETS,
    MAX_COLS,
    MAX_ROWS,
    DifficultyConfig,
    get_difficulty,
    validate_config,
)
from .engine import (
    BOMB,
    CLEAR,
    Board,
    Cell,
    generate_board,
    generate_board_with_start_cell,
    play_cli,
)
from .analysis import (
    compare_component_caps,
    format_solver_knowledge,
    run_difficulty_analysis,
    run_search_many_tests,
    run_search_single_test,
    run_solver_many_tests,
)
from .errors import ConfigError, NoGuessError, NotFoundError
from .search import (
    NoGuessSearch,
    search_no_guess_board,
    search_with_fallback,
    wait_for_board,
)
from .solver import (
    Constraint,
    DeterministicSolver,
    SolveResult,
    evaluate_component,
    solve,
)

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "DifficultyConfig",
    "DIFFICULTY_PRESETS",
    "DEFAULT_TRIES",
    "DEFAULT_MAX_COMPONENT_SIZE",
    "MAX_ROWS",
    "MAX_COLS",
    "get_difficulty",
    "validate_config",
    # Board model and generators
    "Board",
    "Cell",
    "BOMB",
    "CLEAR",
    "generate_board",
    "generate_board_with_start_cell",
    # Solver
    "Constraint",
    "DeterministicSolver",
    "SolveResult",
    "evaluate_component",
    "solve",
    # Search
    "NoGuessSearch",
    "search_no_guess_board",
    "search_with_fallback",
    "wait_for_board",
    # Errors
    "NoGuessError",
    "ConfigError",
    "NotFoundError",
    # CLI
    "play_cli",
    # Analysis functions
    "format_solver_knowledge",
    "run_solver_many_tests",
    "run_search_single_test",
    "run_search_many_tests",
    "run_difficulty_analysis",
    "compare_component_caps",
]
