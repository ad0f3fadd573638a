"""Minesweeper board model and random board generators with safe start cells."""

import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .config import DifficultyConfig, validate_config
from .errors import ConfigError
from .utils import Coordinate, get_neighborhoods

logger = logging.getLogger(__name__)

CLEAR: int = 0
BOMB: int = -1


@dataclass
class Cell:
    """A single board cell: -1 for a bomb, otherwise the adjacent bomb count."""

    value: int = CLEAR
    revealed: bool = False
    flagged: bool = False

    @property
    def is_bomb(self) -> bool:
        return self.value == BOMB


class Board:
    """
    Minesweeper board stored as a flat row-major list of cells.

    Bomb placement updates neighbor counts incrementally, so every non-bomb
    cell's value always equals the number of bombs around it. The gameplay
    fields (revealed, flagged, game-over state) are only touched by the
    gameplay mutators; the solver reads the bomb layout and values.
    """

    def __init__(
        self,
        rows: int,
        cols: int,
        bomb_positions: Iterable[Coordinate] = (),
        start_cell: Optional[Coordinate] = None,
    ) -> None:
        """
        Initialize a board, optionally with an explicit bomb layout.

        Args:
            rows: Number of rows, must be > 0.
            cols: Number of columns, must be > 0.
            bomb_positions: (row, col) coordinates of bombs to place.
            start_cell: Optional designated start coordinate for no-guess play.

        Raises:
            ValueError: If dimensions are invalid or a bomb is placed twice.
            IndexError: If a bomb or the start cell lies outside the board.
        """
        if rows <= 0 or cols <= 0:
            raise ValueError("rows and cols must be positive.")

        self.rows: int = rows
        self.cols: int = cols
        self.cells: List[Cell] = [Cell() for _ in range(rows * cols)]
        self.bomb_positions: List[Coordinate] = []
        # Non-bomb coordinate -> adjacent bomb count; zero-count cells are absent.
        self.position_to_value: Dict[Coordinate, int] = {}
        self._bomb_indices: Set[int] = set()

        self.is_game_over: bool = False
        self.is_won: bool = False
        self.revealed_count: int = 0
        self.start_cell: Optional[Coordinate] = None

        self._neighborhoods: Tuple[Tuple[int, ...], ...] = get_neighborhoods(rows, cols)

        for row, col in bomb_positions:
            self.add_bomb(row, col)

        if start_cell is not None:
            self.index(*start_cell)
            self.start_cell = (start_cell[0], start_cell[1])

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def bomb_count(self) -> int:
        return len(self.bomb_positions)

    @property
    def safe_cell_count(self) -> int:
        return self.rows * self.cols - len(self.bomb_positions)

    @property
    def bomb_indices(self) -> FrozenSet[int]:
        """Packed (row * cols + col) indices of all bombs."""
        return frozenset(self._bomb_indices)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def index(self, row: int, col: int) -> int:
        """Return the flat index of (row, col), raising IndexError when out of bounds."""
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside the {self.rows}x{self.cols} board.")
        return row * self.cols + col

    def position(self, index: int) -> Coordinate:
        """Return the (row, col) coordinate of a flat index."""
        if not 0 <= index < len(self.cells):
            raise IndexError(f"Index {index} is outside the board.")
        return divmod(index, self.cols)

    def cell(self, row: int, col: int) -> Cell:
        return self.cells[self.index(row, col)]

    def is_bomb(self, row: int, col: int) -> bool:
        return self.index(row, col) in self._bomb_indices

    def neighbors(self, row: int, col: int) -> Tuple[Coordinate, ...]:
        """Return the in-bounds 8-neighborhood of (row, col) as coordinates."""
        return tuple(
            divmod(n, self.cols) for n in self._neighborhoods[self.index(row, col)]
        )

    def neighbor_indices(self, index: int) -> Tuple[int, ...]:
        """Return the flat indices of the neighbors of a flat index."""
        return self._neighborhoods[index]

    # -------------------------------------------------------------------------
    # Bomb placement
    # -------------------------------------------------------------------------

    def add_bomb(self, row: int, col: int) -> None:
        """
        Place a bomb and increment the counts of its non-bomb neighbors.

        Raises:
            ValueError: If (row, col) already holds a bomb.
        """
        idx = self.index(row, col)
        if idx in self._bomb_indices:
            raise ValueError(f"Cell ({row}, {col}) already holds a bomb.")

        self.cells[idx].value = BOMB
        self._bomb_indices.add(idx)
        self.bomb_positions.append((row, col))
        self.position_to_value.pop((row, col), None)

        for n in self._neighborhoods[idx]:
            if n in self._bomb_indices:
                continue
            self.cells[n].value += 1
            pos = divmod(n, self.cols)
            self.position_to_value[pos] = self.position_to_value.get(pos, 0) + 1

    # -------------------------------------------------------------------------
    # Gameplay mutators
    # -------------------------------------------------------------------------

    def reveal(self, row: int, col: int, user_click: bool = False) -> bool:
        """
        Reveal a cell, flooding through zero-valued cells.

        Args:
            row: Row of the cell to reveal.
            col: Column of the cell to reveal.
            user_click: True for a direct player action. Clicks ignore flagged
                cells and chord on already revealed cells.

        Returns:
            True if the board changed.
        """
        if self.is_game_over:
            return False

        idx = self.index(row, col)
        cell = self.cells[idx]

        if user_click and cell.flagged:
            return False

        if cell.is_bomb:
            cell.revealed = True
            self.is_game_over = True
            return True

        if cell.revealed:
            if user_click:
                return self.chord(row, col)
            return False

        frontier: Deque[int] = deque([idx])
        while frontier:
            cur = frontier.popleft()
            cur_cell = self.cells[cur]
            if cur_cell.revealed or cur_cell.is_bomb:
                continue
            if cur != idx and cur_cell.flagged:
                continue

            cur_cell.revealed = True
            self.revealed_count += 1
            if self.revealed_count == self.safe_cell_count:
                self.is_game_over = True
                self.is_won = True
                return True

            if cur_cell.value == CLEAR:
                for n in self._neighborhoods[cur]:
                    if not self.cells[n].revealed:
                        frontier.append(n)

        return True

    def chord(self, row: int, col: int) -> bool:
        """Reveal all unflagged hidden neighbors once the flag count matches the value."""
        cell = self.cell(row, col)
        if not cell.revealed or cell.value <= 0:
            return False

        unflagged: List[Coordinate] = []
        flagged_count = 0
        for nr, nc in self.neighbors(row, col):
            nbr = self.cell(nr, nc)
            if nbr.revealed:
                continue
            if nbr.flagged:
                flagged_count += 1
            else:
                unflagged.append((nr, nc))

        if flagged_count != cell.value:
            return False

        changed = False
        for nr, nc in unflagged:
            if self.reveal(nr, nc):
                changed = True
        return changed

    def flag(self, row: int, col: int) -> None:
        """Toggle the flag on an unrevealed cell."""
        if self.is_game_over:
            return
        cell = self.cell(row, col)
        if not cell.revealed:
            cell.flagged = not cell.flagged

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"
    _ANSI_START = "\033[92m"

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show bombs and all underlying values.
            color: If False, emit plain text without ANSI escapes.

        Returns:
            A formatted multi-line string with coordinate labels and the grid.
            Hidden cells are '.', flags 'F', bombs 'M', the start cell 'S'.
        """

        def paint(s: str, ansi: str) -> str:
            return f"{ansi}{s}{self._ANSI_RESET}" if color else s

        def cell_str(row: int, col: int) -> str:
            cell = self.cells[row * self.cols + col]
            if reveal_all or cell.revealed:
                if cell.is_bomb:
                    return paint("M", self._ANSI_MINE)
                return str(cell.value)
            if cell.flagged:
                return "F"
            if self.start_cell == (row, col):
                return paint("S", self._ANSI_START)
            return "."

        header_cells = " ".join(f"{c:2d}" for c in range(self.cols))
        out = [paint("   " + header_cells, self._ANSI_COORD)]
        out.append(paint("   " + "-" * (3 * self.cols - 1), self._ANSI_COORD))

        for r in range(self.rows):
            row_cells = " ".join(f" {cell_str(r, c)}" for c in range(self.cols))
            out.append(paint(f"{r:2d} |", self._ANSI_COORD) + row_cells)

        return "\n".join(out)

    def print_board(self) -> None:
        """Print the current visible board state to stdout."""
        print(self.format_board(reveal_all=False))

    def print_full_board(self) -> None:
        """Print the fully revealed underlying board to stdout (for debugging)."""
        print(self.format_board(reveal_all=True))


# -----------------------------------------------------------------------------
# Generators
# -----------------------------------------------------------------------------


def generate_board(
    config: DifficultyConfig, rng: Optional[random.Random] = None
) -> Board:
    """
    Generate a board with uniformly random bomb placement.

    Bombs are placed by rejection sampling over flat indices; each placement
    updates neighbor counts incrementally.

    Args:
        config: Board dimensions and bomb count.
        rng: Optional random source for reproducible boards.

    Raises:
        ConfigError: If the configuration is invalid.
    """
    validate_config(config)
    source = rng if rng is not None else random

    board = Board(config.rows, config.cols)
    total = config.rows * config.cols
    while board.bomb_count < config.bomb_count:
        idx = source.randrange(total)
        if board.cells[idx].is_bomb:
            continue
        board.add_bomb(*divmod(idx, config.cols))

    return board


def generate_board_with_start_cell(
    config: DifficultyConfig, rng: Optional[random.Random] = None
) -> Board:
    """
    Generate a board with a random start cell whose 3x3 block holds no bomb.

    The start cell is drawn uniformly among cells whose exclusion zone still
    leaves room for every bomb; on boards with at most rows*cols-9 bombs that
    is every cell.

    Args:
        config: Board dimensions and bomb count.
        rng: Optional random source for reproducible boards.

    Raises:
        ConfigError: If the configuration is invalid or no start cell leaves
            room for all bombs.
    """
    validate_config(config)
    source = rng if rng is not None else random

    total = config.rows * config.cols
    neighborhoods = get_neighborhoods(config.rows, config.cols)

    if total - 9 >= config.bomb_count:
        start_idx = source.randrange(total)
    else:
        candidates = [
            idx
            for idx in range(total)
            if total - len(neighborhoods[idx]) - 1 >= config.bomb_count
        ]
        if not candidates:
            raise ConfigError(
                "Cannot keep the start cell and its neighbors free of bombs "
                f"with {config.bomb_count} bombs on a {config.rows}x{config.cols} board."
            )
        start_idx = source.choice(candidates)

    excluded: Set[int] = set(neighborhoods[start_idx])
    excluded.add(start_idx)

    board = Board(config.rows, config.cols, start_cell=divmod(start_idx, config.cols))
    while board.bomb_count < config.bomb_count:
        idx = source.randrange(total)
        if idx in excluded or board.cells[idx].is_bomb:
            continue
        board.add_bomb(*divmod(idx, config.cols))

    logger.debug(
        "Generated %dx%d board with %d bombs, start cell %s",
        config.rows,
        config.cols,
        config.bomb_count,
        board.start_cell,
    )
    return board


def play_cli(board: Board) -> None:
    """
    Run a simple terminal UI for playing a generated board.

    Args:
        board: A Board instance to play on.
    """
    print(
        "Minesweeper CLI (enter: row col to reveal, f row col to flag). "
        "Coordinates are 0-based. Type 'q' to quit.\n"
    )
    if board.start_cell is not None:
        print(f"Start cell (S): {board.start_cell}\n")
    print(board.format_board(reveal_all=False))

    while True:
        s = input("\nMove (row col | f row col): ").strip()
        if s.lower() in {"q", "quit", "exit"}:
            print("Quit.")
            return

        parts = s.replace(",", " ").split()
        flag = bool(parts) and parts[0].lower() == "f"
        if flag:
            parts = parts[1:]
        if len(parts) != 2:
            print("Invalid input. Example: 3 5  or  f 3 5")
            continue

        try:
            row = int(parts[0])
            col = int(parts[1])
        except ValueError:
            print("Invalid input. Coordinates must be integers.")
            continue

        if not board.in_bounds(row, col):
            print("Invalid input. Cell is outside the board.")
            continue

        if flag:
            board.flag(row, col)
        else:
            board.reveal(row, col, user_click=True)

        print()
        print(board.format_board(reveal_all=False))

        if board.is_game_over:
            print("\nYou revealed all safe cells. You won!" if board.is_won else "\nYou hit a mine. You lost.")
            print("\nFull board:")
            print(board.format_board(reveal_all=True))
            return
