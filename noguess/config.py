"""Difficulty configuration, board caps, presets and search defaults."""

from dataclasses import dataclass
from typing import Dict

from .errors import ConfigError

MAX_ROWS: int = 36
MAX_COLS: int = 160

# Retry search defaults
DEFAULT_TRIES: int = 1000
DEFAULT_MAX_COMPONENT_SIZE: int = 18


@dataclass(frozen=True)
class DifficultyConfig:
    """Board dimensions and bomb count for one generated board."""

    rows: int
    cols: int
    bomb_count: int

    @property
    def cell_count(self) -> int:
        return self.rows * self.cols

    @property
    def density(self) -> float:
        """Fraction of cells holding a bomb."""
        return self.bomb_count / self.cell_count if self.cell_count > 0 else 0.0


DIFFICULTY_PRESETS: Dict[str, DifficultyConfig] = {
    "beginner": DifficultyConfig(rows=9, cols=9, bomb_count=10),
    "intermediate": DifficultyConfig(rows=16, cols=16, bomb_count=40),
    "advanced": DifficultyConfig(rows=16, cols=30, bomb_count=99),
    "expert": DifficultyConfig(rows=24, cols=30, bomb_count=150),
    "insane": DifficultyConfig(rows=30, cols=30, bomb_count=199),
}


def validate_config(config: DifficultyConfig) -> None:
    """
    Check a difficulty configuration against the board caps.

    Raises:
        ConfigError: If a dimension or the bomb count is out of range.
    """
    if config.rows <= 0 or config.cols <= 0 or config.bomb_count <= 0:
        raise ConfigError("rows, cols and bomb_count must be positive integers.")
    if config.rows > MAX_ROWS:
        raise ConfigError(f"Maximum number of rows is capped at {MAX_ROWS}.")
    if config.cols > MAX_COLS:
        raise ConfigError(f"Maximum number of cols is capped at {MAX_COLS}.")
    if config.bomb_count >= config.cell_count:
        raise ConfigError(
            f"Too many bombs, bomb_count must be in the range [1, {config.cell_count - 1}]."
        )


def get_difficulty(name: str) -> DifficultyConfig:
    """
    Look up a named difficulty preset (case-insensitive).

    Raises:
        ConfigError: If the preset name is unknown.
    """
    try:
        return DIFFICULTY_PRESETS[name.strip().lower()]
    except KeyError:
        known = ", ".join(DIFFICULTY_PRESETS)
        raise ConfigError(f"Unknown difficulty {name!r}; expected one of: {known}.") from None
