"""Exceptions raised by the no-guess board generator."""


class NoGuessError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(NoGuessError, ValueError):
    """Invalid or out-of-range difficulty configuration."""


class NotFoundError(NoGuessError, RuntimeError):
    """The retry search exhausted its try budget without certifying a board."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"No no-guess board satisfies the difficulty after {attempts} attempts."
        )
        self.attempts: int = attempts
