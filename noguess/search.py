"""Bounded retry search for boards the solver certifies as no-guess."""

import logging
import queue
import random
import threading
from typing import Callable, List, Optional, Tuple

from .config import DEFAULT_MAX_COMPONENT_SIZE, DEFAULT_TRIES, DifficultyConfig, validate_config
from .engine import Board, generate_board_with_start_cell
from .errors import NotFoundError
from .solver import solve

logger = logging.getLogger(__name__)


def search_no_guess_board(
    config: DifficultyConfig,
    tries: int = DEFAULT_TRIES,
    max_component_size: int = DEFAULT_MAX_COMPONENT_SIZE,
    *,
    rng: Optional[random.Random] = None,
    on_attempt: Optional[Callable[[int], None]] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Optional[Board]:
    """
    Generate start-cell boards until one is certified solvable without guessing.

    Args:
        config: Board dimensions and bomb count.
        tries: Maximum number of boards to generate.
        max_component_size: Component size cap passed to the solver.
        rng: Optional random source for reproducible searches.
        on_attempt: Called with the attempt number after every finished attempt.
        cancel_event: When set, the loop stops before starting its next attempt.
            An attempt already in progress always runs to completion.

    Returns:
        The first certified board, or None if the search was cancelled.

    Raises:
        ConfigError: If the configuration is invalid (before any attempt).
        NotFoundError: If no attempt within the budget was certified.
    """
    validate_config(config)

    attempt = 0
    while attempt < tries:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("No-guess search cancelled after %d attempts", attempt)
            return None

        attempt += 1
        board = generate_board_with_start_cell(config, rng=rng)
        result = solve(board, max_component_size)
        logger.debug(
            "Attempt %d/%d: solvable=%s (revealed %d/%d)",
            attempt,
            tries,
            result.solvable,
            len(result.revealed),
            board.safe_cell_count,
        )

        if on_attempt is not None:
            on_attempt(attempt)

        if result.solvable:
            logger.info("No-guess board found after %d attempts", attempt)
            return board

    raise NotFoundError(attempts=attempt)


def search_with_fallback(
    config: DifficultyConfig,
    tries: int = DEFAULT_TRIES,
    max_component_size: int = DEFAULT_MAX_COMPONENT_SIZE,
    *,
    rng: Optional[random.Random] = None,
) -> Tuple[Board, bool]:
    """
    Search for a no-guess board, falling back to a plain start-cell board.

    Returns:
        Tuple of (board, certified) where certified is False for the fallback.
    """
    try:
        board = search_no_guess_board(config, tries, max_component_size, rng=rng)
    except NotFoundError as exc:
        logger.warning("%s Falling back to a regular board.", exc)
        return generate_board_with_start_cell(config, rng=rng), False

    assert board is not None
    return board, True


class NoGuessSearch:
    """
    Cancellable retry search running on a background thread.

    Progress (attempt counts) flows through a queue; the outcome is delivered
    once through a single-slot result queue. Cancellation is checked between
    attempts only.

    Usage:
        with NoGuessSearch(config) as search:
            board = search.result()
    """

    def __init__(
        self,
        config: DifficultyConfig,
        tries: int = DEFAULT_TRIES,
        max_component_size: int = DEFAULT_MAX_COMPONENT_SIZE,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.tries = tries
        self.max_component_size = max_component_size
        self._rng = rng

        self._progress: "queue.Queue[int]" = queue.Queue()
        self._result: "queue.Queue[Tuple[Optional[Board], Optional[BaseException]]]" = queue.Queue(maxsize=1)
        self._outcome: Optional[Tuple[Optional[Board], Optional[BaseException]]] = None
        self._cancel = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="noguess-search", daemon=True
        )

    def _run(self) -> None:
        try:
            board = search_no_guess_board(
                self.config,
                self.tries,
                self.max_component_size,
                rng=self._rng,
                on_attempt=self._progress.put,
                cancel_event=self._cancel,
            )
        except Exception as exc:  # handed to the caller through result()
            self._result.put((None, exc))
            return
        self._result.put((board, None))

    def start(self) -> "NoGuessSearch":
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Request the search to stop before its next attempt."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        """True once the worker has delivered its outcome."""
        return self._outcome is not None or not self._result.empty()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker thread; returns True if it has finished."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def progress(self) -> List[int]:
        """Drain and return the attempt counts emitted since the last call."""
        counts: List[int] = []
        while True:
            try:
                counts.append(self._progress.get_nowait())
            except queue.Empty:
                return counts

    def result(self, timeout: Optional[float] = None) -> Optional[Board]:
        """
        Wait for the outcome of the search.

        Returns:
            The certified board, or None if the search was cancelled.

        Raises:
            NotFoundError: If the try budget was exhausted.
            ConfigError: If the configuration was invalid.
            TimeoutError: If timeout elapsed before the outcome arrived.
        """
        if self._outcome is None:
            try:
                self._outcome = self._result.get(timeout=timeout)
            except queue.Empty:
                raise TimeoutError("No-guess search is still running.") from None

        board, error = self._outcome
        if error is not None:
            raise error
        return board

    def __enter__(self) -> "NoGuessSearch":
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()
        self._thread.join()


def wait_for_board(
    search: NoGuessSearch,
    on_progress: Optional[Callable[[int], None]] = None,
    on_tick: Optional[Callable[[], None]] = None,
    tick_interval: float = 0.05,
) -> Optional[Board]:
    """
    Multiplex progress updates and a periodic tick until the search finishes.

    The tick only drives waiting indicators; it has no effect on the search.
    Cancellation stays with the caller (search.cancel(), e.g. from on_tick).

    Returns:
        Same as NoGuessSearch.result().
    """
    while True:
        finished = search.join(tick_interval)
        for count in search.progress():
            if on_progress is not None:
                on_progress(count)
        if finished:
            return search.result()
        if on_tick is not None:
            on_tick()
