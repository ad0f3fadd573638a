import random
import threading

import pytest

import noguess.search as search_module
from noguess import (
    ConfigError,
    DifficultyConfig,
    NoGuessSearch,
    NotFoundError,
    SolveResult,
    search_no_guess_board,
    search_with_fallback,
    solve,
    wait_for_board,
)

BEGINNER = DifficultyConfig(9, 9, 10)
# 3x3 with 5 bombs: the start cell must sit in a corner, and its zero
# value floods the whole safe 2x2 block.
CORNER_ONLY = DifficultyConfig(3, 3, 5)


def failing_solve(board, max_component_size):
    return SolveResult(False, set(), set())


def test_search_returns_certified_board():
    attempts = []
    board = search_no_guess_board(
        BEGINNER, tries=200, max_component_size=18,
        rng=random.Random(2024), on_attempt=attempts.append,
    )
    assert board is not None
    assert board.start_cell is not None
    assert solve(board, 18).solvable
    assert attempts == list(range(1, len(attempts) + 1))


def test_dense_corner_board_is_certified_on_first_attempt():
    attempts = []
    board = search_no_guess_board(CORNER_ONLY, tries=1, on_attempt=attempts.append)
    assert attempts == [1]
    assert board.start_cell in {(0, 0), (0, 2), (2, 0), (2, 2)}


def test_zero_tries_raises_without_generating(monkeypatch):
    def forbidden(*args, **kwargs):
        raise AssertionError("no board should be generated")

    monkeypatch.setattr(search_module, "generate_board_with_start_cell", forbidden)
    with pytest.raises(NotFoundError) as excinfo:
        search_no_guess_board(BEGINNER, tries=0)
    assert excinfo.value.attempts == 0


def test_exhausted_budget_reports_attempts(monkeypatch):
    monkeypatch.setattr(search_module, "solve", failing_solve)
    attempts = []
    with pytest.raises(NotFoundError) as excinfo:
        search_no_guess_board(BEGINNER, tries=5, on_attempt=attempts.append)
    assert excinfo.value.attempts == 5
    assert attempts == [1, 2, 3, 4, 5]


def test_invalid_config_raises_before_any_attempt():
    attempts = []
    with pytest.raises(ConfigError):
        search_no_guess_board(DifficultyConfig(5, 5, 25), tries=10, on_attempt=attempts.append)
    assert attempts == []


def test_cancel_event_stops_before_first_attempt():
    cancel = threading.Event()
    cancel.set()
    assert search_no_guess_board(BEGINNER, tries=10, cancel_event=cancel) is None


def test_fallback_returns_uncertified_board(monkeypatch):
    monkeypatch.setattr(search_module, "solve", failing_solve)
    board, certified = search_with_fallback(BEGINNER, tries=3)
    assert not certified
    assert board.start_cell is not None
    assert board.bomb_count == BEGINNER.bomb_count


def test_fallback_returns_certified_board():
    board, certified = search_with_fallback(BEGINNER, tries=200, rng=random.Random(7))
    assert certified
    assert solve(board).solvable


def test_background_search_delivers_board():
    with NoGuessSearch(BEGINNER, tries=200, rng=random.Random(31)) as search:
        board = search.result(timeout=60)
        assert search.done()
    assert board is not None
    assert solve(board).solvable
    counts = search.progress()
    assert counts == list(range(1, len(counts) + 1))


def test_background_search_reports_not_found(monkeypatch):
    monkeypatch.setattr(search_module, "solve", failing_solve)
    search = NoGuessSearch(BEGINNER, tries=4).start()
    with pytest.raises(NotFoundError) as excinfo:
        search.result(timeout=30)
    assert excinfo.value.attempts == 4
    assert search.join(timeout=5)
    assert search.progress() == [1, 2, 3, 4]


def test_background_search_reports_config_error():
    search = NoGuessSearch(DifficultyConfig(0, 3, 1)).start()
    with pytest.raises(ConfigError):
        search.result(timeout=5)


def test_cancel_after_first_attempt(monkeypatch):
    in_flight = threading.Event()
    release = threading.Event()

    def blocking_solve(board, max_component_size):
        in_flight.set()
        assert release.wait(timeout=10)
        return SolveResult(False, set(), set())

    monkeypatch.setattr(search_module, "solve", blocking_solve)

    search = NoGuessSearch(BEGINNER, tries=100).start()
    assert in_flight.wait(timeout=10)
    search.cancel()
    release.set()

    assert search.result(timeout=10) is None
    assert search.join(timeout=5)
    assert search.cancelled
    assert search.progress() == [1]


def test_result_timeout_while_running(monkeypatch):
    release = threading.Event()

    def blocking_solve(board, max_component_size):
        release.wait(timeout=10)
        return SolveResult(False, set(), set())

    monkeypatch.setattr(search_module, "solve", blocking_solve)
    search = NoGuessSearch(BEGINNER, tries=1).start()
    with pytest.raises(TimeoutError):
        search.result(timeout=0.01)
    assert not search.done()
    release.set()
    with pytest.raises(NotFoundError):
        search.result(timeout=10)


def test_wait_for_board_multiplexes_progress_and_ticks(monkeypatch):
    monkeypatch.setattr(search_module, "solve", failing_solve)
    progress = []
    ticks = []
    search = NoGuessSearch(BEGINNER, tries=3).start()
    with pytest.raises(NotFoundError):
        wait_for_board(
            search,
            on_progress=progress.append,
            on_tick=lambda: ticks.append(1),
            tick_interval=0.001,
        )
    assert progress == [1, 2, 3]


def test_wait_for_board_cancel_from_tick(monkeypatch):
    monkeypatch.setattr(search_module, "solve", failing_solve)
    search = NoGuessSearch(BEGINNER, tries=10_000_000).start()
    assert wait_for_board(search, on_tick=search.cancel, tick_interval=0.01) is None
