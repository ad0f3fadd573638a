import matplotlib.pyplot as plt
import pytest

from noguess import (
    Board,
    DifficultyConfig,
    compare_component_caps,
    format_solver_knowledge,
    run_difficulty_analysis,
    run_search_many_tests,
    run_search_single_test,
    run_solver_many_tests,
    solve,
)

SMALL = DifficultyConfig(6, 6, 4)


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_format_solver_knowledge():
    board = Board(3, 3, bomb_positions=[(0, 0)], start_cell=(2, 2))
    text = format_solver_knowledge(board, solve(board), show_coords=False)
    assert text.splitlines() == [" F  1  0", " 1  1  0", " 0  0  0"]


def test_format_solver_knowledge_with_coords_marks_unknowns():
    board = Board(2, 3, bomb_positions=[(0, 0)], start_cell=(1, 2))
    lines = format_solver_knowledge(board, solve(board)).splitlines()
    assert len(lines) == 4
    assert lines[2].startswith(" 0 |")
    assert "." in lines[2] and "." in lines[3]


def test_run_solver_many_tests_keys():
    stats = run_solver_many_tests(SMALL, 5, max_component_size=10)
    assert 0.0 <= stats["certified_rate"] <= 1.0
    assert 0.0 < stats["avg_revealed_fraction"] <= 1.0
    assert stats["avg_rounds_count"] >= 1.0
    assert "avg_contradiction" not in stats


def test_run_search_single_test():
    outcome = run_search_single_test(SMALL, tries=200)
    assert outcome["found"]
    assert outcome["attempts"] >= 1
    assert outcome["board"] is not None


def test_run_search_single_test_not_found():
    outcome = run_search_single_test(SMALL, tries=0)
    assert outcome == {
        "found": False,
        "attempts": 0,
        "elapsed_seconds": outcome["elapsed_seconds"],
        "board": None,
    }


def test_run_search_many_tests():
    stats = run_search_many_tests(SMALL, 3, tries=200)
    assert stats["success_rate"] == 1.0
    assert 1.0 <= stats["median_attempts"] <= stats["max_attempts"]
    assert stats["avg_elapsed_seconds"] >= 0.0


def test_run_difficulty_analysis_without_display():
    results = run_difficulty_analysis(1, levels=["beginner"], tries=300, show=False)
    assert set(results) == {"beginner"}
    assert "certified_rate" in results["beginner"]
    assert len(plt.get_fignums()) == 2


def test_compare_component_caps():
    rates = compare_component_caps(SMALL, [0, 8], 4, show=False)
    assert list(rates) == [0, 8]
    assert all(0.0 <= r <= 1.0 for r in rates.values())


def test_runs_must_be_positive():
    with pytest.raises(ValueError):
        run_solver_many_tests(SMALL, 0)
    with pytest.raises(ValueError):
        run_search_many_tests(SMALL, 0)
