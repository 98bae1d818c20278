import pytest

from conftest import (
    HARD_PUZZLE,
    WIKI_SOLUTION,
    is_valid_solution,
    keeps_givens,
    pattern_solution,
)
from sudokulite.engine import (
    Propagation,
    Solver,
    SolveStats,
    _fill_almost_complete_units,
    _fill_almost_complete_values,
    _fill_hidden_singles,
    _fill_naked_singles,
    choose_branch_cell,
    propagate,
    solve,
)
from sudokulite.errors import SearchLimitExceeded
from sudokulite.models import Board, InsertResult, SolveResult
from sudokulite.settings import SolverSettings

UNLIMITED = SolverSettings()


def dead_cell_board():
    """r1c1 sees all nine values across its row, column and box."""
    b = Board(9)
    for r, c, v in [
        (1, 2, 1), (1, 3, 2), (1, 4, 3), (1, 5, 4),
        (2, 1, 5), (3, 1, 6), (4, 1, 7), (5, 1, 8),
        (2, 2, 9),
    ]:
        assert b.insert(r, c, v) is InsertResult.SUCCESS
    return b


# -----------------------------
# Deduction rules
# -----------------------------

def test_value_placed_n_minus_one_times_fills_last_spot():
    b = Board(4)
    for r, c in [(1, 1), (2, 3), (3, 2)]:
        b.insert(r, c, 1)
    b.rebuild_notes()
    stats = SolveStats()
    assert _fill_almost_complete_values(b, stats)
    assert b.value_at(4, 4) == 1
    assert stats.placements["value_almost_complete"] == 1


def test_unit_missing_one_value_is_completed():
    b = Board(9)
    for c in range(1, 9):
        b.insert(1, c, c)
    b.rebuild_notes()
    assert _fill_almost_complete_units(b, None)
    assert b.value_at(1, 9) == 9


def test_naked_single_is_placed():
    b = Board(4)
    b.insert(1, 1, 1)
    b.insert(2, 2, 2)
    b.insert(1, 4, 3)
    b.rebuild_notes()
    # r1c2 sees 1 and 3 in its row and 2 in its column and box
    assert b.candidates(1, 2) == [4]
    stats = SolveStats()
    assert _fill_naked_singles(b, stats)
    assert b.value_at(1, 2) == 4
    assert stats.placements["naked_single"] >= 1


def test_hidden_single_is_placed():
    b = Board(9)
    for r, c in [(2, 5), (3, 8), (5, 2), (8, 3)]:
        b.insert(r, c, 1)
    b.rebuild_notes()
    assert len(b.candidates(1, 1)) == 9
    stats = SolveStats()
    assert _fill_hidden_singles(b, stats)
    assert b.value_at(1, 1) == 1
    assert stats.placements["hidden_single"] >= 1


def test_empty_notes_stop_naked_single_scan():
    b = dead_cell_board()
    b.rebuild_notes()
    assert b.candidates(1, 1) == []
    assert not _fill_naked_singles(b, None)


# -----------------------------
# Propagation
# -----------------------------

def test_propagate_completes_nearly_full_board():
    grid = pattern_solution(4)
    for r, c in [(0, 0), (1, 3), (2, 1), (3, 2), (3, 3)]:
        grid[r][c] = 0
    b = Board.from_grid(grid)
    assert propagate(b) is Propagation.COMPLETE
    assert b.to_grid() == pattern_solution(4)


def test_propagate_stalls_on_empty_board():
    b = Board(9)
    assert propagate(b) is Propagation.STALLED
    assert b.total_appearances == 0
    assert all(len(b.candidates(r, c)) == 9 for r in range(1, 10) for c in range(1, 10))


def test_propagate_detects_dead_cell():
    assert propagate(dead_cell_board()) is Propagation.CONTRADICTION


def test_choose_branch_cell_prefers_fewest_candidates():
    b = Board(4)
    b.insert(1, 1, 1)
    b.insert(1, 2, 2)
    b.rebuild_notes()
    # row 1 cells 3 and 4 have two candidates each; first in scan order wins
    assert choose_branch_cell(b) == (0, 2)


def test_choose_branch_cell_reports_dead_cell():
    b = dead_cell_board()
    b.rebuild_notes()
    assert choose_branch_cell(b) is None


# -----------------------------
# Solve
# -----------------------------

def test_scenario_small_board_solves():
    b = Board(4)
    for args in [(1, 1, 1), (1, 2, 2), (2, 1, 3)]:
        assert b.insert(*args) is InsertResult.SUCCESS
    assert solve(b, UNLIMITED) is SolveResult.SOLVED
    grid = b.to_grid()
    assert is_valid_solution(grid)
    assert grid[0][:2] == [1, 2]
    assert grid[1][0] == 3
    assert b.total_appearances == 16


def test_scenario_dead_cell_is_unsolvable():
    b = dead_cell_board()
    solver = Solver(UNLIMITED)
    assert solver.solve(b) is SolveResult.UNSOLVABLE
    assert solver.last_status == "unsolvable"


@pytest.mark.parametrize("size", [1, 4, 9])
def test_scenario_empty_board_solves(size):
    b = Board(size)
    solver = Solver(UNLIMITED)
    assert solver.solve(b) is SolveResult.SOLVED
    assert is_valid_solution(b.to_grid())
    assert b.total_appearances == size * size
    assert all(b.appearances[v] == size for v in range(1, size + 1))


def test_classic_puzzle_has_expected_solution(wiki_puzzle):
    b = Board.from_grid(wiki_puzzle)
    assert solve(b, UNLIMITED) is SolveResult.SOLVED
    assert b.to_grid() == WIKI_SOLUTION


def test_hard_puzzle_needs_guessing():
    b = Board.from_grid(HARD_PUZZLE)
    solver = Solver(UNLIMITED)
    assert solver.solve(b) is SolveResult.SOLVED
    grid = b.to_grid()
    assert is_valid_solution(grid)
    assert keeps_givens(HARD_PUZZLE, grid)
    assert solver.stats.guesses >= 1
    assert solver.stats.max_depth >= 1
    assert solver.last_status == "solved"


def test_sixteen_by_sixteen_board_solves():
    puzzle = pattern_solution(16)
    for r in range(16):
        for c in range(16):
            if (r + 2 * c) % 3 == 0:
                puzzle[r][c] = 0
    b = Board.from_grid(puzzle)
    assert solve(b, UNLIMITED) is SolveResult.SOLVED
    grid = b.to_grid()
    assert is_valid_solution(grid)
    assert keeps_givens(puzzle, grid)


def test_solved_board_is_left_alone():
    b = Board.from_grid(WIKI_SOLUTION)
    notes_before = [[list(t) for t in row] for row in b.notes]
    solver = Solver(UNLIMITED)
    assert solver.solve(b) is SolveResult.SOLVED
    assert b.to_grid() == WIKI_SOLUTION
    assert [[list(t) for t in row] for row in b.notes] == notes_before
    assert solver.stats.guesses == 0
    assert solver.stats.deduced == 0


def test_solving_twice_is_stable(wiki_puzzle):
    b = Board.from_grid(wiki_puzzle)
    solve(b, UNLIMITED)
    first = b.to_grid()
    assert solve(b, UNLIMITED) is SolveResult.SOLVED
    assert b.to_grid() == first


def test_guess_limit_raises():
    b = Board(9)
    with pytest.raises(SearchLimitExceeded):
        Solver(SolverSettings(max_guesses=0)).solve(b)


def test_solve_reads_limit_from_environment(monkeypatch):
    monkeypatch.setenv("SUDOKULITE_MAX_GUESSES", "0")
    with pytest.raises(SearchLimitExceeded):
        solve(Board(4))


def test_stats_reset_between_calls(no_solver_env):
    solver = Solver()
    solver.solve(Board.from_grid(HARD_PUZZLE))
    assert solver.stats.guesses >= 1
    solver.solve(Board.from_grid(WIKI_SOLUTION))
    assert solver.stats.guesses == 0
