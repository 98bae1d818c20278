# tests/conftest.py
import math
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so "sudokulite" imports without an install
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


WIKI_PUZZLE = [
    [5, 3, 0, 0, 7, 0, 0, 0, 0],
    [6, 0, 0, 1, 9, 5, 0, 0, 0],
    [0, 9, 8, 0, 0, 0, 0, 6, 0],
    [8, 0, 0, 0, 6, 0, 0, 0, 3],
    [4, 0, 0, 8, 0, 3, 0, 0, 1],
    [7, 0, 0, 0, 2, 0, 0, 0, 6],
    [0, 6, 0, 0, 0, 0, 2, 8, 0],
    [0, 0, 0, 4, 1, 9, 0, 0, 5],
    [0, 0, 0, 0, 8, 0, 0, 7, 9],
]

WIKI_SOLUTION = [
    [5, 3, 4, 6, 7, 8, 9, 1, 2],
    [6, 7, 2, 1, 9, 5, 3, 4, 8],
    [1, 9, 8, 3, 4, 2, 5, 6, 7],
    [8, 5, 9, 7, 6, 1, 4, 2, 3],
    [4, 2, 6, 8, 5, 3, 7, 9, 1],
    [7, 1, 3, 9, 2, 4, 8, 5, 6],
    [9, 6, 1, 5, 3, 7, 2, 8, 4],
    [2, 8, 7, 4, 1, 9, 6, 3, 5],
    [3, 4, 5, 2, 8, 6, 1, 7, 9],
]

# widely published "hardest" puzzle; singles alone do not finish it
HARD_PUZZLE = [
    [8, 0, 0, 0, 0, 0, 0, 0, 0],
    [0, 0, 3, 6, 0, 0, 0, 0, 0],
    [0, 7, 0, 0, 9, 0, 2, 0, 0],
    [0, 5, 0, 0, 0, 7, 0, 0, 0],
    [0, 0, 0, 0, 4, 5, 7, 0, 0],
    [0, 0, 0, 1, 0, 0, 0, 3, 0],
    [0, 0, 1, 0, 0, 0, 0, 6, 8],
    [0, 0, 8, 5, 0, 0, 0, 1, 0],
    [0, 9, 0, 0, 0, 0, 4, 0, 0],
]


def pattern_solution(n):
    """A valid complete N x N grid built from the standard shifting pattern."""
    base = math.isqrt(n)
    return [[(base * (r % base) + r // base + c) % n + 1 for c in range(n)] for r in range(n)]


def units_of(grid):
    n = len(grid)
    base = math.isqrt(n)
    for i in range(n):
        yield [grid[i][c] for c in range(n)]
        yield [grid[r][i] for r in range(n)]
        br, bc = base * (i // base), base * (i % base)
        yield [grid[r][c] for r in range(br, br + base) for c in range(bc, bc + base)]


def no_duplicates(grid):
    for unit in units_of(grid):
        filled = [v for v in unit if v]
        if len(filled) != len(set(filled)):
            return False
    return True


def is_valid_solution(grid):
    n = len(grid)
    return all(sorted(unit) == list(range(1, n + 1)) for unit in units_of(grid))


def keeps_givens(puzzle, grid):
    return all(p == 0 or p == g for prow, grow in zip(puzzle, grid) for p, g in zip(prow, grow))


@pytest.fixture
def wiki_puzzle():
    return [row[:] for row in WIKI_PUZZLE]


@pytest.fixture
def no_solver_env(monkeypatch):
    monkeypatch.delenv("SUDOKULITE_MAX_GUESSES", raising=False)
    monkeypatch.delenv("SUDOKULITE_LOG_LEVEL", raising=False)
