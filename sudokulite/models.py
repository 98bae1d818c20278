from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from .errors import InvalidGrid, InvalidSize, OutOfRange
from .tracker import BitsetTracker

Grid = List[List[int]]  # 0 = empty, values 1..N
Cell = Tuple[int, int]  # (row, col) 0-based, internal only


class InsertResult(Enum):
    SUCCESS = "success"
    ALREADY_FILLED = "already_filled"
    CONTRADICTION = "contradiction"


class SolveResult(Enum):
    SOLVED = "solved"
    UNSOLVABLE = "unsolvable"


@dataclass(frozen=True)
class BoardSpec:
    n: int     # board size: N x N (e.g., 9)
    base: int  # box size: base x base (e.g., 3)


def board_spec(n: int) -> BoardSpec:
    """Validate N and build basic constants."""
    if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
        raise InvalidSize(f"Invalid size: {n!r}. Size must be a positive integer.")
    base = math.isqrt(n)
    if base * base != n:
        raise InvalidSize(f"Invalid size: {n}. Only perfect squares are supported (4, 9, 16, ...).")
    return BoardSpec(n=n, base=base)


def box_index(r: int, c: int, base: int) -> int:
    # boxes are numbered left to right, then top to bottom
    return (r // base) * base + (c // base)


class Board:
    """
    A generalized Sudoku board.

    Besides the grid, the board keeps one occupancy tracker per row, column
    and box, one candidate tracker ("notes") per cell, and per-value placement
    counters. `insert` is the only operation that fills cells, and it keeps
    all of these in step.
    """

    def __init__(self, size: int) -> None:
        spec = board_spec(size)
        self.size = spec.n
        self.base = spec.base
        n = self.size

        self.grid: Grid = [[0] * n for _ in range(n)]
        self.rows = [BitsetTracker(n) for _ in range(n)]
        self.cols = [BitsetTracker(n) for _ in range(n)]
        self.boxes = [BitsetTracker(n) for _ in range(n)]
        self.notes = [[BitsetTracker(n) for _ in range(n)] for _ in range(n)]
        # appearances[v] for v in 1..n; slot 0 unused
        self.appearances = [0] * (n + 1)
        self.total_appearances = 0

        self.row_cells: List[List[Cell]] = [[(r, c) for c in range(n)] for r in range(n)]
        self.col_cells: List[List[Cell]] = [[(r, c) for r in range(n)] for c in range(n)]
        self.box_cells: List[List[Cell]] = [[] for _ in range(n)]
        for r in range(n):
            for c in range(n):
                self.box_cells[box_index(r, c, self.base)].append((r, c))
        self._units = (
            list(zip(self.rows, self.row_cells))
            + list(zip(self.cols, self.col_cells))
            + list(zip(self.boxes, self.box_cells))
        )

    # -----------------------------
    # Queries
    # -----------------------------

    def get_size(self) -> int:
        return self.size

    @property
    def is_complete(self) -> bool:
        return self.total_appearances >= self.size * self.size

    def units(self) -> List[Tuple[BitsetTracker, List[Cell]]]:
        """Every row, column and box as (occupancy tracker, cells)."""
        return self._units

    def value_at(self, row: int, col: int) -> int:
        self._check_coords(row, col)
        return self.grid[row - 1][col - 1]

    def candidates(self, row: int, col: int) -> List[int]:
        self._check_coords(row, col)
        return list(self.notes[row - 1][col - 1])

    def to_grid(self) -> Grid:
        return [row[:] for row in self.grid]

    def _check_coords(self, row: int, col: int) -> None:
        n = self.size
        if not (1 <= row <= n and 1 <= col <= n):
            raise OutOfRange(f"Cell ({row},{col}) is outside 1..{n}.")

    # -----------------------------
    # Mutation
    # -----------------------------

    def insert(self, row: int, col: int, val: int) -> InsertResult:
        """
        Place `val` at (row, col), both 1-indexed.

        Rejected insertions (ALREADY_FILLED, CONTRADICTION) leave the board
        untouched. Out-of-range arguments raise OutOfRange.
        """
        self._check_coords(row, col)
        n = self.size
        if not 1 <= val <= n:
            raise OutOfRange(f"Value {val} is outside 1..{n}.")

        r, c = row - 1, col - 1
        if self.grid[r][c] != 0:
            return InsertResult.ALREADY_FILLED

        b = box_index(r, c, self.base)
        if self.rows[r].check(val) or self.cols[c].check(val) or self.boxes[b].check(val):
            return InsertResult.CONTRADICTION

        self.grid[r][c] = val
        self.rows[r].flip(val)
        self.cols[c].flip(val)
        self.boxes[b].flip(val)
        self.appearances[val] += 1
        self.total_appearances += 1

        own = self.notes[r][c]
        for v in list(own):
            own.clear(v)
        for cells in (self.row_cells[r], self.col_cells[c], self.box_cells[b]):
            for rr, cc in cells:
                self.notes[rr][cc].clear(val)

        return InsertResult.SUCCESS

    def rebuild_notes(self) -> None:
        """Reset every empty cell's notes to the values its units still allow."""
        n = self.size
        for r in range(n):
            for c in range(n):
                if self.grid[r][c]:
                    continue
                row_t = self.rows[r]
                col_t = self.cols[c]
                box_t = self.boxes[box_index(r, c, self.base)]
                notes = self.notes[r][c]
                for v in range(1, n + 1):
                    if row_t.check(v) or col_t.check(v) or box_t.check(v):
                        notes.clear(v)
                    else:
                        notes.set(v)

    def copy_from(self, src: "Board") -> None:
        """Make this board's state identical to `src`, reusing its trackers."""
        if src.size != self.size:
            raise ValueError(f"Cannot copy a {src.size}x{src.size} board into a {self.size}x{self.size} one.")
        n = self.size
        for i in range(n):
            self.grid[i][:] = src.grid[i]
            self.rows[i].copy_from(src.rows[i])
            self.cols[i].copy_from(src.cols[i])
            self.boxes[i].copy_from(src.boxes[i])
            for j in range(n):
                self.notes[i][j].copy_from(src.notes[i][j])
        self.appearances[:] = src.appearances
        self.total_appearances = src.total_appearances

    def copy(self) -> "Board":
        scratch = Board(self.size)
        scratch.copy_from(self)
        return scratch

    # -----------------------------
    # Whole-grid import
    # -----------------------------

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[int]]) -> "Board":
        """
        Build a board from an N x N grid (0 = empty).
        Raises InvalidSize / InvalidGrid with a user-facing message.
        """
        n = len(grid)
        if n == 0 or any(len(row) != n for row in grid):
            raise InvalidGrid("Board must be square (N x N).")

        board = cls(n)
        for r, row in enumerate(grid):
            for c, v in enumerate(row):
                if isinstance(v, bool) or not isinstance(v, int):
                    raise InvalidGrid(f"Invalid value at ({r+1},{c+1}): {v} (not an integer).")
                if v < 0 or v > n:
                    raise InvalidGrid(f"Invalid value at ({r+1},{c+1}): {v} (allowed: 0..{n}).")
                if v == 0:
                    continue
                if board.insert(r + 1, c + 1, v) is not InsertResult.SUCCESS:
                    raise InvalidGrid(
                        f"Conflict: value {v} appears twice in a row/column/box (cell {r+1},{c+1})."
                    )
        return board

    def __repr__(self) -> str:
        return f"Board(size={self.size}, filled={self.total_appearances}/{self.size * self.size})"


def validate_grid(grid: Sequence[Sequence[int]]) -> Tuple[bool, str]:
    """
    Checks:
      - board is N x N with N a perfect square
      - values in 0..N
      - no duplicate values in any row/col/box (ignoring 0)
    """
    try:
        Board.from_grid(grid)
    except (InvalidGrid, InvalidSize) as e:
        return False, str(e)
    return True, "OK"
