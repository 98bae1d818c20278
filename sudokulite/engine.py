from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .errors import SearchLimitExceeded
from .models import Board, Cell, InsertResult, SolveResult
from .settings import SolverSettings, load_settings
from .tracker import BitsetTracker

log = logging.getLogger(__name__)

RULES = (
    "value_almost_complete",
    "unit_almost_complete",
    "naked_single",
    "hidden_single",
)


class Propagation(Enum):
    COMPLETE = "complete"
    STALLED = "stalled"
    CONTRADICTION = "contradiction"


@dataclass
class SolveStats:
    placements: Dict[str, int] = field(default_factory=lambda: {rule: 0 for rule in RULES})
    guesses: int = 0
    failed_branches: int = 0
    max_depth: int = 0

    @property
    def deduced(self) -> int:
        return sum(self.placements.values())


# -----------------------------
# Propagation
# -----------------------------

def _place(board: Board, r: int, c: int, v: int, rule: str, stats: Optional[SolveStats]) -> bool:
    """Apply a forced placement; False means the board cannot be completed."""
    if board.insert(r + 1, c + 1, v) is not InsertResult.SUCCESS:
        log.debug("%s: forced %d at (%d,%d) was rejected", rule, v, r + 1, c + 1)
        return False
    if stats is not None:
        stats.placements[rule] += 1
    return True


def _only_unit_missing(trackers: List[BitsetTracker], v: int) -> Optional[int]:
    missing = [i for i, t in enumerate(trackers) if not t.check(v)]
    return missing[0] if len(missing) == 1 else None


def _fill_almost_complete_values(board: Board, stats: Optional[SolveStats]) -> bool:
    # a value placed N-1 times has exactly one row and one column left for it
    n = board.size
    for v in range(1, n + 1):
        if board.appearances[v] != n - 1:
            continue
        row = _only_unit_missing(board.rows, v)
        col = _only_unit_missing(board.cols, v)
        if row is None or col is None:
            continue
        if not _place(board, row, col, v, "value_almost_complete", stats):
            return False
    return True


def _fill_almost_complete_units(board: Board, stats: Optional[SolveStats]) -> bool:
    n = board.size
    for tracker, cells in board.units():
        if tracker.count != n - 1:
            continue
        v = next(tracker.missing())
        empty = [(r, c) for r, c in cells if board.grid[r][c] == 0]
        if len(empty) != 1:
            return False
        r, c = empty[0]
        if not _place(board, r, c, v, "unit_almost_complete", stats):
            return False
    return True


def _fill_naked_singles(board: Board, stats: Optional[SolveStats]) -> bool:
    n = board.size
    for r in range(n):
        for c in range(n):
            if board.grid[r][c]:
                continue
            notes = board.notes[r][c]
            if notes.count == 0:
                log.debug("no candidates left at (%d,%d)", r + 1, c + 1)
                return False
            if notes.count == 1:
                if not _place(board, r, c, notes.first(), "naked_single", stats):
                    return False
    return True


def _fill_hidden_singles(board: Board, stats: Optional[SolveStats]) -> bool:
    n = board.size
    units = board.units()
    for v in range(1, n + 1):
        for tracker, cells in units:
            if tracker.check(v):
                continue
            holders: List[Cell] = []
            for r, c in cells:
                if board.grid[r][c] == 0 and board.notes[r][c].check(v):
                    holders.append((r, c))
                    if len(holders) > 1:
                        break
            if not holders:
                log.debug("value %d has nowhere to go in a unit", v)
                return False
            if len(holders) == 1:
                r, c = holders[0]
                if not _place(board, r, c, v, "hidden_single", stats):
                    return False
    return True


_PASS = (
    _fill_almost_complete_values,
    _fill_almost_complete_units,
    _fill_naked_singles,
    _fill_hidden_singles,
)


def propagate(board: Board, stats: Optional[SolveStats] = None) -> Propagation:
    """
    Rebuild notes, then apply deduction passes until a pass places nothing
    or the board is full. Never guesses.
    """
    board.rebuild_notes()
    progressed = True
    while progressed and not board.is_complete:
        before = board.total_appearances
        for rule in _PASS:
            if not rule(board, stats):
                return Propagation.CONTRADICTION
            if board.is_complete:
                break
        progressed = board.total_appearances > before

    if board.is_complete:
        return Propagation.COMPLETE
    log.debug("propagation stalled with %d/%d cells filled", board.total_appearances, board.size ** 2)
    return Propagation.STALLED


# -----------------------------
# Backtracking
# -----------------------------

def choose_branch_cell(board: Board) -> Optional[Cell]:
    """
    Empty cell with the fewest candidates, first in row-major order on ties.
    None if some empty cell has no candidates at all.
    """
    best: Optional[Cell] = None
    best_count = board.size + 1
    for r in range(board.size):
        for c in range(board.size):
            if board.grid[r][c]:
                continue
            cnt = board.notes[r][c].count
            if cnt == 0:
                return None
            if cnt < best_count:
                best, best_count = (r, c), cnt
                if cnt == 1:
                    return best
    return best


class Solver:
    """Propagation plus minimum-remaining-values backtracking over scratch boards."""

    def __init__(self, settings: Optional[SolverSettings] = None) -> None:
        self.settings = settings if settings is not None else load_settings()
        self.stats = SolveStats()
        self.last_status = "idle"

    def solve(self, board: Board) -> SolveResult:
        """
        Fill `board` in place. On UNSOLVABLE the board may be left partially
        filled; keep a copy beforehand if you need to roll back.
        """
        self.stats = SolveStats()
        if board.is_complete:
            self.last_status = SolveResult.SOLVED.value
            return SolveResult.SOLVED

        solved = self._solve(board, depth=0)
        if solved is None:
            result = SolveResult.UNSOLVABLE
        else:
            if solved is not board:
                board.copy_from(solved)
            result = SolveResult.SOLVED
        self.last_status = result.value
        log.debug(
            "solve finished: %s after %d guess(es), %d deduction(s)",
            result.value, self.stats.guesses, self.stats.deduced,
        )
        return result

    def _solve(self, board: Board, depth: int) -> Optional[Board]:
        """Return the board holding a full solution, or None."""
        self.stats.max_depth = max(self.stats.max_depth, depth)
        state = propagate(board, self.stats)
        if state is Propagation.COMPLETE:
            return board
        if state is Propagation.CONTRADICTION:
            return None
        return self._guess(board, depth)

    def _guess(self, board: Board, depth: int) -> Optional[Board]:
        cell = choose_branch_cell(board)
        if cell is None:
            return None
        r, c = cell
        notes = board.notes[r][c]

        for v in list(notes):
            self._count_guess()
            log.debug("depth %d: guessing %d at (%d,%d) of %s", depth, v, r + 1, c + 1, list(notes))
            scratch = board.copy()
            if scratch.insert(r + 1, c + 1, v) is InsertResult.SUCCESS:
                solved = self._solve(scratch, depth + 1)
                if solved is not None:
                    return solved
            # failed candidate is pruned from the caller's board, not the scratch copy
            self.stats.failed_branches += 1
            notes.clear(v)

        return None

    def _count_guess(self) -> None:
        limit = self.settings.max_guesses
        if limit is not None and self.stats.guesses >= limit:
            raise SearchLimitExceeded(f"Gave up after {self.stats.guesses} guess(es).")
        self.stats.guesses += 1


def solve(board: Board, settings: Optional[SolverSettings] = None) -> SolveResult:
    return Solver(settings).solve(board)
