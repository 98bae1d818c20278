from __future__ import annotations

from typing import List, Sequence

from .models import Board


def _rows(board_or_grid) -> Sequence[Sequence[int]]:
    if isinstance(board_or_grid, Board):
        return board_or_grid.grid
    return board_or_grid


def render_text(board_or_grid) -> str:
    """
    Plain-text grid: a dashed rule above every row and below the last,
    each cell written as "|<digit>" (0 = empty).
    """
    grid = _rows(board_or_grid)
    rule = "-" * (2 * len(grid) + 1)
    lines: List[str] = []
    for row in grid:
        lines.append(rule)
        lines.append("".join(f"|{v}" for v in row) + "|")
    lines.append(rule)
    return "\n".join(lines) + "\n"


def board_to_csv(board_or_grid) -> bytes:
    lines = [",".join(str(v) for v in row) for row in _rows(board_or_grid)]
    return ("\n".join(lines) + "\n").encode("utf-8")
