"""Terminal driver: read a puzzle cell by cell, solve it, print the grid."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterator, List, Optional, TextIO

from .engine import Solver
from .errors import InvalidSize, SearchLimitExceeded
from .models import Board, SolveResult
from .render import render_text
from .settings import load_settings

log = logging.getLogger(__name__)

EXIT_SOLVED = 0
EXIT_UNSOLVABLE = 1
EXIT_BAD_SIZE = 2
EXIT_LIMIT = 3


def _tokens(stream: TextIO) -> Iterator[str]:
    for line in stream:
        yield from line.split()


def _ask_int(tokens: Iterator[str], out: TextIO, prompt: str, lo: int, hi: int) -> Optional[int]:
    """Prompt until a whole number in lo..hi arrives; None at end of input."""
    out.write(prompt)
    out.flush()
    for tok in tokens:
        try:
            v = int(tok)
        except ValueError:
            v = None
        if v is not None and lo <= v <= hi:
            return v
        out.write(f"Error. Must be a whole number between {lo} and {hi}.\n")
    return None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sudokulite",
        description="Enter givens as value/row/column triples (value 0 stops), then solve.",
    )
    p.add_argument("--size", type=int, default=None, help="Board size (4, 9, 16, ...). Asked for when omitted.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log solver progress at DEBUG level.")
    return p


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    tokens = _tokens(stdin if stdin is not None else sys.stdin)
    out = stdout if stdout is not None else sys.stdout

    size = args.size
    if size is None:
        out.write("Insert size: ")
        out.flush()
        raw = next(tokens, "")
        try:
            size = int(raw)
        except ValueError:
            out.write(f"Error. Invalid size: {raw!r}.\n")
            return EXIT_BAD_SIZE

    try:
        board = Board(size)
    except InvalidSize as e:
        out.write(f"Error. {e}\n")
        return EXIT_BAD_SIZE

    while True:
        val = _ask_int(tokens, out, "Insert val (insert 0 to stop): ", 0, size)
        if not val:
            break
        row = _ask_int(tokens, out, "Insert row: ", 1, size)
        col = _ask_int(tokens, out, "Insert column: ", 1, size) if row is not None else None
        if row is None or col is None:
            break
        result = board.insert(row, col, val)
        out.write(f"{result.name}\n")

    out.write("\n")
    solver = Solver(settings)
    try:
        result = solver.solve(board)
    except SearchLimitExceeded as e:
        log.warning("%s", e)
        out.write(render_text(board))
        out.write("LIMIT_EXCEEDED\n")
        return EXIT_LIMIT

    out.write(render_text(board))
    out.write(f"{result.name}\n")
    return EXIT_SOLVED if result is SolveResult.SOLVED else EXIT_UNSOLVABLE


if __name__ == "__main__":
    sys.exit(main())
