from __future__ import annotations


class SudokuError(Exception):
    """Base class for every error raised by sudokulite."""


class InvalidSize(SudokuError, ValueError):
    pass


class OutOfRange(SudokuError, IndexError):
    """A row, column or value argument fell outside 1..size (caller bug)."""


class InvalidGrid(SudokuError, ValueError):
    pass


class SearchLimitExceeded(SudokuError, RuntimeError):
    pass
