from .errors import InvalidGrid, InvalidSize, OutOfRange, SearchLimitExceeded, SudokuError
from .tracker import BitsetTracker
from .models import Board, InsertResult, SolveResult, validate_grid
from .engine import Propagation, Solver, SolveStats, propagate, solve
from .settings import SolverSettings, load_settings

__all__ = [
    "BitsetTracker",
    "Board",
    "InsertResult",
    "InvalidGrid",
    "InvalidSize",
    "OutOfRange",
    "Propagation",
    "SearchLimitExceeded",
    "SolveResult",
    "SolveStats",
    "Solver",
    "SolverSettings",
    "SudokuError",
    "load_settings",
    "propagate",
    "solve",
    "validate_grid",
]
