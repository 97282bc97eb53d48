"""Tableau Optimizer: step-by-step LP simplex solver for OR workbenches."""

from .exceptions import MalformedInputError
from .lp import solve, solve_lp
from .schemas import LPProblem, SolveOptions, SolverMethod, SolverStep

__all__ = [
    "MalformedInputError",
    "solve",
    "solve_lp",
    "LPProblem",
    "SolveOptions",
    "SolverMethod",
    "SolverStep",
]
