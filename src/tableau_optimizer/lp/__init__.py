"""Tableau simplex engine: Simplex, Big-M and Two-Phase with step traces."""

from .simplex import solve, solve_lp, summarize, load_problem
from .sensitivity import shadow_prices, resource_usage
from .dual import dual_problem
from .parser import parse_problem_text
from .diagnostics import analyze_infeasibility

__all__ = [
    "solve",
    "solve_lp",
    "summarize",
    "load_problem",
    "shadow_prices",
    "resource_usage",
    "dual_problem",
    "parse_problem_text",
    "analyze_infeasibility",
]
