from __future__ import annotations

from typing import List, Tuple

from ..schemas import Constraint, ConstraintSign, LPProblem, OptimizationType
from .standard_form import validate_problem


def _canonical_rows(problem: LPProblem) -> List[Tuple[str, List[float], float]]:
    """Rewrite every constraint as <= (maximise) or >= (minimise); equalities become two rows."""

    target = ConstraintSign.LESS_EQ if problem.is_max else ConstraintSign.GREATER_EQ
    rows: List[Tuple[str, List[float], float]] = []
    for cons in problem.constraints:
        coeffs = [float(v) for v in cons.coefficients]
        negated = [-v for v in coeffs]
        if cons.sign == target:
            rows.append((cons.id, coeffs, cons.rhs))
        elif cons.sign == ConstraintSign.EQ:
            rows.append((f"{cons.id}_a", coeffs, cons.rhs))
            rows.append((f"{cons.id}_b", negated, -cons.rhs))
        else:
            rows.append((cons.id, negated, -cons.rhs))
    return rows


def dual_problem(problem: LPProblem) -> LPProblem:
    """
    Build the dual of ``problem``. With the primal in canonical form
    (max cx, Ax <= b or min cx, Ax >= b) the dual has one non-negative
    variable per canonical row; free primal variables give equality rows.
    """

    validate_problem(problem)
    rows = _canonical_rows(problem)
    dual_vars = [f"y{i + 1}" for i in range(len(rows))]

    if not problem.non_negative:
        sign = ConstraintSign.EQ
    elif problem.is_max:
        sign = ConstraintSign.GREATER_EQ
    else:
        sign = ConstraintSign.LESS_EQ

    constraints = [
        Constraint(
            id=f"dual_{name}",
            coefficients=[coeffs[j] for _, coeffs, _ in rows],
            sign=sign,
            rhs=float(cost),
        )
        for j, (name, cost) in enumerate(zip(problem.variables, problem.objective_coefficients))
    ]

    return LPProblem(
        name=f"{problem.name}-dual",
        type=OptimizationType.MINIMIZE if problem.is_max else OptimizationType.MAXIMIZE,
        variables=dual_vars,
        objective_coefficients=[float(rhs) for _, _, rhs in rows],
        constraints=constraints,
        non_negative=True,
    )
