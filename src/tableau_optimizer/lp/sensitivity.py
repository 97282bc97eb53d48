from __future__ import annotations

from typing import Dict, List

from ..schemas import ConstraintSign, LPProblem, ResourceUsage, SolverStep
from .standard_form import build_standard_form

CLAMP = 1e-6


def shadow_prices(problem: LPProblem, final_step: SolverStep) -> Dict[str, float]:
    """
    Shadow price of every constraint that owns a slack or surplus column, read
    from the net-evaluation row of the terminal step. The value is the change
    in the objective per unit increase of the constraint's right-hand side.
    Equality constraints have no such column and are left out.
    """

    if final_step.status not in ("OPTIMAL", "ALTERNATIVE_SOLUTION"):
        raise ValueError(f"Shadow prices need an optimal tableau, got status {final_step.status}.")

    sf = build_standard_form(problem)
    positions = {name: idx for idx, name in enumerate(final_step.headers)}
    prices: Dict[str, float] = {}
    for cons_id, flipped in zip(sf.constraint_ids, sf.flipped):
        if cons_id not in sf.aux_columns:
            continue
        col = sf.aux_columns[cons_id]
        net = final_step.net_evaluation_row[positions[sf.headers[col]]]
        value = -net if sf.column_types[col] == "slack" else net
        if flipped:
            value = -value
        if abs(value) < CLAMP:
            value = 0.0
        prices[cons_id] = float(value)
    return prices


def resource_usage(problem: LPProblem, final_step: SolverStep, tol: float = 1e-6) -> List[ResourceUsage]:
    """Per-constraint consumption, remaining slack and shadow price at the optimum."""

    prices = shadow_prices(problem, final_step)
    solution = final_step.solution or {}
    values = [solution.get(name, 0.0) for name in problem.variables]

    report: List[ResourceUsage] = []
    for cons in problem.constraints:
        used = float(sum(coef * value for coef, value in zip(cons.coefficients, values)))
        if cons.sign == ConstraintSign.LESS_EQ:
            slack = cons.rhs - used
        elif cons.sign == ConstraintSign.GREATER_EQ:
            slack = used - cons.rhs
        else:
            slack = 0.0
        if abs(slack) < tol:
            slack = 0.0
        utilization = used / cons.rhs * 100.0 if cons.rhs != 0 else None
        report.append(
            ResourceUsage(
                constraint_id=cons.id,
                sign=cons.sign,
                used=used,
                available=cons.rhs,
                slack=slack,
                utilization=utilization,
                binding=slack == 0.0,
                shadow_price=prices.get(cons.id),
            )
        )
    return report
