from __future__ import annotations

from typing import Dict, List, Optional

from ..schemas import SolveOptions, LPProblem
from .simplex import solve


def analyze_infeasibility(problem: LPProblem, options: Optional[SolveOptions] = None) -> Dict[str, object]:
    """Very small IIS-style heuristic: drop each constraint and re-solve."""

    opts = options or SolveOptions()
    base_status = solve(problem, options=opts)[-1].status
    if base_status != "INFEASIBLE":
        return {
            "status": base_status,
            "message": "Problem is not infeasible.",
            "conflicting_constraints": [],
            "suggestions": [],
        }

    conflicts: List[str] = []
    for idx, cons in enumerate(problem.constraints):
        relaxed = problem.model_copy(deep=True)
        relaxed.constraints.pop(idx)
        if solve(relaxed, options=opts)[-1].status != "INFEASIBLE":
            conflicts.append(cons.id)

    if conflicts:
        suggestions = ["Relax or inspect the conflicting constraints above."]
    else:
        suggestions = ["Several constraints conflict jointly; consider relaxing right-hand sides."]

    return {
        "status": "INFEASIBLE",
        "message": "Detected infeasibility; listed constraints whose removal restores feasibility.",
        "conflicting_constraints": conflicts,
        "suggestions": suggestions,
    }
