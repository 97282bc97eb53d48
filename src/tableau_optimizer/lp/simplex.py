from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..exceptions import MalformedInputError
from ..schemas import LPProblem, LPSolution, SolveOptions, SolverMethod, SolverStep
from .phases import run_method
from .recorder import StepRecorder
from .sensitivity import shadow_prices
from .standard_form import build_standard_form

logger = logging.getLogger(__name__)


def load_problem(data: Dict[str, Any]) -> LPProblem:
    """Validate an extracted/JSON problem payload, reporting failures as MalformedInputError."""

    try:
        return LPProblem.model_validate(data)
    except ValidationError as exc:
        raise MalformedInputError(f"Invalid problem payload: {exc}") from exc


def _coerce_method(method: SolverMethod | str) -> SolverMethod:
    if isinstance(method, SolverMethod):
        return method
    try:
        return SolverMethod(method)
    except ValueError:
        try:
            return SolverMethod[str(method).upper().replace(" ", "_").replace("-", "_")]
        except KeyError as exc:
            raise MalformedInputError(f"Unknown solver method '{method}'.") from exc


def solve(
    problem: LPProblem,
    method: SolverMethod | str | None = None,
    options: Optional[SolveOptions] = None,
) -> List[SolverStep]:
    """
    Run the tableau simplex on ``problem`` and return every step of the trace.
    The last step carries the terminal status, the solution map and the
    objective value. Raises MalformedInputError before any work is done if the
    problem is inconsistent.
    """

    opts = options or SolveOptions()
    if method is not None:
        opts = opts.model_copy(update={"method": _coerce_method(method)})

    sf = build_standard_form(problem)
    logger.debug(
        "Solving %s with %s: %d rows, %d columns",
        problem.name,
        opts.method.value,
        len(sf.constraint_ids),
        len(sf.headers),
    )
    recorder = StepRecorder(sf)
    run_method(sf, opts, recorder)
    return recorder.steps


def summarize(problem: LPProblem, steps: List[SolverStep], method: SolverMethod) -> LPSolution:
    final = steps[-1]
    iterations = sum(1 for step in steps if step.pivot_col_idx is not None)
    has_optimum = final.status in ("OPTIMAL", "ALTERNATIVE_SOLUTION")
    x = None
    if has_optimum and final.solution is not None:
        x = {name: final.solution.get(name, 0.0) for name in problem.variables}

    return LPSolution(
        status=final.status,
        objective_value=final.z_value if has_optimum else None,
        x=x,
        shadow_prices=shadow_prices(problem, final) if has_optimum else None,
        iterations=iterations,
        method=method,
        message=final.description,
    )


def solve_lp(problem: LPProblem, options: Optional[SolveOptions] = None) -> LPSolution:
    opts = options or SolveOptions()
    return summarize(problem, solve(problem, options=opts), opts.method)
