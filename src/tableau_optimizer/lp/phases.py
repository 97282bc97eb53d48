from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

from ..schemas import SolveOptions, SolverMethod
from .pivot import pivot
from .recorder import StepRecorder
from .standard_form import StandardForm
from .status import Classification, classify, positive_artificials
from .tableau import Tableau, big_m_costs, build_tableau, drop_columns, drop_rows, phase_one_costs

logger = logging.getLogger(__name__)

BIG_M_MARGIN = 100.0


def resolve_method(sf: StandardForm, method: SolverMethod) -> Tuple[SolverMethod, Optional[str]]:
    """Plain simplex has no starting basis for >= or = rows; such problems go through Two-Phase."""

    if method == SolverMethod.SIMPLEX and sf.needs_artificials:
        logger.warning("Problem needs artificial variables; routing Simplex through Two-Phase")
        return (
            SolverMethod.TWO_PHASE,
            "Plain Simplex cannot start without a slack basis for '>=' or '=' constraints; "
            "solving with the Two-Phase method instead.",
        )
    return method, None


def resolve_big_m(sf: StandardForm, big_m: float) -> float:
    magnitudes = [np.abs(sf.costs).max(initial=0.0), np.abs(sf.rhs).max(initial=0.0)]
    if sf.matrix.size:
        magnitudes.append(np.abs(sf.matrix).max())
    floor = BIG_M_MARGIN * max(1.0, float(max(magnitudes)))
    if big_m < floor:
        logger.warning("Big-M value %g is too small for this problem; using %g", big_m, floor)
        return floor
    return big_m


def run_method(sf: StandardForm, opts: SolveOptions, recorder: StepRecorder) -> None:
    method, note = resolve_method(sf, opts.method)
    if method == SolverMethod.TWO_PHASE and sf.needs_artificials:
        _run_two_phase(sf, opts, recorder, note)
    elif method == SolverMethod.BIG_M:
        big_m = resolve_big_m(sf, opts.big_m)
        tableau = build_tableau(sf, big_m_costs(sf, big_m), sf.sense, big_m=big_m)
        intro = f"Initial tableau (Big-M, M = {big_m:g})."
        _iterate(tableau, opts, recorder, 0, intro, equations=sf.equations)
    else:
        tableau = build_tableau(sf, sf.costs, sf.sense)
        intro = "Initial tableau."
        if method == SolverMethod.TWO_PHASE:
            intro = "Initial tableau. No artificial variables are needed, so Phase 1 is skipped."
        if note:
            intro = f"{note} {intro}"
        _iterate(tableau, opts, recorder, 0, intro, equations=sf.equations)


def _run_two_phase(
    sf: StandardForm,
    opts: SolveOptions,
    recorder: StepRecorder,
    note: Optional[str],
) -> None:
    intro = "Initial tableau (Phase 1: minimise the sum of artificial variables)."
    if note:
        intro = f"{note} {intro}"
    tableau = build_tableau(sf, phase_one_costs(sf), "min", phase=1)
    tableau, cls, iterations = _iterate(
        tableau, opts, recorder, 0, intro, equations=sf.equations, phase_one=True
    )
    if not cls.is_optimal or positive_artificials(tableau, opts.zero_tol):
        return

    logger.info("Phase 1 complete after %d pivots", iterations)
    tableau, iterations, redundant = _drive_out_artificials(tableau, opts, recorder, iterations)

    artificial = [j for j, kind in enumerate(tableau.column_types) if kind == "artificial"]
    tableau = drop_columns(tableau, artificial)
    real_costs = np.array(
        [sf.costs[sf.headers.index(name)] for name in tableau.headers], dtype=float
    )
    tableau = tableau.with_costs(real_costs, sf.sense, phase=2)

    intro = "Phase 2 initial tableau: artificial columns removed and the original objective restored."
    if redundant:
        intro += f" Redundant constraint row(s) {', '.join(redundant)} removed."
    _iterate(tableau, opts, recorder, iterations, intro)


def _drive_out_artificials(
    tableau: Tableau,
    opts: SolveOptions,
    recorder: StepRecorder,
    iterations: int,
) -> Tuple[Tableau, int, List[str]]:
    redundant_rows: List[int] = []
    redundant_labels: List[str] = []
    for row in range(tableau.num_rows):
        col = tableau.basis[row]
        if tableau.column_types[col] != "artificial":
            continue
        candidates = [
            j
            for j in tableau.non_basic()
            if tableau.column_types[j] != "artificial" and abs(tableau.matrix[row, j]) > opts.tol
        ]
        leaving = tableau.headers[col]
        if not candidates:
            logger.info("Row %d is redundant; %s stays basic at zero and the row is dropped", row + 1, leaving)
            redundant_rows.append(row)
            redundant_labels.append(f"R{row + 1}")
            continue
        entering = candidates[0]
        tableau, operations = pivot(tableau, row, entering, opts.tol)
        iterations += 1
        recorder.record(
            tableau,
            f"Iteration {iterations}: artificial {leaving} is basic at zero level; "
            f"{tableau.headers[entering]} replaces it (pivot at row {row + 1}, "
            f"column {entering + 1}).",
            "IN_PROGRESS",
            operations=operations,
            pivot_row=row,
            pivot_col=entering,
            entering=tableau.headers[entering],
            leaving=leaving,
            is_optimal=True,
        )
    if redundant_rows:
        tableau = drop_rows(tableau, redundant_rows)
    return tableau, iterations, redundant_labels


def _iterate(
    tableau: Tableau,
    opts: SolveOptions,
    recorder: StepRecorder,
    iterations: int,
    intro: str,
    equations: Optional[List[str]] = None,
    phase_one: bool = False,
) -> Tuple[Tableau, Classification, int]:
    """Record ``tableau`` and keep pivoting until the classifier stops."""

    cls = classify(tableau, opts, iterations)
    _record(tableau, cls, opts, recorder, intro, phase_one, equations=equations)

    while cls.status == "IN_PROGRESS":
        entering, row = cls.entering, cls.leaving
        entering_name = tableau.headers[entering]
        leaving_name = tableau.headers[tableau.basis[row]]
        tableau, operations = pivot(tableau, row, entering, opts.tol)
        iterations += 1
        cls = classify(tableau, opts, iterations)
        description = (
            f"Iteration {iterations}: {entering_name} enters, {leaving_name} leaves "
            f"(pivot at row {row + 1}, column {entering + 1})."
        )
        _record(
            tableau,
            cls,
            opts,
            recorder,
            description,
            phase_one,
            operations=operations,
            pivot_row=row,
            pivot_col=entering,
            entering=entering_name,
            leaving=leaving_name,
        )
    return tableau, cls, iterations


def _record(
    tableau: Tableau,
    cls: Classification,
    opts: SolveOptions,
    recorder: StepRecorder,
    description: str,
    phase_one: bool,
    **fields,
) -> None:
    status = cls.status
    stuck = positive_artificials(tableau, opts.zero_tol) if status != "IN_PROGRESS" else []
    if stuck and status == "UNBOUNDED":
        # the ratio test only fails once no column has a favourable M part
        status = "INFEASIBLE"
        note = (
            f"Artificial variable(s) {', '.join(stuck)} remain basic at a positive level and no "
            "column can reduce them: no assignment satisfies all constraints."
        )
    elif cls.is_optimal:
        if stuck:
            status = "INFEASIBLE"
            note = (
                f"Artificial variable(s) {', '.join(stuck)} remain basic at a positive level: "
                "no assignment satisfies all constraints."
            )
        elif phase_one:
            status = "IN_PROGRESS"
            note = "Phase 1 optimum reached: every artificial variable is zero."
        elif status == "ALTERNATIVE_SOLUTION":
            note = (
                "Optimality condition satisfied; a non-basic column has zero net evaluation, "
                "so alternative optimal solutions exist."
            )
        else:
            note = "Optimality condition satisfied: no non-basic column improves the objective."
    elif status == "UNBOUNDED":
        note = (
            f"{tableau.headers[cls.entering]} can enter but no row has a positive coefficient "
            "in its column: the objective is unbounded."
        )
    elif status == "ITERATION_LIMIT":
        note = f"Stopped after {opts.max_iterations} pivots without reaching a terminal state."
    else:
        note = (
            f"Next: {tableau.headers[cls.entering]} enters, "
            f"{tableau.headers[tableau.basis[cls.leaving]]} leaves."
        )

    if status != "IN_PROGRESS":
        logger.info("Simplex terminated with status %s", status)

    recorder.record(
        tableau,
        f"{description} {note}",
        status,
        ratios=cls.ratios,
        is_optimal=cls.is_optimal and status != "INFEASIBLE",
        **fields,
    )
