from __future__ import annotations

from typing import Dict, List, Optional

from ..schemas import TERMINAL_STATUSES, SolverStep, TableauRow
from .standard_form import StandardForm
from .tableau import Tableau


def _clean(value: float) -> float:
    value = float(value)
    if abs(value) < 1e-12:
        return 0.0
    return value


class StepRecorder:
    """Append-only trace of tableau snapshots; indices start at 1."""

    def __init__(self, sf: StandardForm) -> None:
        self._steps: List[SolverStep] = []
        self._decision_headers = [
            name for name, kind in zip(sf.headers, sf.column_types) if kind == "decision"
        ]
        self._components = {
            name: [(sf.headers[idx], coef) for idx, coef in comps]
            for name, comps in sf.components.items()
        }

    @property
    def steps(self) -> List[SolverStep]:
        return list(self._steps)

    @property
    def last(self) -> Optional[SolverStep]:
        return self._steps[-1] if self._steps else None

    def record(
        self,
        tableau: Tableau,
        description: str,
        status: str,
        *,
        ratios: Optional[List[Optional[float]]] = None,
        operations: Optional[List[str]] = None,
        pivot_row: Optional[int] = None,
        pivot_col: Optional[int] = None,
        entering: Optional[str] = None,
        leaving: Optional[str] = None,
        is_optimal: bool = False,
        equations: Optional[List[str]] = None,
    ) -> SolverStep:
        ratios = ratios or [None] * tableau.num_rows
        cb = tableau.cb
        rows = [
            TableauRow(
                basic_var=tableau.headers[col],
                basic_var_cost=_clean(cb[i]),
                coefficients=[_clean(v) for v in tableau.matrix[i]],
                rhs=_clean(tableau.rhs[i]),
                ratio=None if ratios[i] is None else _clean(ratios[i]),
            )
            for i, col in enumerate(tableau.basis)
        ]
        terminal = status in TERMINAL_STATUSES

        step = SolverStep(
            step_index=len(self._steps) + 1,
            phase=tableau.phase,
            description=description,
            operations=list(operations or []),
            tableau=rows,
            headers=list(tableau.headers),
            cj_row=[_clean(v) for v in tableau.costs],
            zj_row=[_clean(v) for v in tableau.zj()],
            net_evaluation_row=[_clean(v) for v in tableau.net_evaluation()],
            pivot_row_idx=pivot_row,
            pivot_col_idx=pivot_col,
            entering_var=entering,
            leaving_var=leaving,
            is_optimal=is_optimal,
            status=status,
            z_value=_clean(tableau.objective_value()),
            solution=self._solution(tableau) if terminal else None,
            standard_form_equations=list(equations) if equations is not None else None,
        )
        self._steps.append(step)
        return step

    def _solution(self, tableau: Tableau) -> Dict[str, float]:
        values = {name: _clean(v) for name, v in zip(tableau.headers, tableau.values())}
        solution: Dict[str, float] = {}
        for name in self._decision_headers:
            solution[name] = values.get(name, 0.0)
        for name, comps in self._components.items():
            if len(comps) > 1:
                solution[name] = _clean(sum(coef * values.get(header, 0.0) for header, coef in comps))
        for col in tableau.basis:
            header = tableau.headers[col]
            solution.setdefault(header, values[header])
        return solution
