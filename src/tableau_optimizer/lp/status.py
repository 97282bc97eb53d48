from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..schemas import SolveOptions
from .pivot import ratio_test, select_entering
from .tableau import Tableau


@dataclass(frozen=True)
class Classification:
    status: str
    entering: Optional[int] = None
    leaving: Optional[int] = None
    ratios: List[Optional[float]] = field(default_factory=list)

    @property
    def is_optimal(self) -> bool:
        return self.status in ("OPTIMAL", "ALTERNATIVE_SOLUTION")


def classify(tableau: Tableau, opts: SolveOptions, iterations: int) -> Classification:
    entering = select_entering(tableau, opts.tol)
    if entering is None:
        penalty, net = tableau.split_net_evaluation()
        basic_names = {tableau.headers[col] for col in tableau.basis}
        tied = [
            j
            for j in tableau.non_basic()
            if abs(penalty[j]) <= opts.tol
            and abs(net[j]) <= opts.zero_tol
            and _split_twin(tableau.headers[j]) not in basic_names
        ]
        return Classification(status="ALTERNATIVE_SOLUTION" if tied else "OPTIMAL")

    leaving, ratios = ratio_test(tableau, entering, opts.tol)
    if leaving is None:
        return Classification(status="UNBOUNDED", entering=entering, ratios=ratios)
    if iterations >= opts.max_iterations:
        return Classification(
            status="ITERATION_LIMIT", entering=entering, leaving=leaving, ratios=ratios
        )
    return Classification(status="IN_PROGRESS", entering=entering, leaving=leaving, ratios=ratios)


def _split_twin(name: str) -> Optional[str]:
    # x__pos and x__neg always price out against each other
    if name.endswith("__pos"):
        return name[: -len("__pos")] + "__neg"
    if name.endswith("__neg"):
        return name[: -len("__neg")] + "__pos"
    return None


def positive_artificials(tableau: Tableau, tol: float) -> List[str]:
    return [
        tableau.headers[col]
        for row, col in enumerate(tableau.basis)
        if tableau.column_types[col] == "artificial" and tableau.rhs[row] > tol
    ]
