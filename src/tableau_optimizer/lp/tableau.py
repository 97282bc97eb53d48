from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .standard_form import StandardForm


@dataclass(frozen=True, eq=False)
class Tableau:
    """
    Simplex tableau for one objective. ``costs`` is the Cj row in the natural
    sense of that objective (``sense`` is "max" or "min"); the pivot engine
    never mutates an instance in place.
    """

    headers: Tuple[str, ...]
    column_types: Tuple[str, ...]
    matrix: np.ndarray
    rhs: np.ndarray
    costs: np.ndarray
    basis: Tuple[int, ...]
    sense: str
    phase: Optional[int] = None
    big_m: float = 0.0

    @property
    def num_rows(self) -> int:
        return self.matrix.shape[0]

    @property
    def num_cols(self) -> int:
        return self.matrix.shape[1]

    @property
    def sense_factor(self) -> float:
        return 1.0 if self.sense == "max" else -1.0

    @property
    def cb(self) -> np.ndarray:
        return self.costs[list(self.basis)] if self.basis else np.zeros(0)

    def zj(self) -> np.ndarray:
        if self.num_rows == 0:
            return np.zeros(self.num_cols)
        return self.cb @ self.matrix

    def net_evaluation(self) -> np.ndarray:
        net = self.costs - self.zj()
        net[list(self.basis)] = 0.0
        return net

    def split_net_evaluation(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Cj - Zj split into its coefficient of M and its real part. Both are
        zero on basic columns; the M part is all zeros unless ``big_m`` is set.
        """

        penalty = np.zeros(self.num_cols)
        real = self.costs.copy()
        if self.big_m:
            artificial = [j for j, kind in enumerate(self.column_types) if kind == "artificial"]
            penalty[artificial] = -self.sense_factor
            real[artificial] = 0.0
        parts = []
        for row in (penalty, real):
            zj = row[list(self.basis)] @ self.matrix if self.num_rows else np.zeros(self.num_cols)
            net = row - zj
            net[list(self.basis)] = 0.0
            parts.append(net)
        return parts[0], parts[1]

    def objective_value(self) -> float:
        if self.num_rows == 0:
            return 0.0
        return float(self.cb @ self.rhs)

    def values(self) -> np.ndarray:
        x = np.zeros(self.num_cols)
        for row, col in enumerate(self.basis):
            x[col] = self.rhs[row]
        return x

    def non_basic(self) -> List[int]:
        basic = set(self.basis)
        return [j for j in range(self.num_cols) if j not in basic]

    def with_costs(self, costs: np.ndarray, sense: str, phase: Optional[int]) -> "Tableau":
        return replace(self, costs=np.array(costs, dtype=float), sense=sense, phase=phase)


def phase_one_costs(sf: StandardForm) -> np.ndarray:
    costs = np.zeros(len(sf.headers))
    costs[sf.artificial_indices] = 1.0
    return costs


def big_m_costs(sf: StandardForm, big_m: float) -> np.ndarray:
    costs = sf.costs.copy()
    penalty = -big_m if sf.sense == "max" else big_m
    costs[sf.artificial_indices] = penalty
    return costs


def build_tableau(
    sf: StandardForm,
    costs: np.ndarray,
    sense: str,
    phase: Optional[int] = None,
    big_m: float = 0.0,
) -> Tableau:
    """Initial tableau: the slack or artificial of each row starts basic."""

    return Tableau(
        headers=tuple(sf.headers),
        column_types=tuple(sf.column_types),
        matrix=sf.matrix.copy(),
        rhs=sf.rhs.copy(),
        costs=np.array(costs, dtype=float),
        basis=tuple(sf.basis),
        sense=sense,
        phase=phase,
        big_m=big_m,
    )


def drop_columns(tableau: Tableau, columns: Iterable[int]) -> Tableau:
    removed = set(columns)
    if removed & set(tableau.basis):
        raise ValueError("Cannot drop a column that is still basic.")
    keep = [j for j in range(tableau.num_cols) if j not in removed]
    remap = {old: new for new, old in enumerate(keep)}
    return replace(
        tableau,
        headers=tuple(tableau.headers[j] for j in keep),
        column_types=tuple(tableau.column_types[j] for j in keep),
        matrix=tableau.matrix[:, keep].copy(),
        costs=tableau.costs[keep].copy(),
        basis=tuple(remap[j] for j in tableau.basis),
    )


def drop_rows(tableau: Tableau, rows: Sequence[int]) -> Tableau:
    removed = set(rows)
    keep = [i for i in range(tableau.num_rows) if i not in removed]
    return replace(
        tableau,
        matrix=tableau.matrix[keep, :].copy(),
        rhs=tableau.rhs[keep].copy(),
        basis=tuple(tableau.basis[i] for i in keep),
    )
