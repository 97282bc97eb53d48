from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

import numpy as np

from .standard_form import format_number
from .tableau import Tableau

logger = logging.getLogger(__name__)


def entering_threshold(tableau: Tableau, tol: float) -> float:
    # Scaled by the real objective only; the M part of a Big-M tableau is compared on its own.
    costs = tableau.costs
    if tableau.big_m:
        costs = np.array(
            [c for c, kind in zip(tableau.costs, tableau.column_types) if kind != "artificial"]
        )
    scale = float(np.abs(costs).max()) if costs.size else 1.0
    return tol * max(1.0, scale)


def select_entering(tableau: Tableau, tol: float) -> Optional[int]:
    """
    Most favourable non-basic column: largest (Cj - Zj) when maximising,
    smallest when minimising. Ties go to the lowest column index.

    Big-M tableaux compare the coefficient of M first and the real part only
    among columns whose M coefficient is zero.
    """

    penalty, real = tableau.split_net_evaluation()
    factor = tableau.sense_factor
    threshold = entering_threshold(tableau, tol)
    keys = {}
    for j in tableau.non_basic():
        m_part, real_part = factor * penalty[j], factor * real[j]
        if m_part > tol:
            keys[j] = (m_part, real_part)
        elif m_part >= -tol and real_part > threshold:
            keys[j] = (0.0, real_part)
    if not keys:
        return None
    return max(keys, key=lambda j: (keys[j][0], keys[j][1], -j))


def ratio_test(tableau: Tableau, col: int, tol: float) -> Tuple[Optional[int], List[Optional[float]]]:
    """
    Minimum-ratio test on strictly positive entries of ``col``. Ties are broken
    by the smallest column index of the row's current basic variable.
    """

    ratios: List[Optional[float]] = []
    for i in range(tableau.num_rows):
        coef = tableau.matrix[i, col]
        if coef > tol:
            ratios.append(float(tableau.rhs[i] / coef))
        else:
            ratios.append(None)

    candidates = [(ratio, i) for i, ratio in enumerate(ratios) if ratio is not None]
    if not candidates:
        return None, ratios

    best = min(ratio for ratio, _ in candidates)
    tied = [i for ratio, i in candidates if ratio <= best + tol]
    leaving = min(tied, key=lambda i: tableau.basis[i])
    return leaving, ratios


def pivot(tableau: Tableau, row: int, col: int, tol: float = 1e-9) -> Tuple[Tableau, List[str]]:
    """
    Gauss-Jordan pivot on (row, col). Returns the new tableau and the row
    operations performed, leaving the input untouched.
    """

    matrix = tableau.matrix.copy()
    rhs = tableau.rhs.copy()
    element = matrix[row, col]
    if abs(element) <= tol:
        raise ValueError(f"Pivot element at ({row}, {col}) is zero.")

    operations: List[str] = []
    label = f"R{row + 1}"
    if element != 1.0:
        matrix[row] /= element
        rhs[row] /= element
        operations.append(f"{label} = {label} / {format_number(element)}")

    for i in range(matrix.shape[0]):
        if i == row:
            continue
        factor = matrix[i, col]
        if factor == 0.0:
            continue
        matrix[i] -= factor * matrix[row]
        rhs[i] -= factor * rhs[row]
        operations.append(f"R{i + 1} = R{i + 1} - ({format_number(factor)}) * {label}")

    matrix[np.abs(matrix) < tol] = 0.0
    rhs[np.abs(rhs) < tol] = 0.0

    basis = list(tableau.basis)
    basis[row] = col
    for r, c in enumerate(basis):
        matrix[:, c] = 0.0
        matrix[r, c] = 1.0

    logger.debug(
        "Pivot on row %d column %s (%s leaves)",
        row + 1,
        tableau.headers[col],
        tableau.headers[tableau.basis[row]],
    )
    return replace(tableau, matrix=matrix, rhs=rhs, basis=tuple(basis)), operations
