from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np

from ..exceptions import MalformedInputError
from ..schemas import ConstraintSign, LPProblem

logger = logging.getLogger(__name__)

_FLIP = {
    ConstraintSign.LESS_EQ: ConstraintSign.GREATER_EQ,
    ConstraintSign.GREATER_EQ: ConstraintSign.LESS_EQ,
    ConstraintSign.EQ: ConstraintSign.EQ,
}


@dataclass
class StandardForm:
    """Equality-constrained, non-negative form of an LPProblem."""

    headers: List[str]
    column_types: List[str]
    matrix: np.ndarray
    rhs: np.ndarray
    costs: np.ndarray
    basis: List[int]
    sense: str
    constraint_ids: List[str]
    signs: List[ConstraintSign]
    flipped: List[bool]
    aux_columns: Dict[str, int]
    components: Dict[str, List[Tuple[int, float]]]
    equations: List[str] = field(default_factory=list)

    @property
    def artificial_indices(self) -> List[int]:
        return [idx for idx, kind in enumerate(self.column_types) if kind == "artificial"]

    @property
    def needs_artificials(self) -> bool:
        return any(kind == "artificial" for kind in self.column_types)


def validate_problem(problem: LPProblem) -> None:
    n = len(problem.variables)
    if n == 0:
        raise MalformedInputError("Problem has no decision variables.")
    if len(set(problem.variables)) != n:
        raise MalformedInputError("Variable names must be unique.")
    if len(problem.objective_coefficients) != n:
        raise MalformedInputError(
            f"Objective has {len(problem.objective_coefficients)} coefficients "
            f"but {n} variables are declared."
        )
    if not all(math.isfinite(c) for c in problem.objective_coefficients):
        raise MalformedInputError("Objective coefficients must be finite numbers.")

    seen_ids = set()
    for cons in problem.constraints:
        if cons.id in seen_ids:
            raise MalformedInputError(f"Duplicate constraint id '{cons.id}'.")
        seen_ids.add(cons.id)
        if len(cons.coefficients) != n:
            raise MalformedInputError(
                f"Constraint '{cons.id}' has {len(cons.coefficients)} coefficients, expected {n}."
            )
        if not all(math.isfinite(v) for v in cons.coefficients) or not math.isfinite(cons.rhs):
            raise MalformedInputError(f"Constraint '{cons.id}' contains non-finite values.")


def build_standard_form(problem: LPProblem) -> StandardForm:
    """
    Convert an LPProblem to A x = b, x >= 0 with slack, surplus and artificial columns.
    Column order: decision columns, then slack/surplus, then artificial.
    """

    validate_problem(problem)

    headers: List[str] = []
    column_types: List[str] = []
    components: Dict[str, List[Tuple[int, float]]] = {}

    def add_column(name: str, col_type: str) -> int:
        headers.append(name)
        column_types.append(col_type)
        return len(headers) - 1

    for name in problem.variables:
        if problem.non_negative:
            components[name] = [(add_column(name, "decision"), 1.0)]
        else:
            # Unrestricted variable -> difference of two non-negative columns
            idx_pos = add_column(f"{name}__pos", "decision")
            idx_neg = add_column(f"{name}__neg", "decision")
            components[name] = [(idx_pos, 1.0), (idx_neg, -1.0)]

    rows: List[Dict[int, float]] = []
    rhs_values: List[float] = []
    signs: List[ConstraintSign] = []
    flipped: List[bool] = []

    for cons in problem.constraints:
        entries: Dict[int, float] = {}
        for name, coef in zip(problem.variables, cons.coefficients):
            for idx, comp_coef in components[name]:
                entries[idx] = entries.get(idx, 0.0) + coef * comp_coef
        rhs_value = float(cons.rhs)
        sign = cons.sign
        was_flipped = False
        if rhs_value < 0:
            entries = {idx: -val for idx, val in entries.items()}
            rhs_value = -rhs_value
            sign = _FLIP[sign]
            was_flipped = True
            logger.debug("Constraint %s multiplied by -1 to make its RHS non-negative", cons.id)
        rows.append(entries)
        rhs_values.append(rhs_value)
        signs.append(sign)
        flipped.append(was_flipped)

    aux_columns: Dict[str, int] = {}
    slack_count = 0
    for cons, entries, sign in zip(problem.constraints, rows, signs):
        if sign == ConstraintSign.LESS_EQ:
            slack_count += 1
            idx = add_column(f"s{slack_count}", "slack")
            entries[idx] = 1.0
            aux_columns[cons.id] = idx
        elif sign == ConstraintSign.GREATER_EQ:
            slack_count += 1
            idx = add_column(f"s{slack_count}", "surplus")
            entries[idx] = -1.0
            aux_columns[cons.id] = idx

    basis: List[int] = []
    artificial_count = 0
    for cons, entries, sign in zip(problem.constraints, rows, signs):
        if sign == ConstraintSign.LESS_EQ:
            basis.append(aux_columns[cons.id])
        else:
            artificial_count += 1
            idx = add_column(f"a{artificial_count}", "artificial")
            entries[idx] = 1.0
            basis.append(idx)

    n = len(headers)
    matrix = np.zeros((len(rows), n), dtype=float)
    for i, entries in enumerate(rows):
        for idx, value in entries.items():
            matrix[i, idx] = value

    costs = np.zeros(n, dtype=float)
    for name, coef in zip(problem.variables, problem.objective_coefficients):
        for idx, comp_coef in components[name]:
            costs[idx] += coef * comp_coef

    rhs = np.array(rhs_values, dtype=float)
    equations = [_format_equation(matrix[i], headers, rhs[i]) for i in range(len(rows))]

    return StandardForm(
        headers=headers,
        column_types=column_types,
        matrix=matrix,
        rhs=rhs,
        costs=costs,
        basis=basis,
        sense="max" if problem.is_max else "min",
        constraint_ids=[cons.id for cons in problem.constraints],
        signs=signs,
        flipped=flipped,
        aux_columns=aux_columns,
        components=components,
        equations=equations,
    )


def format_number(value: float) -> str:
    if abs(value - round(value)) < 1e-9:
        return str(int(round(value)))
    return f"{value:.4g}"


def _format_equation(row: np.ndarray, headers: List[str], rhs: float) -> str:
    parts: List[str] = []
    for coef, name in zip(row, headers):
        if coef == 0:
            continue
        magnitude = abs(coef)
        term = name if magnitude == 1 else f"{format_number(magnitude)}{name}"
        if not parts:
            parts.append(term if coef > 0 else f"-{term}")
        else:
            parts.append(f"+ {term}" if coef > 0 else f"- {term}")
    lhs = " ".join(parts) if parts else "0"
    return f"{lhs} = {format_number(rhs)}"
