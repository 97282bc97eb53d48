from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SolverStatus = Literal[
    "IN_PROGRESS",
    "OPTIMAL",
    "UNBOUNDED",
    "INFEASIBLE",
    "ALTERNATIVE_SOLUTION",
    "ITERATION_LIMIT",
]

TERMINAL_STATUSES = frozenset(
    {"OPTIMAL", "UNBOUNDED", "INFEASIBLE", "ALTERNATIVE_SOLUTION", "ITERATION_LIMIT"}
)

DEFAULT_BIG_M = 1_000_000.0


class OptimizationType(str, Enum):
    MAXIMIZE = "MAXIMIZE"
    MINIMIZE = "MINIMIZE"


class ConstraintSign(str, Enum):
    LESS_EQ = "<="
    GREATER_EQ = ">="
    EQ = "="


class SolverMethod(str, Enum):
    SIMPLEX = "Simplex"
    BIG_M = "Big M"
    TWO_PHASE = "Two Phase"


class Constraint(BaseModel):
    id: str
    coefficients: List[float]
    sign: ConstraintSign
    rhs: float


class LPProblem(BaseModel):
    name: str = "problem"
    type: OptimizationType
    variables: List[str]
    objective_coefficients: List[float]
    constraints: List[Constraint]
    non_negative: bool = True

    @property
    def is_max(self) -> bool:
        return self.type == OptimizationType.MAXIMIZE


class SolveOptions(BaseModel):
    method: SolverMethod = SolverMethod.TWO_PHASE
    big_m: float = Field(default=DEFAULT_BIG_M, gt=0)
    max_iterations: int = Field(default=200, ge=1)
    tol: float = 1e-9
    zero_tol: float = 1e-6


class TableauRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    basic_var: str
    basic_var_cost: float
    coefficients: List[float]
    rhs: float
    ratio: Optional[float] = None


class SolverStep(BaseModel):
    """One immutable snapshot of the simplex trace."""

    model_config = ConfigDict(frozen=True)

    step_index: int
    phase: Optional[Literal[1, 2]] = None
    description: str
    operations: List[str] = Field(default_factory=list)
    tableau: List[TableauRow]
    headers: List[str]
    cj_row: List[float]
    zj_row: List[float]
    net_evaluation_row: List[float]
    pivot_row_idx: Optional[int] = None
    pivot_col_idx: Optional[int] = None
    entering_var: Optional[str] = None
    leaving_var: Optional[str] = None
    is_optimal: bool = False
    status: SolverStatus = "IN_PROGRESS"
    z_value: Optional[float] = None
    solution: Optional[Dict[str, float]] = None
    standard_form_equations: Optional[List[str]] = None


class LPSolution(BaseModel):
    status: SolverStatus
    objective_value: Optional[float]
    x: Dict[str, float] | None
    shadow_prices: Dict[str, float] | None
    iterations: int
    method: SolverMethod
    message: str = ""


class ResourceUsage(BaseModel):
    constraint_id: str
    sign: ConstraintSign
    used: float
    available: float
    slack: float
    utilization: Optional[float]
    binding: bool
    shadow_price: Optional[float]
