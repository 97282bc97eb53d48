import pytest

from tableau_optimizer.schemas import (
    Constraint,
    ConstraintSign,
    LPProblem,
    OptimizationType,
    SolveOptions,
    SolverMethod,
)
from tableau_optimizer.lp.simplex import solve

LE, GE, EQ = ConstraintSign.LESS_EQ, ConstraintSign.GREATER_EQ, ConstraintSign.EQ


def make_problem(sense, objective, rows, variables=None, non_negative=True) -> LPProblem:
    variables = variables or [f"x{i + 1}" for i in range(len(objective))]
    return LPProblem(
        type=sense,
        variables=variables,
        objective_coefficients=objective,
        constraints=[
            Constraint(id=f"c{idx + 1}", coefficients=coeffs, sign=sign, rhs=rhs)
            for idx, (coeffs, sign, rhs) in enumerate(rows)
        ],
        non_negative=non_negative,
    )


@pytest.mark.parametrize("method", [SolverMethod.TWO_PHASE, SolverMethod.BIG_M])
def test_infeasible_problem(method):
    problem = make_problem(OptimizationType.MAXIMIZE, [1.0], [([1.0], LE, 1.0), ([1.0], GE, 5.0)])
    final = solve(problem, method)[-1]

    assert final.status == "INFEASIBLE"
    assert not final.is_optimal
    assert final.solution is not None
    assert final.solution["a1"] == pytest.approx(4.0)


@pytest.mark.parametrize("method", [SolverMethod.TWO_PHASE, SolverMethod.BIG_M])
def test_infeasible_problem_with_unbounded_column(method):
    # x1 = -1 has no non-negative solution while x2 could grow forever
    problem = make_problem(OptimizationType.MAXIMIZE, [0.0, 1.0], [([1.0, 0.0], EQ, -1.0)])
    final = solve(problem, method)[-1]

    assert final.status == "INFEASIBLE"
    assert not final.is_optimal
    assert "a1" in final.description
    assert final.solution["a1"] == pytest.approx(1.0)


@pytest.mark.parametrize("method", list(SolverMethod))
def test_unbounded_problem(method):
    problem = make_problem(OptimizationType.MAXIMIZE, [1.0], [([1.0], GE, 0.0)])
    final = solve(problem, method)[-1]

    assert final.status == "UNBOUNDED"
    assert final.solution is not None


def test_unbounded_without_constraints():
    problem = make_problem(OptimizationType.MAXIMIZE, [2.0, 1.0], [])
    steps = solve(problem)

    assert len(steps) == 1
    assert steps[0].status == "UNBOUNDED"


def test_alternative_optima():
    problem = make_problem(
        OptimizationType.MAXIMIZE,
        [2.0, 4.0],
        [([1.0, 2.0], LE, 5.0), ([1.0, 1.0], LE, 4.0)],
    )
    final = solve(problem, SolverMethod.SIMPLEX)[-1]

    assert final.status == "ALTERNATIVE_SOLUTION"
    assert final.is_optimal
    assert final.z_value == pytest.approx(10.0)
    x1, x2 = final.solution["x1"], final.solution["x2"]
    assert 2 * x1 + 4 * x2 == pytest.approx(10.0)


def test_iteration_limit_is_a_terminal_status():
    problem = make_problem(
        OptimizationType.MAXIMIZE,
        [3.0, 5.0],
        [([1.0, 0.0], LE, 4.0), ([0.0, 2.0], LE, 12.0), ([3.0, 2.0], LE, 18.0)],
    )
    steps = solve(problem, options=SolveOptions(method=SolverMethod.SIMPLEX, max_iterations=1))

    assert len(steps) == 2
    assert steps[-1].status == "ITERATION_LIMIT"
    assert not steps[-1].is_optimal
    assert steps[-1].solution["x2"] == pytest.approx(6.0)


def test_negative_rhs_is_normalised():
    # -x1 - x2 >= -4 is x1 + x2 <= 4
    problem = make_problem(
        OptimizationType.MAXIMIZE,
        [3.0, 2.0],
        [([-1.0, -1.0], GE, -4.0), ([1.0, 0.0], LE, 3.0)],
    )
    steps = solve(problem, SolverMethod.SIMPLEX)

    assert steps[0].standard_form_equations[0] == "x1 + x2 + s1 = 4"
    assert "a1" not in steps[0].headers
    final = steps[-1]
    assert final.status == "OPTIMAL"
    assert final.solution["x1"] == pytest.approx(3.0)
    assert final.solution["x2"] == pytest.approx(1.0)
    assert final.z_value == pytest.approx(11.0)


def test_unrestricted_variables_are_split():
    problem = make_problem(
        OptimizationType.MINIMIZE,
        [1.0],
        [([1.0], GE, -5.0)],
        variables=["x"],
        non_negative=False,
    )
    steps = solve(problem)

    assert steps[0].headers[:2] == ["x__pos", "x__neg"]
    final = steps[-1]
    assert final.status == "OPTIMAL"
    assert final.solution["x"] == pytest.approx(-5.0)
    assert final.z_value == pytest.approx(-5.0)


def test_degenerate_cycling_stops_at_iteration_limit():
    # Beale's example cycles under the largest-coefficient rule
    problem = make_problem(
        OptimizationType.MAXIMIZE,
        [10.0, -57.0, -9.0, -24.0],
        [
            ([0.5, -5.5, -2.5, 9.0], LE, 0.0),
            ([0.5, -1.5, -0.5, 1.0], LE, 0.0),
            ([1.0, 0.0, 0.0, 0.0], LE, 1.0),
        ],
    )
    steps = solve(problem, options=SolveOptions(method=SolverMethod.SIMPLEX, max_iterations=50))
    final = steps[-1]

    assert len(steps) == 51
    assert final.status == "ITERATION_LIMIT"
    assert not final.is_optimal
    assert all(step.status == "IN_PROGRESS" for step in steps[:-1])
    assert all(step.z_value == pytest.approx(0.0) for step in steps)
    assert final.solution is not None
