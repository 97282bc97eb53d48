import pytest

from tableau_optimizer.schemas import (
    Constraint,
    ConstraintSign,
    LPProblem,
    OptimizationType,
    SolverMethod,
)
from tableau_optimizer.lp.dual import dual_problem
from tableau_optimizer.lp.sensitivity import resource_usage, shadow_prices
from tableau_optimizer.lp.simplex import solve, solve_lp


def make_classic_lp(plant3_rhs: float = 18.0) -> LPProblem:
    return LPProblem(
        name="wyndor",
        type=OptimizationType.MAXIMIZE,
        variables=["x1", "x2"],
        objective_coefficients=[3.0, 5.0],
        constraints=[
            Constraint(id="plant1", coefficients=[1.0, 0.0], sign=ConstraintSign.LESS_EQ, rhs=4.0),
            Constraint(id="plant2", coefficients=[0.0, 2.0], sign=ConstraintSign.LESS_EQ, rhs=12.0),
            Constraint(id="plant3", coefficients=[3.0, 2.0], sign=ConstraintSign.LESS_EQ, rhs=plant3_rhs),
        ],
    )


def make_equality_lp(c3_rhs: float = 4.0) -> LPProblem:
    return LPProblem(
        name="equality",
        type=OptimizationType.MINIMIZE,
        variables=["x1", "x2"],
        objective_coefficients=[4.0, 1.0],
        constraints=[
            Constraint(id="c1", coefficients=[3.0, 1.0], sign=ConstraintSign.EQ, rhs=3.0),
            Constraint(id="c2", coefficients=[4.0, 3.0], sign=ConstraintSign.GREATER_EQ, rhs=6.0),
            Constraint(id="c3", coefficients=[1.0, 2.0], sign=ConstraintSign.LESS_EQ, rhs=c3_rhs),
        ],
    )


def test_shadow_prices_for_classic_problem():
    problem = make_classic_lp()
    prices = shadow_prices(problem, solve(problem)[-1])

    assert prices["plant1"] == 0.0
    assert prices["plant2"] == pytest.approx(1.5)
    assert prices["plant3"] == pytest.approx(1.0)


def test_shadow_price_equals_objective_change_on_resolve():
    base = solve(make_classic_lp())[-1]
    relaxed = solve(make_classic_lp(plant3_rhs=19.0))[-1]
    price = shadow_prices(make_classic_lp(), base)["plant3"]

    assert price > 0
    assert relaxed.z_value - base.z_value == pytest.approx(price)


@pytest.mark.parametrize("method", [SolverMethod.TWO_PHASE, SolverMethod.BIG_M])
def test_shadow_prices_for_minimisation(method):
    problem = make_equality_lp()
    prices = shadow_prices(problem, solve(problem, method)[-1])

    assert "c1" not in prices
    assert prices["c2"] == 0.0
    assert prices["c3"] == pytest.approx(-0.2)

    delta = solve(make_equality_lp(c3_rhs=4.1), method)[-1].z_value - solve(problem, method)[-1].z_value
    assert delta / 0.1 == pytest.approx(prices["c3"])


def test_shadow_price_of_flipped_row():
    problem = LPProblem(
        type=OptimizationType.MAXIMIZE,
        variables=["x1", "x2"],
        objective_coefficients=[3.0, 2.0],
        constraints=[
            Constraint(id="cap", coefficients=[-1.0, -1.0], sign=ConstraintSign.GREATER_EQ, rhs=-4.0),
            Constraint(id="lim", coefficients=[1.0, 0.0], sign=ConstraintSign.LESS_EQ, rhs=3.0),
        ],
    )
    prices = shadow_prices(problem, solve(problem)[-1])

    tightened = problem.model_copy(deep=True)
    tightened.constraints[0].rhs = -3.0
    delta = solve(tightened)[-1].z_value - solve(problem)[-1].z_value
    assert prices["cap"] == pytest.approx(-2.0)
    assert delta == pytest.approx(prices["cap"])


def test_shadow_prices_need_an_optimum():
    problem = LPProblem(
        type=OptimizationType.MAXIMIZE,
        variables=["x1"],
        objective_coefficients=[1.0],
        constraints=[Constraint(id="c1", coefficients=[1.0], sign=ConstraintSign.GREATER_EQ, rhs=1.0)],
    )
    with pytest.raises(ValueError):
        shadow_prices(problem, solve(problem)[-1])


def test_resource_usage_marks_bottlenecks():
    problem = make_classic_lp()
    usage = {item.constraint_id: item for item in resource_usage(problem, solve(problem)[-1])}

    assert usage["plant1"].used == pytest.approx(2.0)
    assert usage["plant1"].slack == pytest.approx(2.0)
    assert not usage["plant1"].binding
    assert usage["plant1"].utilization == pytest.approx(50.0)
    assert usage["plant3"].binding
    assert usage["plant3"].shadow_price == pytest.approx(1.0)


def test_summary_reports_shadow_prices():
    solution = solve_lp(make_classic_lp())

    assert solution.status == "OPTIMAL"
    assert solution.objective_value == pytest.approx(36.0)
    assert solution.iterations == 2
    assert solution.shadow_prices["plant3"] == pytest.approx(1.0)


def test_dual_of_classic_problem_has_equal_optimum():
    dual = dual_problem(make_classic_lp())

    assert dual.type == OptimizationType.MINIMIZE
    assert dual.variables == ["y1", "y2", "y3"]
    assert dual.objective_coefficients == [4.0, 12.0, 18.0]
    assert dual.constraints[0].coefficients == [1.0, 0.0, 3.0]
    assert all(c.sign == ConstraintSign.GREATER_EQ for c in dual.constraints)

    final = solve(dual, SolverMethod.TWO_PHASE)[-1]
    assert final.status == "OPTIMAL"
    assert final.z_value == pytest.approx(36.0)
    assert final.solution["y2"] == pytest.approx(1.5)
    assert final.solution["y3"] == pytest.approx(1.0)


def test_dual_splits_equalities():
    dual = dual_problem(make_equality_lp())

    assert dual.type == OptimizationType.MAXIMIZE
    assert dual.variables == ["y1", "y2", "y3", "y4"]
    assert dual.objective_coefficients == [3.0, -3.0, 6.0, -4.0]
    assert all(c.sign == ConstraintSign.LESS_EQ for c in dual.constraints)
    assert solve(dual)[-1].z_value == pytest.approx(3.4)
