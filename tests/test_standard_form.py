import pytest

from tableau_optimizer.exceptions import MalformedInputError
from tableau_optimizer.lp.simplex import load_problem, solve
from tableau_optimizer.lp.standard_form import build_standard_form
from tableau_optimizer.schemas import Constraint, ConstraintSign, LPProblem, OptimizationType


def make_mixed_lp(**overrides) -> LPProblem:
    data = dict(
        type=OptimizationType.MINIMIZE,
        variables=["x1", "x2"],
        objective_coefficients=[4.0, 1.0],
        constraints=[
            Constraint(id="c1", coefficients=[3.0, 1.0], sign=ConstraintSign.EQ, rhs=3.0),
            Constraint(id="c2", coefficients=[4.0, 3.0], sign=ConstraintSign.GREATER_EQ, rhs=6.0),
            Constraint(id="c3", coefficients=[1.0, 2.0], sign=ConstraintSign.LESS_EQ, rhs=4.0),
        ],
    )
    data.update(overrides)
    return LPProblem(**data)


def test_columns_are_ordered_decision_slack_artificial():
    sf = build_standard_form(make_mixed_lp())

    assert sf.headers == ["x1", "x2", "s1", "s2", "a1", "a2"]
    assert sf.column_types == ["decision", "decision", "surplus", "slack", "artificial", "artificial"]
    assert [sf.headers[j] for j in sf.basis] == ["a1", "a2", "s2"]
    assert sf.matrix[1].tolist() == [4.0, 3.0, -1.0, 0.0, 0.0, 1.0]
    assert sf.aux_columns == {"c2": 2, "c3": 3}
    assert sf.sense == "min"


def test_length_mismatch_is_malformed():
    problem = make_mixed_lp(objective_coefficients=[4.0])
    with pytest.raises(MalformedInputError):
        build_standard_form(problem)


def test_constraint_width_mismatch_is_raised_before_solving():
    bad = Constraint(id="c9", coefficients=[1.0, 2.0, 3.0], sign=ConstraintSign.LESS_EQ, rhs=1.0)
    problem = make_mixed_lp(constraints=[bad])
    with pytest.raises(MalformedInputError):
        solve(problem)


def test_duplicate_names_are_malformed():
    with pytest.raises(MalformedInputError):
        build_standard_form(make_mixed_lp(variables=["x", "x"]))


def test_missing_fields_are_malformed():
    with pytest.raises(MalformedInputError):
        load_problem({"type": "MAXIMIZE", "variables": ["x1"]})


def test_unknown_method_is_malformed():
    with pytest.raises(MalformedInputError):
        solve(make_mixed_lp(), "revised")


def test_method_names_are_accepted_loosely():
    final = solve(make_mixed_lp(), "big_m")[-1]
    assert final.z_value == pytest.approx(3.4)
