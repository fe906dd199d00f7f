from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from plotmath import (
    Blueprint,
    ContourPoints,
    Curve,
    EquationError,
    ParameterAssignment,
    build_scope,
    evaluate_blueprint,
    parse_blueprint,
    resolve_axis_bounds,
)
from plotmath.Blueprint import AxisConfig, AxisSpec, ParameterSpec
from plotmath.errors import UnknownIdentifierError


def test_explicit_parabola_scenario() -> None:
    bp = parse_blueprint("equation: x**2\nsteps: 4\naxis:\n  x: { min: 0, max: 4 }\n")
    result = evaluate_blueprint(bp, {})

    assert isinstance(result.series, Curve)
    assert result.series.points() == [(0.0, 0.0), (1.0, 1.0), (2.0, 4.0), (3.0, 9.0), (4.0, 16.0)]
    assert result.x_range == (0.0, 4.0)
    assert result.y_range == (-10.0, 10.0)


def test_explicit_curve_length_and_spacing(impedance_text: str) -> None:
    bp = parse_blueprint(impedance_text)
    result = evaluate_blueprint(bp, ParameterAssignment.defaults(bp))
    x = result.series.x

    assert len(result.series) == bp.steps + 1
    assert x[0] == 0.0 and x[-1] == 10.0
    assert (np.diff(x) > 0).all()
    np.testing.assert_allclose(np.diff(x), 10.0 / bp.steps)


def test_default_domain_is_minus_ten_to_ten() -> None:
    result = evaluate_blueprint(Blueprint(equation="x", steps=20), {})
    assert result.series.x[0] == -10.0 and result.series.x[-1] == 10.0


def test_resolve_axis_bounds_partial() -> None:
    axis = AxisConfig(x=AxisSpec(min=1.0), y=AxisSpec(max=3.0))
    assert resolve_axis_bounds(axis) == ((1.0, 10.0), (-10.0, 3.0))


def test_variables_scenario_and_reevaluation(impedance_text: str) -> None:
    bp = parse_blueprint(impedance_text)
    values = ParameterAssignment.defaults(bp)

    scope = build_scope(bp, values)
    assert float(scope["Z"]) == pytest.approx(math.sqrt(325))
    assert float(scope["phase"]) == pytest.approx(math.sqrt(325) / 10)

    result = evaluate_blueprint(bp, values)
    assert result.series.y[-1] == pytest.approx(math.sqrt(325))

    bumped = evaluate_blueprint(bp, values.with_values(R=20))
    assert bumped.series.y[-1] == pytest.approx(math.sqrt(20**2 + 15**2))
    assert float(build_scope(bp, values.with_values(R=20))["Z"]) == pytest.approx(25.0)


def test_variable_may_reference_earlier_variable_only() -> None:
    ok = Blueprint(equation="b", variables={"a": "2", "b": "a * 3"})
    assert (evaluate_blueprint(ok, {}).series.y == 6.0).all()

    forward = Blueprint(equation="a", variables={"a": "b * 3", "b": "2"})
    with pytest.raises(EquationError, match="b is not defined") as info:
        evaluate_blueprint(forward, {})
    assert info.value.expression == "a: b * 3"
    assert isinstance(info.value.cause, UnknownIdentifierError)


def test_undeclared_identifier_fails_after_successful_parse() -> None:
    bp = parse_blueprint("equation: foo * x\n")
    assert bp.equation == "foo * x"
    with pytest.raises(EquationError, match="foo is not defined"):
        evaluate_blueprint(bp, {})


def test_syntax_error_message_embeds_original_error() -> None:
    bp = Blueprint(equation="x +* 2")
    with pytest.raises(EquationError) as info:
        evaluate_blueprint(bp, {})
    assert str(info.value).startswith("Equation Error: x +* 2:")
    assert "column" in str(info.value)
    assert info.value.__cause__ is info.value.cause


def test_variables_cannot_see_sweep_variable() -> None:
    bp = Blueprint(equation="k", variables={"k": "x * 2"})
    with pytest.raises(EquationError, match="x is not defined"):
        evaluate_blueprint(bp, {})


def test_explicit_equation_cannot_use_y() -> None:
    with pytest.raises(EquationError, match="y is not defined"):
        evaluate_blueprint(Blueprint(equation="x + y"), {})


def test_non_finite_values_pass_through() -> None:
    bp = Blueprint(equation="1 / x", steps=2, axis=AxisConfig(x=AxisSpec(min=-1.0, max=1.0)))
    y = evaluate_blueprint(bp, {}).series.y
    assert y[0] == -1.0 and math.isinf(y[1]) and y[2] == 1.0


def test_missing_parameter_value_raises_key_error(impedance_text: str) -> None:
    bp = parse_blueprint(impedance_text)
    with pytest.raises(KeyError, match="X"):
        evaluate_blueprint(bp, {"R": 1.0})


def test_extra_parameter_values_are_ignored() -> None:
    bp = Blueprint(equation="x")
    result = evaluate_blueprint(bp, {"unused": 3.0})
    assert len(result.series) == bp.steps + 1


@pytest.mark.parametrize("name", ["sin", "PI", "x", "y"])
def test_reserved_parameter_names_are_rejected(name: str) -> None:
    spec = ParameterSpec(name=name, label=name, value=1.0, min=0.0, max=2.0, step=0.1)
    bp = Blueprint(equation="1", parameters={name: spec})
    with pytest.raises(EquationError, match="reserved"):
        evaluate_blueprint(bp, {name: 1.0})


def test_reserved_variable_names_are_rejected() -> None:
    bp = Blueprint(equation="1", variables={"E": "3"})
    with pytest.raises(EquationError, match="reserved"):
        evaluate_blueprint(bp, {})


def test_implicit_circle_scenario(circle_text: str) -> None:
    bp = parse_blueprint(circle_text)
    result = evaluate_blueprint(bp, ParameterAssignment.defaults(bp))

    assert isinstance(result.series, ContourPoints)
    assert result.x_range == result.y_range == (-2.0, 2.0)
    assert len(result.series) > 0

    radius = np.hypot(result.series.x, result.series.y)
    cell = 4.0 / 120
    assert np.abs(radius - 1.5).max() < cell

    assert (result.series.x >= -2.0).all() and (result.series.x <= 2.0).all()
    assert (result.series.y >= -2.0).all() and (result.series.y <= 2.0).all()


def test_implicit_point_count_is_bounded_by_grid() -> None:
    bp = Blueprint(equation="sin(x * y) = 0.2")
    result = evaluate_blueprint(bp, {}, grid_resolution=40)
    assert len(result.series) <= 4 * 40 * 40


def test_implicit_singularity_cells_are_skipped() -> None:
    bp = Blueprint(
        equation="log(x) = 0",
        axis=AxisConfig(x=AxisSpec(min=-2.0, max=2.0), y=AxisSpec(min=-1.0, max=1.0)),
    )
    result = evaluate_blueprint(bp, {}, grid_resolution=40)
    assert len(result.series) > 0
    # log is NaN for x < 0 and -inf at 0; only x = 1 crossings survive.
    np.testing.assert_allclose(result.series.x, 1.0, atol=4.0 / 40)


def test_implicit_grid_resolution_is_configurable() -> None:
    bp = Blueprint(equation="x = 0.3")
    coarse = evaluate_blueprint(bp, {}, grid_resolution=10)
    fine = evaluate_blueprint(bp, {}, grid_resolution=20)
    assert len(fine.series) == 2 * len(coarse.series)

    with pytest.raises(ValueError):
        evaluate_blueprint(bp, {}, grid_resolution=0)


def test_implicit_error_in_either_side() -> None:
    with pytest.raises(EquationError, match="bar is not defined"):
        evaluate_blueprint(Blueprint(equation="x = bar"), {})
    with pytest.raises(EquationError):
        evaluate_blueprint(Blueprint(equation="x = "), {})


def test_evaluation_is_deterministic(circle_text: str) -> None:
    bp = parse_blueprint(circle_text)
    values = ParameterAssignment.defaults(bp)
    a = evaluate_blueprint(bp, values)
    b = evaluate_blueprint(bp, values)
    np.testing.assert_array_equal(a.series.x, b.series.x)
    np.testing.assert_array_equal(a.series.y, b.series.y)


def test_result_carries_styling(impedance_text: str) -> None:
    bp = parse_blueprint(impedance_text)
    result = evaluate_blueprint(bp, ParameterAssignment.defaults(bp))
    assert result.title == "Impedance"
    assert result.color == bp.color
    assert (result.x_title, result.y_title) == ("Frequency", "|Z|")


def test_debug_logging_reports_mode(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="plotmath.engine"):
        evaluate_blueprint(Blueprint(equation="x", steps=3), {})
    assert "mode=curve" in caplog.text


def test_blueprint_rejects_non_positive_steps() -> None:
    with pytest.raises(ValueError, match="positive"):
        Blueprint(steps=0)


@pytest.mark.parametrize(
    "equation",
    ["(" * 200 + "x" + ")" * 200, "-" * 1200 + "x", "x" + "**x" * 500],
)
def test_deeply_nested_equation_raises_equation_error(equation: str) -> None:
    with pytest.raises(EquationError, match="nested too deeply"):
        evaluate_blueprint(Blueprint(equation=equation, steps=2), {})


def test_long_flat_sum_fails_cleanly() -> None:
    equation = " + ".join(["x"] * 5000)
    try:
        result = evaluate_blueprint(Blueprint(equation=equation, steps=2), {})
    except EquationError:
        return
    np.testing.assert_allclose(result.series.y, 5000 * result.series.x)


def test_moderate_nesting_still_evaluates() -> None:
    bp = Blueprint(equation="(" * 40 + "x" + ")" * 40, steps=2)
    np.testing.assert_array_equal(evaluate_blueprint(bp, {}).series.y, [-10.0, 0.0, 10.0])


def test_default_implicit_grid_has_121_nodes_per_axis() -> None:
    result = evaluate_blueprint(Blueprint(equation="x = 0.05"), {})
    # One crossing column; each of the 120 rows emits its bottom and top edge.
    assert len(result.series) == 240
    assert np.unique(result.series.y).size == 121
