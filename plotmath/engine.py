"""
engine: evaluate a Blueprint for one parameter assignment
=========================================================

Purpose
-------
Turn a parsed :class:`~plotmath.Blueprint.Blueprint` plus a complete set of
parameter values into a :class:`~plotmath.PlotResult.PlotResult`. This is the
function an interactive front end calls on every slider change; the
blueprint itself is parsed once and reused.

Pipeline
--------
1. Resolve axis bounds (``-10``/``10`` for anything unset).
2. Build a fresh :class:`~plotmath.scope.Scope`: math library, parameters,
   then derived variables in declaration order.
3. Dispatch on the equation: explicit sweep, or implicit Marching Squares on
   the difference of both sides.

Every call is a pure function of its inputs. Any syntax error, unknown
identifier or misuse of a library name aborts the whole call with
:class:`~plotmath.errors.EquationError`; non-finite values are not errors.

Logging
-------
Silent by default. Enable with::

    import logging
    logging.basicConfig(level=logging.DEBUG)
    logging.getLogger("plotmath.engine").setLevel(logging.DEBUG)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Tuple

import numpy as np

from .Blueprint import AxisConfig, AxisSpec, Blueprint
from .defaults import DEFAULT_AXIS_RANGE, GRID_RESOLUTION
from .errors import EquationError, ExpressionError
from .expression import Node, evaluate_expression, parse_expression
from .math_library import RESERVED_NAMES
from .ParameterAssignment import require_values
from .PlotResult import ContourPoints, Curve, PlotResult
from .sampling import sample_explicit, sample_implicit
from .scope import Scope

__all__ = ["build_scope", "evaluate_blueprint", "resolve_axis_bounds"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def _axis_range(spec: AxisSpec) -> Tuple[float, float]:
    lo = DEFAULT_AXIS_RANGE[0] if spec.min is None else float(spec.min)
    hi = DEFAULT_AXIS_RANGE[1] if spec.max is None else float(spec.max)
    return lo, hi


def resolve_axis_bounds(axis: AxisConfig) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """Return ``(x_range, y_range)`` with defaults applied to unset bounds."""
    return _axis_range(axis.x), _axis_range(axis.y)


def _parse(label: str, text: str) -> Node:
    try:
        return parse_expression(text)
    except (ExpressionError, RecursionError) as exc:
        raise EquationError(label, exc) from exc


def _evaluate(label: str, node: Node, scope: Mapping[str, Any]) -> Any:
    try:
        return evaluate_expression(node, scope)
    except (ExpressionError, RecursionError) as exc:
        raise EquationError(label, exc) from exc


def _check_name(kind: str, name: str) -> None:
    if name in RESERVED_NAMES:
        raise EquationError(
            f"{kind} {name}",
            message=f"{name!r} is reserved by the math library or the sweep variables and cannot be redefined",
        )


def build_scope(blueprint: Blueprint, values: Mapping[str, Any]) -> Scope:
    """Return the evaluation scope for ``blueprint`` under ``values``.

    Parameters
    ----------
    blueprint : Blueprint
        Parsed blueprint.
    values : Mapping[str, Any]
        Value for every declared parameter. Extra keys are ignored.

    Returns
    -------
    Scope
        Math library, parameter values and derived variables (scalars), in
        that order.

    Raises
    ------
    KeyError
        If a declared parameter has no value.
    EquationError
        If a name is reserved or a variable expression cannot be evaluated.
    """
    for name in blueprint.parameters:
        _check_name("parameter", name)
    for name in blueprint.variables:
        _check_name("variable", name)

    parameter_values = require_values(values, blueprint.parameters)
    scope = Scope.with_math_library().extend(parameter_values)

    for name, text in blueprint.variables.items():
        label = f"{name}: {text}"
        value = _evaluate(label, _parse(label, text), scope)
        scope = scope.extend({name: value})
    return scope


def evaluate_blueprint(
    blueprint: Blueprint,
    values: Mapping[str, Any],
    *,
    grid_resolution: int = GRID_RESOLUTION,
) -> PlotResult:
    """Sample ``blueprint`` for one parameter assignment.

    Parameters
    ----------
    blueprint : Blueprint
        Parsed blueprint.
    values : Mapping[str, Any]
        Complete parameter assignment (e.g. a
        :class:`~plotmath.ParameterAssignment.ParameterAssignment`).
    grid_resolution : int, optional
        Cells per axis for implicit equations. The grid has
        ``grid_resolution + 1`` nodes per axis.

    Returns
    -------
    PlotResult
        ``Curve`` for explicit equations, ``ContourPoints`` for implicit ones.

    Raises
    ------
    EquationError
        On any invalid expression; no partial result is produced.
    KeyError
        If ``values`` lacks a declared parameter.

    Examples
    --------
    >>> from plotmath import parse_blueprint
    >>> bp = parse_blueprint("equation: x**2\\nsteps: 4\\naxis:\\n  x: { min: 0, max: 4 }")
    >>> evaluate_blueprint(bp, {}).series.points()
    [(0.0, 0.0), (1.0, 1.0), (2.0, 4.0), (3.0, 9.0), (4.0, 16.0)]
    """
    if grid_resolution < 1:
        raise ValueError(f"grid_resolution must be >= 1, got {grid_resolution!r}")

    log_debug = logger.isEnabledFor(logging.DEBUG)
    t0 = time.perf_counter() if log_debug else 0.0

    x_range, y_range = resolve_axis_bounds(blueprint.axis)
    scope = build_scope(blueprint, values)

    sides = blueprint.split_equation()
    if sides is None:
        label = blueprint.equation
        node = _parse(label, blueprint.equation)

        def explicit(x: Any) -> Any:
            return _evaluate(label, node, scope.extend(x=x))

        xs, ys = sample_explicit(explicit, x_range, blueprint.steps)
        series = Curve(x=xs, y=ys)
    else:
        left = _parse(blueprint.equation, sides[0])
        right = _parse(blueprint.equation, sides[1])

        def diff(x: Any, y: Any) -> Any:
            grid_scope = scope.extend(x=x, y=y)
            lhs = _evaluate(blueprint.equation, left, grid_scope)
            rhs = _evaluate(blueprint.equation, right, grid_scope)
            with np.errstate(all="ignore"):
                return np.subtract(lhs, rhs)

        xs, ys = sample_implicit(diff, x_range, y_range, grid_resolution)
        series = ContourPoints(x=xs, y=ys)

    if log_debug:
        logger.debug(
            "evaluate_blueprint: mode=%s points=%d x_range=%s y_range=%s (%.2f ms)",
            series.kind,
            len(series),
            x_range,
            y_range,
            1000.0 * (time.perf_counter() - t0),
        )

    return PlotResult(
        series=series,
        x_range=x_range,
        y_range=y_range,
        title=blueprint.title,
        color=blueprint.color,
        x_title=blueprint.axis.x.title,
        y_title=blueprint.axis.y.title,
    )
