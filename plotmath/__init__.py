"""Top-level public API for the ``plotmath`` package.

``plotmath`` turns a small declarative blueprint into plot-ready data:

>>> from plotmath import parse_blueprint, evaluate_blueprint, ParameterAssignment
>>> bp = parse_blueprint('''
... equation: a * x**2
... steps: 4
... params:
...   a: { label: "a", value: 2, min: 0, max: 5 }
... axis:
...   x: { min: 0, max: 4 }
... ''')
>>> values = ParameterAssignment.defaults(bp)
>>> evaluate_blueprint(bp, values).series.points()[-1]
(4.0, 32.0)

Parse once, then call :func:`evaluate_blueprint` again with a new
assignment whenever a slider moves. :class:`BlueprintWidget` wires this loop
to ipywidgets sliders and a Plotly chart for notebook use.
"""

from .Blueprint import AxisConfig, AxisSpec, Blueprint, ParameterSpec
from .BlueprintWidget import BlueprintWidget, equation_latex
from .engine import build_scope, evaluate_blueprint, resolve_axis_bounds
from .errors import (
    EquationError,
    ExpressionError,
    ExpressionEvaluationError,
    ExpressionSyntaxError,
    UnknownIdentifierError,
)
from .expression import evaluate_expression, parse_expression, to_sympy
from .math_library import MATH_LIBRARY, RESERVED_NAMES
from .ParameterAssignment import ParameterAssignment
from .ParseBlueprint import parse_blueprint
from .plotly_render import build_figure, chart_payload, fill_color, series_style, update_figure
from .PlotResult import ContourPoints, Curve, PlotResult
from .scope import Scope

__all__ = [
    "AxisConfig",
    "AxisSpec",
    "Blueprint",
    "BlueprintWidget",
    "ContourPoints",
    "Curve",
    "EquationError",
    "ExpressionError",
    "ExpressionEvaluationError",
    "ExpressionSyntaxError",
    "MATH_LIBRARY",
    "ParameterAssignment",
    "ParameterSpec",
    "PlotResult",
    "RESERVED_NAMES",
    "Scope",
    "UnknownIdentifierError",
    "build_figure",
    "build_scope",
    "chart_payload",
    "equation_latex",
    "evaluate_blueprint",
    "evaluate_expression",
    "fill_color",
    "parse_blueprint",
    "parse_expression",
    "resolve_axis_bounds",
    "series_style",
    "to_sympy",
    "update_figure",
]
