"""Default values shared by the blueprint parser and the sampling engine.

Everything here is a plain module-level constant. Callers that need a
different grid resolution pass ``grid_resolution=`` to
:func:`plotmath.engine.evaluate_blueprint` instead of mutating these values.
"""

from __future__ import annotations

DEFAULT_TITLE: str = ""
DEFAULT_EQUATION: str = "0"
DEFAULT_STEPS: int = 500
DEFAULT_COLOR: str = "rgb(255, 149, 0)"

# Domain used for either axis when a blueprint leaves min/max unset.
DEFAULT_AXIS_RANGE: tuple[float, float] = (-10.0, 10.0)

# Implicit mode samples (GRID_RESOLUTION + 1)**2 grid nodes.
GRID_RESOLUTION: int = 120

# Edge interpolation falls back to the first endpoint below this |v1 - v2|.
INTERPOLATION_EPSILON: float = 1e-6

# Deepest operator or parenthesis nesting accepted by the expression parser.
MAX_NESTING_DEPTH: int = 64

# Slider defaults for parameter literals that omit a field.
DEFAULT_PARAMETER_MIN: float = -10.0
DEFAULT_PARAMETER_MAX: float = 10.0
DEFAULT_PARAMETER_VALUE: float = 0.0
DEFAULT_PARAMETER_STEP_DIVISIONS: int = 100
FALLBACK_PARAMETER_STEP: float = 0.1

DEFAULT_AXIS_TITLES: dict[str, str] = {"x": "X", "y": "Y"}
DEFAULT_PLOT_LABEL: str = "Plot"

__all__ = [
    "DEFAULT_AXIS_RANGE",
    "DEFAULT_AXIS_TITLES",
    "DEFAULT_COLOR",
    "DEFAULT_EQUATION",
    "DEFAULT_PARAMETER_MAX",
    "DEFAULT_PARAMETER_MIN",
    "DEFAULT_PARAMETER_STEP_DIVISIONS",
    "DEFAULT_PARAMETER_VALUE",
    "DEFAULT_PLOT_LABEL",
    "DEFAULT_STEPS",
    "DEFAULT_TITLE",
    "FALLBACK_PARAMETER_STEP",
    "GRID_RESOLUTION",
    "INTERPOLATION_EPSILON",
    "MAX_NESTING_DEPTH",
]
