"""Immutable records describing one parsed plot blueprint.

A ``Blueprint`` captures everything the engine needs to draw a curve: the
equation text, derived variables, slider parameters, axis configuration and
styling. It is produced once by :func:`plotmath.ParseBlueprint.parse_blueprint`
and reused for every re-evaluation; only the parameter values change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .defaults import DEFAULT_COLOR, DEFAULT_EQUATION, DEFAULT_STEPS, DEFAULT_TITLE
from .expression import split_top_level_equals


def _frozen_mapping(entries: Optional[Mapping] = None) -> Mapping:
    return MappingProxyType(dict(entries or {}))


@dataclass(frozen=True)
class ParameterSpec:
    """Slider definition for one named parameter.

    Parameters
    ----------
    name : str
        Identifier used in expressions.
    label : str
        Display label for the slider.
    value : float
        Initial (default) value.
    min, max : float
        Slider bounds.
    step : float
        Slider increment.
    """

    name: str
    label: str
    value: float
    min: float
    max: float
    step: float


@dataclass(frozen=True)
class AxisSpec:
    """Optional title and bounds for one axis. ``None`` means unset."""

    title: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None


@dataclass(frozen=True)
class AxisConfig:
    """Per-axis configuration for ``x`` and ``y``."""

    x: AxisSpec = field(default_factory=AxisSpec)
    y: AxisSpec = field(default_factory=AxisSpec)


@dataclass(frozen=True)
class Blueprint:
    """Parsed, immutable description of one plot.

    Parameters
    ----------
    title : str
        Display title, possibly empty.
    equation : str
        ``"<expr>"`` for explicit mode or ``"<expr> = <expr>"`` for implicit
        mode.
    steps : int
        Explicit-mode sample count; the curve has ``steps + 1`` points.
    color : str
        Color string passed through to the renderer untouched.
    variables : Mapping[str, str]
        Derived variables in declaration order, as raw expression text.
    parameters : Mapping[str, ParameterSpec]
        Slider parameters in declaration order.
    axis : AxisConfig
        Axis titles and bounds.

    Examples
    --------
    >>> bp = Blueprint(equation="x**2 + y**2 = 1")
    >>> bp.is_implicit
    True
    >>> bp.split_equation()
    ('x**2 + y**2', '1')
    """

    title: str = DEFAULT_TITLE
    equation: str = DEFAULT_EQUATION
    steps: int = DEFAULT_STEPS
    color: str = DEFAULT_COLOR
    variables: Mapping[str, str] = field(default_factory=_frozen_mapping)
    parameters: Mapping[str, ParameterSpec] = field(default_factory=_frozen_mapping)
    axis: AxisConfig = field(default_factory=AxisConfig)

    def __post_init__(self) -> None:
        if int(self.steps) < 1:
            raise ValueError(f"Blueprint steps must be a positive integer, got {self.steps!r}")
        # Callers may pass plain dicts; store read-only copies.
        object.__setattr__(self, "variables", _frozen_mapping(self.variables))
        object.__setattr__(self, "parameters", _frozen_mapping(self.parameters))

    @property
    def is_implicit(self) -> bool:
        """Return ``True`` when the equation has a top-level ``=``."""
        return split_top_level_equals(self.equation) is not None

    def split_equation(self) -> Optional[Tuple[str, str]]:
        """Return ``(left, right)`` for implicit equations, else ``None``."""
        return split_top_level_equals(self.equation)

    def default_values(self) -> dict[str, float]:
        """Return ``{name: default value}`` for every declared parameter."""
        return {name: spec.value for name, spec in self.parameters.items()}

    def __repr__(self) -> str:
        return (
            f"Blueprint(title={self.title!r}, equation={self.equation!r}, "
            f"parameters={list(self.parameters)!r}, variables={list(self.variables)!r})"
        )


__all__ = ["AxisConfig", "AxisSpec", "Blueprint", "ParameterSpec"]
