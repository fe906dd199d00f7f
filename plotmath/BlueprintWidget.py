"""Notebook widget that drives a blueprint with parameter sliders.

``BlueprintWidget`` owns the caller-side state the engine deliberately does
not keep: the parsed blueprint, the current :class:`ParameterAssignment` and
the last successfully rendered result. Every slider change builds a new
assignment and re-runs :func:`~plotmath.engine.evaluate_blueprint`; the text
is never re-parsed.

If an evaluation fails with :class:`~plotmath.errors.EquationError` the
message is shown under the chart, a warning is logged, and the previous
curve stays on screen.

Examples
--------
>>> from plotmath import BlueprintWidget  # doctest: +SKIP
>>> w = BlueprintWidget('''
... title: Parabola
... equation: a * x**2
... params:
...   a: { label: "a", value: 1, min: -2, max: 2, step: 0.1 }
... ''')  # doctest: +SKIP
>>> w  # doctest: +SKIP
"""

from __future__ import annotations

import html
import logging
from functools import partial
from typing import Any, Dict, Optional, Union

import ipywidgets as widgets
import plotly.graph_objects as go
import sympy as sp

from .Blueprint import Blueprint
from .defaults import GRID_RESOLUTION
from .engine import evaluate_blueprint
from .errors import EquationError
from .expression import parse_expression, to_sympy
from .ParameterAssignment import ParameterAssignment
from .ParseBlueprint import parse_blueprint
from .PlotResult import PlotResult
from .plotly_render import update_figure

__all__ = ["BlueprintWidget", "equation_latex"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def equation_latex(blueprint: Blueprint) -> Optional[str]:
    """Return a LaTeX rendering of the blueprint's equation, or ``None``.

    Explicit equations render as ``y = ...``. ``None`` means the equation
    could not be parsed; callers should fall back to the raw text.
    """
    sides = blueprint.split_equation()
    symbols: Dict[str, sp.Symbol] = {}
    try:
        if sides is None:
            rhs = to_sympy(parse_expression(blueprint.equation), symbols)
            return f"y = {sp.latex(rhs)}"
        lhs = to_sympy(parse_expression(sides[0]), symbols)
        rhs = to_sympy(parse_expression(sides[1]), symbols)
        return f"{sp.latex(lhs)} = {sp.latex(rhs)}"
    except (TypeError, ValueError, RecursionError):
        return None


def _header_html(blueprint: Blueprint) -> str:
    parts = []
    if blueprint.title:
        parts.append(f"<b>{html.escape(blueprint.title)}</b>")
    latex = equation_latex(blueprint)
    if latex is None:
        parts.append(f"<code>{html.escape(blueprint.equation)}</code>")
    else:
        parts.append(f"${latex}$")
    return "<br>".join(parts)


class BlueprintWidget(widgets.VBox):
    """Slider panel plus Plotly chart for one blueprint.

    Parameters
    ----------
    blueprint : Blueprint or str
        Parsed blueprint, or raw blueprint text to parse.
    continuous_update : bool, optional
        Re-evaluate while a slider is dragged (``True``) or only on release.
    grid_resolution : int, optional
        Implicit-mode grid resolution forwarded to the engine.
    template : str, optional
        Plotly template for the chart.

    Notes
    -----
    The widget re-evaluates synchronously on every slider event. For heavy
    implicit equations pass ``continuous_update=False``.
    """

    def __init__(
        self,
        blueprint: Union[Blueprint, str],
        *,
        continuous_update: bool = True,
        grid_resolution: int = GRID_RESOLUTION,
        template: str = "plotly_dark",
    ) -> None:
        if isinstance(blueprint, str):
            blueprint = parse_blueprint(blueprint)
        self._blueprint = blueprint
        self._grid_resolution = grid_resolution
        self._last_result: Optional[PlotResult] = None
        self._error: Optional[str] = None
        self._syncing = False

        self.header = widgets.HTMLMath(value=_header_html(blueprint), layout=widgets.Layout(margin="0px"))

        self.sliders: Dict[str, widgets.FloatSlider] = {}
        for name, spec in blueprint.parameters.items():
            self.sliders[name] = widgets.FloatSlider(
                value=spec.value,
                min=spec.min,
                max=spec.max,
                step=spec.step,
                description=spec.label,
                continuous_update=continuous_update,
                style={"description_width": "initial"},
                layout=widgets.Layout(width="100%"),
            )

        # Sliders clamp out-of-range defaults, so read values back from them.
        self._values = ParameterAssignment({name: s.value for name, s in self.sliders.items()})

        self.btn_reset = widgets.Button(
            description="↺",
            tooltip="Reset parameters",
            layout=widgets.Layout(width="28px", height="28px", padding="0px"),
        )
        self.error_label = widgets.HTML(value="", layout=widgets.Layout(display="none"))

        self.figure_widget = go.FigureWidget()
        self.figure_widget.update_layout(template=template, autosize=True, height=420)

        controls = [self.btn_reset] if self.sliders else []
        super().__init__(
            children=[self.header, *self.sliders.values(), *controls, self.figure_widget, self.error_label],
            layout=widgets.Layout(width="100%"),
        )

        for name, slider in self.sliders.items():
            slider.observe(partial(self._on_slider_change, name), names="value")
        self.btn_reset.on_click(lambda _btn: self.reset())

        self.refresh()

    # --- Properties ---

    @property
    def blueprint(self) -> Blueprint:
        """The parsed blueprint this widget renders."""
        return self._blueprint

    @property
    def values(self) -> ParameterAssignment:
        """Current full parameter assignment."""
        return self._values

    @property
    def last_result(self) -> Optional[PlotResult]:
        """Most recent successful evaluation, or ``None`` if none succeeded."""
        return self._last_result

    @property
    def error(self) -> Optional[str]:
        """Message of the latest failed evaluation, cleared on success."""
        return self._error

    # --- Public API ---

    def set_value(self, name: str, value: float) -> None:
        """Move slider ``name`` to ``value`` (triggers a re-evaluation)."""
        if name not in self.sliders:
            raise KeyError(f"Unknown parameter name {name!r}.")
        self.sliders[name].value = value

    def reset(self) -> None:
        """Restore every slider to its declared default and re-evaluate once."""
        self._syncing = True
        try:
            for name, spec in self._blueprint.parameters.items():
                self.sliders[name].value = spec.value
        finally:
            self._syncing = False
        self._values = ParameterAssignment({name: s.value for name, s in self.sliders.items()})
        self.refresh()

    def refresh(self) -> Optional[PlotResult]:
        """Re-evaluate with the current values and update the chart.

        Returns the new result, or ``None`` when evaluation failed (the chart
        then keeps showing the previous result).
        """
        try:
            result = evaluate_blueprint(self._blueprint, self._values, grid_resolution=self._grid_resolution)
        except EquationError as exc:
            logger.warning("BlueprintWidget: %s", exc)
            self._show_error(str(exc))
            return None

        update_figure(self.figure_widget, result)
        self._last_result = result
        self._show_error(None)
        return result

    # --- Internals ---

    def _on_slider_change(self, name: str, change: Dict[str, Any]) -> None:
        if self._syncing:
            return
        self._values = self._values.with_values({name: change["new"]})
        self.refresh()

    def _show_error(self, message: Optional[str]) -> None:
        self._error = message
        if message is None:
            self.error_label.value = ""
            self.error_label.layout.display = "none"
        else:
            self.error_label.value = f'<span style="color:#ff6b6b">{html.escape(message)}</span>'
            self.error_label.layout.display = None
