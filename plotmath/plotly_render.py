"""Plotly adapter for :class:`~plotmath.PlotResult.PlotResult`.

The engine knows nothing about charts. This module is the one place that maps
a result onto a chart library: a plain-dict payload for any renderer and a
Plotly figure with the style hints used by the interactive widget.

Style rules
-----------
- ``Curve``: connected spline line (width 3), filled to zero with the line
  color at 10% opacity when the color is an ``rgb(...)`` string.
- ``ContourPoints``: unconnected markers (size 2), no fill.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

import numpy as np
import plotly.graph_objects as go

from .defaults import DEFAULT_AXIS_TITLES, DEFAULT_PLOT_LABEL
from .PlotResult import PlotResult

__all__ = ["build_figure", "chart_payload", "fill_color", "series_style", "update_figure"]

_RGB_RE = re.compile(r"^\s*rgb\((.*)\)\s*$", re.IGNORECASE)

_AXIS_FONT = dict(family="JetBrains Mono, monospace")
_GRID_COLOR = "rgba(255,255,255,0.05)"


def fill_color(color: str, alpha: float = 0.1) -> str:
    """Return ``rgba(...)`` with ``alpha`` for ``rgb(...)`` colors, else ``color``.

    >>> fill_color("rgb(255, 149, 0)")
    'rgba(255, 149, 0, 0.1)'
    >>> fill_color("#ff9500")
    '#ff9500'
    """
    match = _RGB_RE.match(color)
    if match is None:
        return color
    return f"rgba({match.group(1)}, {alpha:g})"


def series_style(result: PlotResult) -> Dict[str, Any]:
    """Return renderer-agnostic style hints for the result's series kind."""
    if result.is_implicit:
        return {
            "show_line": False,
            "line_width": 1,
            "point_radius": 1,
            "fill": False,
            "fill_color": result.color,
        }
    return {
        "show_line": True,
        "line_width": 3,
        "point_radius": 0,
        "fill": True,
        "fill_color": fill_color(result.color),
        "smoothing": 0.4,
    }


def _label(result: PlotResult) -> str:
    return result.title or DEFAULT_PLOT_LABEL


def chart_payload(result: PlotResult) -> Dict[str, Any]:
    """Return a plain-dict description of ``result`` for a chart library.

    Keys: ``kind``, ``label``, ``points``, ``x_range``, ``y_range``,
    ``x_title``, ``y_title``, ``color``, ``style``.
    """
    return {
        "kind": result.series.kind,
        "label": _label(result),
        "points": result.series.points(),
        "x_range": result.x_range,
        "y_range": result.y_range,
        "x_title": result.x_title or DEFAULT_AXIS_TITLES["x"],
        "y_title": result.y_title or DEFAULT_AXIS_TITLES["y"],
        "color": result.color,
        "style": series_style(result),
    }


def _trace(result: PlotResult) -> go.Scatter:
    series = result.series
    style = series_style(result)
    if style["show_line"]:
        return go.Scatter(
            x=np.asarray(series.x),
            y=np.asarray(series.y),
            name=_label(result),
            mode="lines",
            line=dict(color=result.color, width=style["line_width"], shape="spline", smoothing=style["smoothing"]),
            fill="tozeroy",
            fillcolor=style["fill_color"],
            connectgaps=False,
        )
    return go.Scatter(
        x=np.asarray(series.x),
        y=np.asarray(series.y),
        name=_label(result),
        mode="markers",
        marker=dict(color=result.color, size=2 * style["point_radius"]),
    )


def _layout(result: PlotResult) -> Dict[str, Any]:
    def axis(title: str, bounds: tuple[float, float]) -> Dict[str, Any]:
        return dict(
            title=dict(text=title, font=_AXIS_FONT),
            range=list(bounds),
            autorange=False,
            gridcolor=_GRID_COLOR,
            tickfont=_AXIS_FONT,
        )

    return dict(
        showlegend=False,
        margin=dict(l=48, r=28, t=48, b=44),
        xaxis=axis(result.x_title or DEFAULT_AXIS_TITLES["x"], result.x_range),
        yaxis=axis(result.y_title or DEFAULT_AXIS_TITLES["y"], result.y_range),
    )


def build_figure(result: PlotResult, *, template: Optional[str] = "plotly_dark") -> go.Figure:
    """Return a static Plotly figure drawing ``result``."""
    fig = go.Figure(data=[_trace(result)])
    fig.update_layout(template=template, **_layout(result))
    return fig


def update_figure(fig: go.Figure, result: PlotResult) -> None:
    """Replace the first trace's data and the axes of ``fig`` in place.

    Works for both ``go.Figure`` and ``go.FigureWidget``; the widget's update
    is batched so the browser redraws once. The trace style is only set when
    the figure has no trace yet.
    """
    layout = _layout(result)

    def apply() -> None:
        if fig.data:
            fig.data[0].update(
                x=np.asarray(result.series.x),
                y=np.asarray(result.series.y),
                name=_label(result),
            )
        else:
            fig.add_trace(_trace(result))
        fig.update_layout(**layout)

    batch = getattr(fig, "batch_update", None)
    if batch is None:
        apply()
        return
    with batch():
        apply()
