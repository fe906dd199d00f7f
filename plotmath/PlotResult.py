"""Output records produced by the sampling engine.

The engine returns a :class:`PlotResult` wrapping one of two series kinds:

- :class:`Curve` -- ordered samples of an explicit function, drawn as a
  connected line.
- :class:`ContourPoints` -- unordered points on the zero-level set of an
  implicit relation, drawn as unconnected markers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

import numpy as np


@dataclass(frozen=True, eq=False)
class _PointSeries:
    x: np.ndarray
    y: np.ndarray

    kind: ClassVar[str] = ""

    def points(self) -> list[Tuple[float, float]]:
        """Return the samples as a list of ``(x, y)`` float pairs."""
        return [(float(px), float(py)) for px, py in zip(self.x, self.y)]

    def __len__(self) -> int:
        return int(self.x.shape[0])

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={len(self)})"


@dataclass(frozen=True, eq=False)
class Curve(_PointSeries):
    """Ordered ``(x, y)`` samples meant to be drawn as a connected line.

    ``y`` may contain ``nan`` or ``inf``; filtering is the renderer's job.
    """

    kind: ClassVar[str] = "curve"


@dataclass(frozen=True, eq=False)
class ContourPoints(_PointSeries):
    """Unordered points approximating the zero-level set of ``left - right``."""

    kind: ClassVar[str] = "contour"


Series = Union[Curve, ContourPoints]


@dataclass(frozen=True)
class PlotResult:
    """Series plus everything a chart renderer needs to draw it.

    Parameters
    ----------
    series : Curve or ContourPoints
        Sampled data.
    x_range, y_range : tuple[float, float]
        Resolved axis bounds.
    title : str
        Blueprint title (may be empty).
    color : str
        Blueprint color string.
    x_title, y_title : str or None
        Axis titles from the blueprint, if any.
    """

    series: Series
    x_range: Tuple[float, float]
    y_range: Tuple[float, float]
    title: str
    color: str
    x_title: Optional[str] = None
    y_title: Optional[str] = None

    @property
    def is_implicit(self) -> bool:
        return isinstance(self.series, ContourPoints)

    def __repr__(self) -> str:
        return (
            f"PlotResult(series={self.series!r}, x_range={self.x_range!r}, "
            f"y_range={self.y_range!r}, title={self.title!r})"
        )


__all__ = ["ContourPoints", "Curve", "PlotResult", "Series"]
