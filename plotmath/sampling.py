"""Numeric samplers for explicit and implicit blueprints.

Explicit mode
-------------
:func:`sample_explicit` sweeps ``x`` over ``steps + 1`` evenly spaced values,
both ends included, and evaluates ``y = f(x)`` in one vectorized call.

Implicit mode
-------------
:func:`sample_implicit` evaluates ``diff(x, y)`` on a uniform grid and runs
Marching Squares (:func:`marching_squares`) to find where ``diff`` changes
sign. Each grid cell is classified by the signs of its corners
(bottom-left, bottom-right, top-right, top-left -> bits 1, 2, 4, 8); cells
with code 0 or 15 are skipped, as is any cell with a non-finite corner. For
every edge whose endpoint signs differ one linearly interpolated point is
emitted, in bottom, right, top, left order.

Both samplers take plain callables over NumPy arrays so they can be tested
without the expression layer.
"""

from __future__ import annotations

from typing import Any, Callable, Tuple

import numpy as np

from .defaults import GRID_RESOLUTION, INTERPOLATION_EPSILON

__all__ = [
    "cell_codes",
    "grid_nodes",
    "interpolate_crossing",
    "marching_squares",
    "sample_explicit",
    "sample_implicit",
    "sweep_x",
]

Range = Tuple[float, float]


def _as_float_array(values: Any, shape: Tuple[int, ...]) -> np.ndarray:
    # Expressions that ignore the sweep variables evaluate to a scalar.
    return np.broadcast_to(np.asarray(values, dtype=float), shape).copy()


def sweep_x(x_range: Range, steps: int) -> np.ndarray:
    """Return ``x_i = x_min + (x_max - x_min) * i / steps`` for ``i = 0..steps``."""
    x_min, x_max = x_range
    return x_min + (x_max - x_min) * np.arange(steps + 1) / steps


def sample_explicit(fn: Callable[[np.ndarray], Any], x_range: Range, steps: int) -> Tuple[np.ndarray, np.ndarray]:
    """Evaluate ``fn`` on :func:`sweep_x` and return ``(x, y)`` arrays.

    Non-finite ``y`` values are kept.
    """
    x = sweep_x(x_range, steps)
    y = _as_float_array(fn(x), x.shape)
    return x, y


def grid_nodes(x_range: Range, y_range: Range, resolution: int = GRID_RESOLUTION) -> Tuple[np.ndarray, np.ndarray]:
    """Return node coordinates ``(xs, ys)``, each of length ``resolution + 1``."""
    xs = np.linspace(x_range[0], x_range[1], resolution + 1)
    ys = np.linspace(y_range[0], y_range[1], resolution + 1)
    return xs, ys


def interpolate_crossing(p1: Any, p2: Any, v1: Any, v2: Any, eps: float = INTERPOLATION_EPSILON) -> Any:
    """Estimate where the field crosses zero between ``p1`` and ``p2``.

    Uses ``p1 + (0 - v1) / (v2 - v1) * (p2 - p1)`` and returns ``p1`` when
    ``|v1 - v2| < eps``. Works elementwise on arrays.

    >>> float(interpolate_crossing(0.0, 1.0, -1.0, 3.0))
    0.25
    """
    p1 = np.asarray(p1, dtype=float)
    p2 = np.asarray(p2, dtype=float)
    v1 = np.asarray(v1, dtype=float)
    v2 = np.asarray(v2, dtype=float)
    with np.errstate(all="ignore"):
        flat = np.abs(v1 - v2) < eps
        mu = (0.0 - v1) / np.where(flat, 1.0, v2 - v1)
        return np.where(flat, p1, p1 + mu * (p2 - p1))


def cell_codes(values: np.ndarray) -> np.ndarray:
    """Return the 4-bit corner sign code of every cell of a node grid.

    ``values`` is indexed ``[row (y), column (x)]``; the result has one fewer
    row and column.
    """
    bl = values[:-1, :-1] > 0
    br = values[:-1, 1:] > 0
    tr = values[1:, 1:] > 0
    tl = values[1:, :-1] > 0
    return bl * 1 + br * 2 + tr * 4 + tl * 8


def marching_squares(values: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Extract zero-crossing points from a node grid.

    Parameters
    ----------
    values : numpy.ndarray
        Field samples with shape ``(len(ys), len(xs))``.
    xs, ys : numpy.ndarray
        Node coordinates along each axis.

    Returns
    -------
    tuple[numpy.ndarray, numpy.ndarray]
        ``(x, y)`` coordinates of the crossing points, ordered by cell row,
        then cell column, then edge (bottom, right, top, left).
    """
    values = np.asarray(values, dtype=float)
    v0 = values[:-1, :-1]  # bottom-left
    v1 = values[:-1, 1:]  # bottom-right
    v2 = values[1:, 1:]  # top-right
    v3 = values[1:, :-1]  # top-left

    finite = np.isfinite(v0) & np.isfinite(v1) & np.isfinite(v2) & np.isfinite(v3)
    codes = cell_codes(values)
    active = finite & (codes > 0) & (codes < 15)

    shape = v0.shape
    x_left = np.broadcast_to(xs[:-1][np.newaxis, :], shape)
    x_right = np.broadcast_to(xs[1:][np.newaxis, :], shape)
    y_bottom = np.broadcast_to(ys[:-1][:, np.newaxis], shape)
    y_top = np.broadcast_to(ys[1:][:, np.newaxis], shape)

    s0, s1, s2, s3 = v0 > 0, v1 > 0, v2 > 0, v3 > 0
    crossings = np.stack([s0 != s1, s1 != s2, s2 != s3, s3 != s0], axis=-1)
    point_x = np.stack(
        [
            interpolate_crossing(x_left, x_right, v0, v1),
            x_right,
            interpolate_crossing(x_right, x_left, v2, v3),
            x_left,
        ],
        axis=-1,
    )
    point_y = np.stack(
        [
            y_bottom,
            interpolate_crossing(y_bottom, y_top, v1, v2),
            y_top,
            interpolate_crossing(y_top, y_bottom, v3, v0),
        ],
        axis=-1,
    )

    emit = crossings & active[..., np.newaxis]
    return point_x[emit], point_y[emit]


def sample_implicit(
    fn: Callable[[np.ndarray, np.ndarray], Any],
    x_range: Range,
    y_range: Range,
    resolution: int = GRID_RESOLUTION,
) -> Tuple[np.ndarray, np.ndarray]:
    """Evaluate ``fn(x, y)`` on the grid and return its zero-contour points."""
    xs, ys = grid_nodes(x_range, y_range, resolution)
    grid_x, grid_y = np.meshgrid(xs, ys)
    values = _as_float_array(fn(grid_x, grid_y), grid_x.shape)
    return marching_squares(values, xs, ys)
