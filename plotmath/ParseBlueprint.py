"""Parser for the loosely indented, YAML-like blueprint text format.

The format is line oriented::

    title: Damped oscillator
    equation: A * exp(-k * x) * cos(w * x)
    steps: 400
    params:
      A: { label: "Amplitude", value: 1, min: 0, max: 5, step: 0.1 }
      k: { label: "Damping", value: 0.2, min: 0, max: 2 }
    vars:
      w: sqrt(A) * 2
    axis:
      x: { title: "t", min: 0, max: 20 }
      y: { min: -5, max: 5 }

Parsing is total: unknown keys, malformed literals and bad numbers fall back
to the documented defaults in :mod:`plotmath.defaults` and never raise.
Expressions are stored as text; they are only parsed when evaluated.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Optional

from .Blueprint import AxisConfig, AxisSpec, Blueprint, ParameterSpec
from .defaults import (
    DEFAULT_COLOR,
    DEFAULT_EQUATION,
    DEFAULT_PARAMETER_MAX,
    DEFAULT_PARAMETER_MIN,
    DEFAULT_PARAMETER_STEP_DIVISIONS,
    DEFAULT_PARAMETER_VALUE,
    DEFAULT_STEPS,
    DEFAULT_TITLE,
    FALLBACK_PARAMETER_STEP,
)

__all__ = ["parse_blueprint", "parse_object_literal", "coerce_literal_value"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_SECTION_ALIASES = {
    "params": "params",
    "parameters": "params",
    "vars": "vars",
    "variables": "vars",
    "axis": "axis",
}

_NUMERIC_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_LEADING_INT_RE = re.compile(r"[-+]?\d+")
_OBJECT_RE = re.compile(r"\{(.*)\}")
_QUOTES = ("'", '"')


def coerce_literal_value(text: str) -> Any:
    """Strip surrounding quotes from ``text`` and convert numbers to ``float``.

    >>> coerce_literal_value('"Amplitude"')
    'Amplitude'
    >>> coerce_literal_value("2.5e1")
    25.0
    >>> coerce_literal_value("'10'")
    10.0
    """
    value = text.strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        value = value[1:-1].strip()
    if _NUMERIC_RE.fullmatch(value):
        return float(value)
    return value


def _split_top_level(body: str, separator: str = ",") -> list[str]:
    """Split ``body`` on ``separator`` outside quotes and brackets."""
    parts: list[str] = []
    depth = 0
    quote: Optional[str] = None
    start = 0
    for idx, ch in enumerate(body):
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(depth - 1, 0)
        elif ch == separator and depth == 0:
            parts.append(body[start:idx])
            start = idx + 1
    parts.append(body[start:])
    return parts


def parse_object_literal(text: str) -> Optional[Dict[str, Any]]:
    """Parse ``{ key: value, ... }`` into a dict.

    Returns ``None`` when ``text`` has no brace pair. Entries without a key or
    value are dropped; values go through :func:`coerce_literal_value`.

    >>> parse_object_literal('{ label: "a, b", value: 3 }')
    {'label': 'a, b', 'value': 3.0}
    """
    match = _OBJECT_RE.search(text)
    if match is None:
        return None
    props: Dict[str, Any] = {}
    for entry in _split_top_level(match.group(1)):
        key, sep, raw_value = entry.partition(":")
        key = key.strip().strip("'\"")
        raw_value = raw_value.strip()
        if not sep or not key or not raw_value:
            continue
        props[key] = coerce_literal_value(raw_value)
    return props


def _finite(props: Dict[str, Any], key: str) -> Optional[float]:
    value = props.get(key)
    if isinstance(value, float) and math.isfinite(value):
        return value
    return None


def _text(props: Dict[str, Any], key: str) -> Optional[str]:
    value = props.get(key)
    if value is None:
        return None
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _parse_steps(raw: str) -> int:
    match = _LEADING_INT_RE.match(raw.strip())
    if match is None:
        return DEFAULT_STEPS
    steps = int(match.group())
    return steps if steps >= 1 else DEFAULT_STEPS


def _build_parameter(name: str, props: Dict[str, Any]) -> ParameterSpec:
    lo = _finite(props, "min")
    hi = _finite(props, "max")
    lo = DEFAULT_PARAMETER_MIN if lo is None else lo
    hi = DEFAULT_PARAMETER_MAX if hi is None else hi
    if lo > hi:
        lo, hi = hi, lo

    value = _finite(props, "value")
    if value is None:
        value = min(max(DEFAULT_PARAMETER_VALUE, lo), hi)

    step = _finite(props, "step")
    if step is None or step <= 0:
        step = (hi - lo) / DEFAULT_PARAMETER_STEP_DIVISIONS
        if not step > 0:
            step = FALLBACK_PARAMETER_STEP

    return ParameterSpec(
        name=name,
        label=_text(props, "label") or name,
        value=value,
        min=lo,
        max=hi,
        step=step,
    )


def _build_axis(props: Dict[str, Any]) -> AxisSpec:
    return AxisSpec(title=_text(props, "title"), min=_finite(props, "min"), max=_finite(props, "max"))


def parse_blueprint(text: str) -> Blueprint:
    """Parse blueprint ``text`` into an immutable :class:`Blueprint`.

    Parameters
    ----------
    text : str
        Raw multi-line blueprint source.

    Returns
    -------
    Blueprint
        Blueprint with defaults applied for every absent or invalid field.

    Notes
    -----
    Unindented lines containing ``:`` are section headers or root keys;
    indented lines belong to the active ``params``, ``vars`` or ``axis``
    section. Blank lines and ``#`` comments are skipped.

    Examples
    --------
    >>> bp = parse_blueprint("equation: x**2\\nsteps: 4")
    >>> bp.equation, bp.steps
    ('x**2', 4)
    """
    title = DEFAULT_TITLE
    equation = DEFAULT_EQUATION
    steps = DEFAULT_STEPS
    color = DEFAULT_COLOR
    variables: Dict[str, str] = {}
    parameters: Dict[str, ParameterSpec] = {}
    axes: Dict[str, AxisSpec] = {}

    section = ""
    for line in re.split(r"\r?\n", text):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#") or ":" not in trimmed:
            continue

        key, _, value = line.partition(":")
        key = key.strip()
        value = value.strip()

        if not line[0].isspace():
            lowered = key.lower()
            if lowered in _SECTION_ALIASES:
                section = _SECTION_ALIASES[lowered]
                continue
            section = ""
            if lowered == "title":
                title = value
            elif lowered == "equation":
                equation = value
            elif lowered == "steps":
                steps = _parse_steps(value)
            elif lowered == "color":
                color = value
            else:
                logger.debug("parse_blueprint: ignoring root key %r", key)
            continue

        props = parse_object_literal(value)
        if props is not None:
            if section == "params":
                parameters[key] = _build_parameter(key, props)
            elif section == "axis" and key in ("x", "y"):
                axes[key] = _build_axis(props)
        elif section == "vars":
            variables[key] = value
        elif section in ("params", "axis"):
            logger.debug("parse_blueprint: no object literal for %r in %s section", key, section)

    return Blueprint(
        title=title,
        equation=equation,
        steps=steps,
        color=color,
        variables=variables,
        parameters=parameters,
        axis=AxisConfig(x=axes.get("x", AxisSpec()), y=axes.get("y", AxisSpec())),
    )
