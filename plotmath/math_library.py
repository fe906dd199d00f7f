"""Fixed math library available to every blueprint expression.

The library is the only source of callables in an expression scope. Each
entry is either a float constant or a :class:`LibraryFunction` backed by a
NumPy ufunc so the same implementation works for scalars and for the arrays
used by the explicit sweep and the implicit grid.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

import numpy as np
import sympy as sp

__all__ = [
    "LibraryFunction",
    "MATH_LIBRARY",
    "RESERVED_NAMES",
    "SYMPY_EQUIVALENTS",
    "SWEEP_VARIABLES",
]


@dataclass(frozen=True)
class LibraryFunction:
    """NumPy-backed function exposed to expressions under ``name``.

    ``max_args`` of ``None`` means the function is variadic.
    """

    name: str
    impl: Callable[..., Any]
    min_args: int
    max_args: Optional[int]

    def check_arity(self, count: int) -> Optional[str]:
        """Return an error message when ``count`` arguments are not accepted."""
        if count < self.min_args:
            return f"{self.name}() takes at least {self.min_args} argument(s), got {count}"
        if self.max_args is not None and count > self.max_args:
            return f"{self.name}() takes at most {self.max_args} argument(s), got {count}"
        return None

    def __call__(self, *args: Any) -> Any:
        return self.impl(*args)

    def __repr__(self) -> str:
        return f"LibraryFunction({self.name!r})"


def _round_half_up(value: Any) -> Any:
    # np.round rounds half to even; plotting blueprints expect 2.5 -> 3.
    return np.floor(np.add(value, 0.5))


def _variadic_min(*values: Any) -> Any:
    return reduce(np.minimum, values)


def _variadic_max(*values: Any) -> Any:
    return reduce(np.maximum, values)


LibraryEntry = Union[float, LibraryFunction]

_FUNCTIONS: tuple[LibraryFunction, ...] = (
    LibraryFunction("sin", np.sin, 1, 1),
    LibraryFunction("cos", np.cos, 1, 1),
    LibraryFunction("tan", np.tan, 1, 1),
    LibraryFunction("exp", np.exp, 1, 1),
    LibraryFunction("sqrt", np.sqrt, 1, 1),
    LibraryFunction("pow", np.power, 2, 2),
    LibraryFunction("abs", np.abs, 1, 1),
    LibraryFunction("log", np.log, 1, 1),
    LibraryFunction("log10", np.log10, 1, 1),
    LibraryFunction("floor", np.floor, 1, 1),
    LibraryFunction("ceil", np.ceil, 1, 1),
    LibraryFunction("round", _round_half_up, 1, 1),
    LibraryFunction("min", _variadic_min, 1, None),
    LibraryFunction("max", _variadic_max, 1, None),
)

_CONSTANTS: dict[str, float] = {
    "PI": float(np.pi),
    "E": float(np.e),
}

MATH_LIBRARY: Mapping[str, LibraryEntry] = MappingProxyType(
    {**{fn.name: fn for fn in _FUNCTIONS}, **_CONSTANTS}
)

# Independent variables bound by the samplers.
SWEEP_VARIABLES: frozenset[str] = frozenset({"x", "y"})

RESERVED_NAMES: frozenset[str] = frozenset(MATH_LIBRARY) | SWEEP_VARIABLES

# SymPy counterparts used when an expression is converted for LaTeX display.
SYMPY_EQUIVALENTS: Mapping[str, Any] = MappingProxyType(
    {
        "sin": sp.sin,
        "cos": sp.cos,
        "tan": sp.tan,
        "exp": sp.exp,
        "sqrt": sp.sqrt,
        "pow": sp.Pow,
        "abs": sp.Abs,
        "log": sp.log,
        "log10": lambda arg: sp.log(arg, 10),
        "floor": sp.floor,
        "ceil": sp.ceiling,
        "round": lambda arg: sp.floor(arg + sp.Rational(1, 2)),
        "min": sp.Min,
        "max": sp.Max,
        "PI": sp.pi,
        "E": sp.E,
    }
)
