"""Immutable snapshots of slider parameter values.

A ``ParameterAssignment`` is the full ``name -> value`` mapping a caller hands
to the engine on every evaluation. It is always complete (one entry per
declared parameter) and never mutated; a slider change produces a new
assignment via :meth:`ParameterAssignment.with_values`.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Dict, Iterable

if TYPE_CHECKING:
    from .Blueprint import Blueprint


def require_values(
    source: Mapping[str, Any],
    names: Iterable[str],
) -> Dict[str, float]:
    """Return ``{name: float(value)}`` for ``names`` in order.

    Extra keys in ``source`` are ignored.

    Raises
    ------
    KeyError
        If any name in ``names`` is absent from ``source``.
    """
    names = tuple(names)
    missing = [name for name in names if name not in source]
    if missing:
        raise KeyError(f"Missing parameter values: [{', '.join(missing)}]")
    return {name: float(source[name]) for name in names}


class ParameterAssignment(Mapping[str, float]):
    """Immutable, insertion-ordered ``name -> float`` parameter values.

    Parameters
    ----------
    values : Mapping[str, float]
        Source values. Copied and converted to ``float``.

    Examples
    --------
    >>> a = ParameterAssignment({"R": 10, "X": 15})
    >>> b = a.with_values(R=20)
    >>> a["R"], b["R"]
    (10.0, 20.0)
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: Dict[str, float] = {name: float(value) for name, value in (values or {}).items()}

    @classmethod
    def defaults(cls, blueprint: "Blueprint") -> "ParameterAssignment":
        """Return the assignment built from each parameter's declared default."""
        return cls(blueprint.default_values())

    @classmethod
    def for_blueprint(cls, blueprint: "Blueprint", values: Mapping[str, Any]) -> "ParameterAssignment":
        """Return the declared parameters of ``blueprint`` taken from ``values``.

        Raises
        ------
        KeyError
            If a declared parameter is missing from ``values``.
        """
        return cls(require_values(values, blueprint.parameters))

    def with_values(self, updates: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "ParameterAssignment":
        """Return a copy with ``updates`` applied.

        Raises
        ------
        KeyError
            If an update names a parameter this assignment does not hold.
        """
        merged = dict(self._values)
        for name, value in {**dict(updates or {}), **kwargs}.items():
            if name not in merged:
                raise KeyError(
                    f"Unknown parameter name {name!r}. "
                    f"Use one of: {', '.join(merged) or '<none>'}."
                )
            merged[name] = float(value)
        return ParameterAssignment(merged)

    def __getitem__(self, name: str) -> float:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        """Compare by content, ignoring order, like any other ``Mapping``."""
        if not isinstance(other, Mapping):
            return NotImplemented
        return dict(self.items()) == dict(other.items())

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def __repr__(self) -> str:
        return f"ParameterAssignment({self._values!r})"


__all__ = ["ParameterAssignment", "require_values"]
