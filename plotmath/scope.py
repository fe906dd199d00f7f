"""Immutable name -> value tables used to evaluate expressions.

A :class:`Scope` is built fresh for every evaluation pass: the math library
first, then parameter values, then each derived variable in declaration
order. Extending a scope returns a new one and never mutates the original,
so a scope handed to the samplers cannot change underneath them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Dict

from .math_library import MATH_LIBRARY


class Scope(Mapping[str, Any]):
    """Read-only, insertion-ordered mapping of identifiers to values.

    Parameters
    ----------
    entries : Mapping[str, Any], optional
        Initial bindings. Later bindings with the same name replace earlier
        ones when a scope is extended.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Any] | None = None) -> None:
        self._entries: Mapping[str, Any] = MappingProxyType(dict(entries or {}))

    @classmethod
    def with_math_library(cls) -> "Scope":
        """Return a scope holding only the fixed math library."""
        return cls(MATH_LIBRARY)

    def extend(self, bindings: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "Scope":
        """Return a new scope with ``bindings`` (and ``kwargs``) layered on top."""
        merged: Dict[str, Any] = dict(self._entries)
        if bindings:
            merged.update(bindings)
        merged.update(kwargs)
        return Scope(merged)

    def __getitem__(self, name: str) -> Any:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        names = ", ".join(name for name in self._entries if name not in MATH_LIBRARY)
        return f"Scope(<math library>, {names})"
