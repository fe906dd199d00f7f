"""
expression: constrained arithmetic expressions for plot blueprints
==================================================================

Purpose
-------
Parse the arithmetic text found in a blueprint (the equation and every
derived variable) into a small AST and evaluate it with NumPy against a
:class:`~plotmath.scope.Scope`. Nothing here generates or executes Python
source; the grammar is deliberately tiny:

- number literals (``2``, ``1.5``, ``.5``, ``1e-3``),
- identifiers (parameters, variables, ``x``/``y``, library constants),
- binary ``+ - * / **`` and unary ``-``/``+``,
- parentheses,
- calls to the fixed math library (``sin(x)``, ``max(a, b, c)``).

Precedence follows Python: ``**`` binds tighter than unary minus and is right
associative, so ``-x**2 == -(x**2)`` and ``2**3**2 == 2**9``.

Numeric semantics
-----------------
Evaluation always runs on ``numpy.float64`` values inside
``numpy.errstate(all="ignore")``. Division by zero, overflow and domain
errors therefore yield ``inf``/``nan`` instead of raising; those values are
propagated as-is. Only structural problems raise (see :mod:`plotmath.errors`).

Examples
--------
>>> from plotmath.expression import parse_expression, evaluate_expression
>>> from plotmath.scope import Scope
>>> node = parse_expression("a * x**2 + 1")
>>> float(evaluate_expression(node, Scope.with_math_library().extend(a=2.0, x=3.0)))
19.0
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

import numpy as np
import sympy as sp

from .defaults import MAX_NESTING_DEPTH
from .errors import (
    ExpressionEvaluationError,
    ExpressionSyntaxError,
    UnknownIdentifierError,
)
from .math_library import SYMPY_EQUIVALENTS, LibraryFunction

__all__ = [
    "BinaryOp",
    "Call",
    "Name",
    "Node",
    "Number",
    "Token",
    "UnaryOp",
    "evaluate_expression",
    "parse_expression",
    "split_top_level_equals",
    "to_sympy",
    "tokenize",
]


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>\*\*|[-+*/])
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<comma>,)
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    """One lexical token with its kind, source text and offset."""

    kind: str
    text: str
    position: int


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens, ending with an ``"end"`` token.

    Raises
    ------
    ExpressionSyntaxError
        On any character outside the grammar.
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ExpressionSyntaxError(f"Unexpected character {text[pos]!r}", text, pos)
        kind = match.lastgroup or ""
        if kind != "ws":
            tokens.append(Token(kind, match.group(), pos))
        pos = match.end()
    tokens.append(Token("end", "", len(text)))
    return tokens


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Number:
    """Numeric literal. ``text`` keeps the source spelling for display."""

    value: float
    text: str

    def evaluate(self, scope: Mapping[str, Any]) -> Any:
        return np.float64(self.value)

    def names(self) -> frozenset[str]:
        return frozenset()


@dataclass(frozen=True)
class Name:
    """Reference to a constant, parameter, variable or sweep variable."""

    name: str

    def evaluate(self, scope: Mapping[str, Any]) -> Any:
        try:
            value = scope[self.name]
        except KeyError:
            raise UnknownIdentifierError(self.name) from None
        if isinstance(value, LibraryFunction):
            raise ExpressionEvaluationError(
                f"{self.name} is a function; call it with arguments, e.g. {self.name}(x)"
            )
        return value

    def names(self) -> frozenset[str]:
        return frozenset({self.name})


@dataclass(frozen=True)
class UnaryOp:
    """Prefix ``-`` or ``+`` applied to ``operand``."""

    op: str
    operand: "Node"

    def evaluate(self, scope: Mapping[str, Any]) -> Any:
        value = self.operand.evaluate(scope)
        if self.op == "-":
            return np.negative(value)
        return value

    def names(self) -> frozenset[str]:
        return self.operand.names()


_BINARY_UFUNCS = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.true_divide,
    "**": np.power,
}


@dataclass(frozen=True)
class BinaryOp:
    """Arithmetic operation between two sub-expressions."""

    op: str
    left: "Node"
    right: "Node"

    def evaluate(self, scope: Mapping[str, Any]) -> Any:
        ufunc = _BINARY_UFUNCS[self.op]
        return ufunc(self.left.evaluate(scope), self.right.evaluate(scope))

    def names(self) -> frozenset[str]:
        return self.left.names() | self.right.names()


@dataclass(frozen=True)
class Call:
    """Call of a math-library function."""

    name: str
    args: tuple["Node", ...]

    def evaluate(self, scope: Mapping[str, Any]) -> Any:
        try:
            target = scope[self.name]
        except KeyError:
            raise UnknownIdentifierError(self.name) from None
        if not isinstance(target, LibraryFunction):
            raise ExpressionEvaluationError(f"{self.name} is not a function")
        problem = target.check_arity(len(self.args))
        if problem is not None:
            raise ExpressionEvaluationError(problem)
        return target(*(arg.evaluate(scope) for arg in self.args))

    def names(self) -> frozenset[str]:
        """Identifiers used as values in the arguments; the callee is excluded."""
        return frozenset().union(*(arg.names() for arg in self.args))


Node = Union[Number, Name, UnaryOp, BinaryOp, Call]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _accept(self, kind: str, text: Optional[str] = None) -> Optional[Token]:
        token = self.current
        if token.kind == kind and (text is None or token.text == text):
            return self._advance()
        return None

    def _expect(self, kind: str, what: str) -> Token:
        token = self._accept(kind)
        if token is None:
            raise self._error(f"Expected {what}")
        return token

    def _error(self, message: str) -> ExpressionSyntaxError:
        token = self.current
        found = "end of expression" if token.kind == "end" else repr(token.text)
        return ExpressionSyntaxError(f"{message}, found {found}", self.text, token.position)

    def parse(self) -> Node:
        if self.current.kind == "end":
            raise self._error("Expected an expression")
        node = self._sum()
        if self.current.kind != "end":
            raise self._error("Unexpected token")
        return node

    def _sum(self) -> Node:
        node = self._product()
        while self.current.kind == "op" and self.current.text in ("+", "-"):
            op = self._advance().text
            node = BinaryOp(op, node, self._product())
        return node

    def _product(self) -> Node:
        node = self._unary()
        while self.current.kind == "op" and self.current.text in ("*", "/"):
            op = self._advance().text
            node = BinaryOp(op, node, self._unary())
        return node

    def _unary(self) -> Node:
        # Every nesting level (sign, exponent, parenthesis, call) passes here.
        if self.depth >= MAX_NESTING_DEPTH:
            raise self._error(f"Expression nested too deeply (limit {MAX_NESTING_DEPTH})")
        self.depth += 1
        try:
            if self.current.kind == "op" and self.current.text in ("+", "-"):
                op = self._advance().text
                return UnaryOp(op, self._unary())
            return self._power()
        finally:
            self.depth -= 1

    def _power(self) -> Node:
        base = self._primary()
        if self._accept("op", "**") is not None:
            return BinaryOp("**", base, self._unary())
        return base

    def _primary(self) -> Node:
        token = self.current
        if token.kind == "number":
            self._advance()
            return Number(float(token.text), token.text)
        if token.kind == "name":
            self._advance()
            if self._accept("lparen") is not None:
                return Call(token.text, self._arguments())
            return Name(token.text)
        if self._accept("lparen") is not None:
            node = self._sum()
            self._expect("rparen", "')'")
            return node
        raise self._error("Expected a number, name or '('")

    def _arguments(self) -> tuple[Node, ...]:
        args: list[Node] = []
        if self._accept("rparen") is not None:
            return tuple(args)
        while True:
            args.append(self._sum())
            if self._accept("comma") is not None:
                continue
            self._expect("rparen", "',' or ')'")
            return tuple(args)


def parse_expression(text: str) -> Node:
    """Parse arithmetic ``text`` into an AST.

    Raises
    ------
    ExpressionSyntaxError
        If ``text`` is empty or does not match the grammar.
    """
    return _Parser(text).parse()


def evaluate_expression(node: Node, scope: Mapping[str, Any]) -> Any:
    """Evaluate ``node`` against ``scope`` with NumPy floating-point semantics.

    Non-finite intermediate results are returned silently. Array-valued
    bindings (the sweep variables) broadcast through every operation.
    """
    with np.errstate(all="ignore"):
        return node.evaluate(scope)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def split_top_level_equals(text: str) -> Optional[tuple[str, str]]:
    """Split ``text`` on its first ``=`` outside parentheses.

    Returns ``None`` when there is no such ``=`` (explicit equations).
    """
    depth = 0
    for idx, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == "=" and depth == 0:
            return text[:idx].strip(), text[idx + 1:].strip()
    return None


def to_sympy(node: Node, symbols: Optional[Mapping[str, sp.Symbol]] = None) -> sp.Expr:
    """Convert an AST into an equivalent SymPy expression.

    Library names map to their SymPy counterparts (``PI`` -> ``pi``,
    ``log10(v)`` -> ``log(v, 10)``); other names become plain symbols. The
    result is meant for display (``sympy.latex``), not for evaluation.
    """
    lookup: dict[str, sp.Symbol] = dict(symbols or {})

    def convert(item: Node) -> sp.Expr:
        if isinstance(item, Number):
            if item.text.isdigit():
                return sp.Integer(int(item.text))
            return sp.Float(item.text)
        if isinstance(item, Name):
            equivalent = SYMPY_EQUIVALENTS.get(item.name)
            if isinstance(equivalent, sp.Basic):
                return equivalent
            if item.name not in lookup:
                lookup[item.name] = sp.Symbol(item.name)
            return lookup[item.name]
        if isinstance(item, UnaryOp):
            operand = convert(item.operand)
            return -operand if item.op == "-" else operand
        if isinstance(item, BinaryOp):
            left, right = convert(item.left), convert(item.right)
            if item.op == "+":
                return left + right
            if item.op == "-":
                return left - right
            if item.op == "*":
                return left * right
            if item.op == "/":
                return left / right
            return left**right
        args: Sequence[sp.Expr] = [convert(arg) for arg in item.args]
        fn = SYMPY_EQUIVALENTS.get(item.name)
        if fn is None or isinstance(fn, sp.Basic):
            return sp.Function(item.name)(*args)
        return fn(*args)

    return convert(node)
