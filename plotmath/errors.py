"""Exception types raised while evaluating blueprint expressions.

Expression-level errors (:class:`ExpressionError` and subclasses) describe a
problem with one piece of expression text. The engine wraps any of them in a
single :class:`EquationError` so callers only need to catch one type.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "EquationError",
    "ExpressionError",
    "ExpressionEvaluationError",
    "ExpressionSyntaxError",
    "UnknownIdentifierError",
]


class ExpressionError(ValueError):
    """Base class for problems found in a single arithmetic expression."""


class ExpressionSyntaxError(ExpressionError):
    """Raised when expression text does not match the arithmetic grammar.

    Parameters
    ----------
    message : str
        Human-readable description of the problem.
    text : str
        Full expression text being parsed.
    position : int
        Zero-based character offset where the problem was detected.
    """

    def __init__(self, message: str, text: str, position: int) -> None:
        super().__init__(f"{message} at column {position + 1} in {text!r}")
        self.text = text
        self.position = position


class UnknownIdentifierError(ExpressionError):
    """Raised when an expression references a name missing from its scope."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is not defined")
        self.name = name


class ExpressionEvaluationError(ExpressionError):
    """Raised for misuse of names, e.g. calling a constant or wrong arity."""


class EquationError(RuntimeError):
    """Raised when a blueprint's equation or variables cannot be evaluated.

    Parameters
    ----------
    expression : str
        Source text (or a ``name: text`` label) of the offending expression.
    cause : Exception
        Underlying error. Its message is embedded in this error's message.

    Notes
    -----
    Non-finite numeric results never raise this error; they are returned as
    ordinary values in the output series.
    """

    def __init__(self, expression: str, cause: Optional[BaseException] = None, message: Optional[str] = None) -> None:
        detail = message if message is not None else str(cause)
        super().__init__(f"Equation Error: {expression}: {detail}")
        self.expression = expression
        self.cause = cause
