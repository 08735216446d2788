"""Errors raised while parsing or evaluating expressions.

Every error can carry the full source text and an absolute offset into it, so
that a failure deep inside a parenthesised group still points at the right
character of the original input:

    Mismatched parentheses
    2 * (3 + 4
        ^
"""

from __future__ import annotations

import re


class ExpressionError(ValueError):
    """Base class for all expression errors."""

    def __init__(self, message: str, source: str | None = None, position: int | None = None):
        self.message = message
        self.source = source
        self.position = position
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        if self.source is None:
            return self.message
        if self.position is None:
            return f"{self.message}\n{self.source}"
        return f"{self.message}\n{self.source}\n{' ' * self.position}^"

    def attach_source(self, source: str, position: int | None = None) -> None:
        """Record the text the failing expression was parsed from."""
        self.source = source
        self.position = position
        self.args = (self._format_error(),)


class ParseError(ExpressionError):
    """Raised when text cannot be turned into an expression tree."""


class UnrecognizedToken(ParseError):
    pass


class ExpectedOperatorBetweenValues(ParseError):
    pass


class ExpectedPrefixOperator(ParseError):
    pass


class ExpectedInfixOperator(ParseError):
    pass


class ExpectedPostfixOperator(ParseError):
    pass


class MissingOperand(ParseError):
    pass


class UndefinedFunction(ParseError):
    pass


class MissingArgumentList(ParseError):
    pass


class ArityMismatch(ParseError):
    pass


class MismatchedParentheses(ParseError):
    pass


class MalformedNumberLiteral(ParseError):
    pass


class NestingTooDeep(ParseError):
    pass


class EvaluationError(ExpressionError):
    """Raised when a tree cannot be evaluated.

    Trees do not remember where their nodes came from, so these start out
    with a message only; evaluate(node, env, source) attaches the text, and
    UnboundVariable points the caret at the variable.
    """


class IncompleteExpression(EvaluationError):
    pass


class UnboundVariable(EvaluationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Variable {name!r} is not bound")

    def attach_source(self, source: str, position: int | None = None) -> None:
        if position is None:
            # first use of the name that is not a function call
            found = re.search(rf"(?<![\w.]){re.escape(self.name)}(?!\w)(?!\s*\()", source)
            if found is not None:
                position = found.start()
        super().attach_source(source, position)
