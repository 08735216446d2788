"""Ready-made operator and function sets.

Precedences, loosest first: + - (1), * / % (2), unary - + (3), ^ (4), ! (5).
Equal precedence groups to the left, so 2^3^2 is (2^3)^2.
"""

import math
from typing import Callable

from exprtree.core.registry import Fixity, OperatorSpec, ParserSettings, Registry


def _factorial(args):
    return math.gamma(args[0] + 1)


def arithmetic_operators() -> list[OperatorSpec]:
    """Infix + - * / ^ %, prefix - +, postfix !."""
    return [
        OperatorSpec("+", 2, Fixity.INFIX, 1, True, lambda a: a[0] + a[1], "addition"),
        OperatorSpec("-", 2, Fixity.INFIX, 1, False, lambda a: a[0] - a[1], "subtraction"),
        OperatorSpec("*", 2, Fixity.INFIX, 2, True, lambda a: a[0] * a[1], "multiplication"),
        OperatorSpec("/", 2, Fixity.INFIX, 2, False, lambda a: a[0] / a[1], "division"),
        OperatorSpec("%", 2, Fixity.INFIX, 2, False, lambda a: math.fmod(a[0], a[1]), "remainder"),
        OperatorSpec("-", 1, Fixity.PREFIX, 3, False, lambda a: -a[0], "negation"),
        OperatorSpec("+", 1, Fixity.PREFIX, 3, False, lambda a: +a[0], "unary plus"),
        OperatorSpec("^", 2, Fixity.INFIX, 4, False, lambda a: math.pow(a[0], a[1]), "power"),
        OperatorSpec("!", 1, Fixity.POSTFIX, 5, False, _factorial, "factorial (gamma(x + 1))"),
    ]


def elementary_functions() -> list[OperatorSpec]:
    return [
        OperatorSpec("sin", 1, compute=lambda a: math.sin(a[0]), description="sine"),
        OperatorSpec("cos", 1, compute=lambda a: math.cos(a[0]), description="cosine"),
        OperatorSpec("tan", 1, compute=lambda a: math.tan(a[0]), description="tangent"),
        OperatorSpec("exp", 1, compute=lambda a: math.exp(a[0]), description="natural exponential"),
        OperatorSpec("log", 1, compute=lambda a: math.log(a[0]), description="natural logarithm"),
        OperatorSpec("sqrt", 1, compute=lambda a: math.sqrt(a[0]), description="square root"),
        OperatorSpec("abs", 1, compute=lambda a: abs(a[0]), description="absolute value"),
        OperatorSpec("min", 2, commutative=True, compute=lambda a: min(a), description="minimum"),
        OperatorSpec("max", 2, commutative=True, compute=lambda a: max(a), description="maximum"),
        OperatorSpec("pow", 2, compute=lambda a: math.pow(a[0], a[1]), description="power"),
        OperatorSpec("pi", 0, compute=lambda a: math.pi, description="pi constant"),
        OperatorSpec("e", 0, compute=lambda a: math.e, description="Euler's number"),
    ]


def arithmetic() -> Registry:
    """Operators only, no named functions."""
    return Registry(arithmetic_operators())


def scientific() -> Registry:
    return Registry(arithmetic_operators() + elementary_functions())


KNOWN_REGISTRIES: dict[str, Callable[[], Registry]] = {
    "arithmetic": arithmetic,
    "scientific": scientific,
}


# Shared so that trees parsed with the default settings refer to the same
# descriptor objects and compare equal.
DEFAULT_REGISTRY = scientific()


def default_registry() -> Registry:
    return DEFAULT_REGISTRY


def default_settings(**kwargs) -> ParserSettings:
    return ParserSettings(default_registry(), **kwargs)


def load_by_name(name: str) -> Registry | None:
    factory = KNOWN_REGISTRIES.get(name)
    return factory() if factory else None
