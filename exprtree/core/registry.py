"""Operator and function descriptors.

A registry is the vocabulary the parser understands: every operator symbol and
function name, with its arity, fixity, precedence, commutativity and the
callback that computes it. Registries are immutable; nodes built by the parser
hold a reference to the descriptor itself, so a tree stays valid no matter what
the caller does with the list it built the registry from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Sequence

log = logging.getLogger(__name__)

Compute = Callable[[Sequence[float]], float]


class Fixity(str, Enum):
    """Where an operator sits relative to its operands."""

    NONE = "none"  # plain function: name(arg, ...)
    PREFIX = "prefix"
    INFIX = "infix"
    POSTFIX = "postfix"


_FIXITY_ARITY = {
    Fixity.PREFIX: 1,
    Fixity.INFIX: 2,
    Fixity.POSTFIX: 1,
}


@dataclass(frozen=True)
class OperatorSpec:
    """An operator or function known to the parser."""

    name: str
    arity: int
    fixity: Fixity = Fixity.NONE
    precedence: int = 0
    commutative: bool = False
    compute: Compute = field(default=lambda args: 0.0, compare=False, repr=False)
    description: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Operator name must not be empty")
        if self.arity < 0:
            raise ValueError(f"Negative arity for {self.name!r}")
        object.__setattr__(self, "fixity", Fixity(self.fixity))
        expected = _FIXITY_ARITY.get(self.fixity)
        if expected is not None and self.arity != expected:
            raise ValueError(
                f"{self.fixity.value} operator {self.name!r} must have arity {expected}, got {self.arity}"
            )

    @property
    def is_operator(self) -> bool:
        return self.fixity != Fixity.NONE


class Registry:
    """Ordered, immutable collection of operator/function descriptors.

    Usage:
        reg = Registry([OperatorSpec("+", 2, Fixity.INFIX, 1, True, add)])
        reg = reg.extend(OperatorSpec("sqrt", 1, compute=sqrt))
    """

    def __init__(self, specs: Iterable[OperatorSpec] = ()):
        self._specs: tuple[OperatorSpec, ...] = tuple(specs)

    def __iter__(self):
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    @property
    def operators(self) -> tuple[OperatorSpec, ...]:
        return tuple(s for s in self._specs if s.is_operator)

    @property
    def functions(self) -> tuple[OperatorSpec, ...]:
        return tuple(s for s in self._specs if not s.is_operator)

    def extend(self, *specs: OperatorSpec) -> Registry:
        """Return a new registry with `specs` appended."""
        return Registry(self._specs + specs)

    def get(self, name: str, fixity: Fixity | None = None) -> OperatorSpec | None:
        for spec in self._specs:
            if spec.name == name and (fixity is None or spec.fixity == fixity):
                return spec
        return None

    def find_operator(self, text: str, pos: int, fixity: Fixity | None = None) -> OperatorSpec | None:
        """Longest operator name matching `text` at `pos`.

        With `fixity` given only operators of that fixity are considered.
        """
        return _longest_match(
            text, pos, (s for s in self._specs if s.is_operator and (fixity is None or s.fixity == fixity))
        )

    def find_function(self, text: str, pos: int) -> OperatorSpec | None:
        """Longest function name matching `text` at `pos`."""
        return _longest_match(text, pos, (s for s in self._specs if not s.is_operator))

    def __repr__(self) -> str:
        names = ", ".join(f"{s.name}/{s.arity}" for s in self._specs)
        return f"Registry([{names}])"


def _longest_match(text: str, pos: int, candidates: Iterable[OperatorSpec]) -> OperatorSpec | None:
    best = None
    for spec in candidates:
        if text.startswith(spec.name, pos) and (best is None or len(best.name) < len(spec.name)):
            best = spec
    return best


@dataclass
class ParserSettings:
    """Everything a parse needs besides the text itself.

    `variables` is filled in by the parser: every distinct identifier it
    reads as a variable is appended once, in order of first appearance.
    """

    registry: Registry
    variables: list[str] = field(default_factory=list)
    whitespace: str = " \t\r\n"
    max_depth: int = 100
    max_tree_depth: int = 400
    canonicalize: bool = True

    def add_variable(self, name: str) -> None:
        if name not in self.variables:
            log.debug("New variable %r", name)
            self.variables.append(name)
