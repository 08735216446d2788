"""Abstract syntax tree nodes for parsed expressions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterator, Mapping

import numpy as np

from exprtree.core.errors import EvaluationError, IncompleteExpression, UnboundVariable
from exprtree.core.registry import Fixity, OperatorSpec

if TYPE_CHECKING:
    from exprtree.core.matching import Frontier

log = logging.getLogger(__name__)

EPS = 1.0e-5


def format_number(value: float) -> str:
    """Positional (never scientific) text for a number, e.g. 3 or 0.0000001."""
    return np.format_float_positional(float(value), trim="-")


class Node:
    """Base class for expression tree nodes.

    Nodes are mutable while the parser assembles them and when canonicalize()
    reorders commutative operands, so they are compared structurally but never
    hashed.

    Whole-tree operations (evaluation, copying, printing, equality) run on an
    explicit stack, so their cost in Python frames does not grow with the depth
    of the tree. Each node class only says how to combine the results already
    computed for its children.
    """

    __hash__ = None  # type: ignore[assignment]

    @property
    def children(self) -> list[Node]:
        return []

    def fold(self, visit: Callable[[Node, list[Any]], Any]) -> Any:
        """Bottom-up traversal: visit(node, child_results) for every node.

        Children are visited left to right before their parent; the result
        for the root is returned.
        """
        results: list[Any] = []
        stack: list[tuple[Node, bool]] = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            children = node.children
            if children and not expanded:
                stack.append((node, True))
                stack.extend((c, False) for c in reversed(children))
                continue
            n = len(children)
            parts = results[-n:] if n else []
            if n:
                del results[-n:]
            results.append(visit(node, parts))
        return results[0]

    def evaluate(self, env: Mapping[str, float]) -> float:
        return self.fold(lambda node, values: node._evaluated(values, env))

    def _evaluated(self, values: list[float], env: Mapping[str, float]) -> float:
        raise NotImplementedError

    def equals(self, other: Node) -> bool:
        raise NotImplementedError

    def less(self, other: Node) -> bool:
        """Ordering used to put commutative operands in canonical order.

        Functions compare by (name, arity), variables by name, numbers by
        value. A variable sorts before a number and a function sorts before
        anything that is not a function. It is not a total order and is only
        meant to give a deterministic swap decision.
        """
        if isinstance(self, Function) and isinstance(other, Function):
            return (self.spec.name, self.spec.arity) < (other.spec.name, other.spec.arity)
        if isinstance(self, Variable) and isinstance(other, Variable):
            return self.name < other.name
        if isinstance(self, Number) and isinstance(other, Number):
            return self.value < other.value
        if isinstance(self, Variable) and isinstance(other, Number):
            return True
        return isinstance(self, Function)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.equals(other)

    def __lt__(self, other: Node) -> bool:
        return self.less(other)

    def canonicalize(self) -> Node:
        """Put the operands of every binary commutative function in order, in place."""
        # walk() reads a node's children only after the node has been yielded,
        # so a swap made here is seen by the traversal
        for node in self.walk():
            if isinstance(node, Function):
                node._order_operands()
        return self

    def is_subexpression(self, frontier: Frontier) -> tuple[bool, bool]:
        """Match this tree against the subexpression held by `frontier`.

        Leaves compare against the frontier's current node and consume it on
        a match. Returns (found, matched): `found` once the whole frontier has
        been consumed, `matched` whether this subtree matched locally.
        """
        top = frontier.top
        last = len(frontier) == 1
        matched = self.equals(top)
        if matched:
            frontier.pop()
        return (matched if last else False), matched

    def contains(self, sub: Node) -> bool:
        """True if `sub` occurs in this tree (operands compared positionally)."""
        from exprtree.core.matching import Frontier

        found, _ = self.is_subexpression(Frontier(sub))
        return found

    def walk(self) -> Iterator[Node]:
        """Pre-order traversal."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def depth(self) -> int:
        best = 0
        stack: list[tuple[Node, int]] = [(self, 1)]
        while stack:
            node, d = stack.pop()
            best = max(best, d)
            stack.extend((c, d + 1) for c in node.children)
        return best

    def size(self) -> int:
        return sum(1 for _ in self.walk())

    def variables(self) -> list[str]:
        """Distinct variable names in order of first appearance."""
        names: list[str] = []
        for node in self.walk():
            if isinstance(node, Variable) and node.name not in names:
                names.append(node.name)
        return names

    def substitute(self, mapping: Mapping[str, Node]) -> Node:
        """Copy of the tree with variables replaced by copies of `mapping` entries."""
        return self.fold(lambda node, args: node._rebuilt(args, mapping))

    def _rebuilt(self, args: list[Node], mapping: Mapping[str, Node]) -> Node:
        raise NotImplementedError

    def copy(self) -> Node:
        return self.substitute({})

    def to_sexpr(self) -> str:
        return self.fold(lambda node, parts: node._sexpr(parts))

    def _sexpr(self, parts: list[str]) -> str:
        raise NotImplementedError

    def to_infix(self) -> str:
        """Infix text that parses back into an equal tree.

        Operands are parenthesised only where precedence requires it.
        """
        return self.fold(lambda node, parts: node._infix(parts))

    def _infix(self, parts: list[str]) -> str:
        return self._sexpr(parts)

    def __str__(self) -> str:
        return self.to_infix()


@dataclass(eq=False)
class Number(Node):
    """A numeric literal."""

    value: float

    def _evaluated(self, values, env):
        return self.value

    def equals(self, other: Node) -> bool:
        return isinstance(other, Number) and abs(self.value - other.value) < EPS

    def _rebuilt(self, args, mapping):
        return Number(self.value)

    def _sexpr(self, parts):
        return format_number(self.value)


@dataclass(eq=False)
class Variable(Node):
    """A named variable: x, y, rate_2, ..."""

    name: str

    def _evaluated(self, values, env):
        try:
            return env[self.name]
        except KeyError:
            raise UnboundVariable(self.name) from None

    def equals(self, other: Node) -> bool:
        return isinstance(other, Variable) and self.name == other.name

    def _rebuilt(self, args, mapping):
        if self.name in mapping:
            return mapping[self.name].copy()
        return Variable(self.name)

    def _sexpr(self, parts):
        return self.name


@dataclass(eq=False)
class Empty(Node):
    """An operand slot the parser has opened but not filled yet."""

    def _evaluated(self, values, env):
        raise IncompleteExpression("Attempt to evaluate an unfilled operand")

    def equals(self, other: Node) -> bool:
        return False

    def _rebuilt(self, args, mapping):
        return Empty()

    def _sexpr(self, parts):
        return "?"


def _operator_precedence(node: Node) -> int | None:
    if isinstance(node, Function) and node.spec.is_operator:
        return node.spec.precedence
    return None


@dataclass(eq=False)
class Function(Node):
    """Application of an operator or function to its arguments: +(x, y), sin(x), ..."""

    spec: OperatorSpec
    args: list[Node] = field(default_factory=list)

    @property
    def children(self) -> list[Node]:
        return self.args

    def _evaluated(self, values, env):
        return self.spec.compute(values)

    def equals(self, other: Node) -> bool:
        pairs: list[tuple[Node, Node]] = [(self, other)]
        while pairs:
            a, b = pairs.pop()
            if not isinstance(a, Function):
                if not a.equals(b):
                    return False
                continue
            if not isinstance(b, Function) or b.spec is not a.spec or len(a.args) != len(b.args):
                return False
            pairs.extend(zip(a.args, b.args))
        return True

    def _order_operands(self) -> None:
        if self.spec.commutative and self.spec.arity == 2 and self.args[1].less(self.args[0]):
            log.debug("Swapping operands of %r", self.spec.name)
            self.args[0], self.args[1] = self.args[1], self.args[0]

    def is_subexpression(self, frontier: Frontier) -> tuple[bool, bool]:
        # frontier: path from the subexpression's root to a leaf not matched yet
        matched = True
        arity = len(self.args)
        for i, arg in enumerate(self.args):
            found, arg_matched = arg.is_subexpression(frontier)
            if found:
                return True, True
            matched = matched and arg_matched
            # the recursive call may have consumed nodes; move on to the
            # next operand of the frontier's current function
            top = frontier.top
            if isinstance(top, Function) and i + 1 < arity:
                if top.spec is not self.spec:
                    matched = False
                else:
                    frontier.push(top.args[i + 1])
                    frontier.descend()
        top = frontier.top
        if matched and isinstance(top, Function) and top.spec is self.spec:
            frontier.pop()
            return frontier.empty, True
        frontier.descend()
        return False, False

    def _rebuilt(self, args, mapping):
        return Function(self.spec, args)

    def _sexpr(self, parts):
        if not parts:
            return f"({self.spec.name})"
        return f"({self.spec.name} {' '.join(parts)})"

    def _infix(self, parts):
        name = self.spec.name
        fixity = self.spec.fixity
        prec = self.spec.precedence
        if fixity == Fixity.INFIX:
            left, right = parts
            # equal precedence groups to the left, so only the right operand
            # needs brackets at the same level
            lp = _operator_precedence(self.args[0])
            rp = _operator_precedence(self.args[1])
            if lp is not None and lp < prec:
                left = f"({left})"
            if rp is not None and rp <= prec:
                right = f"({right})"
            return f"{left} {name} {right}"
        if fixity == Fixity.PREFIX:
            # always bracketed: "-(3)" must not read back as the literal -3
            return f"{name}({parts[0]})"
        if fixity == Fixity.POSTFIX:
            operand = parts[0]
            op = _operator_precedence(self.args[0])
            if op is not None and op < prec:
                operand = f"({operand})"
            elif operand[-1].isalnum() and name[0].isalnum():
                operand += " "
            return f"{operand}{name}"
        return f"{name}({', '.join(parts)})"


def evaluate(node: Node, env: Mapping[str, float] | None = None, source: str | None = None) -> float:
    """Evaluate `node` with variables bound by `env`.

    When `source` (the text `node` was parsed from) is given, evaluation errors
    carry it for diagnostics.
    """
    try:
        return node.evaluate(env or {})
    except EvaluationError as e:
        if source is not None and e.source is None:
            e.attach_source(source)
        raise
