"""Subexpression matching.

The matcher walks the larger tree top-down while a Frontier keeps its place in
the candidate subexpression: a stack holding the path from the candidate's
root down to the next leaf that still has to be matched. Each matched leaf is
popped, each fully matched function is popped, and the candidate has been
found once the stack runs empty.

Operands are compared positionally. Canonicalize both trees first (the
is_subexpression() helper below does) to make the match insensitive to the
order of commutative operands.
"""

from __future__ import annotations

from exprtree.core.nodes import Function, Node


class Frontier:
    """Traversal cursor over the subexpression being searched for."""

    def __init__(self, root: Node):
        self.path: list[Node] = [root]
        self.descend()

    def __len__(self) -> int:
        return len(self.path)

    @property
    def empty(self) -> bool:
        return not self.path

    @property
    def top(self) -> Node:
        return self.path[-1]

    def push(self, node: Node) -> None:
        self.path.append(node)

    def pop(self) -> Node:
        return self.path.pop()

    def descend(self) -> None:
        """Extend the path down to the leftmost leaf below the current node."""
        while isinstance(self.path[-1], Function) and self.path[-1].args:
            self.path.append(self.path[-1].args[0])

    def __repr__(self) -> str:
        return f"Frontier([{', '.join(n.to_sexpr() for n in self.path)}])"


def is_subexpression(sub: Node, expr: Node, canonical: bool = True) -> bool:
    """Check whether `sub` occurs inside `expr`.

    With `canonical` set, copies of both trees are canonicalized first so
    `b+a` is found in `(a+b)*c`. The arguments are never modified.
    """
    if canonical:
        sub = sub.copy().canonicalize()
        expr = expr.copy().canonicalize()
    return expr.contains(sub)
