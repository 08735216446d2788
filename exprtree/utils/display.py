"""Rich console display utilities for expressions, registries and errors."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from exprtree.core.errors import ExpressionError
from exprtree.core.nodes import Function, Node, Number, Variable, format_number
from exprtree.core.registry import Registry

console = Console()


def _label(node: Node) -> str:
    if isinstance(node, Function):
        return f"[green]{node.spec.name}[/green] [dim]{node.spec.fixity.value}/{node.spec.arity}[/dim]"
    if isinstance(node, Variable):
        return f"[cyan]{node.name}[/cyan]"
    if isinstance(node, Number):
        return f"[yellow]{format_number(node.value)}[/yellow]"
    return "[red]?[/red]"


def build_tree(node: Node, max_depth: int | None = None) -> Tree:
    """Mirror an expression tree as a rich Tree, cut off below `max_depth` levels."""
    root = Tree(_label(node))
    stack: list[tuple[Node, Tree, int]] = [(node, root, 1)]
    while stack:
        current, branch, level = stack.pop()
        if not current.children:
            continue
        if max_depth is not None and level >= max_depth:
            branch.add(f"[dim]... {current.size() - 1} more nodes[/dim]")
            continue
        # rich keeps children in insertion order, so add them before descending
        added = [(child, branch.add(_label(child))) for child in current.children]
        stack.extend((child, sub, level + 1) for child, sub in reversed(added))
    return root


def display_expression(node: Node, title: str = "Expression", max_depth: int = 12) -> None:
    """Display an expression as text plus its tree structure."""
    tree = build_tree(node, max_depth)
    console.print(Panel(tree, title=f"{title}: {escape(node.to_infix())}", border_style="blue"))


def display_registry(registry: Registry, name: str = "Registry") -> None:
    """Display every operator and function of a registry as a table."""
    table = Table(title=name)
    table.add_column("Name", style="cyan")
    table.add_column("Fixity", style="green")
    table.add_column("Arity", justify="right")
    table.add_column("Precedence", justify="right")
    table.add_column("Comm.", justify="center")
    table.add_column("Description", style="dim")

    for spec in registry:
        table.add_row(
            spec.name,
            spec.fixity.value,
            str(spec.arity),
            str(spec.precedence) if spec.is_operator else "",
            "✓" if spec.commutative else "",
            spec.description,
        )

    console.print(table)


def display_samples(expression: str, variable: str, values: Sequence[float], results: np.ndarray) -> None:
    """Display sampled values of an expression as a two-column table."""
    table = Table(title=escape(expression))
    table.add_column(variable, style="cyan", justify="right")
    table.add_column("value", style="green", justify="right")

    for x, y in zip(values, results):
        table.add_row(format_number(float(x)), "[red]undefined[/red]" if np.isnan(y) else f"{y:.6g}")

    console.print(table)


def display_error(error: ExpressionError) -> None:
    """Display an error with its caret diagnostic."""
    body = escape(error.message)
    if error.source is not None and error.position is not None:
        body += f"\n\n{escape(error.source)}\n{' ' * error.position}[bold red]^[/bold red]"
    console.print(Panel(body, title=type(error).__name__, border_style="red"))
