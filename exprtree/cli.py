"""CLI interface for the expression parser.

Usage:
    exprtree parse "2 * (x + 1)"
    exprtree eval "x^2 + y" -v x=3 -v y=1
    exprtree match "(a*b) + (b*a)" "b*a"
    exprtree table "sin(x)" x --start 0 --stop 3.14 --num 8
    exprtree list-operators
"""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console

from exprtree.core.errors import ExpressionError

console = Console()


def _settings(ctx: click.Context, canonicalize: bool = True):
    from exprtree.core.registry import ParserSettings
    from exprtree.library.builtins import KNOWN_REGISTRIES, load_by_name

    registry = load_by_name(ctx.obj["registry"])
    if registry is None:
        raise click.BadParameter(
            f"Unknown registry. Available: {', '.join(KNOWN_REGISTRIES)}", param_hint="--registry"
        )
    return ParserSettings(registry, canonicalize=canonicalize, max_depth=ctx.obj["max_depth"])


def _parse_or_exit(text: str, settings):
    from exprtree.parser.expression_parser import ExpressionParser
    from exprtree.utils.display import display_error

    try:
        node = ExpressionParser(settings).parse(text)
    except ExpressionError as e:
        display_error(e)
        sys.exit(1)
    if node is None:
        console.print("[yellow]Empty expression.[/yellow]")
        sys.exit(1)
    return node


def _parse_bindings(bindings: tuple[str, ...]) -> dict[str, float]:
    env = {}
    for item in bindings:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected NAME=VALUE, got {item!r}", param_hint="--var")
        try:
            env[name.strip()] = float(value)
        except ValueError:
            raise click.BadParameter(f"Not a number: {value!r}", param_hint="--var") from None
    return env


@click.group()
@click.option("--registry", default="scientific", help="Operator set: arithmetic or scientific")
@click.option("--max-depth", default=100, help="Maximum nesting of parentheses and calls")
@click.option("--verbose", is_flag=True, help="Log parser activity")
@click.pass_context
def main(ctx: click.Context, registry: str, max_depth: int, verbose: bool) -> None:
    """Parse, evaluate and compare arithmetic expressions."""
    ctx.ensure_object(dict)
    ctx.obj["registry"] = registry
    ctx.obj["max_depth"] = max_depth
    if verbose:
        from rich.logging import RichHandler

        logging.basicConfig(
            level=logging.DEBUG, format="%(message)s", handlers=[RichHandler(console=console)]
        )


@main.command()
@click.argument("expression")
@click.option("--raw", is_flag=True, help="Skip canonical ordering of commutative operands")
@click.pass_context
def parse(ctx: click.Context, expression: str, raw: bool) -> None:
    """Show the tree an expression parses into."""
    from exprtree.utils.display import display_expression

    settings = _settings(ctx, canonicalize=not raw)
    node = _parse_or_exit(expression, settings)

    display_expression(node)
    console.print(f"  S-expression: {node.to_sexpr()}", markup=False)
    console.print(f"  Size: {node.size()}  Depth: {node.depth()}")
    if settings.variables:
        console.print(f"  Variables: {', '.join(settings.variables)}")


@main.command("eval")
@click.argument("expression")
@click.option("--var", "-v", "bindings", multiple=True, help="Variable binding NAME=VALUE")
@click.pass_context
def eval_(ctx: click.Context, expression: str, bindings: tuple[str, ...]) -> None:
    """Evaluate an expression."""
    from exprtree.core.nodes import evaluate, format_number
    from exprtree.utils.display import display_error

    env = _parse_bindings(bindings)
    node = _parse_or_exit(expression, _settings(ctx))
    try:
        value = evaluate(node, env, expression)
    except ExpressionError as e:
        display_error(e)
        sys.exit(1)
    except (ArithmeticError, ValueError) as e:
        console.print(f"[red]Evaluation failed: {e}[/red]")
        sys.exit(1)
    console.print(format_number(value))


@main.command()
@click.argument("expression")
@click.argument("sub")
@click.option("--positional", is_flag=True, help="Do not canonicalize before matching")
@click.pass_context
def match(ctx: click.Context, expression: str, sub: str, positional: bool) -> None:
    """Check whether SUB occurs inside EXPRESSION."""
    from exprtree.core.matching import is_subexpression

    settings = _settings(ctx, canonicalize=not positional)
    node = _parse_or_exit(expression, settings)
    pattern = _parse_or_exit(sub, settings)

    if is_subexpression(pattern, node, canonical=not positional):
        console.print(f"[green]Found[/green] {pattern.to_infix()} in {node.to_infix()}")
    else:
        console.print(f"[yellow]Not found[/yellow]: {pattern.to_infix()}")
        sys.exit(1)


@main.command()
@click.argument("expression")
@click.argument("variable")
@click.option("--start", default=0.0, help="First sample point")
@click.option("--stop", default=1.0, help="Last sample point")
@click.option("--num", default=11, help="Number of sample points")
@click.option("--var", "-v", "bindings", multiple=True, help="Binding for other variables NAME=VALUE")
@click.pass_context
def table(
    ctx: click.Context,
    expression: str,
    variable: str,
    start: float,
    stop: float,
    num: int,
    bindings: tuple[str, ...],
) -> None:
    """Tabulate an expression over evenly spaced values of VARIABLE."""
    from exprtree.analysis.sampling import grid, sample
    from exprtree.utils.display import display_error, display_samples

    env = _parse_bindings(bindings)
    node = _parse_or_exit(expression, _settings(ctx))
    try:
        points = grid(start, stop, num)
        results = sample(node, variable, points, env)
    except ExpressionError as e:
        display_error(e)
        sys.exit(1)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--num")
    display_samples(expression, variable, points, results)


@main.command("list-operators")
@click.pass_context
def list_operators(ctx: click.Context) -> None:
    """List the operators and functions of the selected registry."""
    from exprtree.utils.display import display_registry

    settings = _settings(ctx)
    display_registry(settings.registry, name=f"Registry: {ctx.obj['registry']}")
