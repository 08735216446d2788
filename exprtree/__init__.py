"""Parse arithmetic expressions into trees, evaluate and compare them."""

from exprtree.core.nodes import evaluate
from exprtree.parser.expression_parser import parse

__version__ = "0.1.0"

__all__ = ["parse", "evaluate"]
