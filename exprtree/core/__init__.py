from exprtree.core.registry import Fixity, OperatorSpec, ParserSettings, Registry
from exprtree.core.nodes import Empty, Function, Node, Number, Variable, evaluate
from exprtree.core.matching import Frontier, is_subexpression

__all__ = [
    "Fixity", "OperatorSpec", "ParserSettings", "Registry",
    "Node", "Number", "Variable", "Function", "Empty", "evaluate",
    "Frontier", "is_subexpression",
]
