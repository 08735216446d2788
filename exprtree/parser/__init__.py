from exprtree.parser.expression_parser import ExpressionParser, parse

__all__ = ["ExpressionParser", "parse"]
