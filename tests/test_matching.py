"""Tests for subexpression matching and the frontier cursor."""

from exprtree.core.matching import Frontier, is_subexpression
from exprtree.core.nodes import Number, Variable
from exprtree.core.registry import ParserSettings
from exprtree.library.builtins import default_registry
from exprtree.parser.expression_parser import parse


def raw(text):
    return parse(text, ParserSettings(default_registry(), canonicalize=False))


class TestFrontier:
    def test_starts_at_leftmost_leaf(self):
        frontier = Frontier(raw("(a+b)*c"))
        assert len(frontier) == 3
        assert frontier.top == Variable("a")
        frontier.pop()
        assert frontier.top.spec.name == "+"

    def test_leaf_root(self):
        frontier = Frontier(Number(1))
        assert len(frontier) == 1
        frontier.pop()
        assert frontier.empty

    def test_zero_argument_function_is_a_leaf(self):
        frontier = Frontier(parse("pi()"))
        assert len(frontier) == 1


class TestIsSubexpression:
    def test_bound_pattern_found(self):
        pattern = parse("x+x").substitute({"x": parse("a*b")})
        assert is_subexpression(pattern, parse("(a*b)+(a*b)"))

    def test_bound_pattern_not_found(self):
        pattern = parse("x+x").substitute({"x": parse("a*b")})
        assert not is_subexpression(pattern, parse("(a*b)+(c*d)"))

    def test_operands_of_a_sum(self):
        expr = parse("(a*b)+(c*d)")
        assert is_subexpression(parse("a*b"), expr)
        assert is_subexpression(parse("c*d"), expr)
        assert not is_subexpression(parse("a*d"), expr)

    def test_commutative_reordering(self):
        assert is_subexpression(parse("b*a"), raw("(a*b)+c"))
        assert not raw("(a*b)+c").contains(raw("b*a"))

    def test_nested_function(self):
        assert is_subexpression(parse("sin(x+1)"), parse("2*sin(1+x)"))
        assert not is_subexpression(parse("sin(x+2)"), parse("2*sin(1+x)"))

    def test_leaf(self):
        assert parse("x + 1").contains(Variable("x"))
        assert not parse("x + 1").contains(Variable("y"))
        assert parse("x + 1").contains(Number(1.000001))

    def test_whole_tree(self):
        expr = parse("max(a, b) - c / 2")
        assert expr.contains(expr.copy())

    def test_different_operator(self):
        assert not is_subexpression(parse("a-b"), parse("(a+b)*c"))

    def test_arguments_untouched(self):
        sub = raw("b+a")
        expr = raw("(b+a)*c")
        is_subexpression(sub, expr)
        assert sub.to_sexpr() == "(+ b a)"
        assert expr.to_sexpr() == "(* (+ b a) c)"


class TestMatchResult:
    def test_leaf_against_larger_frontier(self):
        frontier = Frontier(raw("a+b"))
        found, matched = Variable("a").is_subexpression(frontier)
        assert (found, matched) == (False, True)
        assert len(frontier) == 1

    def test_leaf_mismatch_keeps_frontier(self):
        frontier = Frontier(raw("a+b"))
        found, matched = Variable("z").is_subexpression(frontier)
        assert (found, matched) == (False, False)
        assert len(frontier) == 2

    def test_partial_function_match(self):
        frontier = Frontier(raw("(a*b)+c"))
        found, matched = raw("a*b").is_subexpression(frontier)
        assert (found, matched) == (False, True)
        assert frontier.top.spec.name == "+"

    def test_full_match_empties_frontier(self):
        frontier = Frontier(raw("a*b"))
        found, matched = raw("a*b").is_subexpression(frontier)
        assert found and matched
        assert frontier.empty
