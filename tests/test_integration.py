"""Integration tests: full pipeline from text to evaluation, matching and sampling."""

import numpy as np

from exprtree import evaluate, parse
from exprtree.analysis.sampling import grid, sample
from exprtree.core.matching import is_subexpression
from exprtree.library.builtins import default_settings


class TestPipeline:
    def test_parse_evaluate_match(self):
        settings = default_settings()
        expr = parse("3 * (y + x) + sqrt(x * y)", settings)
        assert settings.variables == ["y", "x"]
        assert evaluate(expr, {"x": 4, "y": 9}) == 45
        assert is_subexpression(parse("x + y", settings), expr)
        assert is_subexpression(parse("y * x", settings), expr)
        assert not is_subexpression(parse("x - y", settings), expr)

    def test_substituted_pattern(self):
        settings = default_settings()
        pattern = parse("u * u", settings)
        expr = parse("(a + 1) * (1 + a) - 2", settings)
        assert is_subexpression(pattern.substitute({"u": parse("a + 1", settings)}), expr)
        assert not is_subexpression(pattern.substitute({"u": parse("a + 2", settings)}), expr)

    def test_round_trip_then_sample(self):
        expr = parse("x^2 - 2*x + 1")
        again = parse(expr.to_infix())
        assert again == expr
        points = grid(-1, 3, 5)
        assert np.allclose(sample(again, "x", points), (points - 1) ** 2)
