"""Tests for evaluating expressions over sample grids."""

import numpy as np
import pytest
from exprtree.analysis.sampling import grid, sample
from exprtree.core.errors import UnboundVariable
from exprtree.parser.expression_parser import parse


class TestGrid:
    def test_endpoints_included(self):
        assert np.allclose(grid(0, 1, 3), [0.0, 0.5, 1.0])

    def test_single_point(self):
        assert np.allclose(grid(2, 5, 1), [2.0])

    def test_needs_points(self):
        with pytest.raises(ValueError):
            grid(0, 1, 0)


class TestSample:
    def test_polynomial(self):
        result = sample(parse("x^2 + 1"), "x", [0, 1, 2])
        assert isinstance(result, np.ndarray)
        assert np.allclose(result, [1, 2, 5])

    def test_other_variables_from_env(self):
        result = sample(parse("x + y"), "x", [1, 2], {"y": 10})
        assert np.allclose(result, [11, 12])

    def test_undefined_points_are_nan(self):
        result = sample(parse("1 / x"), "x", [0, 2])
        assert np.isnan(result[0])
        assert result[1] == 0.5

    def test_domain_errors_are_nan(self):
        result = sample(parse("sqrt(x)"), "x", [-1, 4])
        assert np.isnan(result[0])
        assert result[1] == 2

    def test_unbound_variable_raises(self):
        with pytest.raises(UnboundVariable):
            sample(parse("x + y"), "x", [1])

    def test_env_not_modified(self):
        env = {"y": 1.0}
        sample(parse("x * y"), "x", grid(0, 1, 4), env)
        assert env == {"y": 1.0}
