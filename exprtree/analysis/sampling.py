"""Evaluate an expression over a range of values of one variable."""

from __future__ import annotations

from typing import Iterable, Mapping

import numpy as np

from exprtree.core.errors import EvaluationError
from exprtree.core.nodes import Node


def grid(start: float, stop: float, num: int = 11) -> np.ndarray:
    """Evenly spaced sample points, endpoints included."""
    if num < 1:
        raise ValueError(f"Need at least one sample point, got {num}")
    return np.linspace(start, stop, num)


def sample(
    node: Node,
    variable: str,
    values: Iterable[float],
    env: Mapping[str, float] | None = None,
) -> np.ndarray:
    """Evaluate `node` once per value of `variable`.

    Other variables are taken from `env`. Points where the expression is
    undefined (division by zero, log of a negative, ...) come out as NaN;
    unbound variables still raise.
    """
    bindings = dict(env or {})
    values = np.asarray(list(values), dtype=float)
    out = np.empty_like(values)
    for i, value in enumerate(values):
        bindings[variable] = float(value)
        try:
            out[i] = node.evaluate(bindings)
        except EvaluationError:
            raise
        except (ArithmeticError, ValueError):
            out[i] = np.nan
    return out
