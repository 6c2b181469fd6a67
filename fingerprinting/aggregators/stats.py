"""
Streaming statistical estimators.

Each public name is an :class:`~fingerprinting.aggregators.base.Aggregator`
over a stream of scalars or of ``(x, y)`` pairs.  Inputs are coerced to
``float`` (so ``Decimal`` and numpy scalars mix freely); ``None`` and
non-finite values are skipped, and bivariate estimators skip any pair with
such a component.

Central moments are maintained with the single-pass update formulas of
Welford / Pébay, so no second pass and no large intermediate sums are
needed (epoch-millisecond timestamps squared would otherwise swamp the
variance).
"""

from __future__ import annotations

import math
from typing import Any

from fingerprinting.aggregators.base import Aggregator, Reducer
from fingerprinting.utils.numeric import safe_divide, to_finite

__all__ = [
    "count",
    "summing",
    "sum_of_squares",
    "skewness",
    "kurtosis",
    "simple_linear_regression",
    "correlation",
    "covariance",
]


# ---------------------------------------------------------------------------
# Counting / summing
# ---------------------------------------------------------------------------

count: Aggregator = Reducer(lambda: 0, lambda n, _item: n + 1)
"""Number of items, ``None`` included."""


def _add(acc: float, x: Any) -> float:
    x = to_finite(x)
    return acc if x is None else acc + x


def _add_square(acc: float, x: Any) -> float:
    x = to_finite(x)
    return acc if x is None else acc + x * x


summing: Aggregator = Reducer(lambda: 0, _add)
sum_of_squares: Aggregator = Reducer(lambda: 0, _add_square)


# ---------------------------------------------------------------------------
# Univariate central moments
# ---------------------------------------------------------------------------

# (n, mean, m2, m3, m4)
_EMPTY_MOMENTS = (0, 0.0, 0.0, 0.0, 0.0)


def _moments_step(state: tuple, x: Any) -> tuple:
    x = to_finite(x)
    if x is None:
        return state
    n, mean, m2, m3, m4 = state
    n1 = n
    n = n + 1
    delta = x - mean
    delta_n = delta / n
    delta_n2 = delta_n * delta_n
    term1 = delta * delta_n * n1
    mean = mean + delta_n
    m4 = m4 + term1 * delta_n2 * (n * n - 3 * n + 3) + 6 * delta_n2 * m2 - 4 * delta_n * m3
    m3 = m3 + term1 * delta_n * (n - 2) - 3 * delta_n * m2
    m2 = m2 + term1
    return (n, mean, m2, m3, m4)


def _skewness(state: tuple) -> float | None:
    """Adjusted Fisher–Pearson sample skewness (``G1``)."""
    n, _mean, m2, m3, _m4 = state
    if n < 3 or m2 == 0:
        return None
    g1 = (m3 / n) / (m2 / n) ** 1.5
    return math.sqrt(n * (n - 1)) / (n - 2) * g1


def _kurtosis(state: tuple) -> float | None:
    """Bias-corrected sample excess kurtosis (``G2``)."""
    n, _mean, m2, _m3, m4 = state
    if n < 4 or m2 == 0:
        return None
    g2 = n * m4 / (m2 * m2) - 3
    return (n - 1) / ((n - 2) * (n - 3)) * ((n + 1) * g2 + 6)


skewness: Aggregator = Reducer(lambda: _EMPTY_MOMENTS, _moments_step, _skewness)
kurtosis: Aggregator = Reducer(lambda: _EMPTY_MOMENTS, _moments_step, _kurtosis)


# ---------------------------------------------------------------------------
# Bivariate co-moments
# ---------------------------------------------------------------------------

# (n, mean_x, mean_y, m2_x, m2_y, c_xy)
_EMPTY_COMOMENTS = (0, 0.0, 0.0, 0.0, 0.0, 0.0)


def _comoments_step(state: tuple, pair: Any) -> tuple:
    x, y = to_finite(pair[0]), to_finite(pair[1])
    if x is None or y is None:
        return state
    n, mx, my, m2x, m2y, cxy = state
    n += 1
    dx = x - mx
    dy = y - my
    mx += dx / n
    my += dy / n
    m2x += dx * (x - mx)
    m2y += dy * (y - my)
    cxy += dx * (y - my)
    return (n, mx, my, m2x, m2y, cxy)


def _regression(state: tuple) -> tuple[float, float] | None:
    n, mx, my, m2x, _m2y, cxy = state
    slope = safe_divide(cxy, m2x) if n > 0 else None
    if slope is None:
        return None
    return (my - slope * mx, slope)


def _correlation(state: tuple) -> float | None:
    n, _mx, _my, m2x, m2y, cxy = state
    if n == 0:
        return None
    return safe_divide(cxy, math.sqrt(m2x * m2y))


def _covariance(state: tuple) -> float | None:
    n, _mx, _my, _m2x, _m2y, cxy = state
    if n < 2:
        return None
    return cxy / (n - 1)


simple_linear_regression: Aggregator = Reducer(lambda: _EMPTY_COMOMENTS, _comoments_step, _regression)
"""``(offset, slope)`` of the least-squares line ``y = offset + slope * x``."""

correlation: Aggregator = Reducer(lambda: _EMPTY_COMOMENTS, _comoments_step, _correlation)
"""Pearson correlation coefficient."""

covariance: Aggregator = Reducer(lambda: _EMPTY_COMOMENTS, _comoments_step, _covariance)
"""Sample covariance."""
