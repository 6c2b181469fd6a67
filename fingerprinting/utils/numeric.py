"""
Numeric helpers shared by the fingerprinters and the bin niceifier.

``None`` is the missing value throughout: a ratio that cannot be computed
is reported as ``None`` rather than raising or silently becoming zero.
"""

from __future__ import annotations

import math
from typing import Any

__all__ = [
    "safe_divide",
    "growth",
    "order_of_magnitude",
    "round_to_decimals",
    "floor_to",
    "ceil_to",
    "to_finite",
]


def safe_divide(numerator: float, *denominators: float) -> float | None:
    """Like ``/`` but returns ``None`` instead of dividing by zero.

    With no denominators this is the reciprocal of *numerator* (``None``
    for zero), mirroring single-argument division.

    >>> safe_divide(6, 3)
    2.0
    >>> safe_divide(6, 0) is None
    True
    """
    if denominators:
        if any(d == 0 for d in denominators):
            return None
        result = numerator
        for d in denominators:
            result = result / d
        return result
    if numerator == 0:
        return None
    return 1 / numerator


def growth(x2: float | None, x1: float | None) -> float | None:
    """Relative change from *x1* to *x2*, sign-adjusted for negative baselines.

    >>> growth(110, 100)
    0.1
    >>> growth(-90, -100)
    0.1
    """
    if x2 is None or x1 is None:
        return None
    sign = -1 if x1 < 0 else 1
    return safe_divide(sign * (x2 - x1), x1)


def order_of_magnitude(x: float) -> int:
    """``floor(log10(|x|))``, with ``0`` for ``x == 0``."""
    if x == 0:
        return 0
    return int(math.floor(math.log10(abs(x))))


def round_to_decimals(decimals: int, x: float) -> float:
    return round(x, decimals)


def floor_to(precision: float, x: float) -> float:
    """Round *x* down to a multiple of *precision*."""
    scale = 1 / precision
    return math.floor(x * scale) / scale


def ceil_to(precision: float, x: float) -> float:
    """Round *x* up to a multiple of *precision*."""
    scale = 1 / precision
    return math.ceil(x * scale) / scale


def to_finite(x: Any) -> float | None:
    """``float(x)``, or ``None`` for a missing or non-finite value.

    Accepts anything ``float()`` does (``int``, ``Decimal``, numpy scalars).

    >>> to_finite(3)
    3.0
    >>> to_finite(float("nan")) is None
    True
    """
    if x is None:
        return None
    f = float(x)
    return f if math.isfinite(f) else None
