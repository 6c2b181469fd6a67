"""
Cardinality (approximate distinct count) via HyperLogLog.

The register precision is derived from the requested relative error using
the HLL standard error ``1.04 / sqrt(2^p)``; ``0.01`` gives ``p = 14``.
"""

from __future__ import annotations

import math
import numbers
from decimal import Decimal
from typing import Any

from datasketch import HyperLogLog

from fingerprinting.aggregators.base import Aggregator, Reducer
from fingerprinting.config import CARDINALITY_ERROR

__all__ = ["CardinalitySketch", "cardinality", "precision_for_error"]

# datasketch.HyperLogLog accepts 4 <= p <= 16.
_MIN_P, _MAX_P = 4, 16

_NIL = b"\x00nil"


def precision_for_error(error: float) -> int:
    """Smallest HLL precision whose standard error is at most *error*."""
    p = math.ceil(math.log2((1.04 / error) ** 2))
    return max(_MIN_P, min(_MAX_P, p))


def _normalise(value: Any) -> Any:
    """Map numerically equal values (``1``, ``1.0``, ``Decimal("1")``) to one form."""
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        return value
    if isinstance(value, numbers.Integral):
        return int(value)
    f = float(value)
    if math.isfinite(f) and f.is_integer():
        return int(f)
    return f


def _encode(value: Any) -> bytes:
    if value is None:
        return _NIL
    if isinstance(value, bytes):
        return value
    return str(_normalise(value)).encode("utf-8")


class CardinalitySketch:
    """Thin wrapper pinning the error rate and value encoding of the HLL."""

    def __init__(self, error: float = CARDINALITY_ERROR) -> None:
        self.error = error
        self._hll = HyperLogLog(p=precision_for_error(error))

    def insert(self, value: Any) -> CardinalitySketch:
        """Add *value*; ``None`` counts as one distinct value."""
        self._hll.update(_encode(value))
        return self

    def merge(self, other: CardinalitySketch) -> CardinalitySketch:
        self._hll.merge(other._hll)
        return self

    def distinct_count(self) -> int:
        return int(round(self._hll.count()))


def cardinality(error: float = CARDINALITY_ERROR) -> Aggregator:
    """Aggregator completing to the approximate number of distinct values."""
    return Reducer(
        lambda: CardinalitySketch(error),
        lambda sketch, value: sketch.insert(value),
        lambda sketch: sketch.distinct_count(),
    )
