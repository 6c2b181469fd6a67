"""
HistogramSketch — bounded-memory distribution summary of one column.

Two modes:

* **numeric** — values go into an Apache DataSketches KLL quantile sketch
  (``kll_doubles_sketch``), which answers percentile, CDF and cumulative
  count queries with a bounded rank error.  Count, mean and variance are
  kept exactly alongside it with Welford's update.
* **categorical** — exact per-category counts.

In both modes ``None`` is tallied as a nil and never reaches the sketch.
In numeric mode so are non-finite values (``nan``, ``inf``).
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Hashable, Iterable
from typing import Any

from datasketches import kll_doubles_sketch

from fingerprinting.aggregators.base import Aggregator, Reducer
from fingerprinting.utils.numeric import to_finite

__all__ = [
    "HistogramSketch",
    "histogram",
    "categorical_histogram",
    "optimal_bin_width",
]

logger = logging.getLogger(__name__)


class HistogramSketch:
    """Streaming histogram with nil accounting.

    Parameters
    ----------
    categorical : bool
        Keep exact category counts instead of a quantile sketch.
    k : int
        KLL accuracy parameter (numeric mode only).
    """

    def __init__(self, categorical: bool = False, k: int = 200) -> None:
        self._categorical = categorical
        self._k = k
        self._kll = None if categorical else kll_doubles_sketch(k)
        self._counts: Counter = Counter()
        self._n = 0
        self._nil = 0
        self._mean = 0.0
        self._m2 = 0.0

    # ------------------------------------------------------------------
    # Insertion / merging
    # ------------------------------------------------------------------

    def insert(self, value: Any) -> HistogramSketch:
        if self._categorical and value is not None:
            self._n += 1
            self._counts[value] += 1
            return self
        x = None if self._categorical else to_finite(value)
        if x is None:
            self._nil += 1
            return self
        self._n += 1
        self._kll.update(x)
        delta = x - self._mean
        self._mean += delta / self._n
        self._m2 += delta * (x - self._mean)
        return self

    def merge(self, other: HistogramSketch) -> HistogramSketch:
        """Fold *other* into this sketch (same mode required)."""
        if other._categorical != self._categorical:
            raise ValueError("Cannot merge categorical and numeric histograms")
        n = self._n + other._n
        if self._categorical:
            self._counts.update(other._counts)
        elif other._n:
            self._kll.merge(other._kll)
            delta = other._mean - self._mean
            self._m2 += other._m2 + delta * delta * self._n * other._n / n
            self._mean += delta * other._n / n
        self._n = n
        self._nil += other._nil
        return self

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    @property
    def categorical(self) -> bool:
        return self._categorical

    @property
    def total_count(self) -> int:
        """Number of values inserted, nils included."""
        return self._n + self._nil

    @property
    def nil_count(self) -> int:
        return self._nil

    @property
    def count(self) -> int:
        """Number of non-nil values inserted."""
        return self._n

    def is_empty(self) -> bool:
        return self._n == 0

    # ------------------------------------------------------------------
    # Numeric summaries  (``None`` when empty or categorical)
    # ------------------------------------------------------------------

    def minimum(self) -> float | None:
        if self._categorical or self.is_empty():
            return None
        return self._kll.get_min_value()

    def maximum(self) -> float | None:
        if self._categorical or self.is_empty():
            return None
        return self._kll.get_max_value()

    def mean(self) -> float | None:
        if self._categorical or self.is_empty():
            return None
        return self._mean

    def variance(self) -> float | None:
        """Population variance of the non-nil values."""
        if self._categorical or self.is_empty():
            return None
        return self._m2 / self._n

    def quantile(self, rank: float) -> float | None:
        if self._categorical or self.is_empty():
            return None
        return self._kll.get_quantile(rank, True)

    def median(self) -> float | None:
        return self.quantile(0.5)

    def percentiles(self, ranks: Iterable[float]) -> dict[float, float | None]:
        return {p: self.quantile(p) for p in ranks}

    def cdf(self, x: float) -> float | None:
        """Fraction of non-nil values ``<= x``."""
        if self._categorical or self.is_empty():
            return None
        return self._kll.get_rank(x, True)

    def sum_at(self, x: float) -> float:
        """Approximate number of non-nil values ``< x``.

        Every value is counted once ``x`` exceeds or reaches the maximum, so
        successive differences over a grid covering ``[min, max]`` partition
        the whole population into half-open bins.
        """
        if self._categorical or self.is_empty():
            return 0
        if x >= self._kll.get_max_value():
            return self._n
        return self._n * self._kll.get_rank(x, False)

    # ------------------------------------------------------------------
    # Categorical buckets
    # ------------------------------------------------------------------

    def category_counts(self) -> dict[Hashable, int]:
        """``{category: count}``, sorted by category when comparable."""
        try:
            return dict(sorted(self._counts.items()))
        except TypeError:
            return dict(self._counts)

    def __repr__(self) -> str:  # noqa: D105
        mode = "categorical" if self._categorical else "numeric"
        return f"HistogramSketch({mode}, count={self._n}, nils={self._nil})"


# ---------------------------------------------------------------------------
# Aggregators
# ---------------------------------------------------------------------------

def _insert(h: HistogramSketch, value: Any) -> HistogramSketch:
    return h.insert(value)


def histogram(k: int = 200) -> Aggregator:
    """Aggregator building a numeric :class:`HistogramSketch`."""
    return Reducer(lambda: HistogramSketch(k=k), _insert)


def categorical_histogram() -> Aggregator:
    """Aggregator building a categorical :class:`HistogramSketch`."""
    return Reducer(lambda: HistogramSketch(categorical=True), _insert)


def optimal_bin_width(h: HistogramSketch) -> float | None:
    """Freedman–Diaconis bin width: ``2 * IQR * n^(-1/3)``."""
    if h.categorical or h.is_empty():
        return None
    q1, q3 = h.quantile(0.25), h.quantile(0.75)
    return 2 * (q3 - q1) * h.count ** (-1 / 3)
