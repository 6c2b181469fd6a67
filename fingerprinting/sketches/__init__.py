"""
Sketch adapters — the approximate data structures fingerprints are built on.

Modules
-------
histogram
    ``HistogramSketch`` over a KLL quantile sketch (numeric) or exact
    category counts (categorical).
cardinality
    ``CardinalitySketch`` over a HyperLogLog.
"""

from fingerprinting.sketches.cardinality import CardinalitySketch, cardinality
from fingerprinting.sketches.histogram import (
    HistogramSketch,
    categorical_histogram,
    histogram,
    optimal_bin_width,
)

__all__ = [
    "CardinalitySketch",
    "cardinality",
    "HistogramSketch",
    "categorical_histogram",
    "histogram",
    "optimal_bin_width",
]
