"""
Aggregators — single-pass folds and the combinators that compose them.

Modules
-------
base
    ``Aggregator`` protocol, ``Reducer``, ``fuse``, ``pre_step``,
    ``post_complete``, ``with_filter``, ``rollup``, ``reduce_with``.
stats
    Streaming counts, sums, moments, regression, correlation, covariance.
"""

from fingerprinting.aggregators.base import (
    Aggregator,
    Reducer,
    fuse,
    post_complete,
    pre_step,
    reduce_with,
    rollup,
    with_filter,
)

__all__ = [
    "Aggregator",
    "Reducer",
    "fuse",
    "post_complete",
    "pre_step",
    "reduce_with",
    "rollup",
    "with_filter",
]
