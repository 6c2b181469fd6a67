"""
Computation budget.

A :class:`MaxCost` caps how much work a fingerprinting pass may do along two
axes: how much of the table a query may touch, and how expensive the
in-memory computation may be.  Fingerprinters never inspect the enums
directly; they ask the predicates below.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "QueryCost",
    "ComputationCost",
    "MaxCost",
    "full_scan",
    "unbounded_computation",
    "linear_computation",
    "cache_only",
    "sample_only",
    "allow_joins",
]


class QueryCost(Enum):
    """How much data a pass is allowed to read."""

    CACHE = "cache"
    SAMPLE = "sample"
    FULL_SCAN = "full-scan"
    JOINS = "joins"


class ComputationCost(Enum):
    """How expensive the statistics computed over the data may be."""

    LINEAR = "linear"
    UNBOUNDED = "unbounded"
    YOLO = "yolo"


@dataclass(frozen=True)
class MaxCost:
    query: QueryCost = QueryCost.FULL_SCAN
    computation: ComputationCost = ComputationCost.LINEAR


def full_scan(max_cost: MaxCost) -> bool:
    """``True`` if statistics that need every row (sums) may be reported."""
    return max_cost.query in (QueryCost.FULL_SCAN, QueryCost.JOINS)


def unbounded_computation(max_cost: MaxCost) -> bool:
    """``True`` if super-linear algorithms (seasonal decomposition) may run."""
    return max_cost.computation in (ComputationCost.UNBOUNDED, ComputationCost.YOLO)


def linear_computation(max_cost: MaxCost) -> bool:
    return max_cost.computation is ComputationCost.LINEAR


def cache_only(max_cost: MaxCost) -> bool:
    return max_cost.query is QueryCost.CACHE


def sample_only(max_cost: MaxCost) -> bool:
    return max_cost.query is QueryCost.SAMPLE


def allow_joins(max_cost: MaxCost) -> bool:
    return max_cost.query is QueryCost.JOINS
