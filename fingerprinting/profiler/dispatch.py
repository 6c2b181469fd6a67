"""
Type dispatch — which profiling strategy handles which column.

A column's type signature can match several strategies at once (a
``type/Integer`` column tagged ``type/Category`` is both numeric and
categorical).  Resolution is therefore not first-registered-wins but an
explicit precedence list of ``(predicate, strategy)`` pairs, evaluated top
to bottom:

========  ==================================  =====================
Rank      Predicate                           Strategy
========  ==================================  =====================
1         base type isa Number                numeric
2         base type isa DateTime              datetime
3         special type isa Category           category
4         base type isa Text                  text
5         (Number, Number) pair               numeric × numeric
6         (DateTime, Number) pair             datetime × numeric
--        anything else                       default
========  ==================================  =====================

The order is part of this module's contract.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from fingerprinting.aggregators.base import Aggregator, reduce_with
from fingerprinting.models.field import Field, ProfilingOptions, field_type
from fingerprinting.models.fingerprint import Fingerprint
from fingerprinting.models.types import TypeSignature, signature_matches
from fingerprinting.profiler.strategies import (
    CATEGORY_TYPE,
    DATETIME_TYPE,
    NUM,
    TEXT_TYPE,
    CategoryProfiler,
    DateTimeNumProfiler,
    DateTimeProfiler,
    DefaultProfiler,
    NumericProfiler,
    NumNumProfiler,
    ProfilerStrategy,
    TextProfiler,
)

__all__ = [
    "PRECEDENCE",
    "DEFAULT",
    "resolve_variant",
    "build_aggregator",
    "fingerprint",
    "to_display",
    "to_comparison_vector",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def _univariate(signature: TypeSignature) -> bool:
    return len(signature) == 2 and all(isinstance(t, str) for t in signature)


def _bivariate(signature: TypeSignature) -> bool:
    return len(signature) == 2 and all(isinstance(t, tuple) for t in signature)


def is_numeric(signature: TypeSignature) -> bool:
    return _univariate(signature) and signature_matches(signature, NUM)


def is_datetime(signature: TypeSignature) -> bool:
    return _univariate(signature) and signature_matches(signature, DATETIME_TYPE)


def is_category(signature: TypeSignature) -> bool:
    return _univariate(signature) and signature_matches(signature, CATEGORY_TYPE)


def is_text(signature: TypeSignature) -> bool:
    return _univariate(signature) and signature_matches(signature, TEXT_TYPE)


def is_numeric_pair(signature: TypeSignature) -> bool:
    return _bivariate(signature) and all(is_numeric(s) for s in signature)


def is_datetime_numeric_pair(signature: TypeSignature) -> bool:
    return _bivariate(signature) and is_datetime(signature[0]) and is_numeric(signature[1])


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------

PRECEDENCE: tuple[tuple[Callable[[TypeSignature], bool], ProfilerStrategy], ...] = (
    (is_numeric, NumericProfiler()),
    (is_datetime, DateTimeProfiler()),
    (is_category, CategoryProfiler()),
    (is_text, TextProfiler()),
    (is_numeric_pair, NumNumProfiler()),
    (is_datetime_numeric_pair, DateTimeNumProfiler()),
)

DEFAULT: ProfilerStrategy = DefaultProfiler()

_BY_TYPE_TAG: dict[Any, ProfilerStrategy] = {s.type_tag: s for _, s in PRECEDENCE}


def resolve_variant(signature: TypeSignature) -> ProfilerStrategy:
    """Return the highest-ranked strategy whose predicate accepts *signature*."""
    for predicate, strategy in PRECEDENCE:
        if predicate(signature):
            return strategy
    return DEFAULT


def build_aggregator(
    options: ProfilingOptions | None,
    field: Field | Sequence[Field],
) -> Aggregator:
    """Aggregator producing the fingerprint of *field* (or of a pair of fields)."""
    options = options or ProfilingOptions()
    signature = field_type(field)
    strategy = resolve_variant(signature)
    logger.debug("Resolved %s to %r", signature, strategy)
    return strategy.aggregator(options, field)


def fingerprint(
    field: Field | Sequence[Field],
    values: Iterable[Any],
    options: ProfilingOptions | None = None,
) -> Fingerprint:
    """Fingerprint *values* of *field* in one pass.

    For a pair of fields, *values* is an iterable of ``(x, y)`` pairs.
    """
    return reduce_with(build_aggregator(options, field), values)


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

def _strategy_for(fp: Fingerprint) -> ProfilerStrategy:
    return _BY_TYPE_TAG.get(fp.type, DEFAULT)


def to_display(fp: Fingerprint) -> Fingerprint:
    """Human-readable rendering ("x-ray") of *fp*."""
    return _strategy_for(fp).to_display(fp)


def to_comparison_vector(fp: Fingerprint) -> dict[str, Any]:
    """Feature mapping of *fp* for similarity / difference computations."""
    return _strategy_for(fp).to_comparison_vector(fp)
