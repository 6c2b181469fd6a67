"""
Fingerprinting — single-pass statistical profiles of data columns.

A fingerprint summarises a column (or a pair of columns) from one streaming
pass over its values: histogram, cardinality, moments, temporal cycles,
growth.  Fingerprints can be rendered for humans (:func:`to_display`) or
reduced to a feature mapping for comparisons (:func:`to_comparison_vector`).

Quick start::

    from fingerprinting import Field, fingerprint, to_display
    fp = fingerprint(Field("price", "type/Float"), [1.0, 2.5, None, 4.0])
    fp["mean"], to_display(fp)["histogram"]["rows"]
"""

from fingerprinting.costs import ComputationCost, MaxCost, QueryCost
from fingerprinting.models import Field, Fingerprint, ProfilingOptions, Scale, field_type
from fingerprinting.profiler.dispatch import (
    build_aggregator,
    fingerprint,
    resolve_variant,
    to_comparison_vector,
    to_display,
)
from fingerprinting.profiler.runner import FingerprintRunner

__all__ = [
    "ComputationCost",
    "MaxCost",
    "QueryCost",
    "Field",
    "Fingerprint",
    "ProfilingOptions",
    "Scale",
    "field_type",
    "build_aggregator",
    "fingerprint",
    "resolve_variant",
    "to_comparison_vector",
    "to_display",
    "FingerprintRunner",
]
__version__ = "0.1.0"
