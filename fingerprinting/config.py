"""
Central configuration for fingerprinting.

All sketch parameters and reported percentiles live here.  Passes read a
frozen instance, so one config can be shared by concurrent passes.
"""

from dataclasses import dataclass

__all__ = ["FingerprintConfig", "DEFAULT_CONFIG", "PERCENTILES", "CARDINALITY_ERROR"]


PERCENTILES: tuple[float, ...] = tuple(round(i * 0.1, 1) for i in range(10))
"""Deciles ``0.0 .. 0.9`` reported by the Num and DateTime fingerprints."""

CARDINALITY_ERROR: float = 0.01
"""Target relative error of the HyperLogLog cardinality sketch."""


@dataclass(frozen=True)
class FingerprintConfig:
    """Immutable configuration for one or more fingerprinting passes."""

    # ── Cardinality (HyperLogLog) ──────────────────────────────────────
    cardinality_error: float = CARDINALITY_ERROR
    """Also the slack used by the ``all_distinct`` flag."""

    # ── Histogram (KLL quantile sketch) ────────────────────────────────
    histogram_k: int = 200
    """KLL accuracy parameter; streams shorter than ``k`` are kept exactly."""

    percentiles: tuple[float, ...] = PERCENTILES


DEFAULT_CONFIG = FingerprintConfig()
