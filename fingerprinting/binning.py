"""
Bin niceification and histogram rendering.

A raw histogram sketch knows its bounds and (via Freedman–Diaconis) a
sensible bin width, but those numbers are rarely presentable.
:func:`nicer_breakout` repeatedly snaps the width to a "pleasing" multiple of
a power of ten and the bounds to that width's grid until the result stops
changing.  :func:`equidistant_bins` then reads per-bin counts off the sketch,
and :func:`histogram_to_dataset` turns them into the ``rows`` / ``columns``
table used by rendered fingerprints.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fingerprinting.sketches.histogram import HistogramSketch, optimal_bin_width
from fingerprinting.utils.numeric import (
    ceil_to,
    floor_to,
    order_of_magnitude,
    round_to_decimals,
)

__all__ = [
    "PLEASING_NUMBERS",
    "MAX_STEPS",
    "BinStrategy",
    "BinnedRange",
    "calculate_bin_width",
    "calculate_num_bins",
    "nicer_bin_width",
    "nicer_bounds",
    "nicer_breakout",
    "equidistant_bins",
    "entropy",
    "histogram_to_dataset",
]

logger = logging.getLogger(__name__)

PLEASING_NUMBERS: tuple[float, ...] = (1, 1.25, 2, 2.5, 3, 5, 7.5, 10)
MAX_STEPS = 10
MAX_BINS = 100
BIN_WIDTH_DECIMALS = 5

SHARE_COLUMN: dict[str, str] = {
    "name": "SHARE",
    "display_name": "Share",
    "description": "Share of corresponding bin in the overall population.",
    "base_type": "type/Float",
}


class BinStrategy(Enum):
    """Which of ``num_bins`` / ``bin_width`` stays fixed during niceification."""

    NUM_BINS = "num-bins"
    BIN_WIDTH = "bin-width"


@dataclass(frozen=True)
class BinnedRange:
    min_value: float
    max_value: float
    bin_width: float
    num_bins: int
    strategy: BinStrategy = BinStrategy.NUM_BINS


# ---------------------------------------------------------------------------
# Niceification
# ---------------------------------------------------------------------------

def calculate_bin_width(min_value: float, max_value: float, num_bins: int) -> float:
    return round_to_decimals(BIN_WIDTH_DECIMALS, (max_value - min_value) / num_bins)


def calculate_num_bins(min_value: float, max_value: float, bin_width: float) -> int:
    return int(math.ceil((max_value - min_value) / bin_width))


def nicer_bin_width(min_value: float, max_value: float, num_bins: int) -> float:
    """Smallest pleasing multiple of a power of ten that is >= the raw width."""
    min_bin_width = calculate_bin_width(min_value, max_value, num_bins)
    scale = 10 ** order_of_magnitude(min_bin_width)
    return next(
        (p * scale for p in PLEASING_NUMBERS if p * scale >= min_bin_width),
        PLEASING_NUMBERS[-1] * scale,
    )


def nicer_bounds(min_value: float, max_value: float, bin_width: float) -> tuple[float, float]:
    return floor_to(bin_width, min_value), ceil_to(bin_width, max_value)


def _nicer_step(binned: BinnedRange) -> BinnedRange:
    by_count = binned.strategy is BinStrategy.NUM_BINS
    if by_count:
        bin_width = nicer_bin_width(binned.min_value, binned.max_value, binned.num_bins)
    else:
        bin_width = binned.bin_width
    min_value, max_value = nicer_bounds(binned.min_value, binned.max_value, bin_width)
    return dataclasses.replace(
        binned,
        min_value=min_value,
        max_value=max_value,
        num_bins=binned.num_bins if by_count else calculate_num_bins(min_value, max_value, bin_width),
        bin_width=bin_width,
    )


def nicer_breakout(binned: BinnedRange) -> BinnedRange:
    """Iterate :func:`_nicer_step` to a fixed point, at most :data:`MAX_STEPS` times.

    Returns the last estimate if two consecutive steps never agree.
    """
    current = binned
    for _ in range(MAX_STEPS):
        following = _nicer_step(current)
        if following == current:
            return current
        current = following
    logger.debug("Bin niceification did not converge in %d steps: %s", MAX_STEPS, current)
    return current


# ---------------------------------------------------------------------------
# Reading bins off a sketch
# ---------------------------------------------------------------------------

def equidistant_bins(histogram: HistogramSketch) -> list[tuple[Any, float]]:
    """``[(bin_start, count), ...]`` over nice equidistant bins.

    Categorical histograms yield their ``(category, count)`` pairs as-is.
    """
    if histogram.categorical:
        return list(histogram.category_counts().items())
    if histogram.is_empty():
        return []
    lo, hi = histogram.minimum(), histogram.maximum()
    if lo == hi:
        return [(lo, histogram.count)]

    bin_width = optimal_bin_width(histogram)
    if not bin_width:
        # Zero IQR: fall back to Sturges' bin count.
        bin_width = (hi - lo) / math.ceil(math.log2(histogram.count) + 1)
    num_bins = min(max(calculate_num_bins(lo, hi, bin_width), 1), MAX_BINS)
    binned = nicer_breakout(BinnedRange(lo, hi, bin_width, num_bins, BinStrategy.NUM_BINS))

    points = [binned.min_value + i * binned.bin_width for i in range(binned.num_bins + 1)]
    while points[-1] < hi:
        points.append(points[-1] + binned.bin_width)
    sums = [histogram.sum_at(x) for x in points]
    return [(x, s2 - s1) for x, s1, s2 in zip(points, sums, sums[1:])]


def entropy(histogram: HistogramSketch) -> float:
    """Shannon entropy (nats) of the binned distribution."""
    counts = [c for _, c in equidistant_bins(histogram) if c > 0]
    total = sum(counts)
    if not total:
        return 0.0
    return -sum((c / total) * math.log(c / total) for c in counts)


def histogram_to_dataset(
    field: Any,
    histogram: HistogramSketch,
    key_fn: Callable[[Any], Any] = lambda k: k,
) -> dict[str, Any]:
    """Render *histogram* as ``{"rows": [[bucket, share]], "columns", "cols"}``.

    Shares are normalised by the number of non-nil values.
    """
    field_dict = field.to_dict() if hasattr(field, "to_dict") else dict(field)
    norm = 1 / histogram.count if histogram.count else 0
    return {
        "rows": [[key_fn(k), v * norm] for k, v in equidistant_bins(histogram)],
        "columns": [field_dict.get("name"), SHARE_COLUMN["name"]],
        "cols": [field_dict, dict(SHARE_COLUMN)],
    }
