"""
Temporal helpers: instant coercion, period-aligned series, growth metrics,
seasonal decomposition and periodicity weights.

Instants travel through aggregators as UTC epoch milliseconds stored in a
``float`` (so they fit numeric sketches and regressions) and are turned back
into ``datetime`` objects only when a fingerprint is rendered.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone
from typing import Any

import numpy as np
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from statsmodels.tsa.seasonal import STL

from fingerprinting.models.types import Scale
from fingerprinting.utils.numeric import growth

__all__ = [
    "parse_instant",
    "to_epoch",
    "from_epoch",
    "quarter",
    "period_step",
    "fill_timeseries",
    "decompose_timeseries",
    "period_growth",
    "round_to_month",
    "month_frequencies",
    "quarter_frequencies",
    "weigh_periodicity",
]

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

# Number of periods in one seasonal cycle.
SEASON_LENGTH: dict[Scale, int] = {
    Scale.MONTH: 12,
    Scale.WEEK: 52,
    Scale.DAY: 365,
}

_STEPS: dict[Scale, relativedelta] = {
    Scale.MONTH: relativedelta(months=1),
    Scale.WEEK: relativedelta(weeks=1),
    Scale.DAY: relativedelta(days=1),
}

Series = Sequence[tuple[float, Any]]


# ---------------------------------------------------------------------------
# Instants
# ---------------------------------------------------------------------------

def parse_instant(value: Any) -> datetime | None:
    """Coerce *value* to an aware UTC ``datetime``.

    Accepts ISO-8601 strings, ``datetime`` (naive ones are taken as UTC) and
    ``date``.  ``None`` passes through.  Anything else raises ``ValueError``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        return parse_instant(date_parser.isoparse(value))
    raise ValueError(f"Cannot interpret {value!r} as an instant")


def to_epoch(dt: datetime | None) -> float | None:
    """UTC epoch milliseconds as a float."""
    if dt is None:
        return None
    return float((dt - _EPOCH) // _ONE_MS)


def from_epoch(ms: float | None) -> datetime | None:
    if ms is None:
        return None
    return _EPOCH + timedelta(milliseconds=ms)


def quarter(dt: datetime) -> int:
    return math.ceil(dt.month / 3)


# ---------------------------------------------------------------------------
# Period-aligned series
# ---------------------------------------------------------------------------

def period_step(scale: Scale) -> relativedelta:
    try:
        return _STEPS[scale]
    except KeyError:
        raise ValueError(f"Scale {scale!r} has no period") from None


def fill_timeseries(step: relativedelta, ts: Series) -> list[tuple[float, Any]]:
    """Expand *ts* into one point per *step* from its first to its last instant.

    Periods missing from *ts* get the value ``0``.  When several points share
    an instant the last one wins.  Offsets are applied from the first instant
    (``start + n * step``), so month steps from the 31st land on month ends.
    """
    if not ts:
        return []
    ordered = sorted(ts, key=lambda point: point[0])
    index = dict(ordered)
    start = from_epoch(ordered[0][0])
    last = ordered[-1][0]

    filled: list[tuple[float, Any]] = []
    n = 0
    while True:
        t = to_epoch(start + step * n)
        if t > last:
            break
        filled.append((t, index.get(t, 0)))
        n += 1
    return filled


def decompose_timeseries(scale: Scale, ts: Series) -> dict[str, list[float]] | None:
    """STL-decompose *ts* into trend, seasonal and remainder components.

    Returns ``None`` unless the series spans at least two full seasons and
    every value is present.
    """
    period = SEASON_LENGTH[scale]
    if len(ts) < 2 * period:
        logger.debug("Series of %d points too short for %s decomposition", len(ts), scale.value)
        return None
    ys = [y for _, y in ts]
    if any(y is None for y in ys):
        logger.debug("Series has missing values; skipping decomposition")
        return None
    fit = STL(np.asarray(ys, dtype=float), period=period).fit()
    return {
        "trend": np.asarray(fit.trend).tolist(),
        "seasonal": np.asarray(fit.seasonal).tolist(),
        "remainder": np.asarray(fit.resid).tolist(),
    }


def period_growth(scale: Scale, ys: Sequence[Any]) -> dict[str, float | None]:
    """Period-over-period growth of the most recent values of *ys*.

    The ``*_previous`` variants repeat the comparison one period earlier.
    Comparisons reaching past the start of the series are ``None``.
    """
    recent = list(reversed(ys))

    def nth(i: int) -> Any:
        return recent[i] if i < len(recent) else None

    if scale is Scale.MONTH:
        return {
            "YoY": growth(nth(0), nth(12)),
            "YoY_previous": growth(nth(1), nth(13)),
            "MoM": growth(nth(0), nth(1)),
            "MoM_previous": growth(nth(1), nth(2)),
        }
    if scale is Scale.WEEK:
        return {
            "YoY": growth(nth(0), nth(52)),
            "YoY_previous": growth(nth(1), nth(53)),
            "WoW": growth(nth(0), nth(1)),
            "WoW_previous": growth(nth(1), nth(2)),
        }
    if scale is Scale.DAY:
        return {
            "DoD": growth(nth(0), nth(1)),
            "DoD_previous": growth(nth(1), nth(2)),
        }
    return {}


# ---------------------------------------------------------------------------
# Periodicity weights for cyclical (month / quarter) histograms
# ---------------------------------------------------------------------------

def round_to_month(dt: datetime) -> datetime:
    """Start of *dt*'s month, or of the next month after the 15th."""
    start = dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if dt.day <= 15:
        return start
    return start + relativedelta(months=1)


def _months_between(earliest: datetime, latest: datetime) -> int:
    delta = relativedelta(latest, earliest)
    return delta.years * 12 + delta.months


def month_frequencies(earliest: datetime, latest: datetime) -> Counter:
    """How many times each month number (1–12) occurs in ``[earliest, latest]``."""
    earliest = round_to_month(earliest)
    latest = round_to_month(latest)
    start_month = earliest.month
    duration = _months_between(earliest, latest)
    return Counter(m % 12 + 1 for m in range(start_month - 1, start_month + duration))


def quarter_frequencies(earliest: datetime, latest: datetime) -> Counter:
    """How many times each quarter number (1–4) occurs in ``[earliest, latest]``."""
    earliest = round_to_month(earliest)
    latest = round_to_month(latest)
    start_quarter = quarter(earliest)
    duration = math.floor(_months_between(earliest, latest) / 3 + 0.5)
    return Counter(q % 4 + 1 for q in range(start_quarter - 1, start_quarter + duration))


def weigh_periodicity(weights: Counter, dataset: dict[str, Any]) -> dict[str, Any]:
    """Rescale each row of *dataset* by ``min(weights) / weights[bucket]``.

    Buckets with no expected occurrence are left as they are.
    """
    if not weights:
        return dataset
    baseline = min(weights.values())
    rows = [
        [k, v * baseline / weights[k]] if weights.get(k) else [k, v]
        for k, v in dataset["rows"]
    ]
    return {**dataset, "rows": rows}
