"""
Profiling strategies — one per fingerprint variant.

Each strategy knows three things about its variant:

* :meth:`ProfilerStrategy.aggregator` — the single-pass aggregator that
  turns a stream of values into a :class:`Fingerprint`;
* :meth:`ProfilerStrategy.to_display` — the human-readable rendering
  ("x-ray"): sketches become ``rows`` / ``columns`` tables, epochs become
  datetimes, internal flags are dropped;
* :meth:`ProfilerStrategy.to_comparison_vector` — the fixed subset of
  statistics used to compare fingerprints with each other.

Every multi-statistic variant is a :func:`~fingerprinting.aggregators.fuse`
of independent aggregators followed by a ``post_complete`` that derives
the reported statistics, so all statistics see exactly the same items.
Which strategy handles which column is decided in :mod:`.dispatch`.
"""

from __future__ import annotations

import abc
import logging
import math
from collections.abc import Callable, Sequence
from typing import Any

from fingerprinting.aggregators import stats
from fingerprinting.aggregators.base import (
    Aggregator,
    Reducer,
    fuse,
    post_complete,
    pre_step,
    reduce_with,
    with_filter,
)
from fingerprinting.binning import entropy, histogram_to_dataset
from fingerprinting.costs import full_scan, unbounded_computation
from fingerprinting.models.field import Field, ProfilingOptions, field_type
from fingerprinting.models.fingerprint import Fingerprint
from fingerprinting.models.types import (
    ANY,
    CATEGORY,
    DATETIME,
    NUMBER,
    TEXT,
    Scale,
    TypeSignature,
)
from fingerprinting.sketches.cardinality import cardinality
from fingerprinting.sketches.histogram import categorical_histogram, histogram
from fingerprinting.timeseries import (
    decompose_timeseries,
    fill_timeseries,
    from_epoch,
    month_frequencies,
    parse_instant,
    period_growth,
    period_step,
    quarter,
    quarter_frequencies,
    to_epoch,
    weigh_periodicity,
)
from fingerprinting.utils.numeric import safe_divide, to_finite

__all__ = [
    "NUM",
    "CATEGORY_TYPE",
    "TEXT_TYPE",
    "DATETIME_TYPE",
    "ProfilerStrategy",
    "NumericProfiler",
    "CategoryProfiler",
    "TextProfiler",
    "DateTimeProfiler",
    "NumNumProfiler",
    "DateTimeNumProfiler",
    "DefaultProfiler",
]

logger = logging.getLogger(__name__)


# Type tags stamped on fingerprints (and matched against field signatures).
NUM = (NUMBER, ANY)
CATEGORY_TYPE = (ANY, CATEGORY)
TEXT_TYPE = (TEXT, ANY)
DATETIME_TYPE = (DATETIME, ANY)

_CYCLE_FIELDS = {
    "histogram_hour": Field("HOUR", "type/Integer", CATEGORY, "Hour of day"),
    "histogram_day": Field("DAY", "type/Integer", CATEGORY, "Day of week"),
    "histogram_month": Field("MONTH", "type/Integer", CATEGORY, "Month of year"),
    "histogram_quarter": Field("QUARTER", "type/Integer", CATEGORY, "Quarter of year"),
}


def _somef(f: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Lift *f* so that ``None`` maps to ``None``."""
    return lambda x: None if x is None else f(x)


def _nil_accounting(nil_count: int, total_count: int) -> dict[str, Any]:
    return {
        "count": total_count,
        "nil_pct": nil_count / max(total_count, 1),
        "has_nils": nil_count > 0,
    }


def _append(acc: list, x: Any) -> list:
    acc.append(x)
    return acc


_collect: Aggregator = Reducer(list, _append)


# ---------------------------------------------------------------------------
# Base strategy
# ---------------------------------------------------------------------------

class ProfilerStrategy(abc.ABC):
    """Base class; subclasses set :attr:`type_tag` and build the aggregator."""

    name: str = "default"
    type_tag: Any = None

    @abc.abstractmethod
    def aggregator(self, options: ProfilingOptions, field: Any) -> Aggregator:
        """Single-pass aggregator completing to the fingerprint of *field*."""

    def to_display(self, fingerprint: Fingerprint) -> Fingerprint:
        return fingerprint

    def to_comparison_vector(self, fingerprint: Fingerprint) -> dict[str, Any]:
        return fingerprint.without("type", "field", "has_nils").to_dict()

    def __repr__(self) -> str:  # noqa: D105
        return f"<{type(self).__name__} {self.name}>"


# ---------------------------------------------------------------------------
# Numeric
# ---------------------------------------------------------------------------

class NumericProfiler(ProfilerStrategy):
    """Distribution, moments and shape flags of a numeric column."""

    name = "numeric"
    type_tag = NUM

    _COMPARED = (
        "histogram", "mean", "median", "min", "max", "sd", "count", "kurtosis",
        "skewness", "entropy", "nil_pct", "uniqueness", "range", "min_vs_max",
    )
    _INTERNAL_FLAGS = (
        "has_nils", "var_gt_sd", "zero_to_one", "minus_one_to_one", "all_distinct",
        "positive_definite", "uniqueness", "min_vs_max",
    )

    def aggregator(self, options: ProfilingOptions, field: Field) -> Aggregator:
        cfg = options.config
        children: dict[str, Aggregator] = {
            "histogram": histogram(cfg.histogram_k),
            "cardinality": cardinality(cfg.cardinality_error),
            "kurtosis": stats.kurtosis,
            "skewness": stats.skewness,
        }
        if full_scan(options.max_cost):
            children["sum"] = stats.summing
            children["sum_of_squares"] = stats.sum_of_squares

        def complete(results: dict[str, Any]) -> Fingerprint:
            h = results["histogram"]
            total_count = h.total_count
            if total_count == 0:
                return Fingerprint(count=0, type=NUM, field=field)
            summary = _nil_accounting(h.nil_count, total_count)
            if h.is_empty():
                return Fingerprint(summary, type=NUM, field=field)

            uniqueness = min(results["cardinality"] / total_count, 1.0)
            var = h.variance() or 0
            sd = math.sqrt(var)
            lo, hi = h.minimum(), h.maximum()
            mean, median = h.mean(), h.median()
            value_range = hi - lo
            summary.update(
                histogram=h,
                percentiles=h.percentiles(cfg.percentiles),
                positive_definite=lo >= 0,
                pct_gt_mean=1 - h.cdf(mean),
                uniqueness=uniqueness,
                var_gt_sd=var > sd,
                zero_to_one=0 <= lo <= hi <= 1,
                minus_one_to_one=-1 <= lo <= hi <= 1,
                cv=safe_divide(sd, mean),
                range_vs_sd=safe_divide(sd, value_range),
                mean_median_spread=safe_divide(mean - median, value_range),
                min_vs_max=safe_divide(lo, hi),
                range=value_range,
                cardinality=results["cardinality"],
                min=lo,
                max=hi,
                mean=mean,
                median=median,
                var=var,
                sd=sd,
                kurtosis=results["kurtosis"],
                skewness=results["skewness"],
                all_distinct=uniqueness >= 1 - cfg.cardinality_error,
                entropy=entropy(h),
                type=NUM,
                field=field,
            )
            if "sum" in results:
                summary["sum"] = results["sum"]
                summary["sum_of_squares"] = results["sum_of_squares"]
            return Fingerprint(summary)

        return post_complete(fuse(children), complete)

    def to_display(self, fingerprint: Fingerprint) -> Fingerprint:
        fp = fingerprint.without(*self._INTERNAL_FLAGS)
        if "histogram" in fp:
            fp = fp.evolve(histogram=histogram_to_dataset(fp.field, fp["histogram"]))
        return fp

    def to_comparison_vector(self, fingerprint: Fingerprint) -> dict[str, Any]:
        return fingerprint.select(*self._COMPARED).to_dict()


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------

class CategoryProfiler(ProfilerStrategy):
    """Category frequencies and distinctness."""

    name = "category"
    type_tag = CATEGORY_TYPE

    def aggregator(self, options: ProfilingOptions, field: Field) -> Aggregator:
        def complete(results: dict[str, Any]) -> Fingerprint:
            h = results["histogram"]
            total_count = h.total_count
            return Fingerprint(
                _nil_accounting(h.nil_count, total_count),
                histogram=h,
                uniqueness=min(results["cardinality"] / max(total_count, 1), 1.0),
                cardinality=results["cardinality"],
                entropy=entropy(h),
                type=CATEGORY_TYPE,
                field=field,
            )

        return post_complete(
            fuse({
                "histogram": categorical_histogram(),
                "cardinality": cardinality(options.config.cardinality_error),
            }),
            complete,
        )

    def to_display(self, fingerprint: Fingerprint) -> Fingerprint:
        return fingerprint.evolve(
            histogram=histogram_to_dataset(fingerprint.field, fingerprint["histogram"])
        )

    def to_comparison_vector(self, fingerprint: Fingerprint) -> dict[str, Any]:
        return fingerprint.without("type", "cardinality", "field", "has_nils").to_dict()


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

def _length(value: Any) -> int:
    return len(value) if isinstance(value, str) else len(str(value))


class TextProfiler(ProfilerStrategy):
    """Distribution of value lengths."""

    name = "text"
    type_tag = TEXT_TYPE

    def aggregator(self, options: ProfilingOptions, field: Field) -> Aggregator:
        def complete(results: dict[str, Any]) -> Fingerprint:
            h = results["histogram"]
            return Fingerprint(
                _nil_accounting(h.nil_count, h.total_count),
                min=h.minimum(),
                max=h.maximum(),
                histogram=h,
                type=TEXT_TYPE,
                field=field,
            )

        lengths = pre_step(histogram(options.config.histogram_k), _somef(_length))
        return post_complete(fuse({"histogram": lengths}), complete)

    def to_display(self, fingerprint: Fingerprint) -> Fingerprint:
        return fingerprint.evolve(
            histogram=histogram_to_dataset(fingerprint.field, fingerprint["histogram"])
        )


# ---------------------------------------------------------------------------
# DateTime
# ---------------------------------------------------------------------------

class DateTimeProfiler(ProfilerStrategy):
    """Overall spread of instants plus hour / weekday / month / quarter cycles."""

    name = "datetime"
    type_tag = DATETIME_TYPE

    def aggregator(self, options: ProfilingOptions, field: Field) -> Aggregator:
        cfg = options.config

        def complete(results: dict[str, Any]) -> Fingerprint:
            h = results["histogram"]
            return Fingerprint(
                _nil_accounting(h.nil_count, h.total_count),
                earliest=h.minimum(),
                latest=h.maximum(),
                histogram=h,
                percentiles=h.percentiles(cfg.percentiles),
                histogram_hour=results["histogram_hour"],
                histogram_day=results["histogram_day"],
                histogram_month=results["histogram_month"],
                histogram_quarter=results["histogram_quarter"],
                entropy=entropy(h),
                type=DATETIME_TYPE,
                field=field,
            )

        fused = fuse({
            "histogram": pre_step(histogram(cfg.histogram_k), to_epoch),
            "histogram_hour": pre_step(categorical_histogram(), _somef(lambda dt: dt.hour)),
            "histogram_day": pre_step(categorical_histogram(), _somef(lambda dt: dt.isoweekday())),
            "histogram_month": pre_step(categorical_histogram(), _somef(lambda dt: dt.month)),
            "histogram_quarter": pre_step(categorical_histogram(), _somef(quarter)),
        })
        return post_complete(pre_step(fused, parse_instant), complete)

    def to_display(self, fingerprint: Fingerprint) -> Fingerprint:
        earliest = from_epoch(fingerprint["earliest"])
        latest = from_epoch(fingerprint["latest"])
        cycles = {
            key: histogram_to_dataset(cycle_field, fingerprint[key])
            for key, cycle_field in _CYCLE_FIELDS.items()
        }
        if earliest is not None:
            cycles["histogram_month"] = weigh_periodicity(
                month_frequencies(earliest, latest), cycles["histogram_month"]
            )
            cycles["histogram_quarter"] = weigh_periodicity(
                quarter_frequencies(earliest, latest), cycles["histogram_quarter"]
            )
        return fingerprint.evolve(
            earliest=earliest,
            latest=latest,
            histogram=histogram_to_dataset(fingerprint.field, fingerprint["histogram"], from_epoch),
            percentiles={p: from_epoch(v) for p, v in fingerprint["percentiles"].items()},
            **cycles,
        )

    def to_comparison_vector(self, fingerprint: Fingerprint) -> dict[str, Any]:
        return fingerprint.without("type", "percentiles", "field", "has_nils").to_dict()


# ---------------------------------------------------------------------------
# Num × Num
# ---------------------------------------------------------------------------

class NumNumProfiler(ProfilerStrategy):
    """Linear relationship between two numeric columns."""

    name = "numeric-numeric"
    type_tag = (NUM, NUM)

    def aggregator(self, options: ProfilingOptions, field: Sequence[Field]) -> Aggregator:
        fused = fuse({
            "linear_regression": stats.simple_linear_regression,
            "correlation": stats.correlation,
            "covariance": stats.covariance,
        })
        return post_complete(fused, lambda r: Fingerprint(r, type=self.type_tag, field=tuple(field)))


# ---------------------------------------------------------------------------
# DateTime × Num
# ---------------------------------------------------------------------------

def _parse_pair(pair: Any) -> tuple[float | None, float | None]:
    t, y = pair
    return to_epoch(parse_instant(t)), to_finite(y)


class DateTimeNumProfiler(ProfilerStrategy):
    """A numeric measure over time: trend, period growth, seasonality."""

    name = "datetime-numeric"
    type_tag = (DATETIME_TYPE, NUM)

    def aggregator(self, options: ProfilingOptions, field: Sequence[Field]) -> Aggregator:
        scale = options.scale
        series = with_filter(_collect, lambda point: point[0] is not None)
        if scale is not Scale.RAW:
            series = post_complete(series, lambda ts: fill_timeseries(period_step(scale), ts))
        decompose = scale is not Scale.RAW and unbounded_computation(options.max_cost)
        if scale is not Scale.RAW and not decompose:
            logger.debug("Seasonal decomposition not allowed by %s", options.max_cost)

        def complete(results: dict[str, Any]) -> Fingerprint:
            ts = results["series"]
            fp: dict[str, Any] = {
                "scale": scale,
                "type": self.type_tag,
                "field": tuple(field),
                "series": ts,
                "linear_regression": reduce_with(stats.simple_linear_regression, ts),
            }
            if decompose:
                decomposition = decompose_timeseries(scale, ts)
                if decomposition is not None:
                    fp["seasonal_decomposition"] = decomposition
            fp.update(period_growth(scale, [y for _, y in ts]))
            return Fingerprint(fp)

        return post_complete(pre_step(fuse({"series": series}), _parse_pair), complete)

    def to_display(self, fingerprint: Fingerprint) -> Fingerprint:
        return fingerprint.evolve(series=[(from_epoch(x), y) for x, y in fingerprint["series"]])

    def to_comparison_vector(self, fingerprint: Fingerprint) -> dict[str, Any]:
        return fingerprint.without("type", "scale", "field").to_dict()


# ---------------------------------------------------------------------------
# Default
# ---------------------------------------------------------------------------

def _is_nil(x: Any) -> bool:
    return x is None


class DefaultProfiler(ProfilerStrategy):
    """Fallback for any unmatched signature: counts only."""

    name = "default"

    def aggregator(self, options: ProfilingOptions, field: Any) -> Aggregator:
        signature: TypeSignature = field_type(field)

        def complete(results: dict[str, Any]) -> Fingerprint:
            return Fingerprint(
                _nil_accounting(results["nil_count"], results["total_count"]),
                type=(None, signature),
                field=field,
            )

        fused = fuse({
            "total_count": stats.count,
            "nil_count": with_filter(stats.count, _is_nil),
        })
        return post_complete(fused, complete)
