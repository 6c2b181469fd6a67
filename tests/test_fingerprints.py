"""Tests for the fingerprint variants produced by fingerprinting.fingerprint."""

import math
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from fingerprinting import fingerprint, to_display
from fingerprinting.costs import ComputationCost, MaxCost, QueryCost
from fingerprinting.models import Field, ProfilingOptions, Scale
from fingerprinting.profiler.strategies import CATEGORY_TYPE, DATETIME_TYPE, NUM, TEXT_TYPE
from fingerprinting.sketches.histogram import HistogramSketch
from fingerprinting.timeseries import to_epoch

UTC = timezone.utc

PRICE = Field("price", "type/Float")
CITY = Field("city", "type/Text", "type/City")
NOTE = Field("note", "type/Text")
CREATED = Field("created", "type/DateTime")


def _month(i: int) -> str:
    return f"{2017 + i // 12}-{i % 12 + 1:02d}-01"


# ── Numeric ──────────────────────────────────────────────────────────

class TestNumeric:
    @pytest.fixture
    def fp(self):
        return fingerprint(PRICE, [1, 2, 3, 4, 5, None])

    def test_counts(self, fp):
        assert fp["count"] == 6
        assert fp["nil_pct"] == pytest.approx(1 / 6)
        assert fp["has_nils"] is True

    def test_summary(self, fp):
        assert fp["min"] == 1
        assert fp["max"] == 5
        assert fp["mean"] == pytest.approx(3.0)
        assert fp["median"] == 3
        assert fp["range"] == 4
        assert fp["var"] == pytest.approx(2.0)
        assert fp["sd"] == pytest.approx(math.sqrt(2))
        assert fp["uniqueness"] == pytest.approx(1.0, abs=0.02)

    def test_derived_ratios(self, fp):
        assert fp["pct_gt_mean"] == pytest.approx(0.4)
        assert fp["cv"] == pytest.approx(math.sqrt(2) / 3)
        assert fp["range_vs_sd"] == pytest.approx(math.sqrt(2) / 4)
        assert fp["mean_median_spread"] == pytest.approx(0.0)
        assert fp["min_vs_max"] == pytest.approx(0.2)

    def test_shape_flags(self, fp):
        assert fp["positive_definite"] is True
        assert fp["zero_to_one"] is False
        assert fp["minus_one_to_one"] is False
        assert fp["var_gt_sd"] is True

    def test_moments(self, fp):
        assert fp["kurtosis"] == pytest.approx(-1.2)
        assert fp["skewness"] == pytest.approx(0.0)

    def test_sketch_and_tags(self, fp):
        assert isinstance(fp["histogram"], HistogramSketch)
        assert fp["percentiles"][0.5] == 3
        assert fp.type == NUM
        assert fp.field is PRICE

    def test_sums_need_full_scan(self, fp):
        assert fp["sum"] == 15
        assert fp["sum_of_squares"] == 55
        sampled = fingerprint(
            PRICE, [1, 2, 3], ProfilingOptions(max_cost=MaxCost(query=QueryCost.SAMPLE))
        )
        assert "sum" not in sampled
        assert "sum_of_squares" not in sampled

    def test_unit_interval(self):
        fp = fingerprint(PRICE, [0.1, 0.5, 0.9])
        assert fp["zero_to_one"] is True
        assert fp["minus_one_to_one"] is True

    def test_empty_column(self):
        fp = fingerprint(PRICE, [])
        assert dict(fp) == {"count": 0, "type": NUM, "field": PRICE}

    def test_all_nil_column(self):
        fp = fingerprint(PRICE, [None, None])
        assert set(fp) == {"count", "nil_pct", "has_nils", "type", "field"}
        assert fp["nil_pct"] == 1.0

    def test_decimal_column(self):
        amount = Field("amount", "type/Decimal")
        fp = fingerprint(amount, [Decimal("1.5"), Decimal("2.5"), Decimal("3.5"), Decimal("4.5"), None])
        assert fp["mean"] == pytest.approx(3.0)
        assert fp["sum"] == pytest.approx(12.0)
        assert fp["skewness"] == pytest.approx(0.0)
        assert fp["kurtosis"] == pytest.approx(-1.2)
        assert fp["cardinality"] == 5

    def test_non_finite_values_count_as_nils(self):
        fp = fingerprint(PRICE, [1.0, 2.0, 3.0, math.inf, float("nan")])
        assert fp["count"] == 5
        assert fp["nil_pct"] == pytest.approx(0.4)
        assert fp["max"] == 3
        assert fp["mean"] == pytest.approx(2.0)
        assert fp["sum"] == pytest.approx(6.0)
        assert fp["histogram"].nil_count == 2

    def test_infinite_value_still_bins(self):
        fp = fingerprint(PRICE, [1.0, 2.0, 3.0, -math.inf])
        assert fp["min"] == 1
        rows = to_display(fp)["histogram"]["rows"]
        assert sum(share for _, share in rows) == pytest.approx(1.0)

    def test_ints_and_floats_are_the_same_values(self):
        fp = fingerprint(PRICE, [1, 1.0, 2, 2.0])
        assert fp["cardinality"] == 2
        assert fp["uniqueness"] == pytest.approx(0.5)
        assert fp["all_distinct"] is False


# ── Category / Text ──────────────────────────────────────────────────

class TestCategory:
    def test_frequencies(self):
        fp = fingerprint(CITY, ["a", "b", "a", None])
        assert fp["count"] == 4
        assert fp["nil_pct"] == pytest.approx(0.25)
        assert fp["cardinality"] == 3
        assert fp["uniqueness"] == pytest.approx(0.75)
        assert fp["entropy"] == pytest.approx(-(2 / 3 * math.log(2 / 3) + 1 / 3 * math.log(1 / 3)))
        assert fp["histogram"].category_counts() == {"a": 2, "b": 1}
        assert fp.type == CATEGORY_TYPE

    def test_no_nils(self):
        fp = fingerprint(CITY, ["x", "y"])
        assert fp["has_nils"] is False
        assert fp["nil_pct"] == 0


class TestText:
    def test_lengths(self):
        fp = fingerprint(NOTE, ["ab", "abcd", None])
        assert fp["count"] == 3
        assert fp["min"] == 2
        assert fp["max"] == 4
        assert fp["histogram"].count == 2
        assert fp.type == TEXT_TYPE


# ── DateTime ─────────────────────────────────────────────────────────

class TestDateTime:
    @pytest.fixture
    def fp(self):
        return fingerprint(CREATED, ["2017-01-01", "2017-04-15T10:00:00", None])

    def test_range(self, fp):
        assert fp["count"] == 3
        assert fp["has_nils"] is True
        assert fp["earliest"] == to_epoch(datetime(2017, 1, 1, tzinfo=UTC))
        assert fp["latest"] == to_epoch(datetime(2017, 4, 15, 10, tzinfo=UTC))
        assert fp.type == DATETIME_TYPE

    def test_cycles(self, fp):
        # 2017-01-01 was a Sunday, 2017-04-15 a Saturday.
        assert fp["histogram_day"].category_counts() == {6: 1, 7: 1}
        assert fp["histogram_hour"].category_counts() == {0: 1, 10: 1}
        assert fp["histogram_month"].category_counts() == {1: 1, 4: 1}
        assert fp["histogram_quarter"].category_counts() == {1: 1, 2: 1}

    def test_accepts_datetime_objects(self):
        fp = fingerprint(CREATED, [datetime(2020, 2, 29, 23, 59)])
        assert fp["histogram_hour"].category_counts() == {23: 1}

    def test_malformed_instant(self):
        with pytest.raises(ValueError):
            fingerprint(CREATED, ["2017-01-01", "yesterday-ish"])


# ── Pairs ────────────────────────────────────────────────────────────

class TestNumNum:
    def test_linear_relationship(self):
        fields = (Field("x", "type/Integer"), Field("y", "type/Float"))
        fp = fingerprint(fields, [(1, 2), (2, 4), (3, 6), (None, 7)])
        offset, slope = fp["linear_regression"]
        assert slope == pytest.approx(2.0)
        assert offset == pytest.approx(0.0)
        assert fp["correlation"] == pytest.approx(1.0)
        assert fp["covariance"] == pytest.approx(2.0)
        assert fp.type == (NUM, NUM)
        assert fp.field == fields

    def test_decimal_and_non_finite_pairs(self):
        fields = (Field("qty", "type/Integer"), Field("amount", "type/Decimal"))
        pairs = [(1, Decimal("2.0")), (2, Decimal("4.0")), (3, Decimal("6.0")), (4, float("nan"))]
        fp = fingerprint(fields, pairs)
        assert fp["linear_regression"][1] == pytest.approx(2.0)
        assert fp["correlation"] == pytest.approx(1.0)
        assert fp["covariance"] == pytest.approx(2.0)


class TestDateTimeNum:
    fields = (CREATED, PRICE)

    def _monthly(self, n, skip=()):
        return [(_month(i), 100 + 10 * i) for i in range(n) if i not in skip]

    def test_month_scale_growth(self):
        fp = fingerprint(self.fields, self._monthly(13), ProfilingOptions(scale=Scale.MONTH))
        assert fp["scale"] is Scale.MONTH
        assert fp["MoM"] == pytest.approx(10 / 210)
        assert fp["MoM_previous"] == pytest.approx(10 / 200)
        assert fp["YoY"] == pytest.approx(1.2)
        assert fp["YoY_previous"] is None
        assert fp.type == (DATETIME_TYPE, NUM)

    def test_gaps_are_filled(self):
        fp = fingerprint(self.fields, self._monthly(13, skip={5}), ProfilingOptions(scale="month"))
        series = fp["series"]
        assert len(series) == 13
        assert series[5] == (to_epoch(datetime(2017, 6, 1, tzinfo=UTC)), 0)
        assert fp["linear_regression"] is not None

    def test_nil_instants_are_dropped(self):
        points = self._monthly(3) + [(None, 999)]
        fp = fingerprint(self.fields, points, ProfilingOptions(scale=Scale.MONTH))
        assert [y for _, y in fp["series"]] == [100, 110, 120]

    def test_decimal_measure(self):
        points = [(_month(i), Decimal(100 + 10 * i)) for i in range(13)]
        fp = fingerprint(self.fields, points, ProfilingOptions(scale=Scale.MONTH))
        assert fp["MoM"] == pytest.approx(10 / 210)
        assert fp["linear_regression"] is not None
        assert all(isinstance(y, float) for _, y in fp["series"])

    def test_non_finite_measure_is_missing(self):
        points = self._monthly(3) + [(_month(3), math.inf)]
        fp = fingerprint(self.fields, points, ProfilingOptions(scale=Scale.MONTH))
        assert fp["series"][-1][1] is None
        assert fp["MoM"] is None
        assert fp["MoM_previous"] == pytest.approx(10 / 110)

    def test_raw_scale(self):
        fp = fingerprint(self.fields, self._monthly(4, skip={1}))
        assert fp["scale"] is Scale.RAW
        assert len(fp["series"]) == 3
        assert "MoM" not in fp
        assert "seasonal_decomposition" not in fp

    def test_decomposition_needs_unbounded_budget(self):
        points = self._monthly(36)
        linear = fingerprint(self.fields, points, ProfilingOptions(scale=Scale.MONTH))
        assert "seasonal_decomposition" not in linear

        unbounded = ProfilingOptions(
            scale=Scale.MONTH, max_cost=MaxCost(computation=ComputationCost.UNBOUNDED)
        )
        fp = fingerprint(self.fields, points, unbounded)
        decomposition = fp["seasonal_decomposition"]
        assert set(decomposition) == {"trend", "seasonal", "remainder"}
        assert len(decomposition["trend"]) == 36

    def test_short_series_has_no_decomposition(self):
        unbounded = ProfilingOptions(
            scale=Scale.MONTH, max_cost=MaxCost(computation=ComputationCost.YOLO)
        )
        fp = fingerprint(self.fields, self._monthly(13), unbounded)
        assert "seasonal_decomposition" not in fp


# ── Default ──────────────────────────────────────────────────────────

class TestDefault:
    def test_counts_only(self):
        flag = Field("flag", "type/Boolean")
        fp = fingerprint(flag, [True, None, False])
        assert set(fp) == {"count", "nil_pct", "has_nils", "type", "field"}
        assert fp["count"] == 3
        assert fp["nil_pct"] == pytest.approx(1 / 3)
        assert fp.type == (None, ("type/Boolean", "type/*"))

    def test_unmatched_pair(self):
        fields = (NOTE, PRICE)
        fp = fingerprint(fields, [("a", 1), ("b", 2)])
        assert fp["count"] == 2
        assert fp["has_nils"] is False
