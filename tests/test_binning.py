"""Tests for fingerprinting.binning — bin niceification and rendering."""

import dataclasses
import math

import pytest

from fingerprinting import binning
from fingerprinting.aggregators.base import reduce_with
from fingerprinting.binning import (
    MAX_STEPS,
    PLEASING_NUMBERS,
    BinnedRange,
    BinStrategy,
    calculate_bin_width,
    entropy,
    equidistant_bins,
    histogram_to_dataset,
    nicer_bin_width,
    nicer_breakout,
)
from fingerprinting.models import Field
from fingerprinting.sketches.histogram import categorical_histogram, histogram
from fingerprinting.utils.numeric import order_of_magnitude


def _is_pleasing(width: float) -> bool:
    mantissa = width / 10 ** order_of_magnitude(width)
    return any(math.isclose(mantissa, p) for p in PLEASING_NUMBERS)


class TestNicerBinWidth:
    def test_rounds_up_to_pleasing(self):
        assert nicer_bin_width(0, 100, 7) == pytest.approx(20)
        assert nicer_bin_width(0, 1, 4) == pytest.approx(0.25)
        assert nicer_bin_width(0, 30, 10) == pytest.approx(3)


class TestNicerBreakout:
    @pytest.mark.parametrize(
        "lo, hi, num_bins",
        [(0, 100, 7), (1, 5, 2), (-3.7, 12.2, 9), (0.001, 0.0173, 5), (1000, 98765, 20)],
    )
    def test_width_is_pleasing_and_not_narrower(self, lo, hi, num_bins):
        raw = calculate_bin_width(lo, hi, num_bins)
        result = nicer_breakout(BinnedRange(lo, hi, raw, num_bins, BinStrategy.NUM_BINS))
        assert _is_pleasing(result.bin_width)
        assert result.bin_width >= raw
        assert result.min_value <= lo
        assert result.max_value >= hi
        assert result.num_bins == num_bins

    def test_fixed_point(self):
        result = nicer_breakout(BinnedRange(1, 5, 2, 2, BinStrategy.NUM_BINS))
        assert result == BinnedRange(0, 6, 3, 2, BinStrategy.NUM_BINS)

    def test_by_width_recomputes_bin_count(self):
        result = nicer_breakout(BinnedRange(3, 17, 5, 0, BinStrategy.BIN_WIDTH))
        assert (result.min_value, result.max_value) == (0, 20)
        assert result.bin_width == 5
        assert result.num_bins == 4

    def test_gives_up_after_max_steps(self, monkeypatch):
        monkeypatch.setattr(
            binning,
            "_nicer_step",
            lambda b: dataclasses.replace(b, num_bins=b.num_bins + 1),
        )
        result = nicer_breakout(BinnedRange(0, 1, 1, 0, BinStrategy.NUM_BINS))
        assert result.num_bins == MAX_STEPS


class TestEquidistantBins:
    def test_numeric(self):
        h = reduce_with(histogram(), [1, 2, 3, 4, 5, None])
        bins = equidistant_bins(h)
        assert [start for start, _ in bins] == [0, 3]
        assert [count for _, count in bins] == pytest.approx([2, 3])

    def test_counts_cover_population(self):
        values = [x * 0.37 for x in range(500)]
        h = reduce_with(histogram(), values)
        bins = equidistant_bins(h)
        assert sum(c for _, c in bins) == pytest.approx(500)
        widths = {round(b[0] - a[0], 9) for a, b in zip(bins, bins[1:])}
        assert len(widths) == 1

    def test_constant_column(self):
        h = reduce_with(histogram(), [7, 7, 7])
        assert equidistant_bins(h) == [(7, 3)]

    def test_zero_iqr_still_bins(self):
        h = reduce_with(histogram(), [1] * 20 + [50])
        bins = equidistant_bins(h)
        assert len(bins) > 1
        assert sum(c for _, c in bins) == pytest.approx(21)

    def test_categorical(self):
        h = reduce_with(categorical_histogram(), ["a", "b", "a"])
        assert equidistant_bins(h) == [("a", 2), ("b", 1)]

    def test_empty(self):
        assert equidistant_bins(reduce_with(histogram(), [None])) == []


class TestEntropy:
    def test_uniform_categories(self):
        h = reduce_with(categorical_histogram(), ["a", "b", "c", "d"])
        assert entropy(h) == pytest.approx(math.log(4))

    def test_single_category(self):
        h = reduce_with(categorical_histogram(), ["a", "a"])
        assert entropy(h) == pytest.approx(0.0)

    def test_empty(self):
        assert entropy(reduce_with(histogram(), [])) == 0.0


class TestHistogramToDataset:
    def test_shape_and_shares(self):
        field = Field("price", "type/Float")
        h = reduce_with(histogram(), [1, 2, 3, 4, 5, None])
        dataset = histogram_to_dataset(field, h)
        assert dataset["columns"] == ["price", "SHARE"]
        assert dataset["cols"][0] == {"name": "price", "base_type": "type/Float"}
        assert sum(share for _, share in dataset["rows"]) == pytest.approx(1.0)
        assert dataset["rows"][0] == [0, pytest.approx(0.4)]

    def test_key_fn(self):
        h = reduce_with(categorical_histogram(), [1, 2, 2])
        dataset = histogram_to_dataset({"name": "n"}, h, key_fn=str)
        assert dataset["rows"] == [["1", pytest.approx(1 / 3)], ["2", pytest.approx(2 / 3)]]
