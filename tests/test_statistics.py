"""
Tests for layout statistics.
"""

import math

import numpy as np
import pytest

from tapboard.diagnostics import DiagnosticKind
from tapboard.learning.collector import TapRecord
from tapboard.learning.statistics import (
    KeyDescriptor,
    LayoutStatistics,
    Size,
    Vec2,
    group_keys_into_rows,
)


def taps(char, positions):
    return [TapRecord(char, (float(x), float(y)), 1) for x, y in positions]


class TestDescribe:
    """Tests for LayoutStatistics.describe."""

    def test_single_sample(self):
        """Test a key tapped exactly once."""
        descriptor = LayoutStatistics().describe(taps("a", [(10, 20)]))

        assert descriptor.sample_count == 1
        assert descriptor.mean == Vec2(10.0, 20.0)
        assert descriptor.median == descriptor.mean
        assert descriptor.min == descriptor.max == descriptor.mean
        assert descriptor.variance == Vec2(0.0, 0.0)
        assert descriptor.std_dev == Vec2(0.0, 0.0)
        assert descriptor.iqr == Vec2(0.0, 0.0)
        assert descriptor.confidence_bounds == Vec2(0.0, 0.0)
        assert descriptor.suggested_size == Size(20.0, 36.0)
        assert descriptor.accuracy == 100.0

    def test_known_values(self):
        """Test descriptor values for an even sample count."""
        descriptor = LayoutStatistics().describe(taps("a", [(1, 10), (2, 10), (3, 10), (4, 10)]))

        assert descriptor.mean.x == pytest.approx(2.5)
        assert descriptor.median.x == pytest.approx(2.5)
        assert descriptor.variance.x == pytest.approx(1.25)
        assert descriptor.std_dev.x == pytest.approx(math.sqrt(1.25))
        assert descriptor.min.x == 1.0
        assert descriptor.max.x == 4.0
        assert descriptor.spread.x == 3.0
        assert descriptor.iqr.x == 2.0
        assert descriptor.confidence_bounds.x == pytest.approx(2 * math.sqrt(1.25))
        # Only the two inner taps are within one standard deviation
        assert descriptor.accuracy == pytest.approx(50.0)

    def test_odd_median_and_iqr(self):
        """Test the middle element is the median for an odd count."""
        descriptor = LayoutStatistics().describe(taps("a", [(5, 0), (1, 0), (3, 0)]))

        assert descriptor.median.x == 3.0
        assert descriptor.iqr.x == 4.0

    def test_suggested_size_grows_with_spread(self):
        """Test suggested size is twice the confidence bound once above the floor."""
        descriptor = LayoutStatistics().describe(taps("a", [(0, 0), (100, 0)]))

        assert descriptor.std_dev.x == pytest.approx(50.0)
        assert descriptor.suggested_size.width == pytest.approx(200.0)
        assert descriptor.suggested_size.height == 36.0

    def test_custom_minimum_size(self):
        """Test that the configured floors are used."""
        statistics = LayoutStatistics(min_key_width=30.0, min_key_height=40.0)
        descriptor = statistics.describe(taps("a", [(0, 0)]))
        assert descriptor.suggested_size == Size(30.0, 40.0)

    def test_random_samples_invariants(self):
        """Test ordering and range invariants on random taps."""
        rng = np.random.default_rng(7)
        statistics = LayoutStatistics()
        for _ in range(20):
            n = int(rng.integers(1, 30))
            points = rng.normal(100, 15, size=(n, 2))
            descriptor = statistics.describe(taps("k", points))

            assert descriptor.sample_count == n
            assert 0.0 <= descriptor.accuracy <= 100.0
            for axis in (0, 1):
                assert descriptor.min[axis] <= descriptor.mean[axis] <= descriptor.max[axis]
                assert descriptor.min[axis] <= descriptor.median[axis] <= descriptor.max[axis]
                assert descriptor.iqr[axis] >= 0
                assert descriptor.variance[axis] >= 0
                assert descriptor.spread[axis] == pytest.approx(descriptor.max[axis] - descriptor.min[axis])
            assert descriptor.suggested_size.width >= 20.0
            assert descriptor.suggested_size.height >= 36.0

    def test_sums_in_recorded_order(self):
        """Test mean and variance add twelve taps strictly in recording order."""
        rng = np.random.default_rng(3)
        statistics = LayoutStatistics()
        for _ in range(50):
            xs = [float(v) for v in rng.uniform(0, 375, size=12)]
            descriptor = statistics.describe(taps("o", [(x, 0.0) for x in xs]))

            total = 0.0
            for x in xs:
                total += x
            mean = total / 12
            squares = 0.0
            for x in xs:
                d = x - mean
                squares += d * d

            assert descriptor.mean.x == mean
            assert descriptor.variance.x == squares / 12

    def test_empty_raises_error(self):
        """Test that describing no taps is rejected."""
        with pytest.raises(ValueError):
            LayoutStatistics().describe([])


class TestCompute:
    """Tests for LayoutStatistics.compute."""

    def test_compute_all_keys(self, sample_records):
        """Test one descriptor per tapped character."""
        descriptors = LayoutStatistics().compute(sample_records)

        assert set(descriptors) == {"a", "s", "q"}
        assert descriptors["a"].mean == Vec2(22.0, 102.0)
        assert all(d.sample_count == 2 for d in descriptors.values())

    def test_compute_is_deterministic(self, sample_records):
        """Test repeated reductions give identical results."""
        statistics = LayoutStatistics()
        assert statistics.compute(sample_records) == statistics.compute(sample_records)

    def test_skips_characters_without_taps(self):
        """Test that empty tap lists are left out."""
        descriptors = LayoutStatistics().compute({"a": taps("a", [(0, 0)]), "b": []})
        assert list(descriptors) == ["a"]

    def test_empty_input_reports_diagnostic(self, diagnostics):
        """Test that no taps yields no descriptors and a diagnostic."""
        statistics = LayoutStatistics(on_diagnostic=diagnostics)
        assert statistics.compute({}) == {}
        assert diagnostics.kinds() == [DiagnosticKind.EMPTY_INPUT]


class TestKeyDescriptorSerialization:
    """Tests for KeyDescriptor dict conversion."""

    def test_camel_case_fields(self, sample_records):
        """Test persisted field names."""
        data = LayoutStatistics().compute(sample_records)["a"].to_dict()

        assert set(data) == {
            "mean", "median", "variance", "stdDev", "min", "max", "spread", "iqr",
            "suggestedSize", "sampleCount", "accuracy", "confidenceBounds",
        }
        assert data["mean"] == {"x": 22.0, "y": 102.0}
        assert data["suggestedSize"] == {"width": 20.0, "height": 36.0}
        assert data["sampleCount"] == 2

    def test_from_dict(self, sample_records):
        """Test parsing a serialized descriptor."""
        descriptor = LayoutStatistics().compute(sample_records)["s"]
        assert KeyDescriptor.from_dict(descriptor.to_dict()) == descriptor

    def test_from_dict_missing_field(self, sample_records):
        """Test that a missing field raises KeyError."""
        data = LayoutStatistics().compute(sample_records)["s"].to_dict()
        del data["iqr"]
        with pytest.raises(KeyError):
            KeyDescriptor.from_dict(data)

    def test_from_dict_rejects_non_finite(self, sample_records):
        """Test that NaN and infinite values are rejected."""
        data = LayoutStatistics().compute(sample_records)["s"].to_dict()
        data["mean"]["x"] = float("nan")
        with pytest.raises(ValueError):
            KeyDescriptor.from_dict(data)

        data = LayoutStatistics().compute(sample_records)["s"].to_dict()
        data["suggestedSize"]["width"] = float("inf")
        with pytest.raises(ValueError):
            KeyDescriptor.from_dict(data)

    def test_from_dict_zero_samples(self, sample_records):
        """Test that a non-positive sample count is rejected."""
        data = LayoutStatistics().compute(sample_records)["s"].to_dict()
        data["sampleCount"] = 0
        with pytest.raises(ValueError):
            KeyDescriptor.from_dict(data)


class TestGroupKeysIntoRows:
    """Tests for group_keys_into_rows."""

    def test_groups_by_vertical_gap(self, sample_records):
        """Test rows are split on large y gaps and sorted by x."""
        descriptors = LayoutStatistics().compute(sample_records)
        assert group_keys_into_rows(descriptors) == [["q"], ["a", "s"]]

    def test_single_row_with_large_tolerance(self, sample_records):
        """Test that a wide tolerance keeps every key in one row."""
        descriptors = LayoutStatistics().compute(sample_records)
        assert group_keys_into_rows(descriptors, tolerance=100.0) == [["q", "a", "s"]]

    def test_empty(self):
        """Test grouping nothing."""
        assert group_keys_into_rows({}) == []
