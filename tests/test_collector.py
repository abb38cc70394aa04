"""
Tests for tap collection.
"""

import pytest

from tapboard.learning.collector import SampleCollector, TapRecord


class TestSampleCollector:
    """Tests for SampleCollector."""

    def test_record_tags_iteration(self):
        """Test that records carry the collector's current iteration."""
        collector = SampleCollector()
        first = collector.record("a", (1, 2))
        collector.set_iteration(2)
        second = collector.record("a", (3, 4))

        assert first == TapRecord("a", (1.0, 2.0), 1)
        assert second.iteration == 2
        assert [r.position for r in collector.records["a"]] == [(1.0, 2.0), (3.0, 4.0)]

    def test_records_keep_insertion_order(self):
        """Test per-character and character order."""
        collector = SampleCollector()
        for char, pos in [("b", (0, 0)), ("a", (1, 1)), ("b", (2, 2))]:
            collector.record(char, pos)

        assert list(collector.records) == ["b", "a"]
        assert len(collector.records["b"]) == 2
        assert len(collector) == 3

    def test_records_view_is_read_only(self):
        """Test that the records mapping cannot be modified."""
        collector = SampleCollector()
        collector.record("a", (0, 0))
        with pytest.raises(TypeError):
            collector.records["b"] = []

    def test_reset(self):
        """Test that reset clears taps and iteration."""
        collector = SampleCollector()
        collector.set_iteration(3)
        collector.record("a", (0, 0))
        collector.reset()

        assert len(collector) == 0
        assert collector.iteration == 1
        assert dict(collector.records) == {}
