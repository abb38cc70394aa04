"""
Tests for layout persistence.
"""

import json
from pathlib import Path

import pytest

from tapboard.data.store import LayoutStore
from tapboard.diagnostics import DiagnosticKind, LayoutFormatError
from tapboard.learning.statistics import LayoutStatistics


@pytest.fixture
def descriptors(sample_records):
    return LayoutStatistics().compute(sample_records)


class TestLayoutStore:
    """Tests for LayoutStore."""

    def test_save_and_load(self, descriptors, temp_dir):
        """Test a saved layout loads back unchanged."""
        path = Path(temp_dir) / "layouts" / "layout.json"
        store = LayoutStore()
        store.save(descriptors, str(path))

        assert path.exists()
        assert store.load(str(path)) == descriptors

    def test_saved_format(self, descriptors, temp_dir):
        """Test the file is an object of camelCase descriptors keyed by character."""
        path = Path(temp_dir) / "layout.json"
        LayoutStore().save(descriptors, str(path))

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        assert set(data) == {"a", "s", "q"}
        assert data["a"]["mean"] == {"x": 22.0, "y": 102.0}
        assert data["a"]["stdDev"] == {"x": 2.0, "y": 2.0}
        assert data["a"]["sampleCount"] == 2

    def test_malformed_character_is_skipped(self, descriptors, temp_dir, diagnostics):
        """Test one bad entry does not prevent loading the others."""
        data = {key: d.to_dict() for key, d in descriptors.items()}
        del data["s"]["iqr"]
        data["q"] = "not a descriptor"
        data["ab"] = data["a"]
        path = Path(temp_dir) / "layout.json"
        path.write_text(json.dumps(data))

        loaded = LayoutStore(on_diagnostic=diagnostics).load(str(path))

        assert list(loaded) == ["a"]
        assert loaded["a"] == descriptors["a"]
        assert diagnostics.kinds() == [DiagnosticKind.PERSISTENCE_FAILURE] * 3

    def test_invalid_json(self, temp_dir):
        """Test that unparseable files raise LayoutFormatError."""
        path = Path(temp_dir) / "layout.json"
        path.write_text("{not json")
        with pytest.raises(LayoutFormatError):
            LayoutStore().load(str(path))

    def test_top_level_must_be_object(self, temp_dir):
        """Test that a JSON array is rejected."""
        path = Path(temp_dir) / "layout.json"
        path.write_text("[]")
        with pytest.raises(LayoutFormatError):
            LayoutStore().load(str(path))

    def test_non_finite_values_are_skipped(self, descriptors, temp_dir, diagnostics):
        """Test a character with NaN or Infinity fields is skipped."""
        data = {key: d.to_dict() for key, d in descriptors.items()}
        data["s"]["mean"]["x"] = float("nan")
        data["q"]["accuracy"] = float("inf")
        path = Path(temp_dir) / "layout.json"
        path.write_text(json.dumps(data))

        loaded = LayoutStore(on_diagnostic=diagnostics).load(str(path))

        assert list(loaded) == ["a"]
        assert diagnostics.kinds() == [DiagnosticKind.PERSISTENCE_FAILURE] * 2

    def test_invalid_utf8(self, temp_dir):
        """Test that undecodable bytes raise LayoutFormatError."""
        path = Path(temp_dir) / "layout.json"
        path.write_bytes(b'{"a": "\xff\xfe"}')
        with pytest.raises(LayoutFormatError):
            LayoutStore().load(str(path))

    def test_directory_path(self, temp_dir):
        """Test that a directory raises LayoutFormatError."""
        with pytest.raises(LayoutFormatError):
            LayoutStore().load(temp_dir)

    def test_save_under_regular_file(self, descriptors, temp_dir):
        """Test that an impossible output path raises IOError."""
        blocker = Path(temp_dir) / "blocker"
        blocker.write_text("")
        with pytest.raises(IOError):
            LayoutStore().save(descriptors, str(blocker / "layout.json"))

    def test_missing_file(self):
        """Test loading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            LayoutStore().load("nonexistent_layout.json")

    def test_empty_object(self, temp_dir):
        """Test an empty layout loads as no keys."""
        path = Path(temp_dir) / "layout.json"
        path.write_text("{}")
        assert LayoutStore().load(str(path)) == {}
