"""
Tests for path addressing of nested form records.
"""

import pytest

from smeprofile.paths import get_path, iter_string_leaves, set_path, split_path


class TestSplitPath:
    """Test path parsing."""

    def test_dots_and_indices(self):
        """Test splitting dotted keys and list indices."""
        assert split_path("a.b[0].c") == ["a", "b", "0", "c"]

    def test_nested_indices(self):
        """Test consecutive indices."""
        assert split_path("a[1][2]") == ["a", "1", "2"]

    def test_empty_path(self):
        """Test an empty path has no parts."""
        assert split_path("") == []


class TestGetPath:
    """Test reading values by path."""

    def test_reads_nested_value(self):
        """Test reading through dicts and lists."""
        data = {"a": {"b": [{"c": "x"}]}}
        assert get_path(data, "a.b[0].c") == "x"

    def test_missing_key_returns_default(self):
        """Test missing keys return the default."""
        assert get_path({"a": {}}, "a.b.c") is None
        assert get_path({"a": {}}, "a.b", default="n/a") == "n/a"

    def test_index_out_of_range(self):
        """Test an out-of-range index returns None."""
        assert get_path({"a": ["x"]}, "a[3]") is None

    def test_descending_into_scalar(self):
        """Test a path through a string returns None."""
        assert get_path({"a": "text"}, "a.b") is None


class TestSetPath:
    """Test writing values by path."""

    def test_overwrites_existing_leaf(self):
        """Test overwriting an existing value."""
        data = {"a": {"b": "old"}}
        set_path(data, "a.b", "new")
        assert data == {"a": {"b": "new"}}

    def test_creates_missing_dicts(self):
        """Test intermediate dicts are created."""
        data = {}
        set_path(data, "a.b.c", 1)
        assert data == {"a": {"b": {"c": 1}}}

    def test_creates_and_pads_lists(self):
        """Test lists are created and padded with None."""
        data = {}
        set_path(data, "a.items[2]", "x")
        assert data == {"a": {"items": [None, None, "x"]}}

    def test_writes_into_list_of_dicts(self):
        """Test writing inside a list element."""
        data = {"seasonality": [{"category": "Festivals"}]}
        set_path(data, "seasonality[0].category", "Holidays")
        assert data["seasonality"][0]["category"] == "Holidays"

    def test_empty_path_raises(self):
        """Test an empty path is rejected."""
        with pytest.raises(ValueError):
            set_path({}, "", "x")

    def test_scalar_intermediate_raises(self):
        """Test writing through a string is rejected."""
        with pytest.raises(TypeError):
            set_path({"a": "text"}, "a.b", "x")


class TestIterStringLeaves:
    """Test enumeration of string leaves."""

    def test_walks_dicts_and_lists(self):
        """Test leaves are listed in document order."""
        data = {"a": {"b": ["x", "y"]}, "c": "z"}
        assert list(iter_string_leaves(data)) == [("a.b[0]", "x"), ("a.b[1]", "y"), ("c", "z")]

    def test_skips_blank_and_non_strings(self):
        """Test blank strings and non-strings are skipped."""
        data = {"a": "", "b": "   ", "c": 3, "d": None, "e": True, "f": "kept"}
        assert list(iter_string_leaves(data)) == [("f", "kept")]

    def test_nested_lists(self):
        """Test lists inside lists."""
        assert list(iter_string_leaves({"a": [["x"]]})) == [("a[0][0]", "x")]

    def test_paths_round_trip_through_set_path(self):
        """Test listed paths can be written back."""
        data = {"a": [{"b": "x"}, {"b": "y"}]}
        for path, text in list(iter_string_leaves(data)):
            set_path(data, path, text.upper())
        assert data == {"a": [{"b": "X"}, {"b": "Y"}]}
