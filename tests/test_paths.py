"""Unit tests for the dot-path accessor.

Tests cover:
- Reads through mappings, sequences and plain objects
- Missing segments and defaults
- Path splitting and joining
- Writes creating intermediate dicts and lists
- Invalid paths
"""

from dataclasses import dataclass

import pytest

from formrules.errors import InvalidPathError
from formrules.paths import get_path, is_sequence, join_path, set_path, split_path


@dataclass
class Address:
    post_code: int
    city: str = ""


class TestGetPath:
    """Test reading values by dot-path."""

    def test_top_level_key(self):
        """Should read a top-level mapping key."""
        assert get_path({"name": "John"}, "name") == "John"

    def test_nested_key(self):
        """Should walk nested mappings."""
        source = {"address": {"post_code": 4890}}
        assert get_path(source, "address.post_code") == 4890

    def test_sequence_index(self):
        """Numeric segments should index sequences."""
        source = {"subs": [{"bread": "grains"}, {"bread": "wholemeal"}]}
        assert get_path(source, "subs.1.bread") == "wholemeal"

    def test_tuple_index(self):
        """Tuples are sequences too."""
        assert get_path({"pair": ("a", "b")}, "pair.0") == "a"

    def test_object_attribute(self):
        """Plain objects should be read by attribute."""
        source = {"address": Address(post_code=1234)}
        assert get_path(source, "address.post_code") == 1234

    def test_int_mapping_key(self):
        """Numeric segments should also match integer mapping keys."""
        assert get_path({"codes": {3: "c"}}, "codes.3") == "c"

    def test_missing_key_returns_none(self):
        """Missing keys should resolve to None."""
        assert get_path({"name": "John"}, "age") is None

    def test_missing_intermediate_returns_default(self):
        """A missing intermediate should resolve to the default."""
        assert get_path({}, "address.post_code", default="n/a") == "n/a"

    def test_out_of_range_index(self):
        """Out-of-range indices should resolve to None."""
        assert get_path({"subs": []}, "subs.0.bread") is None

    def test_non_numeric_sequence_segment(self):
        """Non-numeric segments on a sequence resolve to None."""
        assert get_path({"subs": [1, 2]}, "subs.first") is None

    def test_string_is_not_traversed(self):
        """Strings should not be indexed by numeric segments."""
        assert get_path({"name": "John"}, "name.0") is None

    def test_none_value_is_returned(self):
        """An explicit None value is returned as is."""
        assert get_path({"name": None}, "name", default="x") is None

    def test_empty_path_returns_default(self):
        """A path without segments resolves to the default."""
        assert get_path({"": 1}, "") is None

    def test_non_string_path_raises(self):
        """Non-string paths are a caller error."""
        with pytest.raises(InvalidPathError):
            get_path({}, 3)


class TestSplitAndJoin:
    """Test path splitting and joining."""

    def test_split_drops_empty_segments(self):
        """Empty segments should be dropped."""
        assert split_path(".a..b.") == ["a", "b"]

    def test_join_multi_segment_parts(self):
        """Multi-segment parts should be flattened."""
        assert join_path("subs.0", "bread.type") == "subs.0.bread.type"

    def test_join_with_empty_base(self):
        """An empty base should not produce a leading dot."""
        assert join_path("", "name") == "name"

    def test_is_sequence(self):
        """Strings and bytes are not sequences for fan-out purposes."""
        assert is_sequence([1]) is True
        assert is_sequence((1,)) is True
        assert is_sequence("abc") is False
        assert is_sequence(b"abc") is False
        assert is_sequence({"a": 1}) is False


class TestSetPath:
    """Test writing values by dot-path."""

    def test_set_top_level(self):
        """Should set a top-level key."""
        target = {}
        set_path(target, "name", "John")
        assert target == {"name": "John"}

    def test_creates_intermediate_dicts(self):
        """Missing intermediates should be created as dicts."""
        target = {}
        set_path(target, "address.post_code", 4890)
        assert target == {"address": {"post_code": 4890}}

    def test_creates_intermediate_lists(self):
        """A numeric next segment should create a padded list."""
        target = {}
        set_path(target, "subs.1.bread", "rye")
        assert target == {"subs": [None, {"bread": "rye"}]}

    def test_fills_existing_list_slot(self):
        """A None slot in a list should be replaced by a container."""
        target = {"subs": [None, {"bread": "rye"}]}
        set_path(target, "subs.0.bread", "wholemeal")
        assert target == {"subs": [{"bread": "wholemeal"}, {"bread": "rye"}]}

    def test_sets_object_attribute(self):
        """Plain objects should be written by attribute."""
        address = Address(post_code=1)
        set_path({"address": address}, "address.city", "Oslo")
        assert address.city == "Oslo"

    def test_returns_root(self):
        """set_path returns the root object."""
        target = {}
        assert set_path(target, "a", 1) is target

    def test_cannot_write_through_scalar(self):
        """Writing below a scalar value should raise InvalidPathError."""
        with pytest.raises(InvalidPathError):
            set_path({"name": "John"}, "name.first", "J")

    def test_non_numeric_list_segment(self):
        """A non-numeric segment cannot index a list."""
        with pytest.raises(InvalidPathError):
            set_path({"subs": []}, "subs.first", 1)

    def test_empty_path_raises(self):
        """An empty path cannot be written."""
        with pytest.raises(InvalidPathError):
            set_path({}, "", 1)
