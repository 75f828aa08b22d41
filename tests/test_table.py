"""Tests for ImplementorsTable."""

import pytest

from doc_implementors.entry import ImplementorEntry
from doc_implementors.table import ImplementorsTable


class TestImplementorsTable:

    def test_preserves_key_and_entry_order(self):
        table = ImplementorsTable({"b": ["2", "1"], "a": ["3"]})

        assert list(table) == ["b", "a"]
        assert [e.markup for e in table["b"]] == ["2", "1"]

    def test_entries_are_wrapped(self):
        table = ImplementorsTable({"a": ["impl X for Y"]})
        assert isinstance(table["a"][0], ImplementorEntry)

    def test_from_pairs(self):
        table = ImplementorsTable([("a", ["x"]), ("b", [])])
        assert table.to_dict() == {"a": ["x"], "b": []}

    def test_empty(self):
        table = ImplementorsTable()
        assert len(table) == 0
        assert not table
        assert table.entry_count == 0

    def test_equality_includes_order(self):
        assert ImplementorsTable({"a": ["x", "y"]}) == ImplementorsTable({"a": ["x", "y"]})
        assert ImplementorsTable({"a": ["x", "y"]}) != ImplementorsTable({"a": ["y", "x"]})

    def test_equal_to_plain_mapping(self):
        assert ImplementorsTable({"a": ["x"]}) == {"a": ["x"]}

    def test_rejects_single_string_entries(self):
        with pytest.raises(TypeError):
            ImplementorsTable({"a": "impl X for Y"})

    def test_rejects_non_string_key(self):
        with pytest.raises(TypeError):
            ImplementorsTable({1: ["x"]})

    def test_read_only(self):
        table = ImplementorsTable({"a": ["x"]})
        with pytest.raises(TypeError):
            table["b"] = ["y"]

    def test_entry_count(self, couchdb_table):
        assert couchdb_table.entry_count == 2

    def test_merged_replaces_keys(self):
        first = ImplementorsTable({"a": ["x"], "b": ["y"]})
        second = ImplementorsTable({"b": ["z"], "c": ["w"]})

        merged = first.merged(second)

        assert merged.to_dict() == {"a": ["x"], "b": ["z"], "c": ["w"]}
        assert first.to_dict() == {"a": ["x"], "b": ["y"]}

    def test_describe(self, couchdb_table):
        described = couchdb_table.describe()
        assert [e["type_name"] for e in described["couchdb"]] == ["Database", "Revision"]

    def test_repr(self, couchdb_table):
        assert repr(couchdb_table) == "ImplementorsTable({'couchdb': 2})"
