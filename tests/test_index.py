"""Tests for TraitIndex."""

from pathlib import Path

import pytest

from doc_implementors.errors import ErrorCategory, FragmentReadError, UnknownTraitError
from doc_implementors.index import TraitIndex, trait_path_for
from doc_implementors.registry import MergePolicy
from doc_implementors.table import ImplementorsTable


class TestTraitPathFor:

    def test_nested_path(self):
        root = Path("doc/implementors")
        fragment = root / "core" / "cmp" / "trait.PartialOrd.js"
        assert trait_path_for(fragment, root) == "core::cmp::PartialOrd"

    def test_crate_level_trait(self):
        root = Path("doc/implementors")
        assert trait_path_for(root / "mycrate" / "trait.Thing.js", root) == "mycrate::Thing"


class TestScan:

    @pytest.fixture
    def index(self, doc_root):
        return TraitIndex.scan(doc_root)

    def test_finds_traits(self, index):
        assert index.traits() == ["core::clone::Clone", "core::cmp::PartialOrd"]

    def test_accepts_implementors_dir(self, doc_root):
        index = TraitIndex.scan(doc_root / "implementors")
        assert len(index.traits()) == 2

    def test_records_sources(self, index, partial_ord_path):
        assert index.sources["core::cmp::PartialOrd"] == partial_ord_path

    def test_namespaces(self, index):
        assert index.namespaces() == ["couchdb", "serde_json"]

    def test_stats(self, index):
        assert index.stats() == {"traits": 2, "namespaces": 2, "entries": 14, "errors": 0}

    def test_missing_root(self, tmp_path):
        index = TraitIndex.scan(tmp_path / "nowhere")
        assert index.traits() == []
        assert index.stats()["traits"] == 0

    def test_missing_root_strict(self, tmp_path):
        with pytest.raises(FragmentReadError) as exc_info:
            TraitIndex.scan(tmp_path / "nowhere", strict=True)

        assert exc_info.value.category == ErrorCategory.SOURCE
        assert exc_info.value.context.path == str(tmp_path / "nowhere" / "implementors")

    def test_policy_passed_to_registries(self, doc_root):
        index = TraitIndex.scan(doc_root, policy=MergePolicy.APPEND)
        assert all(r.policy is MergePolicy.APPEND for r in index.registries.values())

    def test_bad_fragment_skipped(self, broken_doc_root):
        index = TraitIndex.scan(broken_doc_root)

        assert index.traits() == ["core::cmp::PartialOrd"]
        assert len(index.errors) == 1
        error = index.errors[0]
        assert error["trait"] == "core::fmt::Debug"
        assert error["category"] == "PARSE"
        assert error["path"].endswith("trait.Debug.js")


class TestQueries:

    @pytest.fixture
    def index(self, doc_root):
        return TraitIndex.scan(doc_root)

    def test_implementors_of_full_path(self, index):
        entries = index.implementors_of("core::cmp::PartialOrd")

        assert len(entries) == 11
        assert entries[0].type_name == "Database"

    def test_implementors_of_short_name(self, index):
        names = [e.type_name for e in index.implementors_of("Clone")]
        assert names == ["Revision", "DocumentId", "Value"]

    def test_implementors_of_namespace(self, index):
        names = [e.type_name for e in index.implementors_of("Clone", namespace="serde_json")]
        assert names == ["Value"]

    def test_implementors_of_unknown_namespace(self, index):
        assert index.implementors_of("Clone", namespace="nope") == []

    def test_unknown_trait(self, index):
        with pytest.raises(UnknownTraitError) as exc_info:
            index.implementors_of("core::fmt::Debug")
        assert exc_info.value.context.trait == "core::fmt::Debug"

    def test_ambiguous_short_name(self):
        index = TraitIndex()
        index.add_table("a::Marker", ImplementorsTable({"x": ["impl Marker for T"]}))
        index.add_table("b::Marker", ImplementorsTable({"x": ["impl Marker for U"]}))

        with pytest.raises(UnknownTraitError) as exc_info:
            index.resolve_trait("Marker")

        assert "ambiguous" in str(exc_info.value)
        assert exc_info.value.context.metadata["candidates"] == ["a::Marker", "b::Marker"]

    def test_traits_for_type_name(self, index):
        assert index.traits_for("Revision") == ["core::clone::Clone", "core::cmp::PartialOrd"]

    def test_traits_for_type_path(self, index):
        assert index.traits_for("serde_json::Value") == ["core::clone::Clone"]

    def test_traits_for_unknown_type(self, index):
        assert index.traits_for("Nothing") == []

    def test_to_dict(self, index):
        data = index.to_dict()

        assert set(data["traits"]) == {"core::clone::Clone", "core::cmp::PartialOrd"}
        clone = data["traits"]["core::clone::Clone"]
        assert clone["source"].endswith("trait.Clone.js")
        assert list(clone["implementors"]) == ["couchdb", "serde_json"]
        assert data["stats"]["entries"] == 14


class TestAddTable:

    def test_add_table_registers_directly(self, couchdb_table):
        index = TraitIndex()
        index.add_table("core::cmp::PartialOrd", couchdb_table)

        assert [e.type_name for e in index.implementors_of("PartialOrd")] == ["Database", "Revision"]
        assert "core::cmp::PartialOrd" not in index.sources
