"""Tests for record parsing, flat-record assembly and hierarchy building."""

from __future__ import annotations

import pytest

from mindmap_explorer.core.exceptions import (
    CyclicHierarchyError,
    DuplicateIdentityError,
    MalformedHierarchyError,
)
from mindmap_explorer.core.ingest import (
    assemble_flat_records,
    build_hierarchy,
    dataset_title,
    parse_records,
)
from mindmap_explorer.core.models import NodeRecord


class TestParseRecords:
    def test_accepts_dataset_field_names(self):
        record = parse_records(
            {"name": "Root", "description": "about", "id": "r", "children": []}
        )
        assert record.label == "Root"
        assert record.annotation == "about"
        assert record.identity == "r"

    def test_accepts_canonical_field_names(self):
        record = parse_records({"label": "Root", "annotation": "about"})
        assert record.label == "Root"
        assert record.annotation == "about"

    def test_null_children_is_leaf(self):
        assert parse_records({"name": "Leaf", "children": None}).children == []

    def test_unknown_fields_ignored(self):
        record = parse_records({"name": "Root", "color": "red"})
        assert record.label == "Root"

    def test_record_passthrough(self):
        record = NodeRecord(label="x")
        assert parse_records(record) is record

    def test_missing_label_is_malformed(self):
        with pytest.raises(MalformedHierarchyError) as exc_info:
            parse_records({"children": [{"name": "orphan"}]})
        assert exc_info.value.context["errors"]

    def test_unsupported_type_is_malformed(self):
        with pytest.raises(MalformedHierarchyError):
            parse_records("not a tree")

    def test_self_referencing_mapping_is_cyclic(self):
        root = {"name": "loop", "children": []}
        root["children"].append(root)
        with pytest.raises(CyclicHierarchyError):
            parse_records(root)

    def test_shared_subtree_is_rejected(self):
        shared = {"name": "shared"}
        with pytest.raises(CyclicHierarchyError):
            parse_records({"name": "root", "children": [shared, shared]})

    def test_list_routes_to_flat_records(self):
        record = parse_records(
            [{"id": 1, "name": "Root"}, {"id": 2, "parent": 1, "name": "Child"}]
        )
        assert record.label == "Root"
        assert [c.label for c in record.children] == ["Child"]


class TestFlatRecords:
    def test_children_keep_row_order(self):
        record = assemble_flat_records(
            [
                {"id": "b", "parent_id": "root", "name": "B"},
                {"id": "root", "name": "Root"},
                {"id": "a", "parent_id": "root", "name": "A"},
                {"id": "a1", "parent": "a", "name": "A1", "description": "deep"},
            ]
        )
        assert record.identity == "root"
        assert [c.label for c in record.children] == ["B", "A"]
        assert record.children[1].children[0].annotation == "deep"

    def test_duplicate_identity(self):
        with pytest.raises(DuplicateIdentityError):
            assemble_flat_records(
                [{"id": 1, "name": "a"}, {"id": 1, "parent": 1, "name": "b"}]
            )

    def test_dangling_parent(self):
        with pytest.raises(MalformedHierarchyError) as exc_info:
            assemble_flat_records(
                [{"id": 1, "name": "a"}, {"id": 2, "parent": 7, "name": "b"}]
            )
        assert exc_info.value.context["parent"] == 7

    def test_parent_cycle(self):
        with pytest.raises(CyclicHierarchyError) as exc_info:
            assemble_flat_records(
                [
                    {"id": 1, "name": "root"},
                    {"id": 2, "parent": 3, "name": "b"},
                    {"id": 3, "parent": 2, "name": "c"},
                ]
            )
        cycle = exc_info.value.context["cycle"]
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {2, 3}

    def test_self_parent_is_a_cycle(self):
        with pytest.raises(CyclicHierarchyError):
            assemble_flat_records([{"id": 1, "name": "r"}, {"id": 2, "parent": 2, "name": "x"}])

    def test_two_roots(self):
        with pytest.raises(MalformedHierarchyError) as exc_info:
            assemble_flat_records([{"id": 1, "name": "a"}, {"id": 2, "name": "b"}])
        assert exc_info.value.context["roots"] == [1, 2]

    def test_empty_input_has_no_root(self):
        with pytest.raises(MalformedHierarchyError):
            assemble_flat_records([])

    def test_invalid_row(self):
        with pytest.raises(MalformedHierarchyError):
            assemble_flat_records([{"name": "no id"}])


class TestBuildHierarchy:
    def test_fresh_identities_in_preorder(self, taxes):
        assert [n.label for n in taxes.descendants()] == [
            "Taxes",
            "Income Tax",
            "Federal",
            "Cantonal",
            "Zurich",
            "VAT",
            "Standard Rate",
            "Reduced Rate",
        ]
        assert [n.identity for n in taxes.descendants()] == list(range(1, 9))

    def test_identity_hints_kept_and_skipped_by_fresh_ids(self):
        hierarchy = build_hierarchy(
            parse_records(
                {
                    "name": "root",
                    "children": [{"name": "a", "id": 1}, {"name": "b"}, {"name": "c", "id": "c"}],
                }
            )
        )
        by_label = {n.label: n.identity for n in hierarchy}
        assert by_label == {"root": 2, "a": 1, "b": 3, "c": "c"}

    def test_duplicate_hint_rejected(self):
        with pytest.raises(DuplicateIdentityError):
            build_hierarchy(
                parse_records(
                    {"name": "root", "children": [{"name": "a", "id": 5}, {"name": "b", "id": 5}]}
                )
            )

    def test_shared_record_object_rejected(self):
        shared = NodeRecord(label="shared")
        root = NodeRecord(label="root", children=[shared, shared])
        with pytest.raises(CyclicHierarchyError):
            build_hierarchy(root)

    def test_parent_links_and_depth(self, taxes):
        assert taxes[5].parent == 4
        assert taxes[5].depth == 3
        assert taxes.root.parent is None

    def test_everything_starts_expanded(self, taxes):
        assert not any(n.is_collapsed for n in taxes)

    def test_palette_cycles_over_first_generation(self):
        data = {"name": "r", "children": [{"name": str(i)} for i in range(3)]}
        hierarchy = build_hierarchy(
            parse_records(data), palette=("#111111", "#222222"), root_color="#000000"
        )
        assert hierarchy.root.branch_color == "#000000"
        assert [hierarchy[c].branch_color for c in hierarchy.root.children] == [
            "#111111",
            "#222222",
            "#111111",
        ]

    def test_single_node(self):
        hierarchy = build_hierarchy(parse_records({"name": "alone"}))
        assert len(hierarchy) == 1
        assert hierarchy.root.is_leaf


class TestDeepInput:
    def test_deep_chain_does_not_recurse(self):
        rows = [{"id": 0, "name": "n0"}] + [
            {"id": i, "parent": i - 1, "name": f"n{i}"} for i in range(1, 3000)
        ]
        hierarchy = build_hierarchy(assemble_flat_records(rows))
        assert len(hierarchy) == 3000
        assert hierarchy[2999].depth == 2999


def test_dataset_title():
    assert dataset_title("Steuern_in_der_Schweiz") == "Steuern in der Schweiz"
