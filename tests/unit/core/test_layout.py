"""Tests for the tidy-tree layout engine."""

from __future__ import annotations

import pytest

from mindmap_explorer.core.ingest import build_hierarchy, parse_records
from mindmap_explorer.core.layout import LayoutEngine, label_footprint
from mindmap_explorer.core.models import Point

# root → A → A1 → (x, y, z); root → B
LOPSIDED = {
    "name": "root",
    "children": [
        {"name": "A", "children": [{"name": "A1", "children": [{"name": n} for n in "xyz"]}]},
        {"name": "B"},
    ],
}


def _subtree_span(hierarchy, positions, node_id):
    ys = [positions[n.identity].y for n in hierarchy.visible_descendants(node_id)]
    return min(ys), max(ys)


def _by_label(hierarchy, positions):
    return {hierarchy[node_id].label: point for node_id, point in positions.items()}


class TestLabelFootprint:
    def test_short_label_uses_base_height(self):
        assert label_footprint("VAT") == 60

    def test_long_label_grows_by_line(self):
        assert label_footprint("x" * 28) == 60
        assert label_footprint("x" * 100) == 92

    def test_custom_base_height(self):
        assert label_footprint("VAT", base_height=80) == 80


class TestConstruction:
    @pytest.mark.parametrize(
        "kwargs",
        [{"sibling_spacing": 0}, {"level_spacing": -1}, {"orientation": "diagonal"}],
    )
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            LayoutEngine(**kwargs)


class TestCompute:
    def test_leaves_spread_around_parent(self):
        hierarchy = build_hierarchy(
            parse_records({"name": "r", "children": [{"name": n} for n in "abc"]})
        )
        positions = LayoutEngine(sibling_spacing=100, level_spacing=300).compute(hierarchy)
        assert positions == {
            1: Point(0, 0),
            2: Point(300, -100),
            3: Point(300, 0),
            4: Point(300, 100),
        }

    def test_main_axis_is_depth_times_level_spacing(self, four_levels):
        engine = LayoutEngine(sibling_spacing=40, level_spacing=250)
        positions = engine.compute(four_levels)
        for node_id, point in positions.items():
            assert point.x == four_levels[node_id].depth * 250

    def test_parent_at_midpoint_of_first_and_last_child(self, four_levels):
        positions = LayoutEngine().compute(four_levels)
        for node in four_levels.visible_descendants():
            children = node.visible_children
            if children:
                first, last = positions[children[0]], positions[children[-1]]
                assert positions[node.identity].y == pytest.approx((first.y + last.y) / 2)

    def test_siblings_keep_input_order(self, four_levels):
        positions = LayoutEngine().compute(four_levels)
        for node in four_levels.visible_descendants():
            ys = [positions[c].y for c in node.visible_children]
            assert ys == sorted(ys)

    def test_sibling_subtrees_never_overlap(self, four_levels):
        engine = LayoutEngine(sibling_spacing=40)
        positions = engine.compute(four_levels)
        for node in four_levels.visible_descendants():
            spans = [
                _subtree_span(four_levels, positions, c) for c in node.visible_children
            ]
            for (_, previous_high), (next_low, _) in zip(spans, spans[1:]):
                assert next_low - previous_high >= 40

    def test_default_separates_whole_subtree_spans(self):
        hierarchy = build_hierarchy(parse_records(LOPSIDED))
        positions = _by_label(
            hierarchy, LayoutEngine(sibling_spacing=50, level_spacing=100).compute(hierarchy)
        )
        assert positions["A"] == Point(100, -50)
        assert positions["B"] == Point(100, 50)
        assert [positions[n].y for n in "xyz"] == [-100, -50, 0]

    def test_compact_separates_shared_depths_only(self):
        hierarchy = build_hierarchy(parse_records(LOPSIDED))
        engine = LayoutEngine(sibling_spacing=50, level_spacing=100, compact=True)
        positions = _by_label(hierarchy, engine.compute(hierarchy))
        assert positions["A"] == Point(100, -25)
        assert positions["B"] == Point(100, 25)
        assert [positions[n].y for n in "xyz"] == [-75, -25, 25]

    def test_footprint_adds_node_extent_to_gap(self):
        hierarchy = build_hierarchy(
            parse_records({"name": "r", "children": [{"name": "a"}, {"name": "b"}]})
        )
        engine = LayoutEngine(
            sibling_spacing=40, footprint=lambda node: label_footprint(node.label)
        )
        positions = engine.compute(hierarchy)
        assert positions[2].y == -50
        assert positions[3].y == 50

    def test_vertical_orientation_swaps_axes(self, four_levels):
        horizontal = LayoutEngine().compute(four_levels)
        vertical = LayoutEngine(orientation="vertical").compute(four_levels)
        for node_id, point in horizontal.items():
            assert vertical[node_id] == Point(point.y, point.x)

    def test_deterministic(self, four_levels):
        engine = LayoutEngine()
        assert engine.compute(four_levels) == engine.compute(four_levels)

    def test_only_visible_nodes_are_positioned(self, taxes):
        taxes.collapse_all()
        positions = LayoutEngine().compute(taxes)
        assert set(positions) == {1, 2, 6}

    def test_collapse_pulls_siblings_together(self, four_levels):
        engine = LayoutEngine()
        before = engine.compute(four_levels)
        four_levels.toggle(2)  # A
        after = engine.compute(four_levels)
        gap_before = before[7].y - before[2].y  # A to B
        gap_after = after[7].y - after[2].y
        assert gap_after < gap_before

    def test_single_node(self):
        hierarchy = build_hierarchy(parse_records({"name": "alone"}))
        assert LayoutEngine().compute(hierarchy) == {1: Point(0, 0)}


class TestRun:
    def test_first_run_enters_from_origin(self, taxes):
        taxes.collapse_all()
        LayoutEngine().run(taxes, origin=Point(5, 5))
        for node_id in (1, 2, 6):
            assert taxes[node_id].previous_position == Point(5, 5)
        assert taxes.laid_out == {1, 2, 6}

    def test_first_run_without_origin_enters_in_place(self, taxes):
        positions = LayoutEngine().run(taxes)
        for node_id, point in positions.items():
            assert taxes[node_id].previous_position == point

    def test_entering_children_start_at_parent_previous_position(self, taxes):
        engine = LayoutEngine()
        taxes.collapse_all()
        engine.run(taxes)
        parent_before = taxes[2].position

        taxes.toggle(2)
        engine.run(taxes)
        assert taxes[2].previous_position == parent_before
        assert taxes[3].previous_position == parent_before
        assert taxes[4].previous_position == parent_before
        assert taxes.laid_out == {1, 2, 3, 4, 6}

    def test_hidden_nodes_keep_their_last_position(self, taxes):
        engine = LayoutEngine()
        engine.run(taxes)
        last = taxes[5].position
        taxes.toggle(4)
        engine.run(taxes)
        assert taxes[5].position == last
        assert 5 not in taxes.laid_out
