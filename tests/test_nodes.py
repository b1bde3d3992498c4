import itertools

import pytest

from circuit_layout.nodes import (
    GROUND_ALIASES,
    NodeContext,
    NodeExtremeFinder,
    NodeGrouper,
    NodeRelationMode,
    XYNode,
)


def _classes(grouper: NodeGrouper):
    return sorted(sorted(cls) for cls in grouper.classes())


def test_ground_aliases_grouped_from_construction():
    grouper = NodeGrouper()
    for a, b in itertools.combinations(GROUND_ALIASES, 2):
        assert grouper.are_grouped(a, b)
    assert grouper["gnd!"] == "0"
    assert grouper.ground == "0"


def test_unknown_name_is_its_own_representative():
    grouper = NodeGrouper()
    assert grouper["R1[p].x"] == "R1[p].x"
    assert "R1[p].x" not in grouper
    assert not grouper.are_grouped("a", "b")


def test_group_makes_nodes_equivalent_and_lookup_idempotent():
    grouper = NodeGrouper()
    grouper.group("a", "b")
    assert grouper.are_grouped("a", "b")
    assert grouper.are_grouped("b", "a")
    for name in ("a", "b"):
        rep = grouper[name]
        assert grouper[rep] == rep


def test_names_are_case_insensitive_and_keep_spelling():
    grouper = NodeGrouper()
    grouper.group("R1.X", "r1[p].x")
    assert grouper.are_grouped("r1.x", "R1[P].X")
    assert grouper["r1[p].x"] == "R1.X"


def test_self_union_is_a_noop():
    grouper = NodeGrouper()
    grouper.group("a", "a")
    assert "a" not in grouper
    assert grouper.representatives == ["0"]


def test_ground_always_absorbs():
    grouper = NodeGrouper()
    for i in range(10):
        grouper.group("big", f"n{i}")
    grouper.group("big", "gnd")
    assert grouper["big"] == "0"
    assert grouper["n7"] == "0"
    assert grouper.is_ground("n3")


def test_smaller_group_joins_larger_one():
    grouper = NodeGrouper()
    grouper.group("a", "b")
    grouper.group("a", "c")
    grouper.group("x", "y")
    grouper.group("y", "b")
    assert grouper["x"] == "a"
    assert grouper.members("y") == {"a", "b", "c", "x", "y"}


@pytest.mark.parametrize(
    "pairs",
    [
        [("a", "b"), ("b", "c")],
        [("b", "c"), ("a", "b")],
        [("c", "a"), ("b", "c"), ("a", "b")],
    ],
)
def test_grouping_order_does_not_change_classes(pairs):
    grouper = NodeGrouper()
    for a, b in pairs:
        grouper.group(a, b)
    classes = _classes(grouper)
    assert ["a", "b", "c"] in classes
    assert sorted(GROUND_ALIASES) in classes


def test_extremes_exclude_dominated_nodes():
    finder = NodeExtremeFinder()
    finder.order("a", "b")
    assert finder.extremes == ["a"]
    assert not finder.is_extreme("b")

    finder.order("b", "c")
    assert finder.extremes == ["a"]
    assert not finder.is_extreme("c")


def test_dominated_node_never_becomes_extreme_again():
    finder = NodeExtremeFinder()
    finder.order("x", "y")
    finder.order("y", "z")
    finder.order("y", "w")
    assert "y" not in finder.extremes
    finder.order("q", "x")
    assert finder.extremes == ["q"]


def test_extremes_clear():
    finder = NodeExtremeFinder()
    finder.order("a", "b")
    finder.clear()
    assert finder.extremes == []
    finder.order("b", "a")
    assert finder.extremes == ["b"]


def test_node_context_orders_representatives():
    context = NodeContext()
    context.shorts.group("a", "a2")
    context.shorts.group("b", "b2")
    context.mode = NodeRelationMode.LINKS
    context.order("a2", "b2")
    assert context.extremes.extremes == ["a"]

    context.order("a", "a2")
    assert context.extremes.extremes == ["a"]


def test_node_context_pairs_are_unique_and_ordered():
    context = NodeContext()
    context.pair("p.x", "p.y")
    context.pair("q.x", "q.y")
    context.pair("p.x", "p.y")
    assert context.xy_pairs == [XYNode("p.x", "p.y"), XYNode("q.x", "q.y")]
    assert list(context.iter_nodes()) == ["p.x", "p.y", "q.x", "q.y"]


def test_node_context_find_without_lookup():
    assert NodeContext().find("anything") is None
    assert NodeContext(find={"a": "found"}.get).find("a") == "found"
