from famtree.graph import build_family_graph
from famtree.levels import assign_levels, find_roots
from famtree.models import Member, Relationship


def _graph(ids, relationships):
    return build_family_graph([Member(i) for i in ids], relationships)


def _levels(graph):
    return {node.id: node.level for node in graph.nodes.values()}


def test_children_one_level_below_parent():
    graph = _graph("abc", [Relationship("a", "b", "parent"), Relationship("a", "c", "parent")])
    assign_levels(graph)
    assert _levels(graph) == {"a": 0, "b": 1, "c": 1}


def test_spouses_share_a_level():
    graph = _graph("ab", [Relationship("a", "b", "spouse")])
    assignment = assign_levels(graph)
    assert _levels(graph) == {"a": 0, "b": 0}
    assert assignment.roots == ["a"]
    assert assignment.partner_of == {"a": "b"}


def test_married_in_spouse_follows_partner():
    # s has no parents but is married to someone who does
    graph = _graph("psc", [Relationship("p", "c", "parent"), Relationship("c", "s", "spouse")])
    assert find_roots(graph) == ["p"]

    assignment = assign_levels(graph)
    assert _levels(graph) == {"p": 0, "s": 1, "c": 1}
    assert assignment.discovered_by == {"p": None, "c": "p"}
    assert assignment.partner_of == {"c": "s"}


def test_first_parent_in_member_order_fixes_level():
    # y is reachable from r1 (depth 2) and from r2 (depth 1); r1 is traversed first
    graph = _graph(
        ["r1", "r2", "x", "y"],
        [
            Relationship("r1", "x", "parent"),
            Relationship("x", "y", "parent"),
            Relationship("r2", "y", "parent"),
        ],
    )
    assignment = assign_levels(graph)
    assert _levels(graph) == {"r1": 0, "r2": 0, "x": 1, "y": 2}
    assert assignment.discovered_by["y"] == "x"
    assert assignment.roots == ["r1", "r2"]


def test_every_child_sits_below_some_parent():
    graph = _graph(
        "abcdefgh",
        [
            Relationship("a", "b", "spouse"),
            Relationship("a", "c", "parent"),
            Relationship("b", "c", "parent"),
            Relationship("c", "d", "spouse"),
            Relationship("e", "d", "parent"),
            Relationship("c", "f", "parent"),
            Relationship("g", "d", "child"),
            Relationship("h", "f", "sibling"),
        ],
    )
    assign_levels(graph)
    for node in graph.nodes.values():
        if node.parents:
            assert any(graph.nodes[p].level + 1 == node.level for p in node.parents)
    assert graph.nodes["c"].level == graph.nodes["d"].level


def test_synthetic_root_when_no_member_qualifies():
    # Each parentless member is married to someone with a parent
    graph = _graph(
        "xyzw",
        [
            Relationship("x", "y", "spouse"),
            Relationship("z", "y", "parent"),
            Relationship("z", "w", "spouse"),
            Relationship("x", "w", "parent"),
        ],
    )
    assert find_roots(graph) == []

    assignment = assign_levels(graph)
    assert assignment.roots == ["x"]
    assert _levels(graph) == {"x": 0, "y": 0, "z": 1, "w": 1}


def test_sibling_relationship_does_not_change_levels():
    graph = _graph("pab", [Relationship("p", "a", "parent"), Relationship("a", "b", "sibling")])
    assign_levels(graph)
    assert _levels(graph) == {"p": 0, "a": 1, "b": 0}


def test_spouse_level_wins_over_own_parent_line():
    # s is married to c (level 2) but descends from q; q stays a level 0 root
    graph = _graph(
        "rxcsq",
        [
            Relationship("r", "x", "parent"),
            Relationship("x", "c", "parent"),
            Relationship("c", "s", "spouse"),
            Relationship("q", "s", "parent"),
        ],
    )
    assignment = assign_levels(graph)
    levels = _levels(graph)
    assert levels["s"] == levels["c"] == 2
    assert levels["q"] == 0
    assert assignment.partner_of["c"] == "s"
    assert assignment.roots == ["r", "q"]
