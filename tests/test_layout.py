from collections import defaultdict

import pytest

from famtree.layout import compute_layout, search_members
from famtree.models import DANGLING_REFERENCE, LayoutConfig, LayoutResult, Member, Relationship

CONFIG = LayoutConfig()


def _members(ids):
    return [Member(id=i, first_name=i.upper()) for i in ids]


def _family():
    members = _members(
        ["gp1", "gp2", "gp3", "gp4", "p1", "p2", "u1", "k1", "k2", "k3", "lone", "s1", "s2"]
    )
    relationships = [
        Relationship("gp1", "gp2", "spouse"),
        Relationship("gp1", "p1", "parent"),
        Relationship("gp2", "p1", "parent"),
        Relationship("gp1", "u1", "parent"),
        Relationship("gp4", "gp3", "spouse"),
        Relationship("gp3", "p2", "parent"),
        Relationship("p2", "gp4", "child"),
        Relationship("p1", "p2", "spouse"),
        Relationship("p1", "k1", "parent"),
        Relationship("p2", "k1", "parent"),
        Relationship("k2", "p1", "child"),
        Relationship("p2", "k3", "parent"),
        Relationship("s1", "s2", "sibling"),
    ]
    return members, relationships


def _snapshot(result):
    return [(n.id, n.level, n.x, n.y) for n in result.nodes]


def test_scenario_parent_with_two_children():
    result = compute_layout(
        _members("ABC"), [Relationship("A", "B", "parent"), Relationship("A", "C", "parent")]
    )
    levels = {n.id: n.level for n in result.nodes}
    assert levels == {"A": 0, "B": 1, "C": 1}
    a, b, c = result.node("A"), result.node("B"), result.node("C")
    assert a.x == pytest.approx((b.x + c.x) / 2)
    assert b.x != c.x
    assert b.y == CONFIG.row_height


def test_scenario_spouses():
    result = compute_layout(_members("AB"), [Relationship("A", "B", "spouse")])
    a, b = result.node("A"), result.node("B")
    assert a.level == b.level == 0
    assert b.x == pytest.approx(a.x + CONFIG.spouse_offset)


def test_scenario_cycle_rejected():
    result = compute_layout(
        _members("AB"), [Relationship("A", "B", "parent"), Relationship("B", "A", "parent")]
    )
    assert [(r.parent_id, r.child_id) for r in result.rejections] == [("B", "A")]
    assert result.node("A").level == 0
    assert result.node("B").level == 1
    assert [e.kind for e in result.edges] == ["parent-child"]


def test_scenario_disconnected_components_do_not_overlap():
    result = compute_layout(_members("ACD"), [Relationship("C", "D", "parent")])
    half = CONFIG.node_width / 2
    first = (result.node("A").x - half, result.node("A").x + half)
    second_xs = [result.node("C").x, result.node("D").x]
    second = (min(second_xs) - half, max(second_xs) + half)
    assert first[1] < second[0]
    assert result.node("C").x == pytest.approx(result.node("D").x)


def test_empty_input_gives_empty_layout():
    assert compute_layout([], []) == LayoutResult()
    assert compute_layout([], [Relationship("a", "b", "parent")]) == LayoutResult()


def test_malformed_relationships_never_raise():
    result = compute_layout(
        _members("ab"),
        [
            Relationship("a", "ghost", "parent"),
            Relationship("a", "a", "spouse"),
            Relationship("a", "b", "friend"),
            Relationship("a", "b", "parent"),
        ],
    )
    assert len(result.warnings) == 3
    assert result.warnings[0].code == DANGLING_REFERENCE
    assert result.node("b").level == 1


def test_family_levels_follow_parents():
    members, relationships = _family()
    result = compute_layout(members, relationships)
    levels = {n.id: n.level for n in result.nodes}
    assert levels == {
        "gp1": 0, "gp2": 0, "gp3": 0, "gp4": 0,
        "p1": 1, "p2": 1, "u1": 1,
        "k1": 2, "k2": 2, "k3": 2,
        "lone": 0, "s1": 0, "s2": 0,
    }
    for edge in result.edges:
        if edge.kind == "parent-child":
            assert levels[edge.target_id] == levels[edge.source_id] + 1


def test_family_nodes_never_overlap_on_a_level():
    members, relationships = _family()
    result = compute_layout(members, relationships)
    by_level = defaultdict(list)
    for node in result.nodes:
        by_level[node.level].append(node.x)
    for xs in by_level.values():
        xs.sort()
        for left, right in zip(xs, xs[1:]):
            assert right - left >= CONFIG.node_width


def test_family_spouses_adjacent_and_parents_centered():
    members, relationships = _family()
    result = compute_layout(members, relationships)
    for edge in result.edges:
        if edge.kind == "spouse":
            a, b = result.node(edge.source_id), result.node(edge.target_id)
            assert a.level == b.level
            assert abs(a.x - b.x) == pytest.approx(CONFIG.spouse_offset)

    p1, p2 = result.node("p1"), result.node("p2")
    kids = [result.node(k).x for k in ("k1", "k2", "k3")]
    assert (p1.x + p2.x) / 2 == pytest.approx((min(kids) + max(kids)) / 2)


def test_family_edges():
    members, relationships = _family()
    result = compute_layout(members, relationships)
    kinds = defaultdict(int)
    for edge in result.edges:
        kinds[edge.kind] += 1
    assert dict(kinds) == {"parent-child": 9, "spouse": 3, "sibling": 1}
    assert len({e.id for e in result.edges}) == len(result.edges)


def test_layout_is_deterministic_and_independent_of_other_calls():
    members, relationships = _family()
    first = compute_layout(members, relationships)
    compute_layout(_members("xyz"), [Relationship("x", "y", "spouse"), Relationship("y", "z", "parent")])
    second = compute_layout(members, relationships)
    assert _snapshot(first) == _snapshot(second)
    assert first.to_dict() == second.to_dict()


def test_output_shape():
    result = compute_layout([Member("a", "Ann", "Lee", gender="F")], [])
    data = result.to_dict()
    assert data["nodes"] == [
        {
            "id": "a",
            "level": 0,
            "x": 100.0,
            "y": 0.0,
            "memberPayload": {
                "id": "a",
                "firstName": "Ann",
                "lastName": "Lee",
                "birthDate": None,
                "gender": "F",
                "pictureUrl": None,
            },
        }
    ]
    assert data["edges"] == []


def test_search_members_matches_first_and_last_names():
    members = [Member("1", "Ann", "Smith"), Member("2", "Bob", "Annis"), Member("3", "Cy", "Lee")]
    result = compute_layout(members, [])
    assert search_members(result, "ann") == ["1", "2"]
    assert search_members(result, "  ") == []
