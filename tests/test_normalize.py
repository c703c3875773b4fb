from famtree.models import (
    DANGLING_REFERENCE,
    SELF_RELATIONSHIP,
    UNKNOWN_TYPE,
    CanonicalEdge,
    Relationship,
)
from famtree.normalize import normalize_relationships, pair_key

IDS = {"a", "b", "c"}


def test_parent_record_points_from_member1_to_member2():
    result = normalize_relationships([Relationship("a", "b", "parent")], IDS)
    assert result.parent_edges == [CanonicalEdge(parent_id="a", child_id="b")]
    assert result.warnings == []


def test_child_record_is_inverted():
    result = normalize_relationships([Relationship("b", "a", "child")], IDS)
    assert result.parent_edges == [CanonicalEdge(parent_id="a", child_id="b")]


def test_reciprocal_records_collapse_to_one_edge():
    result = normalize_relationships(
        [Relationship("a", "b", "parent"), Relationship("b", "a", "child"), Relationship("a", "b", "parent")],
        IDS,
    )
    assert result.parent_edges == [CanonicalEdge("a", "b")]
    assert result.warnings == []


def test_spouse_pairs_are_unordered():
    result = normalize_relationships([Relationship("b", "a", "spouse"), Relationship("a", "b", "spouse")], IDS)
    assert result.spouse_pairs == {("a", "b"): ("b", "a")}


def test_sibling_pairs_kept_separately():
    result = normalize_relationships([Relationship("a", "c", "sibling")], IDS)
    assert result.sibling_pairs == {("a", "c"): ("a", "c")}
    assert result.parent_edges == []
    assert result.spouse_pairs == {}


def test_self_relationship_dropped_with_warning():
    result = normalize_relationships([Relationship("a", "a", "parent")], IDS)
    assert result.parent_edges == []
    assert [w.code for w in result.warnings] == [SELF_RELATIONSHIP]


def test_dangling_reference_dropped_with_warning():
    result = normalize_relationships([Relationship("a", "zzz", "spouse")], IDS)
    assert result.spouse_pairs == {}
    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert warning.code == DANGLING_REFERENCE
    assert "zzz" in warning.message
    assert (warning.member1_id, warning.member2_id) == ("a", "zzz")


def test_unknown_type_dropped_with_warning():
    result = normalize_relationships([Relationship("a", "b", "cousin")], IDS)
    assert result.parent_edges == []
    assert [w.code for w in result.warnings] == [UNKNOWN_TYPE]


def test_types_are_case_insensitive_and_accept_gedcom_spellings():
    result = normalize_relationships(
        [Relationship("a", "b", " Parent "), Relationship("c", "b", "CHILD_OF"), Relationship("a", "c", "SPOUSE_OF")],
        IDS,
    )
    assert result.parent_edges == [CanonicalEdge("a", "b"), CanonicalEdge("b", "c")]
    assert list(result.spouse_pairs) == [("a", "c")]


def test_pair_key_ignores_order():
    assert pair_key("b", "a") == pair_key("a", "b") == ("a", "b")


def test_pair_keys_stay_distinct_when_ids_contain_separators():
    ids = {"a|b", "c", "a", "b|c"}
    result = normalize_relationships(
        [Relationship("a|b", "c", "spouse"), Relationship("a", "b|c", "spouse")],
        ids,
    )
    assert result.spouse_pairs == {("a|b", "c"): ("a|b", "c"), ("a", "b|c"): ("a", "b|c")}
