"""Fold raw relationship records into canonical parent -> child edges and pair sets."""

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
import logging

from famtree.models import (
    CHILD,
    DANGLING_REFERENCE,
    PARENT,
    SELF_RELATIONSHIP,
    SIBLING,
    SPOUSE,
    UNKNOWN_TYPE,
    CanonicalEdge,
    DataIntegrityWarning,
    Relationship,
)

logger = logging.getLogger(__name__)

# GEDCOM-style spellings used by imported data
TYPE_ALIASES = {
    "parent_of": PARENT,
    "child_of": CHILD,
    "spouse_of": SPOUSE,
    "sibling_of": SIBLING,
}


@dataclass
class NormalizedRelationships:
    parent_edges: list[CanonicalEdge] = field(default_factory=list)
    # pair_key -> (member1_id, member2_id) as first recorded
    spouse_pairs: dict[tuple[str, str], tuple[str, str]] = field(default_factory=dict)
    sibling_pairs: dict[tuple[str, str], tuple[str, str]] = field(default_factory=dict)
    warnings: list[DataIntegrityWarning] = field(default_factory=list)


def pair_key(a: str, b: str) -> tuple[str, str]:
    """Order-independent key for an unordered member pair."""
    first, second = sorted((a, b))
    return (first, second)


def canonical_type(relationship_type: str | None) -> str | None:
    value = (relationship_type or "").strip().lower()
    value = TYPE_ALIASES.get(value, value)
    return value if value in (PARENT, CHILD, SPOUSE, SIBLING) else None


def _warn(result: NormalizedRelationships, code: str, message: str, rel: Relationship):
    logger.warning(message)
    result.warnings.append(
        DataIntegrityWarning(code=code, message=message, member1_id=rel.member1_id, member2_id=rel.member2_id)
    )


def normalize_relationships(
    relationships: Iterable[Relationship], member_ids: Collection[str]
) -> NormalizedRelationships:
    """
    Canonicalize relationship records.

    "parent" means member1 is the parent of member2; "child" means member2 is the
    parent of member1 and is inverted here. Self-relationships, dangling member
    references and unknown types are recorded as warnings and dropped. Repeated
    records for the same pair (including reciprocal parent/child records) collapse
    silently to the first one.
    """
    result = NormalizedRelationships()
    seen_edges: set[CanonicalEdge] = set()

    for rel in relationships:
        rel_type = canonical_type(rel.relationship_type)
        if rel_type is None:
            _warn(
                result,
                UNKNOWN_TYPE,
                f"Unknown relationship type {rel.relationship_type!r} between "
                f"{rel.member1_id} and {rel.member2_id}",
                rel,
            )
            continue

        if rel.member1_id == rel.member2_id:
            _warn(result, SELF_RELATIONSHIP, f"Member {rel.member1_id} is related to itself ({rel_type})", rel)
            continue

        missing = [m for m in (rel.member1_id, rel.member2_id) if m not in member_ids]
        if missing:
            _warn(
                result,
                DANGLING_REFERENCE,
                f"Relationship {rel_type} between {rel.member1_id} and {rel.member2_id} "
                f"references unknown member(s): {', '.join(map(str, missing))}",
                rel,
            )
            continue

        if rel_type == PARENT:
            edge = CanonicalEdge(parent_id=rel.member1_id, child_id=rel.member2_id)
        elif rel_type == CHILD:
            edge = CanonicalEdge(parent_id=rel.member2_id, child_id=rel.member1_id)
        else:
            pairs = result.spouse_pairs if rel_type == SPOUSE else result.sibling_pairs
            pairs.setdefault(pair_key(rel.member1_id, rel.member2_id), (rel.member1_id, rel.member2_id))
            continue

        if edge not in seen_edges:
            seen_edges.add(edge)
            result.parent_edges.append(edge)

    logger.debug(
        "Normalized %d parent edges, %d spouse pairs, %d sibling pairs",
        len(result.parent_edges),
        len(result.spouse_pairs),
        len(result.sibling_pairs),
    )
    return result
