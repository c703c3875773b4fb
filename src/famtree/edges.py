"""Rendering edges derived from a built and levelled family graph."""

import logging

from famtree.graph import FamilyGraph, is_ancestor
from famtree.models import PARENT_CHILD_EDGE, SIBLING_EDGE, SPOUSE_EDGE, LayoutEdge
from famtree.normalize import pair_key

logger = logging.getLogger(__name__)


def edge_id(kind: str, source_id: str, target_id: str) -> str:
    """Edge id; the source length prefix keeps ids distinct whatever the member ids contain."""
    return f"{kind}:{len(source_id)}:{source_id}-{target_id}"


def _implied_by_parents(graph: FamilyGraph, a: str, b: str) -> bool:
    """True if a shared parent or an ancestor chain already relates a and b."""
    if set(graph.nodes[a].parents) & set(graph.nodes[b].parents):
        return True
    return is_ancestor(graph.nodes, a, b) or is_ancestor(graph.nodes, b, a)


def synthesize_edges(graph: FamilyGraph) -> list[LayoutEdge]:
    """
    Emit one edge per linked parent -> child pair, one per active spouse pair and one
    per sibling pair on the same level that no parent relation already implies.

    Edges are deduplicated by (unordered member pair, kind).
    """
    edges: list[LayoutEdge] = []
    seen: set[tuple[tuple[str, str], str]] = set()

    def emit(source_id: str, target_id: str, kind: str):
        key = (pair_key(source_id, target_id), kind)
        if key in seen:
            return
        seen.add(key)
        edges.append(
            LayoutEdge(
                id=edge_id(kind, source_id, target_id), source_id=source_id, target_id=target_id, kind=kind
            )
        )

    for node in graph.nodes.values():
        for child_id in graph.in_order(node.children):
            emit(node.id, child_id, PARENT_CHILD_EDGE)

    for a, b in graph.spouse_pairs:
        emit(a, b, SPOUSE_EDGE)

    for a, b in graph.sibling_pairs:
        if graph.nodes[a].level != graph.nodes[b].level:
            logger.debug("Skipping sibling edge %s-%s across levels", a, b)
            continue
        if _implied_by_parents(graph, a, b):
            continue
        emit(a, b, SIBLING_EDGE)

    return edges
