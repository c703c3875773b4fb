"""Node arena construction, cycle rejection and NetworkX views of the family graph."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging

import networkx as nx

from famtree.models import (
    DUPLICATE_MEMBER,
    DUPLICATE_SPOUSE,
    PARENT,
    SIBLING,
    SPOUSE,
    CanonicalEdge,
    CycleRejection,
    DataIntegrityWarning,
    LayoutNode,
    Member,
    Relationship,
)
from famtree.normalize import normalize_relationships

logger = logging.getLogger(__name__)


@dataclass
class FamilyGraph:
    """One layout call's worth of nodes, keyed by member id in member-list order."""

    nodes: dict[str, LayoutNode] = field(default_factory=dict)
    spouse_pairs: list[tuple[str, str]] = field(default_factory=list)
    sibling_pairs: list[tuple[str, str]] = field(default_factory=list)
    warnings: list[DataIntegrityWarning] = field(default_factory=list)
    rejections: list[CycleRejection] = field(default_factory=list)

    def in_order(self, member_ids: Iterable[str]) -> list[str]:
        """Sort member ids by the order their members were supplied in."""
        return sorted(member_ids, key=lambda member_id: self.nodes[member_id].order)

    def to_networkx(self) -> nx.DiGraph:
        """
        Build a NetworkX directed graph of the linked nodes.

        Parent edges point parent -> child. Each active spouse pair is stored once,
        unless a parent edge already joins the two members.
        """
        G = nx.DiGraph()
        for node in self.nodes.values():
            G.add_node(node.id, member=node.member, order=node.order)
        for node in self.nodes.values():
            for child_id in node.children:
                G.add_edge(node.id, child_id, relationship_type=PARENT)
        for a, b in self.spouse_pairs:
            if not G.has_edge(a, b) and not G.has_edge(b, a):
                G.add_edge(a, b, relationship_type=SPOUSE)
        return G


def is_ancestor(nodes: Mapping[str, LayoutNode], candidate_id: str, node_id: str) -> bool:
    """
    Return True if `candidate_id` is a transitive parent of `node_id`.

    Walks parent links iteratively with a visited set, so the walk ends even if the
    arena already holds a cycle.
    """
    visited: set[str] = set()
    stack = list(nodes[node_id].parents)
    while stack:
        current = stack.pop()
        if current == candidate_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        stack.extend(nodes[current].parents)
    return False


def _link_parent(graph: FamilyGraph, edge: CanonicalEdge):
    parent = graph.nodes[edge.parent_id]
    child = graph.nodes[edge.child_id]

    if is_ancestor(graph.nodes, child.id, parent.id):
        rejection = CycleRejection(parent_id=parent.id, child_id=child.id)
        logger.warning(rejection.message)
        graph.rejections.append(rejection)
        return

    if child.id not in parent.children:
        parent.children.append(child.id)
    if parent.id not in child.parents:
        child.parents.append(parent.id)


def _link_spouses(graph: FamilyGraph, a: str, b: str):
    first = graph.nodes[a]
    second = graph.nodes[b]

    taken = [node for node in (first, second) if node.spouse is not None]
    if taken:
        details = ", ".join(f"{node.id} is already married to {node.spouse}" for node in taken)
        message = f"Ignoring spouse relationship between {a} and {b}: {details}"
        logger.warning(message)
        graph.warnings.append(
            DataIntegrityWarning(code=DUPLICATE_SPOUSE, message=message, member1_id=a, member2_id=b)
        )
        return

    first.spouse = b
    second.spouse = a
    graph.spouse_pairs.append((a, b))


def build_family_graph(members: Iterable[Member], relationships: Iterable[Relationship]) -> FamilyGraph:
    """
    Create one node per distinct member and link parent, child and spouse relations.

    Parent edges that would make a member its own ancestor are rejected. The first
    spouse pair claiming a member wins; later claims become warnings.
    """
    graph = FamilyGraph()

    for member in members:
        if member.id in graph.nodes:
            message = f"Duplicate member id {member.id}; keeping the first record"
            logger.warning(message)
            graph.warnings.append(
                DataIntegrityWarning(code=DUPLICATE_MEMBER, message=message, member1_id=member.id)
            )
            continue
        graph.nodes[member.id] = LayoutNode(member=member, order=len(graph.nodes))

    normalized = normalize_relationships(relationships, graph.nodes)
    graph.warnings.extend(normalized.warnings)

    for edge in normalized.parent_edges:
        _link_parent(graph, edge)

    for a, b in normalized.spouse_pairs.values():
        _link_spouses(graph, a, b)

    graph.sibling_pairs = list(normalized.sibling_pairs.values())

    logger.debug(
        "Built family graph: %d nodes, %d spouse pairs, %d cycle rejections",
        len(graph.nodes),
        len(graph.spouse_pairs),
        len(graph.rejections),
    )
    return graph


def connected_components(graph: FamilyGraph) -> list[list[str]]:
    """Weakly connected components, each in member order, ordered by first member."""
    components = [graph.in_order(c) for c in nx.weakly_connected_components(graph.to_networkx())]
    return sorted(components, key=lambda component: graph.nodes[component[0]].order)


# ============================================================================
# Member selection (run before layout to show part of a large family)
# ============================================================================


def relationship_graph(members: Iterable[Member], relationships: Iterable[Relationship]) -> nx.DiGraph:
    """Build a NetworkX directed graph straight from member and relationship records."""
    G = nx.DiGraph()
    for member in members:
        if member.id not in G:
            G.add_node(member.id, member=member)

    normalized = normalize_relationships(relationships, G)
    for edge in normalized.parent_edges:
        G.add_edge(edge.parent_id, edge.child_id, relationship_type=PARENT)
    for rel_type, pairs in ((SPOUSE, normalized.spouse_pairs), (SIBLING, normalized.sibling_pairs)):
        for a, b in pairs.values():
            if not G.has_edge(a, b) and not G.has_edge(b, a):
                G.add_edge(a, b, relationship_type=rel_type)
    return G


def _restrict(
    members: list[Member], relationships: list[Relationship], keep: set[str]
) -> tuple[list[Member], list[Relationship]]:
    return (
        [m for m in members if m.id in keep],
        [r for r in relationships if r.member1_id in keep and r.member2_id in keep],
    )


def ego_selection(
    members: Iterable[Member], relationships: Iterable[Relationship], center_id: str, radius: int = 2
) -> tuple[list[Member], list[Relationship]]:
    """
    Keep only members within `radius` relationships of `center_id`.

    Args:
        members: All members
        relationships: All relationship records
        center_id: The member to center the selection on
        radius: Maximum distance from center (default 2)

    Returns:
        The members and relationships among the selected members, in input order
    """
    members = list(members)
    relationships = list(relationships)
    G = relationship_graph(members, relationships)
    if center_id not in G:
        raise ValueError(f"Member ID {center_id} not found")

    # Undirected view so parents, children and spouses all count
    ego = nx.ego_graph(G.to_undirected(), center_id, radius=radius)
    return _restrict(members, relationships, set(ego.nodes()))


def _gender_matches(gender: str | None, wanted: str) -> bool:
    return (gender or "")[:1].upper() == wanted[:1].upper()


def lineage_selection(
    members: Iterable[Member],
    relationships: Iterable[Relationship],
    center_id: str,
    gender: str = "M",
    radius: int = 1,
) -> tuple[list[Member], list[Relationship]]:
    """
    Keep the union of ego selections along a single-gender parental line.

    Starting at `center_id`, repeatedly step to the parent of the given gender and
    add everyone within `radius` of each member on the line. With radius 0 only the
    line itself and its spouses are kept.
    """
    members = list(members)
    relationships = list(relationships)
    G = relationship_graph(members, relationships)
    if center_id not in G:
        raise ValueError(f"Member ID {center_id} not found")

    undirected = G.to_undirected()
    keep: set[str] = set()
    line: set[str] = set()

    current_id = center_id
    while current_id is not None and current_id not in line:
        line.add(current_id)
        if radius == 0:
            keep.add(current_id)
            keep.update(
                n for n in undirected.neighbors(current_id)
                if undirected.edges[current_id, n].get("relationship_type") == SPOUSE
            )
        else:
            keep.update(nx.ego_graph(undirected, current_id, radius=radius).nodes())

        # Parent edges point parent -> child, so parents are predecessors
        next_parent = None
        for parent in G.predecessors(current_id):
            if G.edges[parent, current_id].get("relationship_type") != PARENT:
                continue
            if _gender_matches(G.nodes[parent]["member"].gender, gender):
                next_parent = parent
                break
        current_id = next_parent

    return _restrict(members, relationships, keep)
