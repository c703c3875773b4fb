"""Members and relationships in, positioned nodes and rendering edges out."""

from collections.abc import Iterable
import logging

from famtree.edges import synthesize_edges
from famtree.graph import build_family_graph
from famtree.levels import assign_levels
from famtree.models import LayoutConfig, LayoutResult, Member, PositionedNode, Relationship
from famtree.positioning import assign_positions

logger = logging.getLogger(__name__)


def compute_layout(
    members: Iterable[Member],
    relationships: Iterable[Relationship],
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """
    Lay out a family as a tree diagram.

    Every call builds its own node arena, so the result depends only on the
    arguments. Malformed relationships never raise: they are skipped and reported
    in `LayoutResult.warnings` or `LayoutResult.rejections`. An empty member list
    gives an empty layout.

    Args:
        members: Members in the order they should be laid out
        relationships: Relationship records in any direction encoding
        config: Node sizes and spacing (defaults to LayoutConfig())

    Returns:
        A LayoutResult with one node per distinct member, in member order
    """
    config = config or LayoutConfig()
    members = list(members)
    if not members:
        logger.debug("No members; returning an empty layout")
        return LayoutResult()

    graph = build_family_graph(members, relationships)
    assignment = assign_levels(graph)
    assign_positions(graph, assignment, config)
    edges = synthesize_edges(graph)

    nodes = [
        PositionedNode(
            id=node.id,
            level=node.level,
            x=node.x,
            y=node.level * config.row_height,
            member=node.member,
        )
        for node in graph.nodes.values()
    ]
    logger.debug("Layout has %d nodes and %d edges", len(nodes), len(edges))
    return LayoutResult(nodes=nodes, edges=edges, warnings=graph.warnings, rejections=graph.rejections)


def search_members(result: LayoutResult, term: str) -> list[str]:
    """Ids of nodes whose first or last name contains `term`, ignoring case."""
    term = term.strip().lower()
    if not term:
        return []
    return [
        node.id
        for node in result.nodes
        if term in node.member.first_name.lower() or term in node.member.last_name.lower()
    ]
