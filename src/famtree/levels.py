"""Generation level assignment by breadth-first traversal from root members."""

from collections import deque
from dataclasses import dataclass, field
import logging

from famtree.graph import FamilyGraph

logger = logging.getLogger(__name__)


@dataclass
class LevelAssignment:
    # Traversal starting points, in the order they were traversed
    roots: list[str] = field(default_factory=list)
    # member id -> parent whose edge fixed its level (None for roots)
    discovered_by: dict[str, str | None] = field(default_factory=dict)
    # member id -> spouse that took its level from it
    partner_of: dict[str, str] = field(default_factory=dict)


def find_roots(graph: FamilyGraph) -> list[str]:
    """
    Members with no parents, in member order.

    A parentless member married to someone who has parents is not a root: it takes
    its level from its spouse.
    """
    roots = []
    for node in graph.nodes.values():
        if node.parents:
            continue
        if node.spouse is not None and graph.nodes[node.spouse].parents:
            continue
        roots.append(node.id)
    return roots


def assign_levels(graph: FamilyGraph) -> LevelAssignment:
    """
    Set `level` on every node of the graph.

    Roots are traversed in member order and children are visited in member order,
    so when a member is reachable through several parents the first one reached in
    that order fixes its level. A spouse always receives its partner's level the
    moment that level is fixed.
    """
    assignment = LevelAssignment()
    visited: set[str] = set()

    roots = find_roots(graph)
    if not roots and graph.nodes:
        logger.warning("No root members found; falling back to the earliest member")

    # Parentless members left unreached (only possible through spouse links) seed
    # their own traversal afterwards, which also covers an empty root set.
    parentless = [node.id for node in graph.nodes.values() if not node.parents]
    for start_id in roots + parentless:
        if start_id in visited:
            continue
        if start_id not in roots:
            logger.debug("Using %s as a synthetic root", start_id)
        assignment.roots.append(start_id)
        _traverse(graph, start_id, visited, assignment)

    logger.debug(
        "Assigned levels from %d roots; deepest level %d",
        len(assignment.roots),
        max((node.level for node in graph.nodes.values()), default=0),
    )
    return assignment


def _traverse(graph: FamilyGraph, root_id: str, visited: set[str], assignment: LevelAssignment):
    queue: deque[str] = deque()

    def fix(member_id: str, level: int, parent_id: str | None):
        node = graph.nodes[member_id]
        node.level = level
        visited.add(member_id)
        assignment.discovered_by[member_id] = parent_id
        queue.append(member_id)

        # The spouse keeps this level even if its own parents sit deeper or shallower;
        # a shallower parent line then ends more than one level above it.
        if node.spouse is not None and node.spouse not in visited:
            graph.nodes[node.spouse].level = level
            visited.add(node.spouse)
            assignment.partner_of[member_id] = node.spouse
            queue.append(node.spouse)

    fix(root_id, 0, None)
    while queue:
        current = graph.nodes[queue.popleft()]
        for child_id in graph.in_order(current.children):
            if child_id not in visited:
                fix(child_id, current.level + 1, current.id)
