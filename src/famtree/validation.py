"""Plausibility checks on a computed layout."""

import networkx as nx

from famtree.models import PARENT_CHILD_EDGE, LayoutResult

MIN_PARENT_AGE_YEARS = 12


def validate_layout(result: LayoutResult) -> list[str]:
    """
    Validate a layout for:
    - Cycles in parent-child edges
    - Impossible ages (child born before parent)
    - Suspiciously young parents

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    members = {node.id: node.member for node in result.nodes}

    parent_edges = [(e.source_id, e.target_id) for e in result.edges if e.kind == PARENT_CHILD_EDGE]
    parent_graph = nx.DiGraph(parent_edges)

    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
        warnings.append(f"Cycle detected in parent-child edges: {[edge[0] for edge in cycle]}")
    except nx.NetworkXNoCycle:
        pass

    for parent_id, child_id in parent_edges:
        parent = members[parent_id]
        child = members[child_id]
        if parent.birth_date is None or child.birth_date is None:
            continue

        if child.birth_date < parent.birth_date:
            warnings.append(f"Impossible: {child.name} born before parent {parent.name}")
        elif child.birth_date.year - parent.birth_date.year < MIN_PARENT_AGE_YEARS:
            warnings.append(
                f"Suspicious: {parent.name} was less than {MIN_PARENT_AGE_YEARS} years "
                f"old when {child.name} was born"
            )

    return warnings
