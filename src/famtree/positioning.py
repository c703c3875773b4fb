"""Horizontal placement of family units.

A unit is a member together with the spouse that took its level from it. Units
form a forest: each non-root unit hangs under the unit whose member fixed its
level. Trees are laid out post-order, leaves taking the next free slot on their
level and parents centered over the span of their children. Each level keeps a
frontier (the first free x), so nothing placed later can overlap what is already
there. Connected components are laid out one after another, separated by the
component gap.
"""

from dataclasses import dataclass, field
import logging

from famtree.graph import FamilyGraph, connected_components
from famtree.levels import LevelAssignment
from famtree.models import LayoutConfig

logger = logging.getLogger(__name__)


@dataclass
class Unit:
    anchor: str
    partner: str | None
    level: int
    width: float
    left: float = 0.0
    children: list[str] = field(default_factory=list)  # anchors of child units

    @property
    def right(self) -> float:
        return self.left + self.width


class Frontier:
    """First free horizontal position on every level."""

    def __init__(self, origin: float, margin: float):
        self.origin = origin
        self.margin = margin
        self._next_free: dict[int, float] = {}

    def next_free(self, level: int) -> float:
        return self._next_free.get(level, self.origin)

    def claim(self, unit: Unit):
        self._next_free[unit.level] = max(self.next_free(unit.level), unit.right + self.margin)


def build_units(graph: FamilyGraph, assignment: LevelAssignment, config: LayoutConfig) -> dict[str, Unit]:
    """Group members into units and attach each unit to the unit that discovered it."""
    anchor_of = {partner: anchor for anchor, partner in assignment.partner_of.items()}

    units: dict[str, Unit] = {}
    for node in graph.nodes.values():
        if node.id in anchor_of:
            continue
        partner = assignment.partner_of.get(node.id)
        units[node.id] = Unit(
            anchor=node.id,
            partner=partner,
            level=node.level,
            width=config.couple_width if partner is not None else config.node_width,
        )

    # Member order here keeps every child list in stable input order
    for node in graph.nodes.values():
        parent_id = assignment.discovered_by.get(node.id)
        if parent_id is not None:
            units[anchor_of.get(parent_id, parent_id)].children.append(node.id)

    return units


def _descendants(units: dict[str, Unit], unit: Unit) -> list[Unit]:
    found = []
    stack = list(unit.children)
    while stack:
        child = units[stack.pop()]
        found.append(child)
        stack.extend(child.children)
    return found


def _place_unit(units: dict[str, Unit], unit: Unit, frontier: Frontier):
    if not unit.children:
        unit.left = frontier.next_free(unit.level)
        frontier.claim(unit)
        return

    first = units[unit.children[0]]
    last = units[unit.children[-1]]
    center = (first.left + last.right) / 2
    unit.left = center - unit.width / 2

    # Not enough room on this level: move the whole subtree right
    shortfall = frontier.next_free(unit.level) - unit.left
    if shortfall > 0:
        for descendant in _descendants(units, unit):
            descendant.left += shortfall
            frontier.claim(descendant)
        unit.left += shortfall

    frontier.claim(unit)


def _place_tree(units: dict[str, Unit], root_id: str, frontier: Frontier) -> list[Unit]:
    """Place one tree post-order without recursion; returns its units."""
    placed = []
    stack = [(root_id, False)]
    while stack:
        anchor, expanded = stack.pop()
        unit = units[anchor]
        if expanded:
            _place_unit(units, unit, frontier)
            placed.append(unit)
            continue
        stack.append((anchor, True))
        stack.extend((child, False) for child in reversed(unit.children))
    return placed


def assign_positions(graph: FamilyGraph, assignment: LevelAssignment, config: LayoutConfig) -> None:
    """Set `x` (the horizontal center) on every node of the graph."""
    units = build_units(graph, assignment, config)

    component_of = {}
    for index, component in enumerate(connected_components(graph)):
        for member_id in component:
            component_of[member_id] = index

    roots_by_component: dict[int, list[str]] = {}
    for root_id in assignment.roots:
        roots_by_component.setdefault(component_of[root_id], []).append(root_id)

    origin = 0.0
    for index in sorted(roots_by_component):
        frontier = Frontier(origin, config.horizontal_margin)
        placed = []
        for root_id in roots_by_component[index]:
            placed.extend(_place_tree(units, root_id, frontier))
        origin = max(unit.right for unit in placed) + config.component_gap

    offset = 0.0
    if config.center and units:
        left = min(unit.left for unit in units.values())
        right = max(unit.right for unit in units.values())
        offset = -(left + right) / 2

    for unit in units.values():
        x = unit.left + config.node_width / 2 + offset
        graph.nodes[unit.anchor].x = x
        if unit.partner is not None:
            graph.nodes[unit.partner].x = x + config.spouse_offset

    logger.debug("Positioned %d units in %d components", len(units), len(roots_by_component))
