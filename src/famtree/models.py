"""Data classes for family members, relationships and layout output."""

from dataclasses import dataclass, field
from datetime import date

# Relationship types as stored by the data-access layer
PARENT = "parent"
CHILD = "child"
SPOUSE = "spouse"
SIBLING = "sibling"
RELATIONSHIP_TYPES = (PARENT, CHILD, SPOUSE, SIBLING)

# Rendering edge kinds
PARENT_CHILD_EDGE = "parent-child"
SPOUSE_EDGE = "spouse"
SIBLING_EDGE = "sibling"

# DataIntegrityWarning codes
DANGLING_REFERENCE = "dangling-reference"
UNKNOWN_TYPE = "unknown-relationship-type"
DUPLICATE_SPOUSE = "duplicate-spouse"
SELF_RELATIONSHIP = "self-relationship"
DUPLICATE_MEMBER = "duplicate-member"


@dataclass(frozen=True)
class Member:
    id: str
    first_name: str = ""
    last_name: str = ""
    birth_date: date | None = None
    gender: str | None = None
    picture_url: str | None = None

    @property
    def name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p) or self.id

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "birthDate": self.birth_date.isoformat() if self.birth_date else None,
            "gender": self.gender,
            "pictureUrl": self.picture_url,
        }


@dataclass(frozen=True)
class Relationship:
    member1_id: str
    member2_id: str
    relationship_type: str  # parent, child, spouse, sibling


@dataclass(frozen=True)
class CanonicalEdge:
    """A parent -> child edge after both encodings have been folded into one."""

    parent_id: str
    child_id: str


@dataclass
class LayoutNode:
    """Per-call arena record. Relations are member ids, never node objects."""

    member: Member
    order: int
    level: int = 0
    x: float = 0.0
    spouse: str | None = None
    parents: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.member.id


@dataclass(frozen=True)
class LayoutEdge:
    id: str
    source_id: str
    target_id: str
    kind: str  # parent-child, spouse, sibling

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "kind": self.kind,
        }


@dataclass(frozen=True)
class PositionedNode:
    id: str
    level: int
    x: float
    y: float
    member: Member

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "level": self.level,
            "x": self.x,
            "y": self.y,
            "memberPayload": self.member.to_payload(),
        }


@dataclass(frozen=True)
class DataIntegrityWarning:
    code: str
    message: str
    member1_id: str | None = None
    member2_id: str | None = None


@dataclass(frozen=True)
class CycleRejection:
    parent_id: str
    child_id: str

    @property
    def message(self) -> str:
        return (
            f"Rejected {self.parent_id} -> {self.child_id}: "
            f"{self.child_id} is already an ancestor of {self.parent_id}"
        )


@dataclass(frozen=True)
class LayoutConfig:
    node_width: float = 200.0
    node_height: float = 100.0
    horizontal_margin: float = 80.0
    spouse_gap: float = 50.0
    vertical_gap: float = 150.0
    component_gap: float = 100.0
    center: bool = False

    @property
    def row_height(self) -> float:
        return self.node_height + self.vertical_gap

    @property
    def spouse_offset(self) -> float:
        """Distance between the centers of two spouses."""
        return self.node_width + self.spouse_gap

    @property
    def couple_width(self) -> float:
        return 2 * self.node_width + self.spouse_gap


@dataclass
class LayoutResult:
    nodes: list[PositionedNode] = field(default_factory=list)
    edges: list[LayoutEdge] = field(default_factory=list)
    warnings: list[DataIntegrityWarning] = field(default_factory=list)
    rejections: list[CycleRejection] = field(default_factory=list)

    def node(self, member_id: str) -> PositionedNode:
        for node in self.nodes:
            if node.id == member_id:
                return node
        raise KeyError(member_id)

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "warnings": [
                {"code": w.code, "message": w.message, "member1Id": w.member1_id, "member2Id": w.member2_id}
                for w in self.warnings
            ],
            "rejections": [
                {"parentId": r.parent_id, "childId": r.child_id, "message": r.message}
                for r in self.rejections
            ],
        }
