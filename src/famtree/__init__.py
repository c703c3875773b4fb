"""Family tree layout: members and relationships to positioned nodes and edges."""

from famtree.layout import compute_layout, search_members
from famtree.models import LayoutConfig, LayoutResult, Member, Relationship

__all__ = ["compute_layout", "search_members", "LayoutConfig", "LayoutResult", "Member", "Relationship"]
