"""Drawing a computed layout with matplotlib, and exporting it as Graphviz DOT."""

from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.patches import FancyBboxPatch
import pydot

from famtree.models import PARENT_CHILD_EDGE, SIBLING_EDGE, SPOUSE_EDGE, LayoutConfig, LayoutResult

EDGE_STYLES = {
    PARENT_CHILD_EDGE: {"color": "darkgray", "linestyle": "-"},
    SPOUSE_EDGE: {"color": "#EC4899", "linestyle": "-"},
    SIBLING_EDGE: {"color": "gray", "linestyle": "--"},
}


def _fill_color(gender: str | None) -> str:
    gender = (gender or "")[:1].upper()
    if gender == "M":
        return "lightblue"
    if gender == "F":
        return "lightpink"
    return "lightgray"


def _label(node) -> str:
    member = node.member
    label = f"{member.first_name}\n{member.last_name}" if member.first_name or member.last_name else member.id
    if member.birth_date:
        label += f"\n{member.birth_date.year}"
    return label


def plot_layout(
    result: LayoutResult,
    output_path: Path | None = None,
    config: LayoutConfig | None = None,
    highlight: set[str] | None = None,
):
    """
    Draw the positioned nodes as boxes, generation 0 at the top.

    Args:
        result: The layout to draw
        output_path: Where to save the image (PNG, SVG or PDF). If None, displays interactively.
        config: The config the layout was computed with (for box sizes)
        highlight: Member ids to draw at full opacity; all others are dimmed
    """
    config = config or LayoutConfig()
    fig, ax = plt.subplots(figsize=(20, 16))
    positions = {node.id: (node.x, -node.y) for node in result.nodes}

    for edge in result.edges:
        (x1, y1), (x2, y2) = positions[edge.source_id], positions[edge.target_id]
        style = EDGE_STYLES.get(edge.kind, EDGE_STYLES[PARENT_CHILD_EDGE])
        if edge.kind == PARENT_CHILD_EDGE:
            # Elbow connector from the bottom of the parent to the top of the child
            mid = (y1 + y2) / 2
            xs = [x1, x1, x2, x2]
            ys = [y1 - config.node_height / 2, mid, mid, y2 + config.node_height / 2]
        else:
            xs, ys = [x1, x2], [y1, y2]
        ax.plot(xs, ys, linewidth=1, zorder=1, **style)

    for node in result.nodes:
        x, y = positions[node.id]
        alpha = 1.0 if not highlight or node.id in highlight else 0.2
        ax.add_patch(
            FancyBboxPatch(
                (x - config.node_width / 2, y - config.node_height / 2),
                config.node_width,
                config.node_height,
                boxstyle="round,pad=2",
                facecolor=_fill_color(node.member.gender),
                edgecolor="black",
                alpha=alpha,
                zorder=2,
            )
        )
        ax.text(x, y, _label(node), ha="center", va="center", fontsize=8, alpha=alpha, zorder=3)

    ax.set_aspect("equal")
    ax.autoscale_view()
    ax.axis("off")
    ax.set_title(f"Family Tree ({len(result.nodes)} members, {len(result.edges)} relationships)")
    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        print(f"Graph saved to {output_path}")
    else:
        plt.show()


def to_dot(result: LayoutResult, config: LayoutConfig | None = None) -> pydot.Dot:
    """
    Build a pydot graph with every node pinned at its computed position.

    Render with `neato -n` (or write(..., prog="neato")) to keep the positions.
    Graphviz works in points with y growing upwards, so y is negated.
    """
    config = config or LayoutConfig()
    P = pydot.Dot(graph_type="digraph")
    P.set("splines", "ortho")

    for node in result.nodes:
        P.add_node(
            pydot.Node(
                str(node.id),
                label=_label(node),
                shape="box",
                style="rounded,filled",
                fillcolor=_fill_color(node.member.gender),
                fontsize="10",
                width=f"{config.node_width / 72:.3f}",
                height=f"{config.node_height / 72:.3f}",
                fixedsize="true",
                pos=f"{node.x:.2f},{-node.y:.2f}!",
            )
        )

    for edge in result.edges:
        attrs = {"color": EDGE_STYLES.get(edge.kind, EDGE_STYLES[PARENT_CHILD_EDGE])["color"]}
        if edge.kind != PARENT_CHILD_EDGE:
            attrs["dir"] = "none"
        if edge.kind == SIBLING_EDGE:
            attrs["style"] = "dashed"
        P.add_edge(pydot.Edge(str(edge.source_id), str(edge.target_id), **attrs))

    return P
