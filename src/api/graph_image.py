"""Render a graph snapshot (nodes at their stored positions) to PNG bytes."""

from __future__ import annotations

import io

from src.models.schemas import GraphSnapshot

NODE_COLOR = "#f2f2f5"
EDGE_COLOR = "#183B4E"


def render_graph_image(
    graph: GraphSnapshot,
    dpi: int = 100,
    figsize: tuple[float, float] = (12, 8),
) -> bytes:
    """Draw the snapshot with NetworkX + Matplotlib.

    Uses the diagram's own coordinates instead of a computed layout; y grows
    downwards on screen, so the axis is inverted.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    import networkx as nx

    fig, ax = plt.subplots(figsize=figsize, dpi=dpi)
    fig.patch.set_facecolor("white")
    ax.set_facecolor("white")

    if not graph.nodes:
        ax.text(0.5, 0.5, "No nodes in graph", ha="center", va="center", fontsize=12)
    else:
        G = nx.DiGraph()
        for node in graph.nodes:
            G.add_node(node.id)
        for edge in graph.edges:
            G.add_edge(edge.source, edge.target, label=edge.label)

        pos = {n.id: (n.position.x, n.position.y) for n in graph.nodes}
        labels = {n.id: n.label or n.id for n in graph.nodes}

        nx.draw_networkx_nodes(
            G, pos, node_color=NODE_COLOR, edgecolors="#222222", node_shape="s", node_size=1800, ax=ax
        )
        nx.draw_networkx_edges(G, pos, edge_color=EDGE_COLOR, width=2.5, arrows=True, arrowsize=12, ax=ax)
        nx.draw_networkx_labels(G, pos, labels=labels, font_size=8, ax=ax)
        nx.draw_networkx_edge_labels(
            G, pos, edge_labels=nx.get_edge_attributes(G, "label"), font_size=7, ax=ax
        )
        ax.invert_yaxis()

    ax.axis("off")
    plt.tight_layout(pad=0.5)

    buf = io.BytesIO()
    plt.savefig(buf, format="png", bbox_inches="tight", facecolor="white", dpi=dpi)
    plt.close(fig)
    buf.seek(0)
    return buf.read()
