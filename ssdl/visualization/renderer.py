"""
Dependency graph visualization using NetworkX and Matplotlib.

Renders a DependencyGraph as an image with:
- Edges coloured by interface type
- Dangling endpoints (ids not in the tree) drawn in red
- Optional highlights for specific elements
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import matplotlib

matplotlib.use("Agg")  # file output only, no display

import matplotlib.patches as mpatches  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import networkx as nx  # noqa: E402

from ..analysis.interfaces import DependencyGraph
from ..core.models import INTERFACE_TYPES, InterfaceType

logger = logging.getLogger(__name__)

INTERFACE_COLORS: Dict[InterfaceType, str] = {
    InterfaceType.PHYSICAL: "#9C755F",  # Brown
    InterfaceType.ELECTRICAL: "#F28E2B",  # Orange
    InterfaceType.DATA: "#4E79A7",  # Blue
    InterfaceType.CONTROL: "#B07AA1",  # Purple
    InterfaceType.THERMAL: "#E15759",  # Red
    InterfaceType.OPTICAL: "#59A14F",  # Green
}

NODE_COLOR = "#76B7B2"  # Teal
DANGLING_COLOR = "#FF0000"  # Red for unresolved endpoints
HIGHLIGHT_COLOR = "#EDC948"  # Yellow

LAYOUTS = ("spring", "kamada_kawai", "circular", "shell")


def parse_figsize(value: str) -> Tuple[int, int]:
    """Parse 'WxH' (e.g. '16x12') into a tuple."""
    width, _, height = value.lower().partition("x")
    try:
        return int(width), int(height)
    except ValueError:
        raise ValueError(f"Invalid figure size {value!r}, expected WxH") from None


class GraphRenderer:
    """
    Renders dependency graphs as images.

    Usage:
        renderer = GraphRenderer(build_dependency_graph(system))
        renderer.render("deps.png")
        renderer.render_neighborhood("EC-001", output_path="ec.png")
    """

    def __init__(self, graph: DependencyGraph):
        self.dependency_graph = graph
        # Parallel interfaces collapse to one drawn arrow
        self.nx_graph = nx.DiGraph(graph.to_networkx())

    def _layout(self, graph: nx.DiGraph, layout: str) -> Dict[str, Tuple[float, float]]:
        if layout == "spring":
            return nx.spring_layout(graph, k=2, iterations=50, seed=42)
        if layout == "kamada_kawai":
            return nx.kamada_kawai_layout(graph)
        if layout == "circular":
            return nx.circular_layout(graph)
        if layout == "shell":
            return nx.shell_layout(graph)
        logger.warning("Unknown layout %r, using spring", layout)
        return nx.spring_layout(graph, seed=42)

    def _node_color(self, graph: nx.DiGraph, node: str, highlights: Optional[Dict[str, str]]) -> str:
        if highlights and node in highlights:
            return highlights[node]
        if not graph.nodes[node].get("known", True):
            return DANGLING_COLOR
        return NODE_COLOR

    def render(
        self,
        output_path: str,
        title: str = "Interface Dependency Graph",
        figsize: Tuple[int, int] = (16, 12),
        layout: str = "spring",
        show_labels: bool = True,
        highlights: Optional[Dict[str, str]] = None,
        graph: Optional[nx.DiGraph] = None,
    ) -> str:
        """
        Render the graph to an image file.

        Args:
            output_path: Path to save the image (PNG, PDF, SVG supported)
            title: Title for the figure
            figsize: Figure size in inches (width, height)
            layout: One of LAYOUTS
            show_labels: Whether to draw element ids
            highlights: Dict of element id -> colour
            graph: Subgraph to draw instead of the whole graph

        Returns:
            Path to the saved image
        """
        graph = self.nx_graph if graph is None else graph
        if len(graph) == 0:
            raise ValueError("Graph is empty, nothing to render")

        fig, ax = plt.subplots(figsize=figsize)
        pos = self._layout(graph, layout)

        used_types = []
        for interface_type in INTERFACE_TYPES:
            edgelist = [
                (u, v) for u, v, data in graph.edges(data=True) if data.get("interface_type") == interface_type.value
            ]
            if not edgelist:
                continue
            used_types.append(interface_type)
            nx.draw_networkx_edges(
                graph,
                pos,
                edgelist=edgelist,
                edge_color=INTERFACE_COLORS[interface_type],
                alpha=0.8,
                arrows=True,
                arrowsize=15,
                connectionstyle="arc3,rad=0.1",
                ax=ax,
            )

        nx.draw_networkx_nodes(
            graph,
            pos,
            node_color=[self._node_color(graph, n, highlights) for n in graph.nodes()],
            node_size=900,
            alpha=0.9,
            ax=ax,
        )

        if show_labels:
            nx.draw_networkx_labels(graph, pos, labels={n: n for n in graph.nodes()}, font_size=8, ax=ax)

        legend_patches = [
            mpatches.Patch(color=INTERFACE_COLORS[t], label=t.value) for t in used_types
        ]
        if any(not graph.nodes[n].get("known", True) for n in graph.nodes()):
            legend_patches.append(mpatches.Patch(color=DANGLING_COLOR, label="unresolved"))
        if legend_patches:
            ax.legend(handles=legend_patches, loc="upper left", fontsize=8)

        ax.set_title(title, fontsize=14, fontweight="bold")
        ax.axis("off")

        plt.tight_layout()
        plt.savefig(output_path, dpi=150, bbox_inches="tight", facecolor="white")
        plt.close(fig)

        logger.info("Rendered %d nodes to %s", len(graph), output_path)
        return output_path

    def render_neighborhood(
        self,
        center: str,
        depth: int = 1,
        output_path: str = "neighborhood.png",
        direction: str = "both",
        figsize: Tuple[int, int] = (12, 10),
        layout: str = "spring",
    ) -> str:
        """
        Render the elements within `depth` hops of `center`.

        Args:
            direction: 'in' (producers), 'out' (consumers) or 'both'
        """
        if center not in self.nx_graph:
            raise ValueError(f"Element {center} not in graph")

        nodes = {center}
        frontier = {center}
        for _ in range(depth):
            next_frontier = set()
            for node in frontier:
                if direction in ("in", "both"):
                    next_frontier.update(self.nx_graph.predecessors(node))
                if direction in ("out", "both"):
                    next_frontier.update(self.nx_graph.successors(node))
            nodes.update(next_frontier)
            frontier = next_frontier

        return self.render(
            output_path,
            title=f"Neighborhood: {center} (depth={depth})",
            figsize=figsize,
            layout=layout,
            highlights={center: HIGHLIGHT_COLOR},
            graph=self.nx_graph.subgraph(nodes).copy(),
        )
