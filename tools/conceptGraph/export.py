"""
Exports a laid-out concept graph: JSON data, SVG image, and optional GraphML
(for Gephi) and PNG preview.
"""

import json
import math
from dataclasses import asdict
from pathlib import Path

import networkx as nx
from jinja2 import Environment, FileSystemLoader

from cooccur import ConceptGraph, Edge, Node

TEMPLATE_DIR = Path(__file__).parent / "templates"
SVG_TEMPLATE = "graph.svg"

MIN_STROKE = 1.0
MAX_STROKE = 6.0
BASE_RADIUS = 4.0


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def graph_to_dict(graph: ConceptGraph) -> dict:
    """Nodes then edges, fields in declaration order."""
    return {
        "nodes": [asdict(n) for n in graph.nodes],
        "edges": [asdict(e) for e in graph.edges],
    }


def write_graph_json(graph: ConceptGraph, path: Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(graph_to_dict(graph), f, indent=2, ensure_ascii=False)


def read_graph_json(path: Path) -> ConceptGraph:
    """Load a graph previously written by write_graph_json."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    return ConceptGraph(
        nodes=[Node(**n) for n in raw["nodes"]],
        edges=[Edge(**e) for e in raw["edges"]],
    )


# ---------------------------------------------------------------------------
# SVG
# ---------------------------------------------------------------------------

def xml_escape(text: str) -> str:
    """Escape &, < and > for element text."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def stroke_width(weight: int) -> float:
    """1 + ln(weight), clamped to [1, 6]."""
    if weight <= 0:
        return MIN_STROKE
    return min(max(1.0 + math.log(weight), MIN_STROKE), MAX_STROKE)


def node_radius(count: int) -> float:
    """4 + log2(count), never below 4."""
    if count <= 0:
        return BASE_RADIUS
    return BASE_RADIUS + max(0.0, math.log2(count))


def format_dimension(value: float) -> str:
    """Canvas sizes print without a trailing .0 when whole."""
    return str(int(value)) if float(value).is_integer() else str(value)


def render_svg(graph: ConceptGraph, width: float, height: float) -> str:
    """Render edges first, then nodes with their labels on top."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["xml_escape"] = xml_escape

    edges = []
    for e in graph.edges:
        a, b = graph.nodes[e.source], graph.nodes[e.target]
        edges.append({
            "x1": f"{a.x:.1f}", "y1": f"{a.y:.1f}",
            "x2": f"{b.x:.1f}", "y2": f"{b.y:.1f}",
            "stroke_width": f"{stroke_width(e.weight):.2f}",
        })
    nodes = [
        {
            "cx": f"{n.x:.1f}", "cy": f"{n.y:.1f}",
            "r": f"{node_radius(n.count):.1f}",
            "label": n.label,
        }
        for n in graph.nodes
    ]

    tpl = env.get_template(SVG_TEMPLATE)
    return tpl.render(
        width=format_dimension(width),
        height=format_dimension(height),
        edges=edges,
        nodes=nodes,
    )


def write_svg(graph: ConceptGraph, path: Path, width: float, height: float) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_svg(graph, width, height))


# ---------------------------------------------------------------------------
# GraphML / PNG
# ---------------------------------------------------------------------------

def to_networkx(graph: ConceptGraph) -> nx.Graph:
    g = nx.Graph()
    for n in graph.nodes:
        g.add_node(n.id, label=n.label, count=n.count, x=n.x, y=n.y)
    for e in graph.edges:
        g.add_edge(e.source, e.target, weight=e.weight)
    return g


def write_graphml(graph: ConceptGraph, path: Path) -> None:
    """Write GraphML with label/count/x/y node attributes for Gephi."""
    nx.write_graphml(to_networkx(graph), str(path))


def plot_graph(graph: ConceptGraph, path: Path, width: float, height: float) -> None:
    """Render a PNG preview of the same layout with matplotlib."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    g = to_networkx(graph)
    pos = {n.id: (n.x, n.y) for n in graph.nodes}

    fig, ax = plt.subplots(figsize=(width / 100, height / 100))
    if g.number_of_nodes():
        widths = [stroke_width(g.edges[e]["weight"]) for e in g.edges()]
        nx.draw_networkx_edges(g, pos, ax=ax, width=widths, alpha=0.6, edge_color="#999")
        sizes = [(2 * node_radius(g.nodes[n]["count"])) ** 2 for n in g.nodes()]
        nx.draw_networkx_nodes(g, pos, ax=ax, node_size=sizes, node_color="#3b82f6")
        labels = {n: g.nodes[n]["label"] for n in g.nodes()}
        nx.draw_networkx_labels(g, pos, labels, ax=ax, font_size=8,
                                horizontalalignment="left", verticalalignment="bottom")

    # Same orientation as the SVG: origin top-left, y grows downwards
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.axis("off")
    fig.tight_layout()
    fig.savefig(str(path), dpi=100)
    plt.close(fig)
