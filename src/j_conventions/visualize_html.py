from __future__ import annotations

from pathlib import Path

import networkx as nx
from pyvis.network import Network


KIND_COLORS = {
    "root": "#6c757d",
    "module": "#1f77b4",
    "fragment": "#2ca02c",
    "plugin": "#ff7f0e",
}


def export_pyvis(g: nx.DiGraph, out: Path, height: str = "800px") -> Path:
    """Write an interactive HTML view of a composition graph."""
    net = Network(height=height, width="100%", directed=True, cdn_resources="remote")
    for node, data in g.nodes(data=True):
        kind = data.get("kind", "plugin")
        net.add_node(str(node), label=str(node), title=kind, color=KIND_COLORS.get(kind, "#999999"))
    for u, v, data in g.edges(data=True):
        order = data.get("order")
        label = str(order + 1) if order is not None else ""
        net.add_edge(str(u), str(v), label=label, dashes=bool(data.get("depends_on")))
    out.parent.mkdir(parents=True, exist_ok=True)
    net.write_html(str(out))
    return out
