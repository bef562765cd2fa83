from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Iterable

from pathbind.graph.model import Graph, GraphNode, entity_node_id
from pathbind.resolver.controller import ResolvedController


@dataclass(frozen=True)
class GraphBuildResult:
    graph: Graph
    generated_at: int


def build_binding_graph(controllers: Iterable[ResolvedController]) -> GraphBuildResult:
    """
    Build a deterministic graph from resolved controllers.

    Nodes:
      - controller: ResolvedController.key, labelled with its request path
      - entity: root and detail entities
      - service: bound services

    Edges:
      - controller -> root entity (EXPOSES)
      - controller -> detail entity (NESTS)
      - controller -> service, for every binding (BINDS)
      - entity -> service (SERVED_BY)
    """
    g = Graph()
    now = int(time.time())

    for c in controllers:
        cid = g.add_node(GraphNode.controller(c.key, f"{c.endpoint_kind.value} {c.request_path}"))
        g.link(cid, g.add_node(GraphNode.entity(c.root_entity)), "EXPOSES")

        for entity in c.detail_bindings:
            g.link(cid, g.add_node(GraphNode.entity(entity)), "NESTS")

        for b in c.all_bindings():
            sid = g.add_node(GraphNode.service(b))
            g.link(cid, sid, "BINDS")
            g.link(entity_node_id(b.entity_type), sid, "SERVED_BY")

    # Make output stable (for diffs)
    g.edges.sort(key=lambda e: (e.type, e.src, e.dst))

    return GraphBuildResult(graph=g, generated_at=now)


def graph_to_payload(result: GraphBuildResult) -> dict[str, Any]:
    g = result.graph
    return {
        "generated_at": result.generated_at,
        "nodes": [
            {"id": n.id, "type": n.type, "label": n.label}
            for n in sorted(g.nodes.values(), key=lambda x: (x.type, x.id))
        ],
        "edges": [{"src": e.src, "dst": e.dst, "type": e.type} for e in g.edges],
    }


def graph_to_dot(result: GraphBuildResult) -> str:
    g = result.graph
    lines = []
    lines.append("digraph pathbind {")
    lines.append('  rankdir="LR";')
    lines.append('  node [shape="box"];')

    for node in sorted(g.nodes.values(), key=lambda x: (x.type, x.id)):
        label = node.label.replace('"', '\\"')
        lines.append(f'  "{node.id}" [label="{label}"];')

    for e in g.edges:
        lines.append(f'  "{e.src}" -> "{e.dst}" [label="{e.type}"];')

    lines.append("}")
    return "\n".join(lines)
