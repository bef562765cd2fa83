from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pathbind.domain.types import ServiceBinding, TypeRef


NodeType = Literal["controller", "entity", "service"]
EdgeType = Literal["EXPOSES", "NESTS", "BINDS", "SERVED_BY"]


@dataclass(frozen=True)
class GraphNode:
    """
    Node ids are prefixed by node type:
      controller:DETAIL com.shop.Order items
      entity:com.shop.Item
      service:com.shop.ItemService
    """

    id: str
    type: NodeType
    label: str

    @classmethod
    def controller(cls, key: str, label: str) -> "GraphNode":
        # key already carries the "controller:" prefix
        return cls(id=key, type="controller", label=label)

    @classmethod
    def entity(cls, entity: TypeRef) -> "GraphNode":
        return cls(id=entity_node_id(entity), type="entity", label=entity.simple_name)

    @classmethod
    def service(cls, binding: ServiceBinding) -> "GraphNode":
        return cls(id=service_node_id(binding.service_type), type="service", label=binding.field_name)

    @property
    def qualified_name(self) -> str:
        return self.id.split(":", 1)[-1]


def entity_node_id(entity: TypeRef) -> str:
    return f"entity:{entity}"


def service_node_id(service: TypeRef) -> str:
    return f"service:{service}"


@dataclass(frozen=True)
class GraphEdge:
    src: str
    dst: str
    type: EdgeType


class Graph:
    """Binding graph; nodes keyed by id, edges unique per (src, dst, type)."""

    def __init__(self) -> None:
        self.nodes: dict[str, GraphNode] = {}
        self.edges: list[GraphEdge] = []
        self._edge_seen: set[tuple[str, str, str]] = set()

    def add_node(self, node: GraphNode) -> str:
        # first label wins
        self.nodes.setdefault(node.id, node)
        return node.id

    def link(self, src: str, dst: str, type: EdgeType) -> None:
        k = (src, dst, type)
        if k in self._edge_seen:
            return
        self._edge_seen.add(k)
        self.edges.append(GraphEdge(src=src, dst=dst, type=type))

    def count(self, node_type: NodeType) -> int:
        return sum(1 for n in self.nodes.values() if n.type == node_type)

    def edge_count(self, edge_type: EdgeType) -> int:
        return sum(1 for e in self.edges if e.type == edge_type)
