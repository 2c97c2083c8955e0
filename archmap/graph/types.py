"""
Graph data model.

A ``Graph`` is rebuilt from a fleet snapshot on every request and never
mutated afterwards; filters return new ``Graph`` values. No adjacency
index is stored here: traversals build their own from ``edges``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NodeType(str, Enum):
    SERVICE = "service"
    CLIENT = "client"
    TOPIC = "topic"  # reserved for event-bus integration


REL_CALLS = "calls"

SERVICE_PREFIX = "svc:"
CLIENT_PREFIX = "dep:"


@dataclass(frozen=True)
class Node:
    """A vertex in the dependency graph, id namespaced as ``kind:short-name``."""

    id: str
    type: NodeType
    meta: dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def label(self) -> str:
        return self.meta.get("label", "")

    @property
    def module(self) -> str:
        return self.meta.get("module", "")

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"id": self.id, "type": self.type.value}
        if self.label:
            d["label"] = self.label
        if self.meta:
            d["meta"] = dict(self.meta)
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Node":
        meta = dict(data.get("meta") or {})
        if data.get("label") and "label" not in meta:
            meta["label"] = data["label"]
        return cls(id=data["id"], type=NodeType(data["type"]), meta=meta)


@dataclass(frozen=True)
class Edge:
    """A directed relation from a consuming service to a depended-upon node."""

    from_id: str
    to_id: str
    rel: str = REL_CALLS
    version: str = ""

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"from": self.from_id, "to": self.to_id, "rel": self.rel}
        if self.version:
            d["version"] = self.version
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Edge":
        return cls(
            from_id=data["from"],
            to_id=data["to"],
            rel=data.get("rel", REL_CALLS),
            version=data.get("version") or "",
        )


@dataclass(frozen=True)
class Graph:
    """Node set plus edge set; list order is insertion order."""

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the wire shape consumed by the renderer and snapshot files."""
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Graph":
        return cls(
            nodes=tuple(Node.from_dict(n) for n in data.get("nodes") or []),
            edges=tuple(Edge.from_dict(e) for e in data.get("edges") or []),
        )


class GraphAccumulator:
    """Mutable working set used while a graph is being built.

    A node id is added at most once (first-seen metadata wins). Edges are
    not de-duplicated, but both endpoints must already exist.
    """

    def __init__(self):
        self._nodes: list[Node] = []
        self._edges: list[Edge] = []
        self._index: set[str] = set()

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._index

    def add_node(self, node_id: str, node_type: NodeType, meta: dict[str, str]) -> None:
        if node_id in self._index:
            return
        self._nodes.append(Node(id=node_id, type=node_type, meta=meta))
        self._index.add(node_id)

    def add_edge(self, edge: Edge) -> None:
        if edge.from_id not in self._index or edge.to_id not in self._index:
            raise ValueError(
                f"edge {edge.from_id!r} -> {edge.to_id!r} added before its endpoints"
            )
        self._edges.append(edge)

    def freeze(self) -> Graph:
        return Graph(nodes=tuple(self._nodes), edges=tuple(self._edges))
