"""Dependency graph construction, node resolution and neighborhood filtering."""

from archmap.graph.builder import build_graph, summarize_libraries
from archmap.graph.classifier import (
    ClientClassifier,
    derive_label,
    is_client_module,
    is_client_module_loose,
)
from archmap.graph.mermaid import render_mermaid
from archmap.graph.neighborhood import filter_by_domain, filter_by_radius
from archmap.graph.resolver import resolve_node
from archmap.graph.types import Edge, Graph, Node, NodeType

__all__ = [
    "ClientClassifier",
    "Edge",
    "Graph",
    "Node",
    "NodeType",
    "build_graph",
    "derive_label",
    "filter_by_domain",
    "filter_by_radius",
    "is_client_module",
    "is_client_module_loose",
    "render_mermaid",
    "resolve_node",
    "summarize_libraries",
]
