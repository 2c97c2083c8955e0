"""
Neighborhood Filter

Reduces a graph to the induced subgraph around one center node.

Two policies:
- ``filter_by_radius``: plain hop-radius BFS over the undirected graph.
- ``filter_by_domain``: keeps every service of the center's domain (first
  module path segment) regardless of distance, and only admits services
  and clients of that domain while expanding from the center.

Each call builds its own adjacency map and returns a new ``Graph``; the
input graph is never touched, so one base graph can be filtered by many
requests at once.
"""

import logging
from collections.abc import Callable

from archmap.graph.types import Graph, Node, NodeType

logger = logging.getLogger("archmap.graph.neighborhood")


def _undirected_adjacency(graph: Graph) -> dict[str, set[str]]:
    adj: dict[str, set[str]] = {}
    for edge in graph.edges:
        adj.setdefault(edge.from_id, set()).add(edge.to_id)
        adj.setdefault(edge.to_id, set()).add(edge.from_id)
    return adj


def _expand(
    adj: dict[str, set[str]],
    keep: set[str],
    center: str,
    radius: int,
    admit: Callable[[str], bool],
) -> None:
    """Breadth-first expansion from ``center``, adding admitted nodes to ``keep``."""
    frontier = {center}
    for _ in range(radius):
        next_frontier: set[str] = set()
        for node_id in frontier:
            for neighbor in adj.get(node_id, ()):
                if neighbor in keep or not admit(neighbor):
                    continue
                keep.add(neighbor)
                next_frontier.add(neighbor)
        frontier = next_frontier
        if not frontier:
            break


def _induced(graph: Graph, keep: set[str]) -> Graph:
    return Graph(
        nodes=tuple(n for n in graph.nodes if n.id in keep),
        edges=tuple(e for e in graph.edges if e.from_id in keep and e.to_id in keep),
    )


def filter_by_radius(graph: Graph, center: str, radius: int) -> Graph:
    """Keep nodes within ``radius`` undirected hops of ``center``."""
    radius = max(radius, 0)
    adj = _undirected_adjacency(graph)
    keep = {center}
    _expand(adj, keep, center, radius, lambda _node_id: True)
    return _induced(graph, keep)


def module_domain_prefix(module: str) -> str:
    """First ``/``-delimited segment of a module path (whole path if none)."""
    module = module.strip()
    if not module:
        return ""
    return module.split("/", 1)[0]


def module_matches_domain(meta: dict[str, str] | None, domain: str) -> bool:
    if not meta:
        return False
    module = meta.get("module")
    if module is None:
        return False
    return module == domain or module.startswith(domain + "/")


def filter_by_domain(graph: Graph, center: str, radius: int) -> Graph:
    """
    Domain-scoped neighborhood of ``center``.

    Applies only when the center is a service with a ``module``; any other
    center falls back to ``filter_by_radius``.
    """
    radius = max(radius, 0)
    nodes_by_id: dict[str, Node] = {n.id: n for n in graph.nodes}

    center_node = nodes_by_id.get(center)
    if center_node is None or center_node.type is not NodeType.SERVICE:
        return filter_by_radius(graph, center, radius)
    domain = module_domain_prefix(center_node.meta.get("module", ""))
    if not domain:
        logger.debug("Center %s has no module domain, using plain radius filter", center)
        return filter_by_radius(graph, center, radius)

    keep = {center}
    for node in graph.nodes:
        if node.type is NodeType.SERVICE and module_matches_domain(node.meta, domain):
            keep.add(node.id)

    def admit(node_id: str) -> bool:
        node = nodes_by_id.get(node_id)
        if node is None:
            return True
        if node.type in (NodeType.SERVICE, NodeType.CLIENT):
            return module_matches_domain(node.meta, domain)
        return True

    _expand(_undirected_adjacency(graph), keep, center, radius, admit)
    return _induced(graph, keep)
