"""
Node Resolver

Maps a free-form query (module path, node id, or a trailing path segment)
to exactly one node id. Scans the graph's node list in its given order so
that resolution is deterministic for a given build.
"""

from archmap.graph.types import Graph


def last_segment(value: str) -> str:
    """Final ``/``-delimited segment, or ``value`` itself."""
    idx = value.rfind("/")
    if idx >= 0 and idx + 1 < len(value):
        return value[idx + 1:]
    return value


def strip_namespace(node_id: str) -> str:
    """Drop a ``kind:`` prefix, e.g. ``svc:billing`` -> ``billing``."""
    idx = node_id.find(":")
    if idx >= 0 and idx + 1 < len(node_id):
        return node_id[idx + 1:]
    return node_id


def resolve_node(graph: Graph, query: str) -> str | None:
    """
    Resolve ``query`` to a node id.

    Order (first match wins):
      1. exact ``meta["module"]``
      2. exact node id
      3. last segment of the query against, in separate passes, the
         node label, the node module and the namespace-stripped id

    Returns:
        The node id, or None when nothing matches.
    """
    q = query.strip()
    if not q:
        return None

    for node in graph.nodes:
        if node.meta.get("module") == q:
            return node.id

    for node in graph.nodes:
        if node.id == q:
            return node.id

    short = last_segment(q)

    for node in graph.nodes:
        label = node.meta.get("label", "")
        if label and last_segment(label) == short:
            return node.id

    for node in graph.nodes:
        module = node.meta.get("module", "")
        if module and last_segment(module) == short:
            return node.id

    for node in graph.nodes:
        if last_segment(strip_namespace(node.id)) == short:
            return node.id

    return None
