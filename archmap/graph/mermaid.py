"""
Mermaid writer: renders a ``Graph`` as a ``flowchart LR`` document.

Node ids are rewritten to Mermaid-safe identifiers (stable in node order);
labels come from ``meta["label"]`` with a per-kind icon.
"""

import re

from archmap.graph.resolver import strip_namespace
from archmap.graph.types import REL_CALLS, Graph, Node, NodeType

_INVALID_ID = re.compile(r"[^A-Za-z0-9_-]")
_INVALID_FILE = re.compile(r"[^A-Za-z0-9._-]+")

NODE_ICONS = {
    NodeType.SERVICE: "🧩",
    NodeType.CLIENT: "📦",
    NodeType.TOPIC: "🛰",
}


def sanitize_id(node_id: str) -> str:
    safe = _INVALID_ID.sub("_", node_id)
    if not safe:
        return "node"
    if safe[0].isdigit():
        safe = "_" + safe
    return safe


def build_id_map(originals: list[str]) -> dict[str, str]:
    """Unique, stable mapping from original ids to Mermaid-safe ids."""
    mapping: dict[str, str] = {}
    used: set[str] = set()
    for original in originals:
        base = sanitize_id(original)
        candidate = base
        suffix = 2
        while candidate in used:
            candidate = f"{base}_{suffix}"
            suffix += 1
        used.add(candidate)
        mapping[original] = candidate
    return mapping


def node_label(node: Node) -> str:
    text = node.label or strip_namespace(node.id)
    icon = NODE_ICONS.get(node.type)
    return f"{icon} {text}" if icon else text


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def render_mermaid(graph: Graph) -> str:
    id_map = build_id_map([n.id for n in graph.nodes])
    lines = ["flowchart LR"]

    for node in graph.nodes:
        lines.append(f"  {id_map[node.id]}[{_quote(node_label(node))}]")

    for edge in graph.edges:
        source = id_map.get(edge.from_id) or sanitize_id(edge.from_id)
        target = id_map.get(edge.to_id) or sanitize_id(edge.to_id)
        label = edge.rel
        if edge.version and edge.rel == REL_CALLS:
            label = f"{edge.rel} ({edge.version})"
        lines.append(f"  {source} -- {label} --> {target}")

    return "\n".join(lines) + "\n"


def sanitize_file_base(text: str) -> str:
    """File-name-safe base derived from a module query (``arch`` when empty)."""
    text = text.strip().replace("/", "-").replace("\\", "-")
    text = _INVALID_FILE.sub("-", text)
    return text or "arch"
