"""
Graph Builder

Turns a fleet snapshot (one ``RepositorySnapshot`` per repository) into a
service -> client dependency ``Graph``:

1. Skip repositories whose path matches an ignore pattern
2. Skip repositories without a manifest (no module identity)
3. Add a ``svc:<short-name>`` node per repository
4. For every internal client dependency, add a ``dep:<module>`` node
   and a ``calls`` edge carrying the declared version

Ordinary third-party libraries never become nodes.
"""

import logging
from collections.abc import Iterable

from archmap.graph.classifier import ClientClassifier
from archmap.graph.types import (
    CLIENT_PREFIX,
    REL_CALLS,
    SERVICE_PREFIX,
    Edge,
    Graph,
    GraphAccumulator,
    NodeType,
)
from archmap.shared.config import ClassifierConfig
from archmap.shared.models import RepositorySnapshot

logger = logging.getLogger("archmap.graph.builder")


def should_ignore_repository(path: str, ignores: Iterable[str]) -> bool:
    """True if any ignore pattern is a case-insensitive substring of ``path``."""
    lower = path.lower()
    for ignore in ignores:
        ignore = ignore.strip()
        if ignore and ignore.lower() in lower:
            return True
    return False


def should_ignore_library(name: str, ignores: Iterable[str]) -> bool:
    """
    True if an ignore pattern matches the library's module path.

    A pattern matches as a case-insensitive substring of the whole path
    or as a whole ``/``-delimited segment (e.g. ``go-libraries`` matches
    ``git.example.com/platform/modules/go-libraries/kafka``).
    """
    lower = name.lower()
    segments = name.split("/") if "/" in name else []
    for ignore in ignores:
        ignore = ignore.strip()
        if not ignore:
            continue
        if ignore.lower() in lower:
            return True
        if any(segment.lower() == ignore.lower() for segment in segments):
            return True
    return False


def build_graph(
    repositories: Iterable[RepositorySnapshot],
    ignore_patterns: Iterable[str] = (),
    clients_only: bool = False,
    classifier: ClientClassifier | ClassifierConfig | None = None,
) -> Graph:
    """
    Build the dependency graph for a fleet snapshot.

    Args:
        repositories: Already-fetched snapshots, replace directives applied.
        ignore_patterns: Substrings excluding repositories and libraries.
        clients_only: Accepted for callers that distinguish strict from
            loose classification; ordinary libraries are never graphed
            either way.
        classifier: Classifier or its config (defaults to strict mode).

    Returns:
        A new, immutable ``Graph``.
    """
    if not isinstance(classifier, ClientClassifier):
        classifier = ClientClassifier(classifier)
    ignores = [p for p in ignore_patterns if p and p.strip()]

    acc = GraphAccumulator()
    skipped = 0

    for repo in repositories:
        if should_ignore_repository(repo.path, ignores):
            skipped += 1
            continue
        if not repo.has_module_identity():
            skipped += 1
            continue

        short = repo.short_name
        svc_id = SERVICE_PREFIX + short
        acc.add_node(svc_id, NodeType.SERVICE, {
            "module": repo.module or repo.path,
            "path": repo.path,
            "label": short,
        })

        for lib in repo.libraries:
            if not classifier.is_client(lib.name):
                continue
            if should_ignore_library(lib.name, ignores):
                continue

            dep_id = CLIENT_PREFIX + lib.name
            acc.add_node(dep_id, NodeType.CLIENT, {
                "module": lib.name,
                "label": classifier.label(lib.name),
            })
            acc.add_edge(Edge(from_id=svc_id, to_id=dep_id, rel=REL_CALLS, version=lib.version))

    graph = acc.freeze()
    logger.debug(
        "Built graph: %d nodes, %d edges (%d repositories skipped, clients_only=%s)",
        len(graph.nodes), len(graph.edges), skipped, clients_only,
    )
    return graph


def summarize_libraries(graph: Graph) -> list[dict[str, str]]:
    """
    List the client libraries present in a graph.

    One entry per client node with its module, its label (when it differs
    from the module) and the version found on the last edge that touches
    the node. Sorted by module.
    """
    nodes_by_id = {n.id: n for n in graph.nodes}
    libs: dict[str, dict[str, str]] = {}

    for node in graph.nodes:
        if node.type is not NodeType.CLIENT:
            continue
        module = node.module or node.id.removeprefix(CLIENT_PREFIX)
        entry = libs.setdefault(module, {"module": module})
        if node.label and node.label != module:
            entry["label"] = node.label

    for edge in graph.edges:
        if not edge.version:
            continue
        for endpoint in (edge.to_id, edge.from_id):
            node = nodes_by_id.get(endpoint)
            if node is not None and node.type is NodeType.CLIENT:
                module = node.module or node.id.removeprefix(CLIENT_PREFIX)
                libs.setdefault(module, {"module": module})["version"] = edge.version
                break

    return sorted(libs.values(), key=lambda entry: entry["module"])
