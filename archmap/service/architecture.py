"""
Architecture Views

Builds the response for one architecture request from a fleet snapshot:

1. Build the service -> client graph (ignores applied)
2. If a module is given, resolve it to a node and cut its neighborhood
   (domain-scoped by default, plain hop radius on request)
3. Render the result as Mermaid and summarize the client libraries

Pure and synchronous; the service layer and the CLI both call it.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from archmap.graph.builder import build_graph, summarize_libraries
from archmap.graph.classifier import ClientClassifier
from archmap.graph.mermaid import render_mermaid
from archmap.graph.neighborhood import filter_by_domain, filter_by_radius
from archmap.graph.resolver import resolve_node
from archmap.graph.types import Graph
from archmap.shared.config import ClassifierConfig
from archmap.shared.exceptions import NodeNotFoundError
from archmap.shared.models import RepositorySnapshot

logger = logging.getLogger("archmap.service.architecture")

FULL_FLEET_MODULE = "all"


@dataclass
class ArchitectureResult:
    """One rendered architecture view."""

    module: str
    radius: int
    ref: str
    graph: Graph = field(default_factory=Graph)
    mermaid: str = ""
    libraries: list[dict[str, str]] = field(default_factory=list)
    clients_only: bool = False
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "module": self.module,
            "radius": self.radius,
            "ref": self.ref,
            "mermaid": self.mermaid,
            "graph": self.graph.to_dict(),
            "libraries": self.libraries,
            "clients_only": self.clients_only,
            "generated_at": self.generated_at.isoformat(),
        }


def build_architecture(
    snapshots: Iterable[RepositorySnapshot],
    module: str = "",
    radius: int = 1,
    ignores: Iterable[str] = (),
    clients_only: bool = False,
    same_domain_only: bool = True,
    classifier: ClientClassifier | ClassifierConfig | None = None,
    ref: str = "",
) -> ArchitectureResult:
    """
    Build, focus and render the fleet graph.

    Raises:
        NodeNotFoundError: ``module`` is given but no node matches it.
    """
    module = module.strip()
    radius = max(radius, 0)
    graph = build_graph(snapshots, ignores, clients_only=clients_only, classifier=classifier)

    if module:
        center = resolve_node(graph, module)
        if center is None:
            raise NodeNotFoundError(module)
        if same_domain_only:
            graph = filter_by_domain(graph, center, radius)
        else:
            graph = filter_by_radius(graph, center, radius)
        logger.debug(f"Focused on {center} (radius={radius}, same_domain={same_domain_only})")

    return ArchitectureResult(
        module=module or FULL_FLEET_MODULE,
        radius=radius,
        ref=ref,
        graph=graph,
        mermaid=render_mermaid(graph),
        libraries=summarize_libraries(graph),
        clients_only=clients_only,
    )
