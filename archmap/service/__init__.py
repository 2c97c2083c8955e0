"""Fleet orchestration: cache maintenance, search and architecture views."""

from archmap.service.architecture import ArchitectureResult, build_architecture
from archmap.service.clients import ClientPackage, list_client_packages
from archmap.service.projects import ProjectService

__all__ = [
    "ArchitectureResult",
    "ClientPackage",
    "ProjectService",
    "build_architecture",
    "list_client_packages",
]
