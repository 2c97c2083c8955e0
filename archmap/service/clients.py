"""
Client package listing.

Lists, per repository, every dependency that looks like an internal client
under the loose rule (internal prefix + ``client`` anywhere in the path),
whatever classification the graph uses. Meant for auditing which client
packages and versions are in use across the fleet.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from archmap.graph.builder import should_ignore_repository
from archmap.graph.classifier import derive_label, is_client_module_loose
from archmap.shared.models import RepositorySnapshot


@dataclass
class ClientPackage:
    project: str
    label: str
    version: str
    module: str

    def to_dict(self) -> dict[str, str]:
        return {
            "project": self.project,
            "label": self.label,
            "version": self.version,
            "module": self.module,
        }

    def __str__(self) -> str:
        return f"{self.project} : {self.label} -> {self.version}"


def list_client_packages(
    snapshots: Iterable[RepositorySnapshot],
    internal_prefix: str,
    ignores: Iterable[str] = (),
) -> list[ClientPackage]:
    ignores = [i for i in ignores if i.strip()]
    rows = []
    for repo in snapshots:
        if should_ignore_repository(repo.path, ignores):
            continue
        for lib in repo.libraries:
            if not is_client_module_loose(lib.name, internal_prefix):
                continue
            rows.append(ClientPackage(
                project=repo.name or repo.short_name,
                label=derive_label(lib.name),
                version=lib.version,
                module=lib.name,
            ))
    return rows
