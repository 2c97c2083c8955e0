"""
Repository Snapshot Models

Data classes describing one scanned repository and the search criteria
used to select repositories from the fleet. Used by the scanner, the
graph builder, the fingerprinting code and the snapshot cache.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Library:
    """A module dependency declared in a manifest (version already effective)."""

    name: str
    version: str = ""


@dataclass
class RepositorySnapshot:
    """A repository and its parsed manifest at one point in time."""

    path: str
    id: int = 0
    name: str = ""
    module: str = ""  # module path declared by the manifest
    go_version: str = ""
    updated_at: datetime | None = None
    web_url: str = ""
    libraries: list[Library] = field(default_factory=list)

    @classmethod
    def from_dependencies(
        cls, path: str, dependencies: dict[str, str], **kwargs
    ) -> "RepositorySnapshot":
        """Build a snapshot from a ``{module path: version}`` mapping."""
        libraries = [Library(name=name, version=ver) for name, ver in dependencies.items()]
        return cls(path=path, libraries=libraries, **kwargs)

    @property
    def module_dependencies(self) -> dict[str, str]:
        return {lib.name: lib.version for lib in self.libraries}

    @property
    def short_name(self) -> str:
        """Final ``/``-delimited segment of the repository path."""
        trimmed = self.path.rstrip("/")
        return trimmed.rsplit("/", 1)[-1] if trimmed else self.path

    def has_module_identity(self) -> bool:
        """True when the repository carried a parseable, non-empty manifest."""
        return bool(self.module or self.go_version or self.libraries)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "path_with_namespace": self.path,
            "module": self.module,
            "go_version": self.go_version,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "web_url": self.web_url,
            "libraries": [{"name": lib.name, "version": lib.version} for lib in self.libraries],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RepositorySnapshot":
        updated_at = data.get("updated_at")
        return cls(
            id=int(data.get("id") or 0),
            name=data.get("name") or "",
            path=data.get("path_with_namespace") or data.get("path") or "",
            module=data.get("module") or "",
            go_version=data.get("go_version") or "",
            updated_at=parse_timestamp(updated_at) if updated_at else None,
            web_url=data.get("web_url") or "",
            libraries=[
                Library(name=lib["name"], version=lib.get("version") or "")
                for lib in data.get("libraries") or []
            ],
        )


@dataclass
class SearchCriteria:
    """Search parameters for selecting repositories from the fleet."""

    go_version: str = ""
    go_version_comparison: str = ""
    library: str = ""
    version: str = ""
    version_comparison: str = ""
    group: str = ""
    tag: str = ""


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601/RFC3339 timestamp as returned by GitLab."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
