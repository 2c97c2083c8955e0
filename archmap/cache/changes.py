"""
Change detection between a cached fleet snapshot and a fresh scan.

Equal ``project_hash`` means unchanged; nothing else is compared.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from archmap.cache.fingerprint import project_hash
from archmap.cache.store import CachedProject
from archmap.shared.models import RepositorySnapshot

logger = logging.getLogger("archmap.cache.changes")


@dataclass
class ChangeSet:
    changed: list[RepositorySnapshot] = field(default_factory=list)
    unchanged: list[RepositorySnapshot] = field(default_factory=list)
    added: list[RepositorySnapshot] = field(default_factory=list)
    removed: list[RepositorySnapshot] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed or self.added or self.removed)

    def to_dict(self) -> dict:
        return {
            "changed": [p.to_dict() for p in self.changed],
            "added": [p.to_dict() for p in self.added],
            "removed": [p.to_dict() for p in self.removed],
            "unchanged_count": len(self.unchanged),
        }


def detect_changes(
    cached_entries: Iterable[CachedProject],
    current: Iterable[RepositorySnapshot],
) -> ChangeSet:
    cached_by_id = {entry.project.id: entry for entry in cached_entries}
    result = ChangeSet()
    seen: set[int] = set()

    for snapshot in current:
        seen.add(snapshot.id)
        entry = cached_by_id.get(snapshot.id)
        if entry is None:
            result.added.append(snapshot)
            continue
        if entry.project_hash == project_hash(snapshot):
            result.unchanged.append(snapshot)
        else:
            logger.debug("Project %s changed since last scan", snapshot.path)
            result.changed.append(snapshot)

    result.removed = [e.project for pid, e in cached_by_id.items() if pid not in seen]
    return result
