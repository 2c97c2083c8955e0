"""Snapshot cache: content fingerprints, storage and change detection."""

from archmap.cache.changes import ChangeSet, detect_changes
from archmap.cache.fingerprint import project_hash, search_hash
from archmap.cache.store import ALL_PROJECTS_KEY, CachedProject, SnapshotCacheStore

__all__ = [
    "ALL_PROJECTS_KEY",
    "CachedProject",
    "ChangeSet",
    "SnapshotCacheStore",
    "detect_changes",
    "project_hash",
    "search_hash",
]
