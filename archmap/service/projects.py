"""
Project Service

Coordinates the GitLab source, the snapshot cache and the graph core:

- fleet cache loading, per-project refresh and change detection
- project search (cache first, live GitLab scan otherwise)
- autocomplete suggestions from the cached fleet
- architecture views over the cached (or freshly scanned) fleet
- the client package listing and the stored architecture files

The cache store is synchronous (SQLAlchemy); calls to it run in a worker
thread so the event loop never blocks on the database.
"""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from archmap.cache.changes import ChangeSet, detect_changes
from archmap.cache.fingerprint import project_hash, search_hash
from archmap.cache.store import ALL_PROJECTS_KEY, SnapshotCacheStore
from archmap.graph.classifier import ClientClassifier
from archmap.graph.types import Graph
from archmap.scanner.gitlab import GitLabClient
from archmap.search import criteria as search
from archmap.service import files
from archmap.service.architecture import FULL_FLEET_MODULE, ArchitectureResult, build_architecture
from archmap.service.clients import ClientPackage, list_client_packages
from archmap.shared.config import ClassifierConfig
from archmap.shared.exceptions import ArchmapError, CacheUnavailableError
from archmap.shared.models import RepositorySnapshot, SearchCriteria

logger = logging.getLogger("archmap.service.projects")

CACHE_REF = "cache"


class ProjectService:
    """
    Fleet-level operations shared by the HTTP gateway and scheduled jobs.

    Usage::

        service = ProjectService(gitlab, store, classifier=ClassifierConfig())
        await service.load_initial_cache()
        result = await service.generate_architecture("billing", radius=2)
    """

    def __init__(
        self,
        source: GitLabClient | None,
        store: SnapshotCacheStore | None,
        classifier: ClassifierConfig | None = None,
        default_ignores: Iterable[str] = (),
        roots: Iterable[str] = (),
        architecture_dir: str | Path = ".",
    ):
        self._source = source
        self._store = store
        self._classifier = ClientClassifier(classifier)
        self._default_ignores = [i for i in default_ignores if i.strip()]
        self._roots = [r for r in roots if r.strip()]
        self._architecture_dir = Path(architecture_dir)
        self._background: set[asyncio.Task] = set()

    # ─── Helpers ────────────────────────────────────────────

    def _require_store(self) -> SnapshotCacheStore:
        if self._store is None:
            raise CacheUnavailableError()
        return self._store

    def _require_source(self) -> GitLabClient:
        if self._source is None:
            raise ArchmapError("no GitLab source configured", component="service")
        return self._source

    def _ignores(self, ignores: Iterable[str]) -> list[str]:
        return self._default_ignores + [i for i in ignores if i.strip()]

    async def _cached_fleet(self) -> list[RepositorySnapshot]:
        store = self._require_store()
        return await asyncio.to_thread(store.get_cached_projects, ALL_PROJECTS_KEY)

    @staticmethod
    def _hashes(projects: Iterable[RepositorySnapshot]) -> dict[int, str]:
        return {p.id: project_hash(p) for p in projects}

    # ─── Cache maintenance ──────────────────────────────────

    async def load_initial_cache(self, ref: str = "") -> int:
        """Scan the whole fleet and replace the fleet-wide cache entry."""
        store = self._require_store()
        snapshots = await self._require_source().scan_fleet(ref=ref, roots=self._roots)
        await asyncio.to_thread(store.cache_projects, snapshots, ALL_PROJECTS_KEY, self._hashes(snapshots))
        logger.info(f"Loaded {len(snapshots)} projects into the snapshot cache")
        return len(snapshots)

    async def refresh_project(self, project_id: int, ref: str = "") -> RepositorySnapshot:
        """Re-scan one project and update its fleet-wide cache entry."""
        store = self._require_store()
        snapshot = await self._require_source().get_project_snapshot(project_id, ref)
        await asyncio.to_thread(store.upsert_project, ALL_PROJECTS_KEY, snapshot, project_hash(snapshot))
        logger.info(f"Refreshed project {snapshot.path} ({project_id}) in cache")
        return snapshot

    async def changed_projects(self, ref: str = "") -> ChangeSet:
        """Compare the cached fleet against a fresh scan."""
        store = self._require_store()
        cached = await asyncio.to_thread(store.get_cached_projects_with_hashes, ALL_PROJECTS_KEY)
        current = await self._require_source().scan_fleet(ref=ref, roots=self._roots)
        changes = detect_changes(cached, current)
        logger.debug(
            f"Change detection: {len(changes.changed)} changed, {len(changes.added)} added, "
            f"{len(changes.removed)} removed, {len(changes.unchanged)} unchanged"
        )
        return changes

    async def clear_cache(self) -> None:
        await asyncio.to_thread(self._require_store().clear_all)

    async def cache_stats(self) -> dict:
        return await asyncio.to_thread(self._require_store().stats)

    # ─── Search ─────────────────────────────────────────────

    async def search_projects(
        self,
        criteria: SearchCriteria,
        use_cache: bool = True,
        force_cache: bool = False,
    ) -> list[RepositorySnapshot]:
        """
        Find projects matching ``criteria``.

        Lookup order:
        1. (use_cache) results stored under this criteria's search hash
        2. (use_cache or force_cache) the fleet-wide cache, filtered
        3. (unless force_cache) a live GitLab scan, filtered; the result is
           written back to the cache in the background
        """
        key = search_hash(criteria)

        if (use_cache or force_cache) and self._store is not None:
            store = self._store
            if use_cache and await asyncio.to_thread(store.is_cache_valid, key):
                return await asyncio.to_thread(store.get_cached_projects, key)
            if await asyncio.to_thread(store.is_cache_valid, ALL_PROJECTS_KEY):
                fleet = await asyncio.to_thread(store.get_cached_projects, ALL_PROJECTS_KEY)
                return search.filter_projects(fleet, criteria)

        if force_cache:
            return []

        snapshots = await self._require_source().scan_fleet(roots=self._roots)
        matches = search.filter_projects(snapshots, criteria)
        if self._store is not None:
            self._spawn_cache_write(matches, key)
        return matches

    def _spawn_cache_write(self, projects: list[RepositorySnapshot], key: str) -> None:
        task = asyncio.create_task(self._write_cache(projects, key))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _write_cache(self, projects: list[RepositorySnapshot], key: str) -> None:
        try:
            await asyncio.to_thread(self._store.cache_projects, projects, key, self._hashes(projects))
        except SQLAlchemyError as e:
            logger.error(f"Failed to cache search results under {key}: {e}")

    async def wait_for_background_writes(self) -> None:
        """Await every pending background cache write."""
        while self._background:
            await asyncio.gather(*list(self._background))

    # ─── Suggestions ────────────────────────────────────────

    async def suggest_libraries(self, query: str = "", limit: int = search.DEFAULT_SUGGESTION_LIMIT) -> list[str]:
        return search.suggest_libraries(await self._cached_fleet(), query, limit)

    async def suggest_go_versions(self, query: str = "", limit: int = search.DEFAULT_SUGGESTION_LIMIT) -> list[str]:
        return search.suggest_go_versions(await self._cached_fleet(), query, limit)

    async def suggest_library_versions(
        self, library: str, query: str = "", limit: int = search.DEFAULT_SUGGESTION_LIMIT
    ) -> list[str]:
        return search.suggest_library_versions(await self._cached_fleet(), library, query, limit)

    async def suggest_modules(self, query: str = "", limit: int = search.DEFAULT_SUGGESTION_LIMIT) -> list[str]:
        return search.suggest_modules(await self._cached_fleet(), query, limit)

    # ─── Architecture ───────────────────────────────────────

    async def _fleet(self, ref: str) -> tuple[list[RepositorySnapshot], str]:
        """Cached fleet when available and no ref is requested, else a live scan."""
        if not ref and self._store is not None:
            if await asyncio.to_thread(self._store.is_cache_valid, ALL_PROJECTS_KEY):
                return await self._cached_fleet(), CACHE_REF
        if self._source is None:
            return [], CACHE_REF
        return await self._source.scan_fleet(ref=ref, roots=self._roots), ref or "default"

    async def generate_architecture(
        self,
        module: str,
        radius: int = 1,
        ignores: Iterable[str] = (),
        clients_only: bool = False,
        same_domain_only: bool = True,
        ref: str = "",
    ) -> ArchitectureResult:
        """
        Architecture view around ``module``.

        Raises:
            NodeNotFoundError: ``module`` matches no node in the fleet graph.
        """
        snapshots, used_ref = await self._fleet(ref)
        if not snapshots:
            return ArchitectureResult(module=module.strip() or FULL_FLEET_MODULE, radius=radius, ref=used_ref)
        return build_architecture(
            snapshots,
            module=module,
            radius=radius,
            ignores=self._ignores(ignores),
            clients_only=clients_only,
            same_domain_only=same_domain_only,
            classifier=self._classifier,
            ref=used_ref,
        )

    async def generate_full_architecture(
        self, ignores: Iterable[str] = (), clients_only: bool = False
    ) -> ArchitectureResult:
        return await self.generate_architecture("", radius=1, ignores=ignores, clients_only=clients_only)

    # ─── Client packages ────────────────────────────────────

    async def list_client_packages(self, ignores: Iterable[str] = (), ref: str = "") -> list[ClientPackage]:
        """Loosely matched client dependencies per repository (never the graph classifier)."""
        snapshots, _ = await self._fleet(ref)
        return list_client_packages(
            snapshots, self._classifier.config.internal_prefix, self._ignores(ignores)
        )

    # ─── Stored architecture files ──────────────────────────

    async def list_architecture_files(self) -> list[files.ArchitectureFile]:
        return await asyncio.to_thread(files.list_architecture_files, self._architecture_dir)

    async def get_architecture_file(self, filename: str) -> tuple[bytes, str]:
        """
        Raises:
            ArchitectureFileError: invalid name or not a ``.json``/``.mmd`` file.
            ArchitectureFileNotFoundError: no such file.
        """
        return await asyncio.to_thread(files.read_architecture_file, self._architecture_dir, filename)

    async def load_architecture_graph(self, filename: str) -> Graph:
        return await asyncio.to_thread(files.load_architecture_graph, self._architecture_dir, filename)
