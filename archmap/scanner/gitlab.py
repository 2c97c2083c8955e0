"""
GitLab Repository Source

Async client for the subset of the GitLab REST API (v4) the scanner uses:
listing a group's projects, reading project metadata and downloading raw
manifest files at a ref.

Listing failures are fatal for a scan; manifest failures only affect the
repository they belong to.
"""

import asyncio
import logging
from collections.abc import Iterable
from urllib.parse import quote

import httpx

from archmap.graph.builder import should_ignore_repository
from archmap.scanner.gomod import GoModFile, effective_requirements, parse_go_mod
from archmap.shared.config import BaseServiceSettings
from archmap.shared.exceptions import GitLabError, ManifestParseError
from archmap.shared.models import RepositorySnapshot, parse_timestamp

logger = logging.getLogger("archmap.scanner.gitlab")

PAGE_SIZE = 100
MANIFEST_PATH = "go.mod"


def within_roots(path: str, roots: Iterable[str]) -> bool:
    """True when ``path`` equals or lies under one of ``roots`` (no roots: always)."""
    roots = [r.strip().rstrip("/") for r in roots if r.strip()]
    if not roots:
        return True
    return any(path == root or path.startswith(root + "/") for root in roots)


def snapshot_from_project(project: dict, gomod: GoModFile | None = None) -> RepositorySnapshot:
    """Combine GitLab project JSON with its parsed manifest (if any)."""
    stamp = project.get("updated_at") or project.get("last_activity_at")
    snapshot = RepositorySnapshot(
        id=int(project.get("id") or 0),
        name=project.get("name") or "",
        path=project.get("path_with_namespace") or "",
        web_url=project.get("web_url") or "",
        updated_at=parse_timestamp(stamp) if stamp else None,
    )
    if gomod is None:
        return snapshot
    deps = effective_requirements(gomod)
    return RepositorySnapshot.from_dependencies(
        snapshot.path,
        deps,
        id=snapshot.id,
        name=snapshot.name,
        module=gomod.module,
        go_version=gomod.go_version,
        updated_at=snapshot.updated_at,
        web_url=snapshot.web_url,
    )


class GitLabClient:
    """
    Thin async wrapper around ``httpx.AsyncClient``.

    Usage
    -----
    async with GitLabClient.from_settings(settings) as gitlab:
        snapshots = await gitlab.scan_fleet(ref="main", ignores=["sandbox"])
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        group: str = "",
        timeout: float = 30.0,
        max_concurrency: int = 8,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.group = group
        self._max_concurrency = max(1, max_concurrency)
        headers = {"PRIVATE-TOKEN": token} if token else {}
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: BaseServiceSettings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "GitLabClient":
        return cls(
            base_url=settings.gitlab_api_url,
            token=settings.gitlab_token,
            group=settings.group,
            timeout=settings.request_timeout_seconds,
            max_concurrency=settings.max_concurrency,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    # ─── Raw API ────────────────────────────────────────────

    async def _get(self, url: str, params: dict | None = None) -> httpx.Response:
        try:
            response = await self._http.get(url, params=params)
        except httpx.HTTPError as e:
            raise GitLabError(f"request to {url} failed: {e}") from e
        if response.status_code >= 400:
            raise GitLabError(
                f"GET {url} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    async def list_group_projects(self, group: str | None = None) -> list[dict]:
        """All projects of ``group`` including subgroups, following pagination."""
        group = group or self.group
        url = f"/groups/{quote(group, safe='')}/projects"
        projects: list[dict] = []
        page = 1
        while True:
            response = await self._get(url, params={
                "include_subgroups": "true",
                "per_page": PAGE_SIZE,
                "page": page,
            })
            batch = response.json()
            if not batch:
                break
            projects.extend(batch)
            if len(batch) < PAGE_SIZE:
                break
            page += 1
        logger.info(f"Listed {len(projects)} projects in group {group}")
        return projects

    async def get_project(self, project_id: int) -> dict:
        response = await self._get(f"/projects/{project_id}")
        return response.json()

    async def get_raw_file(self, project_id: int, path: str, ref: str = "") -> bytes | None:
        """Raw file contents at ``ref`` (default branch when empty); ``None`` if missing."""
        params = {"ref": ref} if ref.strip() else None
        url = f"/projects/{project_id}/repository/files/{quote(path, safe='')}/raw"
        try:
            response = await self._get(url, params=params)
        except GitLabError as e:
            if e.status_code == 404:
                return None
            raise
        return response.content

    # ─── Snapshots ──────────────────────────────────────────

    async def _snapshot_for(self, project: dict, ref: str) -> RepositorySnapshot:
        path = project.get("path_with_namespace") or ""
        try:
            data = await self.get_raw_file(int(project["id"]), MANIFEST_PATH, ref)
        except GitLabError as e:
            logger.warning(f"Skipping manifest of {path}: {e}")
            return snapshot_from_project(project)
        if data is None:
            logger.info(f"No {MANIFEST_PATH} in {path}")
            return snapshot_from_project(project)
        try:
            gomod = parse_go_mod(data, filename=f"{path}/{MANIFEST_PATH}")
        except ManifestParseError as e:
            logger.warning(f"Ignoring malformed manifest: {e}")
            return snapshot_from_project(project)
        return snapshot_from_project(project, gomod)

    async def get_project_snapshot(self, project_id: int, ref: str = "") -> RepositorySnapshot:
        project = await self.get_project(project_id)
        return await self._snapshot_for(project, ref)

    async def scan_fleet(
        self,
        ref: str = "",
        ignores: Iterable[str] = (),
        roots: Iterable[str] = (),
    ) -> list[RepositorySnapshot]:
        """
        Snapshot every repository of the configured group.

        Ignored repositories and those outside ``roots`` are dropped before
        any manifest is fetched. Manifests are downloaded concurrently; the
        result keeps the listing order.
        """
        ignores = list(ignores)
        roots = list(roots)
        projects = [
            p for p in await self.list_group_projects()
            if not should_ignore_repository(p.get("path_with_namespace") or "", ignores)
            and within_roots(p.get("path_with_namespace") or "", roots)
        ]

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def fetch(project: dict) -> RepositorySnapshot:
            async with semaphore:
                return await self._snapshot_for(project, ref)

        snapshots = await asyncio.gather(*(fetch(p) for p in projects))
        with_manifest = sum(1 for s in snapshots if s.has_module_identity())
        logger.info(f"Scanned {len(snapshots)} repositories ({with_manifest} with a manifest)")
        return list(snapshots)
