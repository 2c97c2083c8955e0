"""
Project routes: GET /api/projects/search and GET /api/projects/changed.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from archmap.gateway.dependencies import get_service
from archmap.gateway.errors import http_error
from archmap.service.projects import ProjectService
from archmap.shared.exceptions import ArchmapError
from archmap.shared.logging import setup_logging
from archmap.shared.models import SearchCriteria

logger = setup_logging("archmap.gateway.routes.projects", level="INFO")

router = APIRouter()


# ─── Response Models ────────────────────────────────────────


class SearchResponse(BaseModel):
    """Response model for GET /api/projects/search."""

    projects: list[dict[str, Any]] = Field(default_factory=list)
    count: int = Field(0, description="Number of matching projects")
    from_cache: bool = Field(False, description="True if served from the snapshot cache")
    cached_at: str = Field("", description="Response timestamp when served from cache")


class ChangedProjectsResponse(BaseModel):
    """Response model for GET /api/projects/changed."""

    changed: list[dict[str, Any]] = Field(default_factory=list)
    added: list[dict[str, Any]] = Field(default_factory=list)
    removed: list[dict[str, Any]] = Field(default_factory=list)
    unchanged_count: int = 0
    count: int = Field(0, description="Number of changed projects")


# ─── GET /api/projects/search ───────────────────────────────


@router.get("/projects/search", response_model=SearchResponse)
async def search_projects(
    go_version: str = "",
    go_version_comparison: str = "",
    library: str = "",
    version: str = Query("", description="Library version (alias: library_version)"),
    library_version: str = "",
    version_comparison: str = "",
    group: str = "",
    tag: str = "",
    use_cache: bool = False,
    force_cache: bool = False,
    service: ProjectService = Depends(get_service),
) -> SearchResponse:
    """Search the fleet by Go version, library/version, group and tag."""
    criteria = SearchCriteria(
        go_version=go_version,
        go_version_comparison=go_version_comparison,
        library=library,
        version=library_version or version,
        version_comparison=version_comparison,
        group=group,
        tag=tag,
    )
    try:
        projects = await service.search_projects(criteria, use_cache=use_cache, force_cache=force_cache)
    except ArchmapError as e:
        raise http_error(e) from e

    from_cache = (use_cache or force_cache) and bool(projects)
    return SearchResponse(
        projects=[p.to_dict() for p in projects],
        count=len(projects),
        from_cache=from_cache,
        cached_at=datetime.now(timezone.utc).isoformat() if from_cache else "",
    )


# ─── GET /api/projects/changed ──────────────────────────────


@router.get("/projects/changed", response_model=ChangedProjectsResponse)
async def changed_projects(
    ref: str = "",
    service: ProjectService = Depends(get_service),
) -> ChangedProjectsResponse:
    """Projects whose content hash differs from the cached one."""
    try:
        changes = await service.changed_projects(ref=ref)
    except ArchmapError as e:
        raise http_error(e) from e
    return ChangedProjectsResponse(**changes.to_dict(), count=len(changes.changed))
