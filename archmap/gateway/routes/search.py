"""
Suggestion routes: GET /api/search/{libraries,go-versions,library-versions,modules}.

All answers come from the fleet-wide snapshot cache.
"""

from fastapi import APIRouter, Depends, Query

from archmap.gateway.dependencies import get_service
from archmap.gateway.errors import http_error
from archmap.service.projects import ProjectService
from archmap.shared.exceptions import ArchmapError

router = APIRouter()

_LIMIT = Query(20, ge=1, le=100)


@router.get("/search/libraries")
async def search_libraries(
    q: str = "", limit: int = _LIMIT, service: ProjectService = Depends(get_service)
) -> dict:
    try:
        libraries = await service.suggest_libraries(q, limit)
    except ArchmapError as e:
        raise http_error(e) from e
    return {"libraries": libraries, "count": len(libraries)}


@router.get("/search/go-versions")
async def search_go_versions(
    q: str = "", limit: int = _LIMIT, service: ProjectService = Depends(get_service)
) -> dict:
    try:
        versions = await service.suggest_go_versions(q, limit)
    except ArchmapError as e:
        raise http_error(e) from e
    return {"versions": versions, "count": len(versions)}


@router.get("/search/library-versions")
async def search_library_versions(
    library: str = Query(..., min_length=1),
    q: str = "",
    limit: int = _LIMIT,
    service: ProjectService = Depends(get_service),
) -> dict:
    try:
        versions = await service.suggest_library_versions(library, q, limit)
    except ArchmapError as e:
        raise http_error(e) from e
    return {"library": library, "versions": versions, "count": len(versions)}


@router.get("/search/modules")
async def search_modules(
    q: str = "", limit: int = _LIMIT, service: ProjectService = Depends(get_service)
) -> dict:
    try:
        modules = await service.suggest_modules(q, limit)
    except ArchmapError as e:
        raise http_error(e) from e
    return {"modules": modules, "count": len(modules)}
