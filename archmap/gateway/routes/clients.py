"""
Client package route: GET /api/clients.
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from archmap.gateway.dependencies import get_service, split_csv
from archmap.gateway.errors import http_error
from archmap.service.projects import ProjectService
from archmap.shared.exceptions import ArchmapError

router = APIRouter()


class ClientPackageResponse(BaseModel):
    project: str
    label: str
    version: str
    module: str


class ClientListResponse(BaseModel):
    clients: list[ClientPackageResponse] = Field(default_factory=list)
    count: int = 0


@router.get("/clients", response_model=ClientListResponse)
async def list_clients(
    ignore: str | None = Query(None, description="Comma-separated ignore substrings (project paths)"),
    ref: str = Query("", description="Git ref to scan live instead of using the cache"),
    service: ProjectService = Depends(get_service),
) -> ClientListResponse:
    """Every dependency that looks like an internal client, per project."""
    try:
        packages = await service.list_client_packages(split_csv(ignore), ref=ref)
    except ArchmapError as e:
        raise http_error(e) from e
    return ClientListResponse(
        clients=[ClientPackageResponse(**p.to_dict()) for p in packages],
        count=len(packages),
    )
