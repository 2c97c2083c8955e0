"""
Architecture routes: GET /api/architecture, GET /api/architecture/full and
the stored architecture files under /api/architecture/files.
"""

from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel, Field

from archmap.gateway.dependencies import get_service, split_csv
from archmap.gateway.errors import http_error
from archmap.graph.mermaid import render_mermaid
from archmap.service.projects import ProjectService
from archmap.shared.exceptions import ArchmapError
from archmap.shared.logging import setup_logging

logger = setup_logging("archmap.gateway.routes.architecture", level="INFO")

router = APIRouter()


# ─── Response Models ────────────────────────────────────────


class ArchitectureResponse(BaseModel):
    """JSON body of GET /api/architecture?format=json."""

    module: str = Field(..., description="Requested module, or 'all' for the whole fleet")
    radius: int = Field(..., description="Hop radius applied around the module")
    ref: str = Field(..., description="Git ref scanned, or 'cache'")
    mermaid: str = Field("", description="Mermaid flowchart of the graph")
    graph: dict[str, Any] = Field(default_factory=dict, description="Nodes and edges")
    libraries: list[dict[str, str]] = Field(
        default_factory=list, description="Client libraries present in the graph"
    )
    clients_only: bool = Field(False, description="Classification requested by the caller")
    generated_at: str = Field(..., description="Generation timestamp (ISO 8601)")


def _render(result, fmt: str):
    if fmt == "mermaid":
        return PlainTextResponse(result.mermaid)
    return ArchitectureResponse(**result.to_dict())


# ─── GET /api/architecture ──────────────────────────────────


@router.get("/architecture")
async def get_architecture(
    module: str = Query("", description="Module path, node id or service name to focus on"),
    radius: int = Query(1, description="Neighborhood radius in hops (negative values count as 0)"),
    ref: str = Query("", description="Git ref to scan live instead of using the cache"),
    ignore: str | None = Query(None, description="Comma-separated ignore substrings"),
    clients_only: bool = Query(False),
    same_domain: bool = Query(True, description="Keep the neighborhood inside the module's domain"),
    format: Literal["mermaid", "json"] = Query("mermaid"),
    service: ProjectService = Depends(get_service),
):
    """Architecture view around one module (the whole fleet when empty).

    Returns Mermaid text by default, or the full JSON document with
    ``format=json``.
    """
    logger.debug(f"Architecture request: module={module!r} radius={radius} clients_only={clients_only}")
    try:
        result = await service.generate_architecture(
            module,
            radius=radius,
            ignores=split_csv(ignore),
            clients_only=clients_only,
            same_domain_only=same_domain,
            ref=ref,
        )
    except ArchmapError as e:
        logger.warning(f"Architecture request failed: {e}")
        raise http_error(e) from e
    return _render(result, format)


# ─── GET /api/architecture/full ─────────────────────────────


@router.get("/architecture/full")
async def get_full_architecture(
    ignore: str | None = Query(None, description="Comma-separated ignore substrings"),
    clients_only: bool = Query(False),
    format: Literal["mermaid", "json"] = Query("json"),
    service: ProjectService = Depends(get_service),
):
    """Architecture of the whole cached fleet."""
    try:
        result = await service.generate_full_architecture(
            ignores=split_csv(ignore), clients_only=clients_only
        )
    except ArchmapError as e:
        raise http_error(e) from e
    if not result.graph.nodes and format == "json":
        logger.info("Full architecture requested but the cache is empty")
    return _render(result, format)


# ─── Stored architecture files ──────────────────────────────


class ArchitectureFileResponse(BaseModel):
    filename: str
    size: int
    modified_at: str
    type: str = Field(..., description="json or mermaid")
    module: str = Field("", description="Module part of '<module>-arch.<ext>' names")


class ArchitectureFileListResponse(BaseModel):
    files: list[ArchitectureFileResponse] = Field(default_factory=list)
    count: int = 0


@router.get("/architecture/files", response_model=ArchitectureFileListResponse)
async def list_architecture_files(
    service: ProjectService = Depends(get_service),
) -> ArchitectureFileListResponse:
    """Architecture files written by the CLI."""
    stored = await service.list_architecture_files()
    return ArchitectureFileListResponse(
        files=[ArchitectureFileResponse(**f.to_dict()) for f in stored],
        count=len(stored),
    )


@router.get("/architecture/files/{filename}")
async def get_architecture_file(
    filename: str,
    service: ProjectService = Depends(get_service),
) -> Response:
    """Raw content of one stored file (``text/plain`` for Mermaid)."""
    try:
        content, content_type = await service.get_architecture_file(filename)
    except ArchmapError as e:
        logger.warning(f"Architecture file request failed: {e}")
        raise http_error(e) from e
    return Response(content=content, media_type=content_type)


@router.get("/architecture/files/{filename}/mermaid")
async def render_architecture_file(
    filename: str,
    service: ProjectService = Depends(get_service),
) -> PlainTextResponse:
    """Re-render a stored JSON graph as Mermaid."""
    try:
        graph = await service.load_architecture_graph(filename)
    except ArchmapError as e:
        raise http_error(e) from e
    return PlainTextResponse(render_mermaid(graph))
