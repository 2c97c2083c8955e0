"""
Cache routes: fleet cache loading (as a background job), refresh, clear
and statistics.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field

from archmap.gateway.dependencies import get_service
from archmap.gateway.errors import http_error
from archmap.service.projects import ProjectService
from archmap.shared.exceptions import ArchmapError
from archmap.shared.logging import generate_correlation_id, setup_logging

logger = setup_logging("archmap.gateway.routes.cache", level="INFO")

router = APIRouter()


# ─── Job tracking ───────────────────────────────────────────


@dataclass
class Job:
    """Tracks a background cache load."""

    job_id: str
    status: str = "pending"           # pending -> running -> completed | failed
    ref: str = ""
    result: dict | None = None
    error: str | None = None
    created_at: str = ""
    completed_at: str | None = None


_jobs: dict[str, Job] = {}


def _create_job(ref: str) -> Job:
    job = Job(
        job_id=generate_correlation_id(),
        ref=ref,
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    _jobs[job.job_id] = job
    return job


async def _run_load_job(job: Job, service: ProjectService) -> None:
    job.status = "running"
    logger.info(f"[{job.job_id}] Loading fleet into cache (ref={job.ref or 'default'})")
    try:
        count = await service.load_initial_cache(ref=job.ref)
    except ArchmapError as e:
        logger.error(f"[{job.job_id}] Cache load failed: {e}")
        job.status = "failed"
        job.error = str(e)
    else:
        job.status = "completed"
        job.result = {"projects_cached": count}
        logger.info(f"[{job.job_id}] Cached {count} projects")
    job.completed_at = datetime.now(timezone.utc).isoformat()


# ─── Request/Response Models ────────────────────────────────


class LoadRequest(BaseModel):
    ref: str = Field("", description="Git ref to scan (default branch when empty)")


class JobResponse(BaseModel):
    """Response model for POST /api/cache/load and GET /api/cache/jobs/{job_id}."""

    job_id: str
    status: str = Field(..., description="pending, running, completed or failed")
    result: dict[str, Any] | None = None
    error: str | None = None
    created_at: str = ""
    completed_at: str | None = None


class RefreshProjectRequest(BaseModel):
    project_id: int = Field(..., gt=0, description="GitLab project id")
    ref: str = ""


class MessageResponse(BaseModel):
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


def _job_response(job: Job) -> JobResponse:
    return JobResponse(
        job_id=job.job_id,
        status=job.status,
        result=job.result,
        error=job.error,
        created_at=job.created_at,
        completed_at=job.completed_at,
    )


# ─── POST /api/cache/load ───────────────────────────────────


@router.post("/cache/load", response_model=JobResponse, status_code=202)
async def load_cache(
    background_tasks: BackgroundTasks,
    request: LoadRequest | None = None,
    service: ProjectService = Depends(get_service),
) -> JobResponse:
    """Start a full fleet scan into the cache; poll the returned job id."""
    job = _create_job(request.ref if request else "")
    background_tasks.add_task(_run_load_job, job, service)
    return _job_response(job)


@router.get("/cache/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: str) -> JobResponse:
    job = _jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Unknown job: {job_id}")
    return _job_response(job)


# ─── Synchronous maintenance ────────────────────────────────


@router.post("/cache/refresh", response_model=MessageResponse)
async def refresh_cache(service: ProjectService = Depends(get_service)) -> MessageResponse:
    """Reload the whole fleet and wait for it."""
    try:
        count = await service.load_initial_cache()
    except ArchmapError as e:
        raise http_error(e) from e
    return MessageResponse(message="Cache refreshed successfully", details={"projects_cached": count})


@router.post("/cache/refresh-project", response_model=MessageResponse)
async def refresh_project(
    request: RefreshProjectRequest,
    service: ProjectService = Depends(get_service),
) -> MessageResponse:
    try:
        snapshot = await service.refresh_project(request.project_id, ref=request.ref)
    except ArchmapError as e:
        raise http_error(e) from e
    return MessageResponse(
        message="Project cache refreshed successfully",
        details={"project_id": snapshot.id, "path": snapshot.path},
    )


@router.post("/cache/clear", response_model=MessageResponse)
async def clear_cache(service: ProjectService = Depends(get_service)) -> MessageResponse:
    try:
        await service.clear_cache()
    except ArchmapError as e:
        raise http_error(e) from e
    return MessageResponse(message="All cache cleared successfully")


@router.get("/cache/stats")
async def cache_stats(service: ProjectService = Depends(get_service)) -> dict:
    try:
        return await service.cache_stats()
    except ArchmapError as e:
        raise http_error(e) from e
