"""
Webhook route: POST /api/webhook/gitlab.

Push events refresh the pushed project's cache entry; every other event
kind is acknowledged and ignored.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from archmap.gateway.dependencies import get_service
from archmap.gateway.errors import http_error
from archmap.service.projects import ProjectService
from archmap.shared.exceptions import ArchmapError
from archmap.shared.logging import setup_logging

logger = setup_logging("archmap.gateway.routes.webhook", level="INFO")

router = APIRouter()


class WebhookProject(BaseModel):
    id: int
    name: str = ""
    path_with_namespace: str = ""


class GitLabEvent(BaseModel):
    """The fields of a GitLab webhook payload this route reads."""

    object_kind: str
    ref: str = ""
    project: WebhookProject | None = None
    commits: list[dict[str, Any]] = Field(default_factory=list)


@router.post("/webhook/gitlab")
async def gitlab_webhook(
    event: GitLabEvent,
    service: ProjectService = Depends(get_service),
) -> dict:
    if event.object_kind != "push" or event.project is None:
        return {"message": "Webhook received but not a push event, ignoring"}

    logger.info(
        f"Push to {event.project.path_with_namespace or event.project.id} "
        f"({len(event.commits)} commits), refreshing cache entry"
    )
    try:
        await service.refresh_project(event.project.id)
    except ArchmapError as e:
        raise http_error(e) from e
    return {"message": "Project cache refreshed successfully", "project_id": event.project.id}
