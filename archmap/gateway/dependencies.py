"""FastAPI dependencies shared by the route modules."""

from fastapi import Request

from archmap.service.projects import ProjectService


def get_service(request: Request) -> ProjectService:
    return request.app.state.service


def split_csv(value: str | None) -> list[str]:
    """``"a, b,,c"`` -> ``["a", "b", "c"]``."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]
