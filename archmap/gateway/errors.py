"""Mapping from archmap errors to HTTP responses."""

from fastapi import HTTPException

from archmap.shared.exceptions import (
    ArchitectureFileError,
    ArchitectureFileNotFoundError,
    ArchmapError,
    CacheUnavailableError,
    GitLabError,
    NodeNotFoundError,
)

_STATUS_BY_ERROR: list[tuple[type[ArchmapError], int]] = [
    (NodeNotFoundError, 404),
    (ArchitectureFileNotFoundError, 404),
    (ArchitectureFileError, 400),
    (CacheUnavailableError, 503),
    (GitLabError, 502),
]


def http_error(exc: ArchmapError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
