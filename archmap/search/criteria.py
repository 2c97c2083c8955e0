"""
Search criteria matching and suggestion helpers.

Suggestions are drawn from a list of cached snapshots: unique values,
filtered by a case-insensitive substring, sorted and truncated.
"""

from collections.abc import Iterable

from archmap.search.versions import compare_versions
from archmap.shared.models import RepositorySnapshot, SearchCriteria

DEFAULT_SUGGESTION_LIMIT = 20


def matches_criteria(project: RepositorySnapshot, criteria: SearchCriteria) -> bool:
    """Coarse filter: group is a substring of the path, tag of the name (any case)."""
    if criteria.group and criteria.group not in project.path:
        return False
    if criteria.tag and criteria.tag.lower() not in project.name.lower():
        return False
    return True


def matches_detailed_criteria(project: RepositorySnapshot, criteria: SearchCriteria) -> bool:
    """
    Go version and library/version filters; all given filters must hold.

    A project without a manifest never matches either filter.
    """
    if (criteria.go_version or criteria.library) and not (project.go_version or project.libraries):
        return False

    if criteria.go_version:
        if not compare_versions(project.go_version, criteria.go_version, criteria.go_version_comparison):
            return False

    if criteria.library:
        for lib in project.libraries:
            if lib.name != criteria.library:
                continue
            if not criteria.version:
                break
            if compare_versions(lib.version, criteria.version, criteria.version_comparison):
                break
        else:
            return False

    return True


def filter_projects(projects: Iterable[RepositorySnapshot], criteria: SearchCriteria) -> list[RepositorySnapshot]:
    return [
        p for p in projects
        if matches_criteria(p, criteria) and matches_detailed_criteria(p, criteria)
    ]


def _suggest(values: Iterable[str], query: str, limit: int) -> list[str]:
    needle = query.lower()
    unique = {v for v in values if v and needle in v.lower()}
    return sorted(unique)[:max(limit, 0)]


def suggest_libraries(projects: Iterable[RepositorySnapshot], query: str = "", limit: int = DEFAULT_SUGGESTION_LIMIT) -> list[str]:
    return _suggest((lib.name for p in projects for lib in p.libraries), query, limit)


def suggest_go_versions(projects: Iterable[RepositorySnapshot], query: str = "", limit: int = DEFAULT_SUGGESTION_LIMIT) -> list[str]:
    return _suggest((p.go_version for p in projects), query, limit)


def suggest_library_versions(
    projects: Iterable[RepositorySnapshot],
    library: str,
    query: str = "",
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[str]:
    """Versions of ``library`` (exact module path) seen across the fleet."""
    return _suggest(
        (lib.version for p in projects for lib in p.libraries if lib.name == library),
        query,
        limit,
    )


def suggest_modules(projects: Iterable[RepositorySnapshot], query: str = "", limit: int = DEFAULT_SUGGESTION_LIMIT) -> list[str]:
    """Repository paths, used to pick an architecture focus."""
    return _suggest((p.path for p in projects), query, limit)
