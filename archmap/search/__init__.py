"""Fleet search: version comparison, criteria matching and suggestions."""

from archmap.search.criteria import (
    filter_projects,
    matches_criteria,
    matches_detailed_criteria,
    suggest_go_versions,
    suggest_libraries,
    suggest_library_versions,
    suggest_modules,
)
from archmap.search.versions import compare_versions, parse_version

__all__ = [
    "compare_versions",
    "filter_projects",
    "matches_criteria",
    "matches_detailed_criteria",
    "parse_version",
    "suggest_go_versions",
    "suggest_libraries",
    "suggest_library_versions",
    "suggest_modules",
]
