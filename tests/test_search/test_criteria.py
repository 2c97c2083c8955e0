"""
Tests for search matching and suggestions over the sample fleet.
"""

from archmap.search.criteria import (
    filter_projects,
    matches_criteria,
    matches_detailed_criteria,
    suggest_go_versions,
    suggest_libraries,
    suggest_library_versions,
    suggest_modules,
)
from archmap.shared.models import SearchCriteria

BILLING_CLIENT = "git.example.com/org/openapi/clients/go/billingclient/v2"


def _ids(projects):
    return [p.id for p in projects]


class TestMatching:
    def test_empty_criteria_matches_everything(self, fleet):
        assert _ids(filter_projects(fleet, SearchCriteria())) == [1, 2, 3, 4]

    def test_group_is_path_substring(self, fleet):
        assert matches_criteria(fleet[0], SearchCriteria(group="payments")) is True
        assert matches_criteria(fleet[2], SearchCriteria(group="payments")) is False

    def test_tag_ignores_case(self, fleet):
        assert matches_criteria(fleet[1], SearchCriteria(tag="LEDG")) is True

    def test_go_version_exact(self, fleet):
        criteria = SearchCriteria(go_version="1.22.3")
        assert _ids(filter_projects(fleet, criteria)) == [1, 3]

    def test_go_version_comparison(self, fleet):
        criteria = SearchCriteria(go_version="1.22", go_version_comparison="lt")
        assert _ids(filter_projects(fleet, criteria)) == [2]

    def test_library_by_exact_name(self, fleet):
        assert _ids(filter_projects(fleet, SearchCriteria(library=BILLING_CLIENT))) == [1, 2]
        assert filter_projects(fleet, SearchCriteria(library="billingclient")) == []

    def test_library_version(self, fleet):
        criteria = SearchCriteria(library=BILLING_CLIENT, version="v2.2.0", version_comparison="gte")
        assert _ids(filter_projects(fleet, criteria)) == [1]

    def test_library_version_exact(self, fleet):
        criteria = SearchCriteria(library=BILLING_CLIENT, version="v2.1.0")
        assert matches_detailed_criteria(fleet[1], criteria) is True
        assert matches_detailed_criteria(fleet[0], criteria) is False

    def test_all_filters_must_hold(self, fleet):
        criteria = SearchCriteria(group="identity", library=BILLING_CLIENT)
        assert filter_projects(fleet, criteria) == []


class TestSuggestions:
    def test_libraries(self, fleet):
        assert suggest_libraries(fleet, "client") == [
            BILLING_CLIENT,
            "git.example.com/org/openapi/clients/go/usersclient",
        ]

    def test_libraries_unique_and_limited(self, fleet):
        assert suggest_libraries(fleet, "", limit=2) == [
            "git.example.com/org/openapi/clients/go/billingclient/v2",
            "git.example.com/org/openapi/clients/go/usersclient",
        ]
        assert len(suggest_libraries(fleet)) == 4

    def test_go_versions_skip_blank(self, fleet):
        assert suggest_go_versions(fleet) == ["1.21", "1.22.3"]

    def test_library_versions(self, fleet):
        assert suggest_library_versions(fleet, BILLING_CLIENT) == ["v2.1.0", "v2.3.0"]
        assert suggest_library_versions(fleet, BILLING_CLIENT, "2.3") == ["v2.3.0"]
        assert suggest_library_versions(fleet, "unknown") == []

    def test_modules_are_paths(self, fleet):
        assert suggest_modules(fleet, "PAY") == ["platform/payments/api", "platform/payments/ledger"]

    def test_zero_limit(self, fleet):
        assert suggest_modules(fleet, limit=0) == []


class TestProjectsWithoutManifest:
    def test_never_match_detailed_filters(self, fleet):
        playground = fleet[3]
        assert matches_detailed_criteria(playground, SearchCriteria(go_version="", group="sandbox")) is True
        assert matches_detailed_criteria(playground, SearchCriteria(go_version="1.22", go_version_comparison="lt")) is False
        assert matches_detailed_criteria(playground, SearchCriteria(library=BILLING_CLIENT)) is False
