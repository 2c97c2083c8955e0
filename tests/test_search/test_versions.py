"""
Tests for version parsing and comparison.
"""

import pytest

from archmap.search.versions import Version, compare_versions, parse_version


class TestParseVersion:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1.22.3", Version(1, 22, 3)),
            ("v1.22", Version(1, 22, 0)),
            ("v2.3.0-rc1", Version(2, 3, 0)),
            ("0.0.0+build.7", Version(0, 0, 0)),
        ],
    )
    def test_parses(self, raw, expected):
        assert parse_version(raw) == expected

    @pytest.mark.parametrize("raw", ["", "latest", "1", "1.x", "1.2.3.4"])
    def test_rejects(self, raw):
        assert parse_version(raw) is None


class TestCompareVersions:
    def test_exact_is_string_equality(self):
        assert compare_versions("1.21", "1.21") is True
        assert compare_versions("1.21", "1.21", "exact") is True
        # equal numerically, but exact means the literal string
        assert compare_versions("1.21", "1.21.0") is False

    @pytest.mark.parametrize(
        "actual, wanted, comparison, expected",
        [
            ("1.22.3", "1.21", "gt", True),
            ("1.21", "1.21", "gt", False),
            ("1.21", "1.21.0", "gte", True),
            ("v1.9.1", "v1.10.0", "lt", True),
            ("1.10", "1.9", "greater", True),
            ("1.20", "1.20.0", "less_equal", True),
            ("1.20", "1.20.1", "greater_equal", False),
        ],
    )
    def test_ordering(self, actual, wanted, comparison, expected):
        assert compare_versions(actual, wanted, comparison) is expected

    def test_unknown_comparison_is_parsed_equality(self):
        assert compare_versions("1.21", "v1.21.0", "about") is True

    def test_unparseable_falls_back_to_strings(self):
        assert compare_versions("master", "main", "gt") is True
        assert compare_versions("", "1.21", "lt") is True
