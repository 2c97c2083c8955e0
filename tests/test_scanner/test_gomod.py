"""
Unit tests for the go.mod parser.
"""

import pytest

from archmap.scanner.gomod import effective_requirements, parse_go_mod
from archmap.shared.exceptions import ManifestParseError

SAMPLE = b"""\
// Payments API
module git.example.com/org/payments/api

go 1.22.3

toolchain go1.22.5

godebug default=go1.21

require git.example.com/org/openapi/clients/go/billingclient/v2 v2.3.0

require (
\tgithub.com/pkg/errors v0.9.1
\tgithub.com/gin-gonic/gin v1.9.1 // indirect
\t"git.example.com/org/libs/quoted" v0.1.0
)

replace (
\tgithub.com/pkg/errors => github.com/pkg/errors v0.9.2
\tgithub.com/gin-gonic/gin v1.9.0 => github.com/gin-gonic/gin v1.9.5
)

replace git.example.com/org/libs/quoted => ../quoted

exclude github.com/pkg/errors v0.8.0

retract [v1.0.0, v1.0.5] // broken release
"""


class TestParseGoMod:
    @pytest.fixture
    def gomod(self):
        return parse_go_mod(SAMPLE)

    def test_module_and_versions(self, gomod):
        assert gomod.module == "git.example.com/org/payments/api"
        assert gomod.go_version == "1.22.3"
        assert gomod.toolchain == "go1.22.5"

    def test_requires_in_order(self, gomod):
        assert [(r.path, r.version) for r in gomod.requires] == [
            ("git.example.com/org/openapi/clients/go/billingclient/v2", "v2.3.0"),
            ("github.com/pkg/errors", "v0.9.1"),
            ("github.com/gin-gonic/gin", "v1.9.1"),
            ("git.example.com/org/libs/quoted", "v0.1.0"),
        ]

    def test_indirect_marker(self, gomod):
        assert [r.indirect for r in gomod.requires] == [False, False, True, False]

    def test_replaces(self, gomod):
        assert len(gomod.replaces) == 3
        local = gomod.replaces[2]
        assert (local.old_path, local.old_version, local.new_path, local.new_version) == (
            "git.example.com/org/libs/quoted", "", "../quoted", "",
        )

    def test_excludes(self, gomod):
        assert gomod.excludes == [("github.com/pkg/errors", "v0.8.0")]

    def test_accepts_str(self):
        assert parse_go_mod("module a/b\n").module == "a/b"

    def test_empty_file(self):
        gomod = parse_go_mod(b"")
        assert gomod.module == ""
        assert gomod.requires == []


class TestEffectiveRequirements:
    def test_replace_rules(self):
        deps = effective_requirements(parse_go_mod(SAMPLE))
        assert deps == {
            "git.example.com/org/openapi/clients/go/billingclient/v2": "v2.3.0",
            # unversioned replace applies to any required version
            "github.com/pkg/errors": "v0.9.2",
            # versioned replace only applies to the version it names
            "github.com/gin-gonic/gin": "v1.9.1",
            # directory replacement keeps the required version
            "git.example.com/org/libs/quoted": "v0.1.0",
        }

    def test_first_matching_replacement_wins(self):
        gomod = parse_go_mod(
            "module m\n"
            "require a/b v1.0.0\n"
            "replace a/b v1.0.0 => a/b v1.0.1\n"
            "replace a/b => a/b v9.9.9\n"
        )
        assert effective_requirements(gomod) == {"a/b": "v1.0.1"}

    def test_paths_are_never_rewritten(self):
        gomod = parse_go_mod("module m\nrequire a/b v1.0.0\nreplace a/b => fork/b v1.2.0\n")
        assert effective_requirements(gomod) == {"a/b": "v1.2.0"}


class TestMalformed:
    @pytest.mark.parametrize("text, line", [
        ("module a\nfrobnicate x\n", 2),
        ("module a\nrequire (\n\ta/b v1.0.0\n", 2),
        ("module a\nrequire a/b\n", 2),
        ("module a\nmodule b\n", 2),
        ("module a\ngo banana\n", 2),
        ("module a\nreplace a/b v1 c/d\n", 2),
        ('module "a\n', 1),
        ("module (\n", 1),
    ])
    def test_raises_with_line(self, text, line):
        with pytest.raises(ManifestParseError) as exc_info:
            parse_go_mod(text)
        assert exc_info.value.line == line
        assert exc_info.value.component == "manifest"

    def test_invalid_utf8(self):
        with pytest.raises(ManifestParseError):
            parse_go_mod(b"module \xff\xfe\n")
