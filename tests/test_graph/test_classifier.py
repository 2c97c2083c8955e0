"""
Unit tests for manifest dependency classification and label derivation.
"""

import pytest

from archmap.graph.classifier import (
    ClientClassifier,
    derive_label,
    is_client_module,
    is_client_module_loose,
)
from archmap.shared.config import ClassifierConfig

PREFIX = "git.example.com/org"


class TestStrictClassification:
    @pytest.mark.parametrize("module_path", [
        f"{PREFIX}/openapi/clients/go/fooclient/v2",
        f"{PREFIX}/openapi/clients/go/fooclient",
        f"{PREFIX}/openapi/clients/go/foo-client/v11",
    ])
    def test_generated_clients_match(self, module_path):
        assert is_client_module(module_path, PREFIX) is True

    @pytest.mark.parametrize("module_path", [
        "github.com/gin-gonic/gin",
        f"{PREFIX}/openapi/clients/go",
        f"{PREFIX}/openapi/clients/go/fooclient/v2/extra",
        f"{PREFIX}/openapi/clients/go/fooclient/latest",
        f"{PREFIX}/libs/httpclient",
        f"other.example.com/org/openapi/clients/go/fooclient",
    ])
    def test_everything_else_is_rejected(self, module_path):
        assert is_client_module(module_path, PREFIX) is False

    def test_prefix_is_matched_literally(self):
        # A '.' in the prefix must not act as a regex wildcard
        assert is_client_module("gitXexample.com/org/openapi/clients/go/fooclient", PREFIX) is False

    def test_empty_inputs(self):
        assert is_client_module("", PREFIX) is False
        assert is_client_module(f"{PREFIX}/openapi/clients/go/fooclient", "") is False


class TestLooseClassification:
    def test_any_internal_module_mentioning_client(self):
        assert is_client_module_loose(f"{PREFIX}/libs/httpclient", PREFIX) is True
        assert is_client_module_loose(f"{PREFIX}/sdk/PaymentsClient", PREFIX) is True

    def test_external_modules_never_match(self):
        assert is_client_module_loose("github.com/some/client", PREFIX) is False

    def test_internal_module_without_client(self):
        assert is_client_module_loose(f"{PREFIX}/libs/logging", PREFIX) is False


class TestClientClassifier:
    def test_mode_flag_selects_strategy(self):
        module_path = f"{PREFIX}/libs/httpclient"
        strict = ClientClassifier(ClassifierConfig(internal_prefix=PREFIX, strict=True))
        loose = ClientClassifier(ClassifierConfig(internal_prefix=PREFIX, strict=False))
        assert strict.is_client(module_path) is False
        assert loose.is_client(module_path) is True

    def test_label_delegates_to_derive_label(self):
        classifier = ClientClassifier(ClassifierConfig(internal_prefix=PREFIX))
        assert classifier.label(f"{PREFIX}/openapi/clients/go/fooclient/v2") == "fooclient/v2"


class TestDeriveLabel:
    def test_openapi_segment_keeps_version_directory(self):
        assert derive_label(f"{PREFIX}/openapi/clients/go/fooclient/v2") == "fooclient/v2"

    def test_openapi_segment_without_version(self):
        assert derive_label(f"{PREFIX}/openapi/clients/go/fooclient") == "fooclient"

    def test_client_segment(self):
        assert derive_label(f"{PREFIX}/payments/client/v3") == "client/v3"

    def test_client_segment_is_case_insensitive(self):
        assert derive_label(f"{PREFIX}/payments/Client") == "Client"

    def test_fallback_is_full_path(self):
        assert derive_label("github.com/gin-gonic/gin") == "github.com/gin-gonic/gin"

    def test_openapi_rule_wins_over_client_segment(self):
        assert derive_label(f"{PREFIX}/openapi/clients/go/client/v1") == "client/v1"
