"""
Unit tests for graph construction from fleet snapshots.
"""

import pytest

from archmap.graph.builder import (
    build_graph,
    should_ignore_library,
    should_ignore_repository,
    summarize_libraries,
)
from archmap.graph.neighborhood import filter_by_radius
from archmap.graph.resolver import resolve_node
from archmap.graph.types import Edge, GraphAccumulator, NodeType
from archmap.shared.config import ClassifierConfig
from archmap.shared.models import RepositorySnapshot

PREFIX = "git.example.com/org"
BILLING_CLIENT = f"{PREFIX}/openapi/clients/go/billingclient/v2"
USERS_CLIENT = f"{PREFIX}/openapi/clients/go/usersclient"


# ─── Two-service scenario ────────────────────────────────────


class TestTwoServiceScenario:
    """svcA and svcB both call barclient; svcA also uses a third-party library."""

    BAR = "org/openapi/clients/go/barclient/v1"

    @pytest.fixture
    def graph(self):
        repos = [
            RepositorySnapshot.from_dependencies(
                "group/teamx/svcA",
                {self.BAR: "v1.2.0", "github.com/pkg/errors": "v0.9.1"},
            ),
            RepositorySnapshot.from_dependencies("group/teamy/svcB", {self.BAR: "v1.3.0"}),
        ]
        return build_graph(repos, classifier=ClassifierConfig(internal_prefix="org"))

    def test_nodes(self, graph):
        assert [n.id for n in graph.nodes] == ["svc:svcA", f"dep:{self.BAR}", "svc:svcB"]
        assert graph.get_node(f"dep:{self.BAR}").label == "barclient/v1"

    def test_edges(self, graph):
        assert graph.edges == (
            Edge("svc:svcA", f"dep:{self.BAR}", "calls", "v1.2.0"),
            Edge("svc:svcB", f"dep:{self.BAR}", "calls", "v1.3.0"),
        )

    def test_third_party_library_is_not_graphed(self, graph):
        assert not any("errors" in node_id for node_id in graph.node_ids())

    def test_resolve_by_service_name(self, graph):
        assert resolve_node(graph, "svcA") == "svc:svcA"

    def test_radius_one_around_svc_a(self, graph):
        sub = filter_by_radius(graph, "svc:svcA", 1)
        assert sub.node_ids() == {"svc:svcA", f"dep:{self.BAR}"}
        assert len(sub.nodes) == 2
        assert sub.edges == (Edge("svc:svcA", f"dep:{self.BAR}", "calls", "v1.2.0"),)
        assert "svc:svcB" not in sub.node_ids()


# ─── Fleet fixture ───────────────────────────────────────────


class TestBuildGraph:
    def test_service_nodes_and_meta(self, fleet, classifier_config):
        graph = build_graph(fleet, classifier=classifier_config)
        api = graph.get_node("svc:api")
        assert api.type is NodeType.SERVICE
        assert api.meta == {
            "module": f"{PREFIX}/payments/api",
            "path": "platform/payments/api",
            "label": "api",
        }

    def test_repository_without_manifest_is_skipped(self, fleet, classifier_config):
        graph = build_graph(fleet, classifier=classifier_config)
        assert "svc:playground" not in graph.node_ids()

    def test_service_without_clients_is_still_a_node(self, fleet, classifier_config):
        graph = build_graph(fleet, classifier=classifier_config)
        assert "svc:users" in graph.node_ids()
        assert not [e for e in graph.edges if "svc:users" in (e.from_id, e.to_id)]

    def test_shared_client_is_one_node(self, fleet, classifier_config):
        graph = build_graph(fleet, classifier=classifier_config)
        client_ids = [n.id for n in graph.nodes if n.type is NodeType.CLIENT]
        assert client_ids == [f"dep:{BILLING_CLIENT}", f"dep:{USERS_CLIENT}"]
        assert len(graph.edges) == 3

    def test_ignored_repository(self, fleet, classifier_config):
        graph = build_graph(fleet, ["LEDGER"], classifier=classifier_config)
        assert "svc:ledger" not in graph.node_ids()

    def test_ignored_library_by_segment(self, fleet, classifier_config):
        graph = build_graph(fleet, ["usersclient"], classifier=classifier_config)
        assert f"dep:{USERS_CLIENT}" not in graph.node_ids()
        assert "svc:api" in graph.node_ids()

    def test_clients_only_never_widens_edges(self, fleet, classifier_config):
        plain = build_graph(fleet, classifier=classifier_config)
        clients_only = build_graph(fleet, clients_only=True, classifier=classifier_config)
        assert plain == clients_only

    def test_module_falls_back_to_path(self, classifier_config):
        repo = RepositorySnapshot(path="group/svc", go_version="1.22")
        graph = build_graph([repo], classifier=classifier_config)
        assert graph.get_node("svc:svc").module == "group/svc"

    def test_duplicate_dependencies_yield_duplicate_edges(self, classifier_config):
        repo = RepositorySnapshot.from_dependencies("group/svc", {BILLING_CLIENT: "v2.0.0"})
        repo.libraries.append(repo.libraries[0])
        graph = build_graph([repo], classifier=classifier_config)
        assert len(graph.nodes) == 2
        assert len(graph.edges) == 2

    def test_first_seen_metadata_wins(self, classifier_config):
        first = RepositorySnapshot(path="a/svc", module="first", go_version="1.22")
        second = RepositorySnapshot(path="b/svc", module="second", go_version="1.22")
        graph = build_graph([first, second], classifier=classifier_config)
        assert len(graph.nodes) == 1
        assert graph.get_node("svc:svc").module == "first"

    def test_input_is_not_mutated(self, fleet, classifier_config):
        before = [s.to_dict() for s in fleet]
        build_graph(fleet, ["sandbox"], classifier=classifier_config)
        assert [s.to_dict() for s in fleet] == before


class TestIgnoreHelpers:
    def test_repository_substring_case_insensitive(self):
        assert should_ignore_repository("platform/Sandbox/play", ["sandbox"]) is True
        assert should_ignore_repository("platform/payments/api", ["sandbox", ""]) is False

    def test_library_whole_segment(self):
        name = "git.example.com/platform/modules/go-libraries/kafka"
        assert should_ignore_library(name, ["go-libraries"]) is True
        assert should_ignore_library(name, ["KAFKA"]) is True
        assert should_ignore_library(name, ["redis"]) is False

    def test_blank_patterns_ignore_nothing(self):
        assert should_ignore_library("github.com/pkg/errors", ["", "  "]) is False


class TestAccumulator:
    def test_edge_before_endpoints_is_rejected(self):
        acc = GraphAccumulator()
        acc.add_node("svc:a", NodeType.SERVICE, {})
        with pytest.raises(ValueError):
            acc.add_edge(Edge("svc:a", "dep:x"))


class TestSummarizeLibraries:
    def test_one_entry_per_client_sorted(self, fleet, classifier_config):
        graph = build_graph(fleet, classifier=classifier_config)
        libs = summarize_libraries(graph)
        assert [lib["module"] for lib in libs] == sorted([BILLING_CLIENT, USERS_CLIENT])
        billing = next(lib for lib in libs if lib["module"] == BILLING_CLIENT)
        assert billing["label"] == "billingclient/v2"
        # last edge touching the node wins
        assert billing["version"] == "v2.1.0"
