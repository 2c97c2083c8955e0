"""Shared fixtures: a small fleet of repository snapshots, a scripted
GitLab source serving it and an in-memory snapshot cache."""

import dataclasses
from datetime import datetime, timezone

import pytest

from archmap.cache.store import SnapshotCacheStore
from archmap.scanner.gitlab import within_roots
from archmap.service.projects import ProjectService
from archmap.shared.config import ClassifierConfig
from archmap.shared.exceptions import GitLabError
from archmap.shared.models import Library, RepositorySnapshot

PREFIX = "git.example.com/org"
BILLING_CLIENT = f"{PREFIX}/openapi/clients/go/billingclient/v2"
USERS_CLIENT = f"{PREFIX}/openapi/clients/go/usersclient"


@pytest.fixture
def classifier_config() -> ClassifierConfig:
    return ClassifierConfig(internal_prefix=PREFIX, strict=True)


@pytest.fixture
def fleet() -> list[RepositorySnapshot]:
    """
    Four repositories:

    - payments/api calls billingclient/v2 and usersclient
    - payments/ledger calls billingclient/v2
    - identity/users lives on another host and calls nothing internal
    - sandbox/playground, no manifest
    """
    stamp = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
    return [
        RepositorySnapshot(
            id=1,
            name="api",
            path="platform/payments/api",
            module=f"{PREFIX}/payments/api",
            go_version="1.22.3",
            updated_at=stamp,
            libraries=[
                Library(BILLING_CLIENT, "v2.3.0"),
                Library(USERS_CLIENT, "v0.4.1"),
                Library("github.com/pkg/errors", "v0.9.1"),
            ],
        ),
        RepositorySnapshot(
            id=2,
            name="ledger",
            path="platform/payments/ledger",
            module=f"{PREFIX}/payments/ledger",
            go_version="1.21",
            updated_at=stamp,
            libraries=[
                Library(BILLING_CLIENT, "v2.1.0"),
                Library("github.com/gin-gonic/gin", "v1.9.1"),
            ],
        ),
        RepositorySnapshot(
            id=3,
            name="users",
            path="platform/identity/users",
            module="identity.example.com/users",
            go_version="1.22.3",
            updated_at=stamp,
            libraries=[Library("github.com/pkg/errors", "v0.9.1")],
        ),
        RepositorySnapshot(id=4, name="playground", path="platform/sandbox/playground"),
    ]


class FakeSource:
    """Stands in for ``GitLabClient``: serves a mutable list of snapshots."""

    def __init__(self, snapshots):
        self.snapshots = list(snapshots)
        self.scans: list[str] = []
        self.roots: list[str] = []

    async def scan_fleet(self, ref="", ignores=(), roots=()):
        self.scans.append(ref)
        self.roots = list(roots)
        return [dataclasses.replace(s) for s in self.snapshots if within_roots(s.path, roots)]

    async def get_project_snapshot(self, project_id, ref=""):
        for s in self.snapshots:
            if s.id == project_id:
                return dataclasses.replace(s)
        raise GitLabError(f"project {project_id} not found", status_code=404)


@pytest.fixture
def source(fleet):
    return FakeSource(fleet)


@pytest.fixture
def store():
    store = SnapshotCacheStore("sqlite://")
    yield store
    store.close()


@pytest.fixture
def service(source, store, classifier_config):
    return ProjectService(source, store, classifier=classifier_config)
