from __future__ import annotations

import importlib
from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.planner.application.cache import TaskCache
from src.planner.application.services import TaskSyncService
from src.planner.domain.models import TrackerConfig, WorkspaceConfig, WorkspaceMember
from src.planner.domain.repositories import TrackerConfigRepository, WorkspaceConfigRepository
from tests.fakes import (
    FRAGMENT_TYPE_ID,
    WORKSPACE_ID,
    InMemoryConfigStore,
    StubFragmentRepository,
    StubMemberDirectory,
    StubTrackerRepository,
)


@pytest.fixture
def fragments() -> StubFragmentRepository:
    return StubFragmentRepository()


@pytest.fixture
def tracker() -> StubTrackerRepository:
    return StubTrackerRepository()


@pytest.fixture
def members() -> StubMemberDirectory:
    return StubMemberDirectory([WorkspaceMember(user_id="user-jane", email="jane@co.com")])


@pytest.fixture
def workspace_store() -> InMemoryConfigStore:
    return InMemoryConfigStore(
        WorkspaceConfig(
            workspace_id=WORKSPACE_ID,
            workspace_name="Acme",
            task_fragment_type_id=FRAGMENT_TYPE_ID,
        )
    )


@pytest.fixture
def tracker_store() -> InMemoryConfigStore:
    return InMemoryConfigStore(
        TrackerConfig(domain="acme", email="bot@acme.io", api_token="secret")
    )


@pytest.fixture
def cache(fragments: StubFragmentRepository) -> TaskCache:
    return TaskCache(fragments)


@pytest.fixture
def service(
    cache: TaskCache,
    fragments: StubFragmentRepository,
    tracker: StubTrackerRepository,
    members: StubMemberDirectory,
    workspace_store: InMemoryConfigStore,
) -> TaskSyncService:
    return TaskSyncService(
        cache=cache,
        fragments=fragments,
        tracker=tracker,
        members=members,
        workspace_config=workspace_store,
    )


def _patch_inject_instance(
    monkeypatch: pytest.MonkeyPatch,
    bindings: dict[object, object],
) -> Callable[[object], object]:
    """Patch `inject.instance` to return the stubs wired for the test."""
    import inject

    def fake_instance(interface: object) -> object:
        if interface in bindings:
            return bindings[interface]
        raise RuntimeError(f"Unexpected dependency request: {interface}")

    monkeypatch.setattr(inject, "instance", fake_instance)
    return fake_instance


@pytest.fixture
def api_client(
    monkeypatch: pytest.MonkeyPatch,
    service: TaskSyncService,
    workspace_store: InMemoryConfigStore,
    tracker_store: InMemoryConfigStore,
):
    """FastAPI test client with routes wired to stub repositories."""
    _patch_inject_instance(
        monkeypatch,
        {
            TaskSyncService: service,
            TrackerConfigRepository: tracker_store,
            WorkspaceConfigRepository: workspace_store,
        },
    )
    # Reload so module-level singletons pick up the patched injector.
    routes_module = importlib.reload(importlib.import_module("src.planner.presentation.routes"))

    app = FastAPI()
    app.include_router(routes_module.router)
    return TestClient(app)
