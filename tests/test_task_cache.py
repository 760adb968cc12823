import asyncio

import pytest

from src.planner.application.cache import TaskCache
from src.planner.domain.events.tasks_changed import TasksChangedEvent
from src.planner.domain.exceptions import MalformedFragmentError, WorkspaceBackendError
from src.planner.infrastructure.fragments.mappers import SOURCE_TAG
from tests.fakes import WORKSPACE_ID, StubFragmentRepository


def _raw(fragment_id: str, title: str, status: str = "todo") -> dict:
    return {
        "id": fragment_id,
        "title": title,
        "tags": [SOURCE_TAG],
        "frontmatter": {"status": status},
        "updatedAt": "2026-01-01T00:00:00+00:00",
    }


@pytest.mark.asyncio
async def test_get_reads_through_once_while_fresh(
    cache: TaskCache, fragments: StubFragmentRepository
) -> None:
    fragments.add_raw(_raw("a", "Alpha"))

    first = await cache.get(WORKSPACE_ID)
    second = await cache.get(WORKSPACE_ID)

    assert [t.title for t in first] == ["Alpha"]
    assert second == first
    assert fragments.list_calls == 1


@pytest.mark.asyncio
async def test_get_ignores_fragments_without_source_tag(
    cache: TaskCache, fragments: StubFragmentRepository
) -> None:
    fragments.add_raw(_raw("a", "Alpha"))
    fragments.add_raw({**_raw("n", "Note"), "tags": ["note"]})

    tasks = await cache.get(WORKSPACE_ID)

    assert [t.id for t in tasks] == ["a"]


@pytest.mark.asyncio
async def test_concurrent_gets_share_a_single_fetch(
    cache: TaskCache, fragments: StubFragmentRepository
) -> None:
    fragments.add_raw(_raw("a", "Alpha"))
    fragments.list_delay = 0.05

    results = await asyncio.gather(*(cache.get(WORKSPACE_ID) for _ in range(5)))

    assert fragments.list_calls == 1
    assert all([t.id for t in result] == ["a"] for result in results)


@pytest.mark.asyncio
async def test_invalidate_forces_full_refetch(
    cache: TaskCache, fragments: StubFragmentRepository
) -> None:
    fragments.add_raw(_raw("a", "Alpha"))
    await cache.get(WORKSPACE_ID)

    fragments.add_raw(_raw("b", "Beta"))
    cache.invalidate(WORKSPACE_ID)
    tasks = await cache.get(WORKSPACE_ID)

    assert fragments.list_calls == 2
    assert {t.id for t in tasks} == {"a", "b"}


@pytest.mark.asyncio
async def test_invalidate_without_id_marks_every_workspace_stale(
    cache: TaskCache, fragments: StubFragmentRepository
) -> None:
    await cache.get("ws-a")
    await cache.get("ws-b")

    cache.invalidate()

    assert not cache.is_fresh("ws-a")
    assert not cache.is_fresh("ws-b")


@pytest.mark.asyncio
async def test_write_during_inflight_fetch_is_not_hidden(
    cache: TaskCache, fragments: StubFragmentRepository
) -> None:
    fragments.add_raw(_raw("a", "Alpha"))
    fragments.list_delay = 0.05

    inflight = asyncio.create_task(cache.get(WORKSPACE_ID))
    await asyncio.sleep(0.01)
    fragments.add_raw(_raw("b", "Beta"))
    cache.invalidate(WORKSPACE_ID)
    await inflight

    assert not cache.is_fresh(WORKSPACE_ID)
    fragments.list_delay = 0
    tasks = await cache.get(WORKSPACE_ID)
    assert {t.id for t in tasks} == {"a", "b"}


@pytest.mark.asyncio
async def test_failed_fetch_keeps_previous_value_stale_and_raises(
    cache: TaskCache, fragments: StubFragmentRepository
) -> None:
    fragments.add_raw(_raw("a", "Alpha"))
    await cache.get(WORKSPACE_ID)
    cache.invalidate(WORKSPACE_ID)
    fragments.fail_next_list = WorkspaceBackendError("boom", status_code=503)

    with pytest.raises(WorkspaceBackendError):
        await cache.get(WORKSPACE_ID)

    assert not cache.is_fresh(WORKSPACE_ID)
    tasks = await cache.get(WORKSPACE_ID)
    assert [t.id for t in tasks] == ["a"]
    assert fragments.list_calls == 3


@pytest.mark.asyncio
async def test_malformed_fragment_aborts_the_read(
    cache: TaskCache, fragments: StubFragmentRepository
) -> None:
    fragments.add_raw({"id": "bad", "title": "No status", "tags": [SOURCE_TAG], "frontmatter": {}})

    with pytest.raises(MalformedFragmentError):
        await cache.get(WORKSPACE_ID)
    assert not cache.is_fresh(WORKSPACE_ID)


@pytest.mark.asyncio
async def test_notify_changed_reaches_observers_until_unsubscribed(cache: TaskCache) -> None:
    received: list[TasksChangedEvent] = []

    async def observer(event: TasksChangedEvent) -> None:
        received.append(event)

    unsubscribe = cache.subscribe(observer)
    await cache.notify_changed(WORKSPACE_ID)
    unsubscribe()
    await cache.notify_changed(WORKSPACE_ID)

    assert [e.workspace_id for e in received] == [WORKSPACE_ID]


@pytest.mark.asyncio
async def test_failing_observer_does_not_block_others(cache: TaskCache) -> None:
    received: list[str] = []

    async def broken(event: TasksChangedEvent) -> None:
        raise RuntimeError("socket closed")

    async def healthy(event: TasksChangedEvent) -> None:
        received.append(event.workspace_id)

    cache.subscribe(broken)
    cache.subscribe(healthy)
    await cache.notify_changed(WORKSPACE_ID)

    assert received == [WORKSPACE_ID]


@pytest.mark.asyncio
async def test_notify_does_not_invalidate(
    cache: TaskCache, fragments: StubFragmentRepository
) -> None:
    await cache.get(WORKSPACE_ID)

    await cache.notify_changed(WORKSPACE_ID)

    assert cache.is_fresh(WORKSPACE_ID)
