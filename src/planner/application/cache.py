from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from src.planner.domain.events.tasks_changed import TasksChangedEvent
from src.planner.domain.models.fragment import FragmentFilter
from src.planner.domain.models.task import Task
from src.planner.domain.repositories import FragmentRepository
from src.planner.infrastructure.fragments.mappers import SOURCE_TAG, FragmentMapper

logger = logging.getLogger(__name__)

TasksChangedObserver = Callable[[TasksChangedEvent], Awaitable[None]]


@dataclass
class _CacheEntry:
    tasks: list[Task] = field(default_factory=list)
    fresh: bool = False
    generation: int = 0


class TaskCache:
    """
    Read-through cache of decoded task fragments, keyed by workspace.

    At most one remote fetch per workspace is in flight: callers queue on a
    per-workspace lock and reuse the result if it is still fresh when they get
    it. ``invalidate`` bumps the entry generation so a fetch that started before
    a write can never be stored as fresh.
    """

    def __init__(self, fragments: FragmentRepository) -> None:
        self._fragments = fragments
        self._entries: dict[str, _CacheEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._observers: list[TasksChangedObserver] = []

    async def get(self, workspace_id: str) -> list[Task]:
        entry = self._entries.get(workspace_id)
        if entry is not None and entry.fresh:
            return list(entry.tasks)

        lock = self._locks.setdefault(workspace_id, asyncio.Lock())
        async with lock:
            entry = self._entries.setdefault(workspace_id, _CacheEntry())
            if entry.fresh:
                return list(entry.tasks)
            generation = entry.generation
            try:
                raw = await self._fragments.list_fragments(
                    workspace_id, FragmentFilter(tags=[SOURCE_TAG])
                )
                tasks = [FragmentMapper.to_task(fragment) for fragment in raw]
            except Exception:
                entry.fresh = False
                logger.warning(
                    "Task fetch failed, keeping previous entry",
                    extra={"workspace_id": workspace_id, "cached": len(entry.tasks)},
                )
                raise
            entry.tasks = tasks
            entry.fresh = entry.generation == generation
            logger.debug(
                "Fetched tasks",
                extra={"workspace_id": workspace_id, "count": len(tasks), "fresh": entry.fresh},
            )
            return list(tasks)

    def invalidate(self, workspace_id: str | None = None) -> None:
        if workspace_id is None:
            targets = list(self._entries.values())
        else:
            targets = [self._entries.get(workspace_id)]
        for entry in targets:
            if entry is None:
                continue
            entry.fresh = False
            entry.generation += 1

    def is_fresh(self, workspace_id: str) -> bool:
        entry = self._entries.get(workspace_id)
        return entry is not None and entry.fresh

    def subscribe(self, observer: TasksChangedObserver) -> Callable[[], None]:
        """Register an observer and return a function that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    async def notify_changed(self, workspace_id: str) -> None:
        event = TasksChangedEvent(workspace_id=workspace_id)
        for observer in list(self._observers):
            try:
                await observer(event)
            except Exception:
                logger.exception(
                    "Tasks-changed observer failed", extra={"workspace_id": workspace_id}
                )

    def close(self) -> None:
        self._entries.clear()
        self._locks.clear()
        self._observers.clear()
