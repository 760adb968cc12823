from __future__ import annotations

from typing import Protocol

from src.planner.domain.events.tasks_changed import TasksChangedEvent


class TasksChangedBroadcaster(Protocol):
    async def broadcast_tasks_changed(self, event: TasksChangedEvent) -> None:
        """Broadcast a task-list change to connected clients."""
