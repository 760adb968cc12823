import pytest

from src.planner.domain.events.tasks_changed import TasksChangedEvent
from src.planner.presentation.websockets import (
    WebSocketTasksBroadcaster,
    WorkspaceConnectionManager,
)


class FakeSocket:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[dict] = []
        self.attempts = 0
        self.fail = fail

    async def accept(self) -> None:
        return None

    async def send_json(self, payload: dict) -> None:
        self.attempts += 1
        if self.fail:
            raise RuntimeError("closed")
        self.sent.append(payload)


@pytest.mark.asyncio
async def test_broadcast_targets_workspace_and_drops_dead_sockets() -> None:
    manager = WorkspaceConnectionManager()
    alive, dead, other = FakeSocket(), FakeSocket(fail=True), FakeSocket()
    await manager.connect("ws-1", alive)
    await manager.connect("ws-1", dead)
    await manager.connect("ws-2", other)

    broadcaster = WebSocketTasksBroadcaster(manager)
    await broadcaster.broadcast_tasks_changed(TasksChangedEvent(workspace_id="ws-1"))
    await broadcaster.broadcast_tasks_changed(TasksChangedEvent(workspace_id="ws-1"))

    assert [m["type"] for m in alive.sent] == ["tasks_changed", "tasks_changed"]
    assert alive.sent[0]["workspace_id"] == "ws-1"
    assert other.sent == []
    assert dead.attempts == 1

