from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.planner.application.broadcaster import TasksChangedBroadcaster
from src.planner.domain.events.tasks_changed import TasksChangedEvent

router = APIRouter(tags=["ws"])


class WorkspaceConnectionManager:
    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = {}

    async def connect(self, workspace_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.setdefault(workspace_id, set()).add(websocket)

    def disconnect(self, workspace_id: str, websocket: WebSocket) -> None:
        connections = self._connections.get(workspace_id)
        if not connections:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(workspace_id, None)

    async def broadcast(self, workspace_id: str, payload: dict[str, object]) -> None:
        connections = list(self._connections.get(workspace_id, set()))
        for websocket in connections:
            try:
                await websocket.send_json(payload)
            except (RuntimeError, WebSocketDisconnect):
                self.disconnect(workspace_id, websocket)


class WebSocketTasksBroadcaster(TasksChangedBroadcaster):
    def __init__(self, manager: WorkspaceConnectionManager) -> None:
        self._manager = manager

    async def broadcast_tasks_changed(self, event: TasksChangedEvent) -> None:
        await self._manager.broadcast(event.workspace_id, event.to_message())


connection_manager = WorkspaceConnectionManager()


@router.websocket("/ws/tasks/{workspace_id}")
async def task_list_updates(websocket: WebSocket, workspace_id: str) -> None:
    await connection_manager.connect(workspace_id, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        connection_manager.disconnect(workspace_id, websocket)
