from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class TasksChangedEvent(BaseModel):
    workspace_id: str = Field(description="Workspace whose task list changed.")
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_message(self) -> dict[str, object]:
        return {
            "type": "tasks_changed",
            "workspace_id": self.workspace_id,
            "ts": self.ts.isoformat(),
        }
